from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path('upload', views.upload, name='upload'),
    path('files/public', views.public_files, name='public'),
    path('files/search', views.search_files, name='search'),
    path('files/request', views.request_file, name='request'),
    path(
        'files/download/<int:file_id>',
        views.download_file,
        name='download',
    ),
    path('files/<int:file_id>', views.delete_file, name='delete'),
]
