"""Main URL mapping configuration file."""

from django.contrib import admin
from django.urls import include, path

from server.apps.files import views as files_views

urlpatterns = [
    path('', files_views.health, name='health'),
    path('api/', include('server.apps.files.urls', namespace='files')),
    path('admin/', admin.site.urls),
]
