from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='FileRecord',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID',
                )),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('file', models.FileField(
                    help_text='Storage key: {visibility}/{name}__{timestamp}_{token}.ext',
                    max_length=512,
                    upload_to='',
                )),
                ('original_filename', models.CharField(
                    blank=True,
                    default='',
                    max_length=255,
                )),
                ('tags', models.TextField(blank=True, default='')),
                ('visibility', models.CharField(
                    choices=[('public', 'Public'), ('private', 'Private')],
                    max_length=7,
                )),
                ('mime_type', models.CharField(
                    help_text='Declared content type or guessed from the filename',
                    max_length=255,
                )),
                ('size_bytes', models.BigIntegerField(
                    help_text='File size in bytes',
                )),
                ('checksum_sha256', models.CharField(
                    db_index=True,
                    help_text='SHA256 hash for integrity verification',
                    max_length=64,
                )),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['-uploaded_at', '-id'],
                'indexes': [
                    models.Index(
                        fields=['visibility', '-uploaded_at'],
                        name='files_visibility_recent_idx',
                    ),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(
                            ('visibility__in', ['public', 'private']),
                        ),
                        name='files_visibility_valid',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(
                                ('file__startswith', 'public/'),
                                ('visibility', 'public'),
                            ),
                            models.Q(
                                ('file__startswith', 'private/'),
                                ('visibility', 'private'),
                            ),
                            _connector='OR',
                        ),
                        name='files_key_matches_visibility',
                    ),
                    models.CheckConstraint(
                        condition=models.Q(('title', ''), _negated=True),
                        name='files_title_not_empty',
                    ),
                    models.UniqueConstraint(
                        fields=('file',),
                        name='files_storage_key_unique',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='AccessRequest',
            fields=[
                ('id', models.BigAutoField(
                    auto_created=True,
                    primary_key=True,
                    serialize=False,
                    verbose_name='ID',
                )),
                ('file_title', models.CharField(max_length=255)),
                ('requester', models.CharField(max_length=255)),
                ('reason', models.TextField(blank=True, default='')),
                ('requested_at', models.DateTimeField(auto_now_add=True)),
                ('file', models.ForeignKey(
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='access_requests',
                    to='files.filerecord',
                )),
            ],
            options={
                'verbose_name': 'Access Request',
                'verbose_name_plural': 'Access Requests',
                'ordering': ['-requested_at'],
            },
        ),
    ]
