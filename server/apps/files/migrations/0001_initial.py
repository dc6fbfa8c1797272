import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Folder',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('path', models.CharField(help_text='Materialized path: /parent/child', max_length=1024)),
                ('tags', models.JSONField(blank=True, default=list, help_text='Normalized tags (trimmed, lower-case, unique)')),
                ('is_favorite', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('modified_at', models.DateTimeField(blank=True, null=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('parent_folder', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='child_folders', to='files.folder')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='folders', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Folder',
                'verbose_name_plural': 'Folders',
                'ordering': ['path'],
                'indexes': [
                    models.Index(fields=['user', 'parent_folder'], name='folders_user_parent_idx'),
                    models.Index(fields=['user', 'path'], name='folders_user_path_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('is_deleted', False)), fields=('user', 'path'), name='folders_user_path_unique'),
                ],
            },
        ),
        migrations.CreateModel(
            name='File',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('content_type', models.CharField(max_length=255)),
                ('size_bytes', models.BigIntegerField(help_text='File size in bytes')),
                ('storage_ref', models.CharField(help_text='Key in the byte store: {user_id}/{uuid}_{filename}', max_length=1024)),
                ('status', models.CharField(choices=[('processing', 'Processing'), ('active', 'Active'), ('archived', 'Archived'), ('failed', 'Failed')], default='processing', max_length=16)),
                ('tags', models.JSONField(blank=True, default=list, help_text='Normalized tags (trimmed, lower-case, unique)')),
                ('is_favorite', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('modified_at', models.DateTimeField(blank=True, null=True)),
                ('is_deleted', models.BooleanField(db_index=True, default=False)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('folder', models.ForeignKey(blank=True, help_text='Containing folder, empty for unfiled files', null=True, on_delete=django.db.models.deletion.CASCADE, related_name='files', to='files.folder')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='files', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'File',
                'verbose_name_plural': 'Files',
                'ordering': ['name'],
                'indexes': [
                    models.Index(fields=['user', 'folder'], name='files_user_folder_idx'),
                    models.Index(fields=['user', 'is_favorite'], name='files_user_favorite_idx'),
                ],
            },
        ),
    ]
