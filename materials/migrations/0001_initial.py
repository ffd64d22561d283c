import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Document',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner_id', models.CharField(db_column='user_id', db_index=True, max_length=64)),
                ('name', models.CharField(max_length=255)),
                ('file', models.FileField(blank=True, upload_to='uploads/%Y/%m/')),
                ('url', models.URLField(blank=True, help_text='Storage URL when the file lives outside MEDIA_ROOT.', max_length=1024)),
                ('size', models.PositiveBigIntegerField(default=0, help_text='Size in bytes')),
                ('mime_type', models.CharField(blank=True, max_length=150)),
            ],
            options={
                'db_table': 'uploaded_files',
                'ordering': ['-created_at'],
            },
        ),
    ]
