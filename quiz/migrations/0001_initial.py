import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('materials', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Quiz',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner_id', models.CharField(db_column='user_id', db_index=True, max_length=64)),
                ('title', models.CharField(max_length=255)),
                ('difficulty', models.CharField(choices=[('easy', 'Easy'), ('medium', 'Medium'), ('hard', 'Hard')], db_index=True, default='medium', max_length=10)),
                ('document', models.ForeignKey(db_column='file_id', on_delete=django.db.models.deletion.CASCADE, related_name='quizzes', to='materials.document')),
            ],
            options={
                'verbose_name': 'Quiz',
                'verbose_name_plural': 'Quizzes',
                'db_table': 'quizzes',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='QuizQuestion',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('position', models.PositiveIntegerField(default=0, help_text='0-based order within the quiz')),
                ('text', models.TextField()),
                ('choices', models.JSONField(default=list)),
                ('correct_answer', models.TextField()),
                ('quiz', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='questions', to='quiz.quiz')),
            ],
            options={
                'db_table': 'quiz_questions',
                'ordering': ['position'],
            },
        ),
        migrations.CreateModel(
            name='Flashcard',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner_id', models.CharField(db_column='user_id', db_index=True, max_length=64)),
                ('question', models.TextField()),
                ('answer', models.TextField()),
                ('position', models.PositiveIntegerField(default=0, help_text='Order within its generation batch')),
                ('document', models.ForeignKey(db_column='file_id', on_delete=django.db.models.deletion.CASCADE, related_name='flashcards', to='materials.document')),
            ],
            options={
                'db_table': 'flashcards',
                'ordering': ['created_at', 'position'],
            },
        ),
        migrations.CreateModel(
            name='Summary',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner_id', models.CharField(db_column='user_id', db_index=True, max_length=64)),
                ('content', models.TextField()),
                ('document', models.ForeignKey(db_column='file_id', on_delete=django.db.models.deletion.CASCADE, related_name='summaries', to='materials.document')),
            ],
            options={
                'verbose_name_plural': 'Summaries',
                'db_table': 'summaries',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ProcessingRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner_id', models.CharField(db_column='user_id', db_index=True, max_length=64)),
                ('action', models.CharField(choices=[('quiz', 'Quiz'), ('summary', 'Summary'), ('flashcards', 'Flashcards')], max_length=20)),
                ('status', models.CharField(choices=[('completed', 'Completed'), ('failed', 'Failed')], db_index=True, max_length=20)),
                ('failure_kind', models.CharField(blank=True, max_length=50)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('document', models.ForeignKey(db_column='file_id', on_delete=django.db.models.deletion.CASCADE, related_name='processing_records', to='materials.document')),
            ],
            options={
                'db_table': 'file_processing',
                'ordering': ['-created_at'],
            },
        ),
    ]
