# quiz/models.py
from django.db import models
from core.models import BaseModel, OwnedModel
from materials.models import Document

DIFFICULTY_CHOICES = [
    ('easy', 'Easy'),
    ('medium', 'Medium'),
    ('hard', 'Hard'),
]

ACTION_CHOICES = [
    ('quiz', 'Quiz'),
    ('summary', 'Summary'),
    ('flashcards', 'Flashcards'),
]


class Quiz(OwnedModel):
    """A generated multiple-choice quiz for one document."""
    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name='quizzes', db_column='file_id')
    title = models.CharField(max_length=255)
    difficulty = models.CharField(max_length=10, choices=DIFFICULTY_CHOICES, default='medium', db_index=True)

    class Meta:
        db_table = 'quizzes'
        ordering = ['-created_at']
        verbose_name = "Quiz"
        verbose_name_plural = "Quizzes"

    def __str__(self):
        return f"{self.title} ({self.document.name})"

    def to_dict(self, include_questions=True):
        data = {
            'id': str(self.id),
            'fileId': str(self.document_id),
            'title': self.title,
            'difficulty': self.difficulty,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }
        if include_questions:
            data['questions'] = [q.to_dict() for q in self.questions.all()]
        return data


class QuizQuestion(BaseModel):
    quiz = models.ForeignKey(Quiz, on_delete=models.CASCADE, related_name='questions')
    position = models.PositiveIntegerField(default=0, help_text="0-based order within the quiz")
    text = models.TextField()
    choices = models.JSONField(default=list)
    correct_answer = models.TextField()

    class Meta:
        db_table = 'quiz_questions'
        ordering = ['position']

    def __str__(self):
        return self.text[:80]

    def to_dict(self):
        return {
            'id': str(self.id),
            'text': self.text,
            'choices': self.choices,
            'correctAnswer': self.correct_answer,
        }


class Flashcard(OwnedModel):
    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name='flashcards', db_column='file_id')
    question = models.TextField()
    answer = models.TextField()
    position = models.PositiveIntegerField(default=0, help_text="Order within its generation batch")

    class Meta:
        db_table = 'flashcards'
        ordering = ['created_at', 'position']

    def __str__(self):
        return self.question[:80]

    def to_dict(self):
        return {
            'id': str(self.id),
            'fileId': str(self.document_id),
            'question': self.question,
            'answer': self.answer,
            'createdAt': self.created_at.isoformat(),
        }


class Summary(OwnedModel):
    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name='summaries', db_column='file_id')
    content = models.TextField()

    class Meta:
        db_table = 'summaries'
        ordering = ['-created_at']
        verbose_name_plural = "Summaries"

    def __str__(self):
        return f"Summary of {self.document.name}"

    def to_dict(self):
        return {
            'id': str(self.id),
            'fileId': str(self.document_id),
            'content': self.content,
            'createdAt': self.created_at.isoformat(),
        }


class ProcessingRecord(OwnedModel):
    """One row per generation request. Holds the outcome, never the artifact."""
    STATUS_COMPLETED = 'completed'
    STATUS_FAILED = 'failed'

    document = models.ForeignKey(Document, on_delete=models.CASCADE, related_name='processing_records', db_column='file_id')
    action = models.CharField(max_length=20, choices=ACTION_CHOICES)
    status = models.CharField(max_length=20, choices=[
        (STATUS_COMPLETED, 'Completed'),
        (STATUS_FAILED, 'Failed'),
    ], db_index=True)
    failure_kind = models.CharField(max_length=50, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'file_processing'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.action} on {self.document_id}: {self.status}"
