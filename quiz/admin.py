from django.contrib import admin
from .models import Flashcard, ProcessingRecord, Quiz, QuizQuestion, Summary


class QuizQuestionInline(admin.TabularInline):
    model = QuizQuestion
    extra = 0
    fields = ['position', 'text', 'choices', 'correct_answer']


@admin.register(Quiz)
class QuizAdmin(admin.ModelAdmin):
    list_display = ['title', 'document', 'owner_id', 'difficulty', 'created_at']
    list_filter = ['created_at', 'difficulty']
    search_fields = ['title', 'owner_id', 'document__name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [QuizQuestionInline]
    fieldsets = (
        ('Quiz Information', {
            'fields': ('title', 'difficulty', 'document', 'owner_id')
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Flashcard)
class FlashcardAdmin(admin.ModelAdmin):
    list_display = ['question', 'document', 'owner_id', 'position', 'created_at']
    search_fields = ['question', 'answer', 'owner_id']


@admin.register(Summary)
class SummaryAdmin(admin.ModelAdmin):
    list_display = ['document', 'owner_id', 'created_at']
    search_fields = ['content', 'owner_id']


@admin.register(ProcessingRecord)
class ProcessingRecordAdmin(admin.ModelAdmin):
    list_display = ['document', 'action', 'status', 'failure_kind', 'completed_at']
    list_filter = ['status', 'action']
    readonly_fields = ['created_at', 'completed_at']
