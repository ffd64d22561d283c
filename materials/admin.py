from django.contrib import admin
from .models import Document


@admin.register(Document)
class DocumentAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner_id', 'mime_type', 'size', 'created_at']
    list_filter = ['mime_type', 'created_at']
    search_fields = ['name', 'owner_id']
    readonly_fields = ['created_at', 'updated_at']
