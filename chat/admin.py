from django.contrib import admin
from .models import ChatMessage, PublishedMessage


@admin.register(ChatMessage)
class ChatMessageAdmin(admin.ModelAdmin):
    list_display = ('conversation_id', 'sender_type', 'sender_id', 'receiver_type', 'receiver_id', 'is_read', 'created_at')
    list_filter = ('sender_type', 'receiver_type', 'is_read', 'message_type')
    search_fields = ('conversation_id', 'message')


@admin.register(PublishedMessage)
class PublishedMessageAdmin(admin.ModelAdmin):
    list_display = ('title', 'author_name', 'category', 'is_active', 'published_at', 'view_count')
    list_filter = ('category', 'is_active')
    search_fields = ('title', 'content', 'author_name')
