from django.db import models
from django.db.models import Q
from django.conf import settings
from django.utils import timezone
import uuid

from .conversations import PARTICIPANT_TYPES, MEDICAL_OFFICER


class ChatMessageQuerySet(models.QuerySet):
    def for_participant(self, participant_id, participant_type):
        return self.filter(
            Q(sender_id=participant_id, sender_type=participant_type) |
            Q(receiver_id=participant_id, receiver_type=participant_type)
        )

    def mark_read(self, conversation_id, participant_id, participant_type):
        """Mark everything addressed to the participant in a conversation as read."""
        return self.filter(
            conversation_id=conversation_id,
            receiver_id=participant_id,
            receiver_type=participant_type,
            is_read=False,
        ).update(is_read=True, read_at=timezone.now())


class ChatMessage(models.Model):
    MESSAGE_TYPE_CHOICES = (
        ('text', 'Text'),
        ('image', 'Image'),
        ('file', 'File'),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    conversation_id = models.CharField(max_length=255, db_index=True)
    sender_id = models.CharField(max_length=128)
    sender_type = models.CharField(max_length=20, choices=PARTICIPANT_TYPES)
    receiver_id = models.CharField(max_length=128)
    receiver_type = models.CharField(max_length=20, choices=PARTICIPANT_TYPES)
    message = models.TextField()
    message_type = models.CharField(max_length=10, choices=MESSAGE_TYPE_CHOICES, default='text')
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ChatMessageQuerySet.as_manager()

    class Meta:
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['conversation_id', '-created_at'], name='chat_conversation_idx'),
        ]

    def __str__(self):
        return f"{self.sender_type}:{self.sender_id} -> {self.receiver_type}:{self.receiver_id}"


class PublishedMessage(models.Model):
    """
    A medical officer's chat answer republished by an admin as a public
    article. It keeps its own copy of the text and attribution, so it
    outlives the original message.
    """
    CATEGORY_CHOICES = [
        ('medical_advice', 'Medical Advice'),
        ('safety_tips', 'Safety Tips'),
        ('emergency_guidance', 'Emergency Guidance'),
        ('prevention', 'Prevention'),
        ('treatment', 'Treatment'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    original_message = models.ForeignKey(
        ChatMessage,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='publications'
    )
    title = models.CharField(max_length=255)
    content = models.TextField()
    author_id = models.CharField(max_length=128)
    author_name = models.CharField(max_length=150)
    author_type = models.CharField(max_length=20, default=MEDICAL_OFFICER)
    author_specialization = models.CharField(max_length=30, blank=True)
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES, default='medical_advice')
    tags = models.JSONField(default=list, blank=True)
    published_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True, blank=True,
        related_name='published_messages'
    )
    published_at = models.DateTimeField(default=timezone.now)
    view_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-published_at']

    def __str__(self):
        return self.title
