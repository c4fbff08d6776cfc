from rest_framework import serializers

from medical_officers.models import MedicalOfficer
from .models import ChatMessage, PublishedMessage


class ChatMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ChatMessage
        fields = [
            'id', 'conversation_id', 'sender_id', 'sender_type', 'receiver_id', 'receiver_type',
            'message', 'message_type', 'is_read', 'read_at', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class SendMessageSerializer(serializers.Serializer):
    message = serializers.CharField(error_messages={
        'required': 'Message is required', 'blank': 'Message is required'
    })
    message_type = serializers.ChoiceField(choices=ChatMessage.MESSAGE_TYPE_CHOICES, default='text')


class MedicalOfficerSummarySerializer(serializers.ModelSerializer):
    """What end users see about the officers they can message."""
    name = serializers.CharField(read_only=True)
    email = serializers.EmailField(read_only=True)
    phone_number = serializers.CharField(source='user.phone_number', read_only=True)

    class Meta:
        model = MedicalOfficer
        fields = ['id', 'name', 'email', 'phone_number', 'specialization', 'hospital']
        read_only_fields = fields


class PublishedMessageSerializer(serializers.ModelSerializer):
    author = serializers.SerializerMethodField()
    published_by = serializers.SerializerMethodField()
    original_message_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = PublishedMessage
        fields = [
            'id', 'original_message_id', 'title', 'content', 'author', 'category', 'tags',
            'published_by', 'published_at', 'view_count', 'like_count', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_author(self, obj):
        return {
            'id': obj.author_id,
            'name': obj.author_name,
            'type': obj.author_type,
            'specialization': obj.author_specialization or None,
        }

    def get_published_by(self, obj):
        if obj.published_by is None:
            return None
        return {
            'id': str(obj.published_by.id),
            'name': obj.published_by.display_name,
            'type': 'admin',
        }


class PublishMessageSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255, required=False, allow_blank=True)
    content = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=PublishedMessage.CATEGORY_CHOICES, default='medical_advice')
    tags = serializers.ListField(child=serializers.CharField(), required=False, default=list)


class PublishedMessageUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = PublishedMessage
        fields = ['title', 'content', 'category', 'tags', 'is_active']
