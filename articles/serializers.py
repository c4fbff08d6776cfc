from rest_framework import serializers

from .models import Article

REQUIRED_MESSAGE = 'Title, content, and category are required'


class ArticleSerializer(serializers.ModelSerializer):
    author = serializers.SerializerMethodField()
    reviewer = serializers.SerializerMethodField()

    class Meta:
        model = Article
        fields = [
            'id', 'title', 'content', 'excerpt', 'author', 'category', 'tags', 'images',
            'status', 'reviewer', 'published_at', 'view_count', 'like_count',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_author(self, obj):
        return {
            'id': str(obj.author_id),
            'name': obj.author.display_name,
            'type': obj.author_type,
        }

    def get_reviewer(self, obj):
        if obj.reviewed_at is None:
            return None
        return {
            'id': str(obj.reviewed_by_id) if obj.reviewed_by_id else None,
            'name': obj.reviewed_by.display_name if obj.reviewed_by else None,
            'comments': obj.review_comments,
            'reviewed_at': obj.reviewed_at,
        }


class ArticleWriteSerializer(serializers.ModelSerializer):
    title = serializers.CharField(max_length=255, error_messages={
        'required': REQUIRED_MESSAGE, 'blank': REQUIRED_MESSAGE
    })
    content = serializers.CharField(error_messages={
        'required': REQUIRED_MESSAGE, 'blank': REQUIRED_MESSAGE
    })
    excerpt = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=Article.CATEGORY_CHOICES, error_messages={
        'required': REQUIRED_MESSAGE,
        'invalid_choice': 'Invalid category. Allowed values are: ' + ', '.join(Article.category_values()),
    })
    tags = serializers.JSONField(required=False)
    images = serializers.JSONField(required=False, help_text="List of {url, alt, caption} objects")

    class Meta:
        model = Article
        fields = ['title', 'content', 'excerpt', 'category', 'tags', 'images']

    def validate_title(self, value):
        return value.strip()

    def validate_content(self, value):
        return value.strip()

    def validate_excerpt(self, value):
        return value.strip()

    def validate_tags(self, value):
        # Anything that is not a list of strings is dropped rather than rejected
        if not isinstance(value, list):
            return []
        return [str(tag).strip() for tag in value if str(tag).strip()]

    def validate_images(self, value):
        if not isinstance(value, list):
            return []
        return [
            {key: image[key] for key in ('url', 'alt', 'caption') if key in image}
            for image in value if isinstance(image, dict)
        ]


class ReviewSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=['approve', 'reject'], error_messages={
        'invalid_choice': 'Invalid action', 'required': 'Invalid action'
    })
    comments = serializers.CharField(required=False, allow_blank=True)


class ApproveSerializer(serializers.Serializer):
    comments = serializers.CharField(required=False, allow_blank=True, default='')


class RejectSerializer(serializers.Serializer):
    """
    The reason may arrive as ``reason``, ``rejection_reason`` or ``comments``.
    """
    reason = serializers.CharField(required=False, allow_blank=True)
    rejection_reason = serializers.CharField(required=False, allow_blank=True)
    comments = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        for key in ('reason', 'rejection_reason', 'comments'):
            value = (attrs.get(key) or '').strip()
            if value:
                return {'reason': value}
        raise serializers.ValidationError({'reason': 'A rejection reason is required'})
