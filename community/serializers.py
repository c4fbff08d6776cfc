from rest_framework import serializers

from .models import Post, Comment
from .reactions import summarize


def request_uid(serializer):
    request = serializer.context.get('request')
    if request is None or not request.user.is_authenticated:
        return None
    return request.user.uid


class ReactionSummaryMixin(serializers.Serializer):
    reaction_counts = serializers.SerializerMethodField()
    total_reactions = serializers.SerializerMethodField()
    user_reaction = serializers.SerializerMethodField()

    def get_reaction_counts(self, obj):
        return summarize(obj.reactions)['reaction_counts']

    def get_total_reactions(self, obj):
        return len(obj.reactions or [])

    def get_user_reaction(self, obj):
        return summarize(obj.reactions, request_uid(self))['user_reaction']

    def get_author(self, obj):
        return {'id': obj.author.uid, 'name': obj.author.display_name}


class CommentSerializer(ReactionSummaryMixin, serializers.ModelSerializer):
    author = serializers.SerializerMethodField()
    post_id = serializers.UUIDField(read_only=True)
    parent_id = serializers.UUIDField(read_only=True)
    replies = serializers.SerializerMethodField()

    class Meta:
        model = Comment
        fields = [
            'id', 'post_id', 'parent_id', 'author', 'text', 'is_edited', 'likes', 'liked_by',
            'reactions', 'reaction_counts', 'total_reactions', 'user_reaction', 'replies',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_replies(self, obj):
        # Replies are rendered one level deep under their top-level comment
        if obj.parent_id is not None:
            return []
        return CommentSerializer(obj.replies.select_related('author').all(), many=True, context=self.context).data


class PostSerializer(ReactionSummaryMixin, serializers.ModelSerializer):
    author = serializers.SerializerMethodField()
    photo_url = serializers.SerializerMethodField()
    comments = serializers.SerializerMethodField()
    comment_count = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            'id', 'animal_name', 'experience', 'author', 'photo_url', 'likes', 'liked_by',
            'reactions', 'reaction_counts', 'total_reactions', 'user_reaction',
            'comments', 'comment_count', 'created_at', 'updated_at'
        ]
        read_only_fields = fields

    def get_photo_url(self, obj):
        return obj.photo.url if obj.photo else None

    def get_comments(self, obj):
        top_level = obj.comments.filter(parent__isnull=True).select_related('author')
        return CommentSerializer(top_level, many=True, context=self.context).data

    def get_comment_count(self, obj):
        return obj.comments.count()


class PostWriteSerializer(serializers.ModelSerializer):
    animal_name = serializers.CharField(max_length=255, error_messages={
        'required': 'Animal name and experience are required',
        'blank': 'Animal name and experience are required',
    })
    experience = serializers.CharField(error_messages={
        'required': 'Animal name and experience are required',
        'blank': 'Animal name and experience are required',
    })
    photo = serializers.ImageField(required=False, allow_null=True)

    class Meta:
        model = Post
        fields = ['animal_name', 'experience', 'photo']


class CommentWriteSerializer(serializers.Serializer):
    text = serializers.CharField(error_messages={
        'required': 'Comment text is required', 'blank': 'Comment text is required'
    })
    parent_id = serializers.UUIDField(required=False, allow_null=True)

    def validate_text(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Comment text is required')
        return value



class ReactSerializer(serializers.Serializer):
    # The reaction type itself is checked by community.reactions
    type = serializers.CharField(required=False, allow_blank=True, default='')
