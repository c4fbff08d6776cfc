import logging

from rest_framework import status, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.generics import get_object_or_404
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema

from users.authentication import FirebaseAuthentication
from users.permissions import IsEndUser
from .models import Post, Comment
from .reactions import InvalidReaction, REACTION_TYPES, summarize
from .serializers import (
    PostSerializer, PostWriteSerializer, CommentSerializer, CommentWriteSerializer, ReactSerializer
)

logger = logging.getLogger(__name__)

reaction_request_body = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    required=['type'],
    properties={
        'type': openapi.Schema(type=openapi.TYPE_STRING, enum=list(REACTION_TYPES), description="Reaction type"),
    }
)

PUBLIC_ACTIONS = ('list', 'retrieve', 'reactions')


class ReactionActionsMixin:
    """
    ``like``, ``react`` and ``reactions`` for viewsets whose objects carry
    reaction lists.
    """
    entity_name = 'Post'

    def like(self, request, *args, **kwargs):
        obj = self.get_object()
        liked = obj.toggle_like(request.user)
        return Response({
            'liked': liked,
            'likes': obj.likes,
            'liked_by': obj.liked_by,
        })

    def react(self, request, *args, **kwargs):
        obj = self.get_object()
        serializer = ReactSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        try:
            obj.react(request.user, serializer.validated_data['type'])
        except InvalidReaction as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
        return Response(self.get_serializer(obj).data)

    def reactions(self, request, *args, **kwargs):
        obj = self.get_object()
        uid = request.user.uid if request.user.is_authenticated else None
        return Response({
            **summarize(obj.reactions, uid),
            'reactions': obj.reactions,
        })

    def check_author(self, obj, verb):
        if obj.author_id != self.request.user.id:
            raise PermissionDenied(f'You can only {verb} your own {self.entity_name.lower()}s')


class PostViewSet(ReactionActionsMixin, viewsets.ModelViewSet):
    """
    Animal encounter stories. Anyone can read; signed-in community members
    can post, comment and react.
    """
    queryset = Post.objects.select_related('author')
    authentication_classes = [FirebaseAuthentication]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            permission_classes = [permissions.AllowAny]
        else:
            permission_classes = [IsEndUser]
        return [permission() for permission in permission_classes]

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return PostWriteSerializer
        return PostSerializer

    @swagger_auto_schema(request_body=PostWriteSerializer, responses={201: PostSerializer})
    def create(self, request, *args, **kwargs):
        serializer = PostWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        post = serializer.save(author=request.user)
        return Response(PostSerializer(post, context={'request': request}).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        post = self.get_object()
        self.check_author(post, 'edit')
        serializer = PostWriteSerializer(post, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        post = serializer.save()
        return Response(PostSerializer(post, context={'request': request}).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        post = self.get_object()
        self.check_author(post, 'delete')
        if post.photo:
            post.photo.delete(save=False)
        # Comments and replies go with the post
        post.delete()
        logger.info(f"Post {kwargs.get('pk')} deleted by {request.user.uid}")
        return Response({'message': 'Post deleted successfully'})

    @action(detail=True, methods=['post'])
    def like(self, request, pk=None):
        return super().like(request, pk=pk)

    @swagger_auto_schema(request_body=reaction_request_body)
    @action(detail=True, methods=['post'])
    def react(self, request, pk=None):
        return super().react(request, pk=pk)

    @action(detail=True, methods=['get'])
    def reactions(self, request, pk=None):
        return super().reactions(request, pk=pk)


class CommentViewSet(ReactionActionsMixin, viewsets.ModelViewSet):
    """
    Comments and replies on a post, addressed under ``/api/posts/<post_id>/comments/``.
    """
    serializer_class = CommentSerializer
    authentication_classes = [FirebaseAuthentication]
    pagination_class = None
    entity_name = 'Comment'

    def get_permissions(self):
        if self.action in PUBLIC_ACTIONS:
            permission_classes = [permissions.AllowAny]
        else:
            permission_classes = [IsEndUser]
        return [permission() for permission in permission_classes]

    def get_post(self):
        if not hasattr(self, '_post'):
            self._post = get_object_or_404(Post, pk=self.kwargs['post_id'])
        return self._post

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Comment.objects.none()
        queryset = Comment.objects.filter(post=self.get_post()).select_related('author')
        if self.action == 'list':
            queryset = queryset.filter(parent__isnull=True)
        return queryset

    @swagger_auto_schema(request_body=CommentWriteSerializer, responses={201: CommentSerializer})
    def create(self, request, *args, **kwargs):
        post = self.get_post()
        serializer = CommentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        parent = None
        parent_id = serializer.validated_data.get('parent_id')
        if parent_id:
            parent = Comment.objects.filter(pk=parent_id, post=post).first()
            if parent is None:
                return Response({'error': 'Parent comment not found on this post'},
                                status=status.HTTP_404_NOT_FOUND)
            # Replies to replies attach to the top-level comment
            if parent.parent_id is not None:
                parent = parent.parent

        comment = Comment.objects.create(
            post=post, parent=parent, author=request.user, text=serializer.validated_data['text']
        )
        return Response(self.get_serializer(comment).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(request_body=CommentWriteSerializer)
    def update(self, request, *args, **kwargs):
        comment = self.get_object()
        self.check_author(comment, 'edit')
        serializer = CommentWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        comment.text = serializer.validated_data['text']
        comment.is_edited = True
        comment.save(update_fields=['text', 'is_edited', 'updated_at'])
        return Response(self.get_serializer(comment).data)

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        comment = self.get_object()
        self.check_author(comment, 'delete')
        comment.delete()
        return Response({'message': 'Comment deleted successfully'})

    @action(detail=True, methods=['post'])
    def like(self, request, post_id=None, pk=None):
        return super().like(request, pk=pk)

    @swagger_auto_schema(request_body=reaction_request_body)
    @action(detail=True, methods=['post'])
    def react(self, request, post_id=None, pk=None):
        return super().react(request, pk=pk)

    @action(detail=True, methods=['get'])
    def reactions(self, request, post_id=None, pk=None):
        return super().reactions(request, pk=pk)
