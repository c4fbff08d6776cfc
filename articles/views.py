import logging

from django.db.models import F
from rest_framework import status, permissions, viewsets, mixins, filters
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema

from users.permissions import IsAdminUser, IsMedicalOfficerUser
from .models import Article
from .serializers import (
    ArticleSerializer, ArticleWriteSerializer, ReviewSerializer, ApproveSerializer, RejectSerializer
)
from .workflow import InvalidTransition, author_can_modify

logger = logging.getLogger(__name__)

reason_request_body = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    required=['reason'],
    properties={
        'reason': openapi.Schema(type=openapi.TYPE_STRING, description="Why the article is rejected"),
    }
)


class ArticleTransitionMixin:
    """
    Runs a workflow action on the current article and renders the outcome.
    """
    transition_messages = {
        'submit': 'Article submitted for review',
        'approve': 'Article approved successfully',
        'reject': 'Article rejected successfully',
        'publish': 'Article published successfully',
        'unpublish': 'Article unpublished and reverted to draft',
        're_review': 'Article sent back for review',
        'cancel_pending': 'Pending review cancelled, article reverted to draft',
    }

    def run_transition(self, request, article, action_name, comments=None):
        previous = article.status
        try:
            article.apply_transition(action_name, actor=request.user, comments=comments)
        except InvalidTransition as e:
            return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

        logger.info(
            f"Article {article.id} moved {previous} -> {article.status} ({action_name}) by {request.user.email}"
        )
        return Response({
            'message': self.transition_messages[action_name],
            'article': ArticleSerializer(article).data
        })


class MedicalOfficerArticleViewSet(ArticleTransitionMixin, viewsets.ModelViewSet):
    """
    Articles authored by the signed-in medical officer.
    """
    permission_classes = [IsMedicalOfficerUser]
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    def get_queryset(self):
        if getattr(self, 'swagger_fake_view', False):
            return Article.objects.none()
        if self.action in ('list', 'my_articles'):
            return Article.objects.filter(author=self.request.user).select_related('author', 'reviewed_by')
        return Article.objects.select_related('author', 'reviewed_by')

    def get_serializer_class(self):
        if self.action in ('create', 'update', 'partial_update'):
            return ArticleWriteSerializer
        return ArticleSerializer

    def get_object(self):
        article = super().get_object()
        if article.author_id != self.request.user.id:
            raise PermissionDenied('Access denied')
        return article

    @action(detail=False, methods=['get'], url_path='my-articles')
    def my_articles(self, request):
        return self.list(request)

    def create(self, request, *args, **kwargs):
        serializer = ArticleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = serializer.save(author=request.user, author_type='medical_officer')
        return Response({
            'message': 'Article created successfully',
            'article': ArticleSerializer(article).data
        }, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        article = self.get_object()
        if not author_can_modify(article.status):
            return Response({'error': 'Cannot edit published articles'}, status=status.HTTP_400_BAD_REQUEST)

        serializer = ArticleWriteSerializer(article, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        article = serializer.save()
        return Response({
            'message': 'Article updated successfully',
            'article': ArticleSerializer(article).data
        })

    def partial_update(self, request, *args, **kwargs):
        return self.update(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        article = self.get_object()
        if not author_can_modify(article.status):
            return Response({'error': 'Cannot delete published articles'}, status=status.HTTP_400_BAD_REQUEST)

        article.delete()
        return Response({'message': 'Article deleted successfully'})

    @action(detail=True, methods=['post'])
    def submit(self, request, pk=None):
        return self.run_transition(request, self.get_object(), 'submit')

    @action(detail=True, methods=['post', 'put'])
    def re_review(self, request, pk=None):
        return self.run_transition(request, self.get_object(), 're_review')


class AdminArticleViewSet(ArticleTransitionMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          mixins.DestroyModelMixin,
                          viewsets.GenericViewSet):
    """
    Moderation queue for all articles.
    """
    queryset = Article.objects.select_related('author', 'reviewed_by').all()
    serializer_class = ArticleSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['status', 'category', 'author_type']
    search_fields = ['title', 'content']

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('status', openapi.IN_QUERY, type=openapi.TYPE_STRING, description="Filter by status"),
            openapi.Parameter('category', openapi.IN_QUERY, type=openapi.TYPE_STRING, description="Filter by category"),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @swagger_auto_schema(request_body=ArticleWriteSerializer, responses={201: ArticleSerializer})
    def create(self, request):
        serializer = ArticleWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        article = serializer.save(author=request.user, author_type='admin')
        return Response({
            'message': 'Article created successfully',
            'article': ArticleSerializer(article).data
        }, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        article = self.get_object()
        logger.info(f"Admin {request.user.email} deleted article {article.id}")
        article.delete()
        return Response({'message': 'Article deleted successfully'})

    @swagger_auto_schema(methods=['post', 'put'], request_body=ReviewSerializer)
    @action(detail=True, methods=['post', 'put'])
    def review(self, request, pk=None):
        """
        Approve or reject a pending article in one call
        """
        serializer = ReviewSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        review_action = serializer.validated_data['action']
        comments = serializer.validated_data.get('comments', '').strip()

        if review_action == 'reject' and not comments:
            return Response({'error': 'A rejection reason is required'}, status=status.HTTP_400_BAD_REQUEST)
        return self.run_transition(request, self.get_object(), review_action, comments=comments)

    @swagger_auto_schema(methods=['post', 'put'], request_body=ApproveSerializer)
    @action(detail=True, methods=['post', 'put'])
    def approve(self, request, pk=None):
        serializer = ApproveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self.run_transition(request, self.get_object(), 'approve',
                                   comments=serializer.validated_data['comments'].strip())

    @swagger_auto_schema(methods=['post', 'put'], request_body=reason_request_body)
    @action(detail=True, methods=['post', 'put'])
    def reject(self, request, pk=None):
        serializer = RejectSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return self.run_transition(request, self.get_object(), 'reject',
                                   comments=serializer.validated_data['reason'])

    @action(detail=True, methods=['post', 'put'])
    def publish(self, request, pk=None):
        return self.run_transition(request, self.get_object(), 'publish')

    @action(detail=True, methods=['post', 'put'])
    def unpublish(self, request, pk=None):
        return self.run_transition(request, self.get_object(), 'unpublish')

    @action(detail=True, methods=['post', 'put'])
    def cancel_pending(self, request, pk=None):
        return self.run_transition(request, self.get_object(), 'cancel_pending')

    @action(detail=True, methods=['post', 'put'])
    def re_review(self, request, pk=None):
        return self.run_transition(request, self.get_object(), 're_review')


class ArticleViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Published articles, readable by anyone.
    """
    serializer_class = ArticleSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    filter_backends = [filters.SearchFilter]
    search_fields = ['title', 'content', 'excerpt']

    def get_queryset(self):
        return Article.objects.filter(status='published').select_related('author', 'reviewed_by') \
            .order_by('-published_at', '-created_at')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('search', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description="Search title and content"),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def retrieve(self, request, *args, **kwargs):
        article = self.get_object()
        Article.objects.filter(pk=article.pk).update(view_count=F('view_count') + 1)
        article.refresh_from_db(fields=['view_count'])
        return Response(self.get_serializer(article).data)

    @action(detail=False, methods=['get'], url_path=r'category/(?P<category>[^/.]+)')
    def category(self, request, category=None):
        if category not in Article.category_values():
            return Response({'error': 'Invalid category'}, status=status.HTTP_400_BAD_REQUEST)

        queryset = self.filter_queryset(self.get_queryset().filter(category=category))
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)
