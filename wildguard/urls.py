"""
URL configuration for wildguard project.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.views.generic import RedirectView
from django.views.static import serve
from django.conf import settings

from users.views import AdminRegisterAPIView, AdminLoginAPIView, AdminProfileAPIView, AdminUserViewSet
from medical_officers.views import (
    MedicalOfficerRegisterAPIView, MedicalOfficerLoginAPIView, MedicalOfficerProfileAPIView,
    AdminMedicalOfficerViewSet
)
from articles.views import MedicalOfficerArticleViewSet, AdminArticleViewSet, ArticleViewSet
from community.views import PostViewSet, CommentViewSet
from chat.views import (
    UserChatViewSet, MedicalOfficerChatViewSet, AdminChatMessageViewSet,
    AdminPublishedMessageViewSet, PublishedMessageViewSet
)
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

# Swagger documentation
from rest_framework import permissions
from rest_framework.routers import DefaultRouter
from drf_yasg.views import get_schema_view
from drf_yasg import openapi


schema_view = get_schema_view(
   openapi.Info(
      title="WildGuard API",
      default_version='v1',
      description="""
      API documentation for the WildGuard wildlife safety platform

      ## Authentication

      Community members sign in with Firebase and send their Firebase ID token:

      `Authorization: Bearer <firebase_id_token>`

      Admins and medical officers log in with email and password and send the
      JWT access token returned by `POST /api/admin/auth/login/` or
      `POST /api/medical-officer/auth/login/` the same way.

      ## Error Handling

      Errors are returned as `{"error": "..."}` with the usual status codes:

      - 400: Bad Request
      - 401: Unauthorized
      - 403: Forbidden
      - 404: Not Found
      - 500: Server Error
      """,
      contact=openapi.Contact(email="contact@wildguard.app"),
      license=openapi.License(name="MIT License"),
   ),
   public=True,
   permission_classes=[permissions.AllowAny],
)

router = DefaultRouter()
router.register(r'admin/users', AdminUserViewSet, basename='admin-user')
router.register(r'admin/medical-officers', AdminMedicalOfficerViewSet, basename='admin-medical-officer')
router.register(r'admin/articles', AdminArticleViewSet, basename='admin-article')
router.register(r'admin/chat/messages', AdminChatMessageViewSet, basename='admin-chat-message')
router.register(r'admin/chat/published-messages', AdminPublishedMessageViewSet, basename='admin-published-message')
router.register(r'medical-officer/articles', MedicalOfficerArticleViewSet, basename='medical-officer-article')
router.register(r'articles', ArticleViewSet, basename='article')
router.register(r'posts', PostViewSet, basename='post')
router.register(r'posts/(?P<post_id>[^/.]+)/comments', CommentViewSet, basename='post-comment')
router.register(r'published-messages', PublishedMessageViewSet, basename='published-message')

auth_urls = [
    path('api/admin/auth/register/', AdminRegisterAPIView.as_view(), name='admin-register'),
    path('api/admin/auth/login/', AdminLoginAPIView.as_view(), name='admin-login'),
    path('api/admin/auth/profile/', AdminProfileAPIView.as_view(), name='admin-profile'),
    path('api/medical-officer/auth/register/', MedicalOfficerRegisterAPIView.as_view(), name='medical-officer-register'),
    path('api/medical-officer/auth/login/', MedicalOfficerLoginAPIView.as_view(), name='medical-officer-login'),
    path('api/medical-officer/auth/profile/', MedicalOfficerProfileAPIView.as_view(), name='medical-officer-profile'),
]

chat_urls = [
    # Community members
    path('api/chat/medical-officers/', UserChatViewSet.as_view({'get': 'medical_officers'}), name='chat-medical-officers'),
    path('api/chat/conversations/', UserChatViewSet.as_view({'get': 'conversations'}), name='chat-conversations'),
    path('api/chat/messages/<str:conversation_id>/', UserChatViewSet.as_view({'get': 'messages'}), name='chat-messages'),
    path('api/chat/send/<uuid:medical_officer_id>/', UserChatViewSet.as_view({'post': 'send'}), name='chat-send'),

    # Medical officers
    path('api/medical-officer/chat/conversations/', MedicalOfficerChatViewSet.as_view({'get': 'conversations'}),
         name='medical-officer-chat-conversations'),
    path('api/medical-officer/chat/messages/<str:conversation_id>/', MedicalOfficerChatViewSet.as_view({'get': 'messages'}),
         name='medical-officer-chat-messages'),
    path('api/medical-officer/chat/send/<str:user_uid>/', MedicalOfficerChatViewSet.as_view({'post': 'send'}),
         name='medical-officer-chat-send'),

    # Admin publishing
    path('api/admin/chat/publish-message/<uuid:pk>/', AdminChatMessageViewSet.as_view({'post': 'publish'}),
         name='admin-chat-publish-message'),
]

urlpatterns = [
    path('admin/', admin.site.urls),

    path('', RedirectView.as_view(url='/swagger/', permanent=False), name='index'),
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('swagger.json', schema_view.without_ui(cache_timeout=0), name='schema-json'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),

    *auth_urls,
    *chat_urls,

    path('api/', include(router.urls)),

    # JWT Authentication
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    # Uploaded post photos
    re_path(r'^uploads/(?P<path>.*)$', serve, {'document_root': settings.MEDIA_ROOT}),
]
