import logging
from datetime import timedelta

from django.db.models import Q
from django.utils import timezone
from firebase_admin import auth as firebase_auth
from rest_framework import status, permissions, viewsets, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema

from wildguard.pagination import SmallPageNumberPagination
from .firebase import serialize_firebase_user
from .models import User, ROLE_ADMIN, ROLE_USER, ROLE_MEDICAL_OFFICER
from .permissions import IsAdminUser
from .serializers import (
    UserSerializer, AdminSerializer, AdminRegisterSerializer, LoginSerializer, EndUserUpdateSerializer
)
from .tokens import issue_tokens

logger = logging.getLogger(__name__)

# Largest page firebase-admin's list_users accepts
FIREBASE_MAX_PAGE = 1000

login_request_body = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    required=['email', 'password'],
    properties={
        'email': openapi.Schema(type=openapi.TYPE_STRING, description="Account email"),
        'password': openapi.Schema(type=openapi.TYPE_STRING, format="password", description="Password")
    }
)


def check_credentials(request, role_name):
    """
    Validate an email/password login for an account holding ``role_name``.

    Returns ``(user, None)`` on success or ``(None, error_response)``.
    """
    serializer = LoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    email = serializer.validated_data['email'].strip().lower()
    password = serializer.validated_data['password']

    user = User.objects.with_role(role_name).filter(email__iexact=email).first()
    if user is None or not user.check_password(password):
        logger.info(f"Failed {role_name} login for {email}")
        return None, Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

    if not user.is_active:
        return None, Response({'error': 'Account is deactivated'}, status=status.HTTP_401_UNAUTHORIZED)

    return user, None


class AdminRegisterAPIView(APIView):
    """
    Register an admin account.

    The very first admin may register without credentials and becomes the
    superuser; after that only an authenticated admin can add admins.
    """
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(request_body=AdminRegisterSerializer, responses={201: AdminSerializer})
    def post(self, request):
        first_admin = not User.objects.with_role(ROLE_ADMIN).exists()
        if not first_admin:
            if not request.user.is_authenticated:
                return Response({'error': 'Authentication credentials were not provided.'},
                                status=status.HTTP_401_UNAUTHORIZED)
            if not request.user.has_role(ROLE_ADMIN):
                return Response({'error': 'Only admins can register new admins'},
                                status=status.HTTP_403_FORBIDDEN)

        serializer = AdminRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        admin = User.objects.create_user(
            username=data['email'],
            email=data['email'],
            password=data['password'],
            name=data['name'],
            is_staff=True,
            is_superuser=first_admin,
        )
        admin.add_role(ROLE_ADMIN)
        logger.info(f"Registered admin {admin.email} (superadmin={first_admin})")

        return Response({
            'message': 'Admin registered successfully',
            'admin': AdminSerializer(admin).data,
            **issue_tokens(admin),
        }, status=status.HTTP_201_CREATED)


class AdminLoginAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @swagger_auto_schema(operation_description="Log in an admin and obtain tokens", request_body=login_request_body)
    def post(self, request):
        admin, error = check_credentials(request, ROLE_ADMIN)
        if error:
            return error

        tokens = issue_tokens(admin)
        return Response({
            'message': 'Login successful',
            'admin': AdminSerializer(admin).data,
            **tokens,
        })


class AdminProfileAPIView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request):
        return Response({'admin': AdminSerializer(request.user).data})


class AdminUserViewSet(viewsets.GenericViewSet):
    """
    Admin management of community members (Firebase accounts and their
    local mirrors).
    """
    serializer_class = UserSerializer
    permission_classes = [IsAdminUser]
    pagination_class = SmallPageNumberPagination
    filter_backends = [filters.SearchFilter]
    search_fields = ['email', 'name', 'username']
    lookup_field = 'firebase_uid'
    lookup_url_kwarg = 'uid'
    lookup_value_regex = '[^/]+'

    def get_queryset(self):
        return User.objects.with_role(ROLE_USER).order_by('-date_joined')

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('search', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description="Search by email or display name"),
        ]
    )
    def list(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def retrieve(self, request, uid=None):
        return Response(self.get_serializer(self.get_object()).data)

    @swagger_auto_schema(request_body=EndUserUpdateSerializer, responses={200: UserSerializer})
    def update(self, request, uid=None):
        serializer = EndUserUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        # None leaves a Firebase attribute unchanged; DELETE_ATTRIBUTE clears it
        changes = {key: value or firebase_auth.DELETE_ATTRIBUTE for key, value in data.items()}
        try:
            firebase_auth.update_user(uid, **changes)
        except firebase_auth.UserNotFoundError:
            return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

        user = User.objects.filter(firebase_uid=uid).first()
        if user is not None:
            if 'email' in data:
                taken = User.objects.filter(email__iexact=data['email']).exclude(pk=user.pk).exists()
                user.email = None if taken else data['email']
            if 'display_name' in data:
                user.name = data['display_name']
            if 'photo_url' in data:
                user.photo_url = data['photo_url']
            user.save()

        logger.info(f"Admin {request.user.email} updated user {uid}")
        return Response({
            'message': 'User updated successfully',
            'user': UserSerializer(user).data if user else None
        })

    def partial_update(self, request, uid=None):
        return self.update(request, uid=uid)

    def destroy(self, request, uid=None):
        try:
            firebase_auth.delete_user(uid)
        except firebase_auth.UserNotFoundError:
            return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)

        # The local mirror keeps authorship of posts and messages; it is only disabled.
        User.objects.filter(firebase_uid=uid).update(is_active=False)
        logger.info(f"Admin {request.user.email} deleted Firebase user {uid}")
        return Response({'message': 'User deleted successfully'})

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('limit', openapi.IN_QUERY, type=openapi.TYPE_INTEGER, description="Users per page"),
            openapi.Parameter('page_token', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description="Token returned by the previous page"),
        ]
    )
    @action(detail=False, methods=['get'])
    def firebase(self, request):
        """
        List accounts straight from Firebase Authentication
        """
        try:
            max_results = int(request.query_params.get('limit', 10))
        except ValueError:
            return Response({'error': 'limit must be a number'}, status=status.HTTP_400_BAD_REQUEST)
        if not 1 <= max_results <= FIREBASE_MAX_PAGE:
            return Response({'error': f'limit must be between 1 and {FIREBASE_MAX_PAGE}'},
                            status=status.HTTP_400_BAD_REQUEST)
        page_token = request.query_params.get('page_token') or None

        result = firebase_auth.list_users(page_token=page_token, max_results=max_results)
        return Response({
            'users': [serialize_firebase_user(record) for record in result.users],
            'next_page_token': result.next_page_token or None,
        })

    @action(detail=False, methods=['get'], url_path='firebase-count')
    def firebase_count(self, request):
        count = sum(1 for _ in firebase_auth.list_users().iterate_all())
        return Response({'count': count})

    @action(detail=False, methods=['get'])
    def stats(self, request):
        since = timezone.now() - timedelta(days=30)
        users = User.objects.with_role(ROLE_USER)
        officers = User.objects.with_role(ROLE_MEDICAL_OFFICER)
        return Response({
            'total_users': users.count(),
            'recent_users': users.filter(date_joined__gte=since).count(),
            'total_medical_officers': officers.count(),
            'recent_medical_officers': officers.filter(date_joined__gte=since).count(),
            'pending_medical_officers': officers.filter(
                Q(medical_officer__isnull=False) & Q(medical_officer__is_approved=False)
            ).count(),
        })
