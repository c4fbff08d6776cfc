import logging

from django.db.models import Q
from rest_framework import status, permissions, viewsets, mixins
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema

from users.models import ROLE_MEDICAL_OFFICER
from users.permissions import IsAdminUser, IsMedicalOfficerUser
from users.tokens import issue_tokens
from users.views import check_credentials, login_request_body
from .models import MedicalOfficer
from .serializers import (
    MedicalOfficerSerializer, MedicalOfficerRegisterSerializer,
    MedicalOfficerProfileUpdateSerializer, AdminMedicalOfficerUpdateSerializer
)

logger = logging.getLogger(__name__)


class MedicalOfficerRegisterAPIView(APIView):
    """
    Self-registration for medical officers. New accounts wait for admin approval.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @swagger_auto_schema(request_body=MedicalOfficerRegisterSerializer, responses={201: MedicalOfficerSerializer})
    def post(self, request):
        serializer = MedicalOfficerRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        officer = serializer.save()
        logger.info(f"Medical officer {officer.email} registered, pending approval")

        return Response({
            'message': 'Registration successful. Your account is pending admin approval.',
            'medical_officer': MedicalOfficerSerializer(officer).data,
            **issue_tokens(officer.user),
        }, status=status.HTTP_201_CREATED)


class MedicalOfficerLoginAPIView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    @swagger_auto_schema(operation_description="Log in a medical officer and obtain tokens",
                         request_body=login_request_body)
    def post(self, request):
        user, error = check_credentials(request, ROLE_MEDICAL_OFFICER)
        if error:
            return error

        officer = getattr(user, 'medical_officer', None)
        if officer is None:
            return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)
        if not officer.is_approved:
            return Response({'error': 'Account is pending approval'}, status=status.HTTP_401_UNAUTHORIZED)

        tokens = issue_tokens(user)
        return Response({
            'message': 'Login successful',
            'medical_officer': MedicalOfficerSerializer(officer).data,
            **tokens,
        })


class MedicalOfficerProfileAPIView(APIView):
    permission_classes = [IsMedicalOfficerUser]

    def get(self, request):
        return Response({'medical_officer': MedicalOfficerSerializer(request.user.medical_officer).data})

    @swagger_auto_schema(request_body=MedicalOfficerProfileUpdateSerializer, responses={200: MedicalOfficerSerializer})
    def put(self, request):
        officer = request.user.medical_officer
        serializer = MedicalOfficerProfileUpdateSerializer(officer, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        officer = serializer.save()
        return Response({
            'message': 'Profile updated successfully',
            'medical_officer': MedicalOfficerSerializer(officer).data
        })


class AdminMedicalOfficerViewSet(mixins.ListModelMixin,
                                 mixins.RetrieveModelMixin,
                                 viewsets.GenericViewSet):
    """
    Admin directory of medical officers, including approval.
    """
    queryset = MedicalOfficer.objects.select_related('user').all()
    serializer_class = MedicalOfficerSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['specialization', 'is_approved']

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('is_approved', openapi.IN_QUERY, type=openapi.TYPE_BOOLEAN,
                              description="Filter by approval status"),
            openapi.Parameter('specialization', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description="Filter by specialization"),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    @swagger_auto_schema(request_body=AdminMedicalOfficerUpdateSerializer, responses={200: MedicalOfficerSerializer})
    def update(self, request, pk=None):
        officer = self.get_object()
        was_approved = officer.is_approved
        serializer = AdminMedicalOfficerUpdateSerializer(officer, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        officer = serializer.save()

        if officer.is_approved != was_approved:
            logger.info(
                f"Admin {request.user.email} set approval of medical officer {officer.email} to {officer.is_approved}"
            )

        return Response({
            'message': 'Medical officer updated successfully',
            'medical_officer': MedicalOfficerSerializer(officer).data
        })

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    def destroy(self, request, pk=None):
        officer = self.get_object()
        email = officer.email
        # Removing the account removes the profile with it
        officer.user.delete()
        logger.info(f"Admin {request.user.email} deleted medical officer {email}")
        return Response({'message': 'Medical officer deleted successfully'})

    @action(detail=False, methods=['get'], url_path=r'search/(?P<query>[^/]+)')
    def search(self, request, query=None):
        officers = self.get_queryset().filter(
            Q(user__name__icontains=query) |
            Q(user__email__icontains=query) |
            Q(license_number__icontains=query)
        )
        serializer = self.get_serializer(officers, many=True)
        return Response({'medical_officers': serializer.data})
