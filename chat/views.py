import logging

from django.db.models import F
from rest_framework import status, permissions, viewsets, mixins, filters
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema

from users.authentication import FirebaseAuthentication
from users.firebase import get_firebase_user
from users.models import User
from users.permissions import IsAdminUser, IsEndUser, IsMedicalOfficerUser
from medical_officers.models import MedicalOfficer
from .conversations import derive_conversation_id, summarize_conversations, USER, MEDICAL_OFFICER
from .models import ChatMessage, PublishedMessage
from .serializers import (
    ChatMessageSerializer, SendMessageSerializer, MedicalOfficerSummarySerializer,
    PublishedMessageSerializer, PublishMessageSerializer, PublishedMessageUpdateSerializer
)

logger = logging.getLogger(__name__)

MESSAGE_PAGE_LIMIT = 100

send_request_body = openapi.Schema(
    type=openapi.TYPE_OBJECT,
    required=['message'],
    properties={
        'message': openapi.Schema(type=openapi.TYPE_STRING, description="Message text"),
        'message_type': openapi.Schema(type=openapi.TYPE_STRING, enum=['text', 'image', 'file']),
    }
)


class ParticipantChatMixin:
    """
    Conversation list, thread reading and sending for one side of a chat.
    Subclasses say who the signed-in participant is and how to describe
    the other side.
    """
    participant_type = None

    def get_participant_id(self):
        raise NotImplementedError

    def describe_counterpart(self, counterpart_id, counterpart_type):
        raise NotImplementedError

    def conversations(self, request):
        participant_id = self.get_participant_id()
        messages = ChatMessage.objects.for_participant(participant_id, self.participant_type).order_by('-created_at')
        threads = summarize_conversations(messages, participant_id, self.participant_type)

        results = []
        for thread in threads:
            other_key = 'user' if thread['counterpart_type'] == USER else 'medical_officer'
            results.append({
                'conversation_id': thread['conversation_id'],
                'last_message': ChatMessageSerializer(thread['last_message']).data,
                'message_count': thread['message_count'],
                'unread_count': thread['unread_count'],
                other_key: self.describe_counterpart(thread['counterpart_id'], thread['counterpart_type']),
            })
        return Response({'conversations': results})

    def messages(self, request, conversation_id=None):
        participant_id = self.get_participant_id()
        is_member = ChatMessage.objects.for_participant(participant_id, self.participant_type) \
            .filter(conversation_id=conversation_id).exists()
        if not is_member:
            return Response({'error': 'Access denied to this conversation'}, status=status.HTTP_403_FORBIDDEN)

        messages = list(
            ChatMessage.objects.filter(conversation_id=conversation_id).order_by('created_at')[:MESSAGE_PAGE_LIMIT]
        )
        ChatMessage.objects.mark_read(conversation_id, participant_id, self.participant_type)
        return Response({'messages': ChatMessageSerializer(messages, many=True).data})

    def send_to(self, request, receiver_id, receiver_type):
        serializer = SendMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        sender_id = self.get_participant_id()
        message = ChatMessage.objects.create(
            conversation_id=derive_conversation_id((sender_id, self.participant_type), (receiver_id, receiver_type)),
            sender_id=sender_id,
            sender_type=self.participant_type,
            receiver_id=receiver_id,
            receiver_type=receiver_type,
            message=serializer.validated_data['message'],
            message_type=serializer.validated_data['message_type'],
        )
        return Response({'message': ChatMessageSerializer(message).data}, status=status.HTTP_201_CREATED)


class UserChatViewSet(ParticipantChatMixin, viewsets.ViewSet):
    """
    Chat for community members, who talk to approved medical officers.
    """
    authentication_classes = [FirebaseAuthentication]
    permission_classes = [IsEndUser]
    participant_type = USER

    def get_participant_id(self):
        return self.request.user.uid

    def describe_counterpart(self, counterpart_id, counterpart_type):
        if counterpart_type != MEDICAL_OFFICER:
            return None
        officer = MedicalOfficer.objects.select_related('user').filter(pk=counterpart_id).first()
        if officer is None:
            return None
        return MedicalOfficerSummarySerializer(officer).data

    def medical_officers(self, request):
        officers = MedicalOfficer.objects.select_related('user') \
            .filter(is_approved=True, user__is_active=True).order_by('user__name')
        return Response({'medical_officers': MedicalOfficerSummarySerializer(officers, many=True).data})

    @swagger_auto_schema(request_body=send_request_body)
    def send(self, request, medical_officer_id=None):
        officer = MedicalOfficer.objects.select_related('user').filter(pk=medical_officer_id).first()
        if officer is None or not officer.can_practice:
            return Response({'error': 'Medical officer not found or unavailable'}, status=status.HTTP_404_NOT_FOUND)
        return self.send_to(request, str(officer.id), MEDICAL_OFFICER)


class MedicalOfficerChatViewSet(ParticipantChatMixin, viewsets.ViewSet):
    """
    Chat for approved medical officers, who answer community members.
    """
    permission_classes = [IsMedicalOfficerUser]
    participant_type = MEDICAL_OFFICER

    def get_participant_id(self):
        return str(self.request.user.medical_officer.id)

    def describe_counterpart(self, counterpart_id, counterpart_type):
        if counterpart_type != USER:
            return None
        return self.lookup_user(counterpart_id)

    def lookup_user(self, uid):
        """Local mirror first, then Firebase."""
        user = User.objects.filter(firebase_uid=uid).first()
        if user is not None:
            return {
                'uid': uid,
                'email': user.email,
                'display_name': user.display_name,
                'photo_url': user.photo_url or None,
            }
        return get_firebase_user(uid)

    @swagger_auto_schema(request_body=send_request_body)
    def send(self, request, user_uid=None):
        if self.lookup_user(user_uid) is None:
            return Response({'error': 'User not found'}, status=status.HTTP_404_NOT_FOUND)
        return self.send_to(request, user_uid, USER)


class AdminChatMessageViewSet(mixins.ListModelMixin,
                              mixins.DestroyModelMixin,
                              viewsets.GenericViewSet):
    """
    Admin moderation of every chat message, and publishing of answers.
    """
    queryset = ChatMessage.objects.all().order_by('-created_at')
    serializer_class = ChatMessageSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['conversation_id', 'sender_type', 'receiver_type', 'is_read']

    @swagger_auto_schema(
        manual_parameters=[
            openapi.Parameter('conversation_id', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description="Only messages of this conversation"),
            openapi.Parameter('sender_type', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                              description="user, medical_officer or admin"),
        ]
    )
    def list(self, request, *args, **kwargs):
        return super().list(request, *args, **kwargs)

    def destroy(self, request, *args, **kwargs):
        message = self.get_object()
        message.delete()
        logger.info(f"Admin {request.user.email} deleted chat message {kwargs.get('pk')}")
        return Response({'message': 'Chat message deleted successfully'})

    @swagger_auto_schema(request_body=PublishMessageSerializer, responses={201: PublishedMessageSerializer})
    def publish(self, request, pk=None):
        """
        Republish a medical officer's answer as a public article
        """
        chat_message = get_object_or_404(ChatMessage, pk=pk)
        if chat_message.sender_type != MEDICAL_OFFICER:
            return Response({'error': 'Only medical officer messages can be published'},
                            status=status.HTTP_400_BAD_REQUEST)

        serializer = PublishMessageSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        officer = MedicalOfficer.objects.select_related('user').filter(pk=chat_message.sender_id).first()
        published = PublishedMessage.objects.create(
            original_message=chat_message,
            title=data.get('title') or chat_message.message[:255],
            content=data.get('content') or chat_message.message,
            author_id=chat_message.sender_id,
            author_name=officer.name if officer else 'Medical Officer',
            author_type=MEDICAL_OFFICER,
            author_specialization=officer.specialization if officer else '',
            category=data['category'],
            tags=data['tags'],
            published_by=request.user,
        )
        logger.info(f"Admin {request.user.email} published chat message {chat_message.id} as {published.id}")
        return Response({
            'message': 'Message published successfully',
            'published_message': PublishedMessageSerializer(published).data
        }, status=status.HTTP_201_CREATED)


class AdminPublishedMessageViewSet(mixins.ListModelMixin,
                                   mixins.RetrieveModelMixin,
                                   mixins.DestroyModelMixin,
                                   viewsets.GenericViewSet):
    queryset = PublishedMessage.objects.select_related('published_by').all()
    serializer_class = PublishedMessageSerializer
    permission_classes = [IsAdminUser]
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ['category', 'is_active']

    @swagger_auto_schema(request_body=PublishedMessageUpdateSerializer, responses={200: PublishedMessageSerializer})
    def update(self, request, pk=None):
        published = self.get_object()
        serializer = PublishedMessageUpdateSerializer(published, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        published = serializer.save()
        return Response({
            'message': 'Published message updated successfully',
            'published_message': PublishedMessageSerializer(published).data
        })

    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    @action(detail=True, methods=['post', 'put'])
    def deactivate(self, request, pk=None):
        published = self.get_object()
        published.is_active = False
        published.save(update_fields=['is_active', 'updated_at'])
        return Response({
            'message': 'Published message deactivated',
            'published_message': PublishedMessageSerializer(published).data
        })

    def destroy(self, request, *args, **kwargs):
        self.get_object().delete()
        return Response({'message': 'Published message deleted successfully'})


class PublishedMessageViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Active published answers, readable by anyone.
    """
    serializer_class = PublishedMessageSerializer
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ['category']
    search_fields = ['title', 'content']

    def get_queryset(self):
        return PublishedMessage.objects.filter(is_active=True).select_related('published_by')

    def retrieve(self, request, *args, **kwargs):
        published = self.get_object()
        PublishedMessage.objects.filter(pk=published.pk).update(view_count=F('view_count') + 1)
        published.refresh_from_db(fields=['view_count'])
        return Response(self.get_serializer(published).data)
