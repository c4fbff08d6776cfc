from types import SimpleNamespace
from unittest.mock import patch

from django.test import SimpleTestCase, override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from users.models import User
from medical_officers.tests import make_medical_officer, make_admin
from chat.conversations import derive_conversation_id, summarize_conversations
from chat.models import ChatMessage, PublishedMessage


def message(conversation_id, sender, receiver, is_read=False):
    return SimpleNamespace(
        conversation_id=conversation_id,
        sender_id=sender[0], sender_type=sender[1],
        receiver_id=receiver[0], receiver_type=receiver[1],
        is_read=is_read,
    )


class ConversationFunctionsTestCase(SimpleTestCase):
    """Test cases for conversation keys and thread summaries"""

    def test_conversation_id_is_commutative(self):
        user = ('uid-1', 'user')
        officer = ('5f0c', 'medical_officer')

        self.assertEqual(derive_conversation_id(user, officer), derive_conversation_id(officer, user))

    def test_conversation_id_format(self):
        """Ids and types are sorted independently"""
        conversation_id = derive_conversation_id(('b-id', 'user'), ('a-id', 'medical_officer'))

        self.assertEqual(conversation_id, 'medical_officer_a-id_user_b-id')

    def test_summary_groups_threads_newest_first(self):
        me = ('uid-1', 'user')
        officer_a = ('mo-a', 'medical_officer')
        officer_b = ('mo-b', 'medical_officer')
        newest_first = [
            message('conv-b', officer_b, me),
            message('conv-a', me, officer_a),
            message('conv-a', officer_a, me),
            message('conv-a', officer_a, me, is_read=True),
        ]

        threads = summarize_conversations(newest_first, *me)

        self.assertEqual([t['conversation_id'] for t in threads], ['conv-b', 'conv-a'])
        self.assertEqual(threads[1]['message_count'], 3)
        self.assertEqual(threads[1]['unread_count'], 1)
        self.assertIs(threads[1]['last_message'], newest_first[1])
        self.assertEqual((threads[0]['counterpart_id'], threads[0]['counterpart_type']), officer_b)

    def test_summary_skips_foreign_messages(self):
        stranger = message('conv-x', ('uid-9', 'user'), ('mo-a', 'medical_officer'))

        self.assertEqual(summarize_conversations([stranger], 'uid-1', 'user'), [])

    def test_unread_counts_only_messages_to_participant(self):
        me = ('uid-1', 'user')
        officer = ('mo-a', 'medical_officer')

        threads = summarize_conversations([message('c', me, officer)], *me)

        self.assertEqual(threads[0]['unread_count'], 0)


def make_member(uid, name):
    user, _ = User.objects.sync_firebase_user(uid, email=f'{uid}@test.com', name=name)
    return user


@override_settings(ALLOWED_HOSTS=['*'])
class UserChatTestCase(APITestCase):
    """Test cases for community members chatting with medical officers"""

    def setUp(self):
        self.member = make_member('uid-member', 'Amina')
        self.officer = make_medical_officer(name='Dr. Zawadi')
        self.client.force_authenticate(user=self.member)

    def send(self, text='I was bitten by a snake'):
        return self.client.post(f'/api/chat/send/{self.officer.id}/', {'message': text}, format='json')

    def test_available_officers_are_approved_and_sorted(self):
        make_medical_officer(email='b@test.com', license_number='LIC-002', name='Dr. Baraka')
        make_medical_officer(email='p@test.com', license_number='LIC-003', name='Dr. Pending', approved=False)

        response = self.client.get('/api/chat/medical-officers/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = [o['name'] for o in response.data['medical_officers']]
        self.assertEqual(names, ['Dr. Baraka', 'Dr. Zawadi'])

    def test_send_uses_derived_conversation_id(self):
        response = self.send()

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        expected = derive_conversation_id(('uid-member', 'user'), (str(self.officer.id), 'medical_officer'))
        self.assertEqual(response.data['message']['conversation_id'], expected)
        self.assertEqual(response.data['message']['message_type'], 'text')

    def test_send_requires_text(self):
        response = self.client.post(f'/api/chat/send/{self.officer.id}/', {'message': ''}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Message is required')

    def test_send_to_unapproved_officer(self):
        self.officer.is_approved = False
        self.officer.save()

        response = self.send()

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Medical officer not found or unavailable')

    def test_send_to_deactivated_officer(self):
        self.officer.user.is_active = False
        self.officer.user.save()

        self.assertEqual(self.send().status_code, status.HTTP_404_NOT_FOUND)

    def test_conversations_include_officer_and_unread(self):
        conversation_id = self.send().data['message']['conversation_id']
        ChatMessage.objects.create(
            conversation_id=conversation_id,
            sender_id=str(self.officer.id), sender_type='medical_officer',
            receiver_id='uid-member', receiver_type='user',
            message='Keep the limb still and come in.',
        )

        response = self.client.get('/api/chat/conversations/')

        conversation = response.data['conversations'][0]
        self.assertEqual(conversation['message_count'], 2)
        self.assertEqual(conversation['unread_count'], 1)
        self.assertEqual(conversation['medical_officer']['name'], 'Dr. Zawadi')
        self.assertEqual(conversation['last_message']['message'], 'Keep the limb still and come in.')

    def test_reading_marks_messages_read(self):
        conversation_id = self.send().data['message']['conversation_id']
        reply = ChatMessage.objects.create(
            conversation_id=conversation_id,
            sender_id=str(self.officer.id), sender_type='medical_officer',
            receiver_id='uid-member', receiver_type='user',
            message='Go to the nearest clinic.',
        )

        response = self.client.get(f'/api/chat/messages/{conversation_id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['message'] for m in response.data['messages']],
                         ['I was bitten by a snake', 'Go to the nearest clinic.'])
        reply.refresh_from_db()
        self.assertTrue(reply.is_read)
        self.assertIsNotNone(reply.read_at)

    def test_outsider_cannot_read_conversation(self):
        conversation_id = self.send().data['message']['conversation_id']
        self.client.force_authenticate(user=make_member('uid-outsider', 'Juma'))

        response = self.client.get(f'/api/chat/messages/{conversation_id}/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Access denied to this conversation')

    def test_officer_cannot_use_member_endpoints(self):
        self.client.force_authenticate(user=self.officer.user)

        response = self.client.get('/api/chat/conversations/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(ALLOWED_HOSTS=['*'])
class MedicalOfficerChatTestCase(APITestCase):
    """Test cases for medical officers answering community members"""

    def setUp(self):
        self.officer = make_medical_officer()
        self.member = make_member('uid-member', 'Amina')
        self.client.force_authenticate(user=self.officer.user)

    def test_reply_to_known_member(self):
        response = self.client.post('/api/medical-officer/chat/send/uid-member/', {'message': 'Rest'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message']['sender_id'], str(self.officer.id))
        self.assertEqual(response.data['message']['receiver_type'], 'user')

    @patch('chat.views.get_firebase_user')
    def test_reply_to_firebase_only_member(self, mock_get_user):
        mock_get_user.return_value = {'uid': 'uid-remote', 'email': 'r@test.com', 'display_name': 'Remote'}

        response = self.client.post('/api/medical-officer/chat/send/uid-remote/', {'message': 'Hi'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        mock_get_user.assert_called_once_with('uid-remote')

    @patch('chat.views.get_firebase_user', return_value=None)
    def test_reply_to_unknown_member(self, mock_get_user):
        response = self.client.post('/api/medical-officer/chat/send/uid-ghost/', {'message': 'Hi'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'User not found')

    def test_conversations_include_member_details(self):
        ChatMessage.objects.create(
            conversation_id=derive_conversation_id(('uid-member', 'user'), (str(self.officer.id), 'medical_officer')),
            sender_id='uid-member', sender_type='user',
            receiver_id=str(self.officer.id), receiver_type='medical_officer',
            message='Help',
        )

        response = self.client.get('/api/medical-officer/chat/conversations/')

        conversation = response.data['conversations'][0]
        self.assertEqual(conversation['user']['display_name'], 'Amina')
        self.assertEqual(conversation['unread_count'], 1)

    def test_pending_officer_is_refused(self):
        self.officer.is_approved = False
        self.officer.save()

        response = self.client.get('/api/medical-officer/chat/conversations/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(ALLOWED_HOSTS=['*'])
class AdminChatTestCase(APITestCase):
    """Test cases for chat moderation and published messages"""

    def setUp(self):
        self.admin = make_admin()
        self.officer = make_medical_officer()
        conversation_id = derive_conversation_id(('uid-member', 'user'), (str(self.officer.id), 'medical_officer'))
        self.question = ChatMessage.objects.create(
            conversation_id=conversation_id,
            sender_id='uid-member', sender_type='user',
            receiver_id=str(self.officer.id), receiver_type='medical_officer',
            message='What do I do if an elephant charges?',
        )
        self.answer = ChatMessage.objects.create(
            conversation_id=conversation_id,
            sender_id=str(self.officer.id), sender_type='medical_officer',
            receiver_id='uid-member', receiver_type='user',
            message='Do not run. Move behind a large tree or vehicle.',
        )
        self.client.force_authenticate(user=self.admin)

    def test_list_filters_by_sender_type(self):
        response = self.client.get('/api/admin/chat/messages/', {'sender_type': 'medical_officer'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['id'], str(self.answer.id))

    def test_delete_message(self):
        response = self.client.delete(f'/api/admin/chat/messages/{self.question.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(ChatMessage.objects.filter(pk=self.question.pk).exists())

    def test_publish_defaults_to_message_text(self):
        response = self.client.post(f'/api/admin/chat/publish-message/{self.answer.id}/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        published = response.data['published_message']
        self.assertEqual(published['title'], self.answer.message)
        self.assertEqual(published['content'], self.answer.message)
        self.assertEqual(published['category'], 'medical_advice')
        self.assertEqual(published['author']['name'], 'Dr. Jane Mwangi')
        self.assertEqual(published['author']['specialization'], 'toxicology')
        self.assertEqual(published['published_by']['type'], 'admin')

    def test_only_officer_answers_can_be_published(self):
        response = self.client.post(f'/api/admin/chat/publish-message/{self.question.id}/', {}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Only medical officer messages can be published')

    def test_published_copy_survives_message_deletion(self):
        self.client.post(f'/api/admin/chat/publish-message/{self.answer.id}/',
                         {'title': 'Elephant charges', 'category': 'safety_tips'}, format='json')
        self.answer.delete()

        published = PublishedMessage.objects.get()
        self.assertIsNone(published.original_message)
        self.assertEqual(published.title, 'Elephant charges')

    def test_non_admin_cannot_moderate(self):
        self.client.force_authenticate(user=self.officer.user)

        response = self.client.get('/api/admin/chat/messages/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Admin access required')

    def test_deactivate_hides_from_public(self):
        published = PublishedMessage.objects.create(
            original_message=self.answer, title='Elephants', content='Do not run.',
            author_id=str(self.officer.id), author_name='Dr. Jane Mwangi', published_by=self.admin
        )

        response = self.client.post(f'/api/admin/chat/published-messages/{published.id}/deactivate/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['published_message']['is_active'])

        self.client.force_authenticate(user=None)
        response = self.client.get('/api/published-messages/')
        self.assertEqual(response.data['count'], 0)

    def test_update_published_message(self):
        published = PublishedMessage.objects.create(
            title='Old', content='Do not run.', author_id=str(self.officer.id), author_name='Dr. Jane Mwangi'
        )

        response = self.client.patch(f'/api/admin/chat/published-messages/{published.id}/',
                                     {'title': 'New', 'tags': ['elephant']}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['published_message']['title'], 'New')
        self.assertEqual(response.data['published_message']['tags'], ['elephant'])


@override_settings(ALLOWED_HOSTS=['*'])
class PublishedMessageTestCase(APITestCase):
    """Test cases for the public published messages feed"""

    def setUp(self):
        self.published = PublishedMessage.objects.create(
            title='Snakebite first aid', content='Keep calm and keep the limb still.',
            author_id='mo-1', author_name='Dr. Jane Mwangi', category='emergency_guidance'
        )

    def test_retrieve_counts_views(self):
        response = self.client.get(f'/api/published-messages/{self.published.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['view_count'], 1)

    def test_filter_by_category(self):
        response = self.client.get('/api/published-messages/', {'category': 'prevention'})

        self.assertEqual(response.data['count'], 0)

    def test_search(self):
        response = self.client.get('/api/published-messages/', {'search': 'limb'})

        self.assertEqual(response.data['count'], 1)
