from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import patch

from django.test import override_settings
from django.utils import timezone
from firebase_admin import auth as firebase_auth
from rest_framework import status
from rest_framework.test import APITestCase, APIRequestFactory

from users.authentication import FirebaseAuthentication
from users.models import User, Role


def make_admin(email='admin@test.com', password='adminpass123', superuser=False):
    admin = User.objects.create_user(
        username=email, email=email, password=password, name='Admin User',
        is_staff=True, is_superuser=superuser
    )
    admin.add_role('admin')
    return admin


@override_settings(ALLOWED_HOSTS=['*'])
class AdminAuthTestCase(APITestCase):
    """Test cases for admin registration, login and profile"""

    register_url = '/api/admin/auth/register/'
    login_url = '/api/admin/auth/login/'
    profile_url = '/api/admin/auth/profile/'

    def test_first_admin_registers_without_credentials(self):
        """The first admin can self-register and becomes the superuser"""
        response = self.client.post(self.register_url, {
            'email': 'First@Test.com',
            'password': 'secret123',
            'name': 'First Admin',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['admin']['role'], 'superadmin')
        self.assertIn('access', response.data)

        admin = User.objects.get(email='first@test.com')
        self.assertTrue(admin.is_superuser)
        self.assertTrue(admin.has_role('admin'))

    def test_later_admin_requires_authenticated_admin(self):
        """Once an admin exists, anonymous registration is refused"""
        make_admin()
        data = {'email': 'second@test.com', 'password': 'secret123', 'name': 'Second'}

        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        self.client.force_authenticate(user=User.objects.get(email='admin@test.com'))
        response = self.client.post(self.register_url, data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['admin']['role'], 'admin')

    def test_duplicate_email_rejected(self):
        """Registering an existing email fails with 400"""
        admin = make_admin()
        self.client.force_authenticate(user=admin)

        response = self.client.post(self.register_url, {
            'email': 'admin@test.com', 'password': 'secret123', 'name': 'Copy'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already exists', response.data['error'])

    def test_login_success_updates_last_login(self):
        """Valid credentials return tokens and record the login time"""
        make_admin()

        response = self.client.post(self.login_url, {
            'email': 'admin@test.com', 'password': 'adminpass123'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertIsNotNone(User.objects.get(email='admin@test.com').last_login)

    def test_login_missing_fields(self):
        """Missing email or password is a 400"""
        response = self.client.post(self.login_url, {'email': 'admin@test.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Email and password are required')

    def test_login_invalid_credentials(self):
        """A wrong password is a 401"""
        make_admin()

        response = self.client.post(self.login_url, {
            'email': 'admin@test.com', 'password': 'wrong-password'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_login_deactivated_account(self):
        """A deactivated admin cannot log in"""
        admin = make_admin()
        admin.is_active = False
        admin.save()

        response = self.client.post(self.login_url, {
            'email': 'admin@test.com', 'password': 'adminpass123'
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Account is deactivated')

    def test_profile_requires_admin_role(self):
        """Non-admin users get 403 on the admin profile"""
        user = User.objects.create_user(username='member', email='member@test.com', password='x' * 8)
        user.add_role('user')
        self.client.force_authenticate(user=user)

        response = self.client.get(self.profile_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Admin access required')


@override_settings(ALLOWED_HOSTS=['*'])
class AdminUserManagementTestCase(APITestCase):
    """Test cases for admin management of community members"""

    def setUp(self):
        self.admin = make_admin()
        self.client.force_authenticate(user=self.admin)
        self.member, _ = User.objects.sync_firebase_user('uid-123', email='member@test.com', name='Member')
        User.objects.sync_firebase_user('uid-456', email='other@test.com', name='Other')

    def test_list_and_search_users(self):
        """Only end users are listed and search narrows the results"""
        response = self.client.get('/api/admin/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['page_size'], 10)

        response = self.client.get('/api/admin/users/', {'search': 'member@'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['uid'], 'uid-123')

    def test_limit_controls_page_size(self):
        response = self.client.get('/api/admin/users/', {'limit': 1})

        self.assertEqual(response.data['page_size'], 1)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertTrue(response.data['has_next'])
        self.assertFalse(response.data['has_previous'])
        self.assertEqual(len(response.data['results']), 1)

    def test_retrieve_by_uid(self):
        """Users are addressed by their Firebase uid"""
        response = self.client.get('/api/admin/users/uid-123/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'member@test.com')

        response = self.client.get('/api/admin/users/missing/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('users.views.firebase_auth.update_user')
    def test_update_user(self, mock_update):
        """Updates go to Firebase and to the local mirror"""
        response = self.client.put('/api/admin/users/uid-123/', {'display_name': 'Renamed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_update.assert_called_once_with('uid-123', display_name='Renamed')
        self.member.refresh_from_db()
        self.assertEqual(self.member.name, 'Renamed')

    @patch('users.views.firebase_auth.update_user')
    def test_blank_fields_are_cleared_in_firebase(self, mock_update):
        """Blank values remove the attribute in Firebase, not just locally"""
        response = self.client.patch('/api/admin/users/uid-123/', {'display_name': '', 'photo_url': ''}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_update.assert_called_once_with(
            'uid-123', display_name=firebase_auth.DELETE_ATTRIBUTE, photo_url=firebase_auth.DELETE_ATTRIBUTE
        )
        self.member.refresh_from_db()
        self.assertEqual(self.member.name, '')

    @patch('users.views.firebase_auth.update_user')
    def test_update_to_email_held_locally(self, mock_update):
        """The mirror drops an email another local account already holds"""
        response = self.client.put('/api/admin/users/uid-123/', {'email': 'admin@test.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_update.assert_called_once_with('uid-123', email='admin@test.com')
        self.member.refresh_from_db()
        self.assertIsNone(self.member.email)

    @patch('users.views.firebase_auth.delete_user')
    def test_delete_user_deactivates_mirror(self, mock_delete):
        """Deleting removes the Firebase account and disables the mirror"""
        response = self.client.delete('/api/admin/users/uid-123/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_delete.assert_called_once_with('uid-123')
        self.member.refresh_from_db()
        self.assertFalse(self.member.is_active)

    @patch('users.views.firebase_auth.delete_user')
    def test_delete_unknown_firebase_user(self, mock_delete):
        """A uid Firebase does not know is a 404"""
        mock_delete.side_effect = firebase_auth.UserNotFoundError('No user record found')

        response = self.client.delete('/api/admin/users/uid-123/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    @patch('users.views.firebase_auth.list_users')
    def test_firebase_listing(self, mock_list):
        """The Firebase listing passes the page token through"""
        record = SimpleNamespace(uid='uid-9', email='nine@test.com', display_name='Nine',
                                 photo_url=None, disabled=False)
        mock_list.return_value = SimpleNamespace(users=[record], next_page_token='next')

        response = self.client.get('/api/admin/users/firebase/', {'limit': 5, 'page_token': 'abc'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        mock_list.assert_called_once_with(page_token='abc', max_results=5)
        self.assertEqual(response.data['users'][0]['uid'], 'uid-9')
        self.assertEqual(response.data['next_page_token'], 'next')

    @patch('users.views.firebase_auth.list_users')
    def test_firebase_listing_limit_out_of_range(self, mock_list):
        for limit in (0, 1001, 'ten'):
            response = self.client.get('/api/admin/users/firebase/', {'limit': limit})

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        mock_list.assert_not_called()

    @patch('users.views.firebase_auth.list_users')
    def test_firebase_count(self, mock_list):
        mock_list.return_value.iterate_all.return_value = iter(['a', 'b', 'c'])

        response = self.client.get('/api/admin/users/firebase-count/')

        self.assertEqual(response.data['count'], 3)

    def test_stats(self):
        """Stats count users overall and in the last 30 days"""
        User.objects.filter(firebase_uid='uid-456').update(date_joined=timezone.now() - timedelta(days=60))

        response = self.client.get('/api/admin/users/stats/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_users'], 2)
        self.assertEqual(response.data['recent_users'], 1)
        self.assertEqual(response.data['total_medical_officers'], 0)


class FirebaseAuthenticationTestCase(APITestCase):
    """Test cases for Firebase ID token authentication"""

    def setUp(self):
        self.authentication = FirebaseAuthentication()

    def make_request(self, header=None):
        if header:
            return APIRequestFactory().get('/', HTTP_AUTHORIZATION=header)
        return APIRequestFactory().get('/')

    def test_no_header_is_anonymous(self):
        self.assertIsNone(self.authentication.authenticate(self.make_request()))

    @patch('users.authentication.auth.verify_id_token')
    def test_first_sight_creates_mirror(self, mock_verify):
        """A verified uid gets a local user with the user role"""
        mock_verify.return_value = {'uid': 'uid-new', 'email': 'new@test.com', 'name': 'New Person'}

        user, decoded = self.authentication.authenticate(self.make_request('Bearer good-token'))

        self.assertEqual(user.firebase_uid, 'uid-new')
        self.assertEqual(user.name, 'New Person')
        self.assertTrue(user.has_role('user'))
        self.assertFalse(user.has_usable_password())
        self.assertTrue(Role.objects.filter(name='user').exists())

    @patch('users.authentication.auth.verify_id_token')
    def test_invalid_token_rejected(self, mock_verify):
        mock_verify.side_effect = firebase_auth.InvalidIdTokenError('bad token')

        with self.assertRaises(Exception) as ctx:
            self.authentication.authenticate(self.make_request('Bearer bad-token'))

        self.assertEqual(str(ctx.exception.detail), 'Invalid or expired token')

    @patch('users.authentication.auth.verify_id_token')
    def test_disabled_mirror_rejected(self, mock_verify):
        """A locally deactivated user cannot authenticate"""
        user, _ = User.objects.sync_firebase_user('uid-off', email='off@test.com')
        user.is_active = False
        user.save()
        mock_verify.return_value = {'uid': 'uid-off'}

        with self.assertRaises(Exception) as ctx:
            self.authentication.authenticate(self.make_request('Bearer token'))

        self.assertEqual(str(ctx.exception.detail), 'User account is disabled')

    def test_api_rejects_missing_token(self):
        """Protected end-user routes answer 401 in the error envelope"""
        response = self.client.get('/api/chat/conversations/')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Unauthorized. Please login again.')

    @patch('users.authentication.auth.verify_id_token')
    def test_email_held_by_officer_is_not_mirrored(self, mock_verify):
        """A member whose email belongs to a staff account still signs in"""
        officer = User.objects.create_user(username='doc@test.com', email='doc@test.com', password='officerpass')
        officer.add_role('medical_officer')
        mock_verify.return_value = {'uid': 'uid-doc', 'email': 'Doc@test.com', 'name': 'Doc at home'}

        response = self.client.get('/api/chat/conversations/', HTTP_AUTHORIZATION='Bearer token')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['conversations'], [])
        member = User.objects.get(firebase_uid='uid-doc')
        self.assertIsNone(member.email)
        self.assertEqual(member.name, 'Doc at home')

    def test_second_uid_with_same_email(self):
        first, _ = User.objects.sync_firebase_user('uid-a', email='shared@test.com')
        second, created = User.objects.sync_firebase_user('uid-b', email='shared@test.com')

        self.assertTrue(created)
        self.assertEqual(first.email, 'shared@test.com')
        self.assertIsNone(second.email)
        self.assertEqual(second.name, 'shared@test.com')
