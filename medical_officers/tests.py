from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from users.models import User
from medical_officers.models import MedicalOfficer


def make_medical_officer(email='mo@test.com', password='officerpass', approved=True, license_number='LIC-001',
                         name='Dr. Jane Mwangi'):
    user = User.objects.create_user(username=email, email=email, password=password, name=name)
    user.add_role('medical_officer')
    return MedicalOfficer.objects.create(
        user=user, specialization='toxicology', license_number=license_number,
        hospital='Nairobi Hospital', is_approved=approved
    )


def make_admin(email='admin@test.com'):
    admin = User.objects.create_user(username=email, email=email, password='adminpass123', name='Admin')
    admin.add_role('admin')
    return admin


@override_settings(ALLOWED_HOSTS=['*'])
class MedicalOfficerAuthTestCase(APITestCase):
    """Test cases for medical officer registration, login and profile"""

    register_url = '/api/medical-officer/auth/register/'
    login_url = '/api/medical-officer/auth/login/'
    profile_url = '/api/medical-officer/auth/profile/'

    def setUp(self):
        self.valid_data = {
            'email': 'New.Officer@test.com',
            'password': 'secret123',
            'name': 'Dr. New Officer',
            'specialization': 'emergency',
            'license_number': 'LIC-100',
            'hospital': 'Mombasa General',
        }

    def test_register_creates_pending_officer(self):
        """A new officer is stored unapproved with the medical_officer role"""
        response = self.client.post(self.register_url, self.valid_data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['medical_officer']['is_approved'])

        officer = MedicalOfficer.objects.get(license_number='LIC-100')
        self.assertEqual(officer.email, 'new.officer@test.com')
        self.assertTrue(officer.user.has_role('medical_officer'))

    def test_register_short_password(self):
        data = dict(self.valid_data, password='12345')

        response = self.client.post(self.register_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Password must be at least 6 characters long')

    def test_register_unknown_specialization(self):
        data = dict(self.valid_data, specialization='dentistry')

        response = self.client.post(self.register_url, data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_duplicate_license(self):
        """Email and license number must both be unique"""
        make_medical_officer(license_number='LIC-100')

        response = self.client.post(self.register_url, self.valid_data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('already exists', response.data['error'])

    def test_login_pending_officer_rejected(self):
        """Officers awaiting approval cannot log in"""
        make_medical_officer(approved=False)

        response = self.client.post(self.login_url, {'email': 'mo@test.com', 'password': 'officerpass'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Account is pending approval')

    def test_login_deactivated_officer_rejected(self):
        officer = make_medical_officer()
        officer.user.is_active = False
        officer.user.save()

        response = self.client.post(self.login_url, {'email': 'mo@test.com', 'password': 'officerpass'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Account is deactivated')

    def test_login_approved_officer(self):
        make_medical_officer()

        response = self.client.post(self.login_url, {'email': 'MO@test.com', 'password': 'officerpass'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['medical_officer']['specialization'], 'toxicology')

    def test_profile_get_and_update(self):
        """Officers can read and update name, phone number and hospital"""
        officer = make_medical_officer()
        self.client.force_authenticate(user=officer.user)

        response = self.client.get(self.profile_url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['medical_officer']['license_number'], 'LIC-001')

        response = self.client.put(self.profile_url, {
            'name': 'Dr. Renamed', 'phone_number': '+254700000000', 'hospital': 'Kisumu Clinic'
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        officer.refresh_from_db()
        officer.user.refresh_from_db()
        self.assertEqual(officer.user.name, 'Dr. Renamed')
        self.assertEqual(officer.hospital, 'Kisumu Clinic')

    def test_profile_requires_approval(self):
        officer = make_medical_officer(approved=False)
        self.client.force_authenticate(user=officer.user)

        response = self.client.get(self.profile_url)

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(ALLOWED_HOSTS=['*'])
class AdminMedicalOfficerTestCase(APITestCase):
    """Test cases for admin management of medical officers"""

    def setUp(self):
        self.admin = make_admin()
        self.client.force_authenticate(user=self.admin)
        self.pending = make_medical_officer(email='pending@test.com', license_number='LIC-002',
                                           approved=False, name='Dr. Pending')
        self.approved = make_medical_officer(email='approved@test.com', license_number='LIC-003',
                                            name='Dr. Approved')

    def test_list_filters_by_approval(self):
        response = self.client.get('/api/admin/medical-officers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

        response = self.client.get('/api/admin/medical-officers/', {'is_approved': 'false'})
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['email'], 'pending@test.com')

    def test_search(self):
        response = self.client.get('/api/admin/medical-officers/search/pending/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['medical_officers']), 1)

    def test_approve_officer(self):
        """Approval flips is_approved and lets the officer through"""
        response = self.client.put(f'/api/admin/medical-officers/{self.pending.id}/',
                                   {'is_approved': True}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.pending.refresh_from_db()
        self.assertTrue(self.pending.is_approved)

    def test_delete_officer_removes_account(self):
        response = self.client.delete(f'/api/admin/medical-officers/{self.pending.id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(MedicalOfficer.objects.filter(id=self.pending.id).exists())
        self.assertFalse(User.objects.filter(email='pending@test.com').exists())

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=self.approved.user)

        response = self.client.get('/api/admin/medical-officers/')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
