"""
Test suite for accounts, settings and audit logging
Tests: registration, JWT login, profile updates, password changes, user management, image validation
"""
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from grain.core.models import User, UserSettings, AuditLog
from grain.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from grain.core.validators import normalize_tags


class RegistrationTests(TestCase):
    """Test the public registration endpoint"""

    def setUp(self):
        self.client = APIClient()
        self.data = {
            'username': 'carpenter',
            'email': 'carpenter@test.com',
            'password': 'Sawdust-and-glue-42',
            'first_name': 'Ana',
            'last_name': 'Mora',
            'has_accepted_terms': True,
        }

    def test_register_returns_user_and_tokens(self):
        response = self.client.post('/api/v1/auth/register/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['username'], 'carpenter')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertNotIn('password', response.data['user'])

    def test_register_creates_default_settings(self):
        self.client.post('/api/v1/auth/register/', self.data, format='json')
        user = User.objects.get(username='carpenter')
        self.assertEqual(user.settings.currency, 'USD')
        self.assertTrue(AuditLog.objects.filter(action='register', object_id=str(user.id)).exists())

    def test_register_requires_terms(self):
        self.data['has_accepted_terms'] = False
        response = self.client.post('/api/v1/auth/register/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('has_accepted_terms', response.data)
        self.assertFalse(User.objects.filter(username='carpenter').exists())

    def test_register_password_mismatch(self):
        self.data['password_confirm'] = 'Something-else-42'
        response = self.client.post('/api/v1/auth/register/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_rejects_weak_password(self):
        self.data['password'] = '123'
        response = self.client.post('/api/v1/auth/register/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_duplicate_username(self):
        TestDataFactory.create_user(username='carpenter')
        response = self.client.post('/api/v1/auth/register/', self.data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('username', response.data)


class LoginTests(TestCase):
    """Test JWT login and refresh"""

    def setUp(self):
        self.client = APIClient()
        self.user = TestDataFactory.create_user(username='luthier', password='Grain-pass-123')

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'luthier', 'password': 'Grain-pass-123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['id'], self.user.id)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'luthier', 'password': 'nope'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_login_deleted_user_fails(self):
        self.user.soft_delete()
        response = self.client.post('/api/v1/auth/login/', {'username': 'luthier', 'password': 'Grain-pass-123'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_refresh_token(self):
        login = self.client.post('/api/v1/auth/login/', {'username': 'luthier', 'password': 'Grain-pass-123'}, format='json')
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': login.data['refresh']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)

    def test_refresh_with_garbage_token(self):
        response = self.client.post('/api/v1/auth/refresh/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_protected_endpoint_requires_token(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class CurrentUserTests(TestCase):
    """Test the auth/me endpoint and password changes"""

    def setUp(self):
        self.user = TestDataFactory.create_user(password='Grain-pass-123')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_me(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], self.user.username)

    def test_update_profile(self):
        response = self.client.patch('/api/v1/auth/me/', {'first_name': 'Lucia', 'date_of_birth': '1990-05-01'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Lucia')
        self.assertEqual(str(self.user.date_of_birth), '1990-05-01')

    def test_username_is_read_only(self):
        original = self.user.username
        self.client.patch('/api/v1/auth/me/', {'username': 'someone_else'}, format='json')
        self.user.refresh_from_db()
        self.assertEqual(self.user.username, original)

    def test_profile_image_accepts_png(self):
        response = self.client.patch('/api/v1/auth/me/', {'image_data': TestDataFactory.image_data_url()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['image_data'].startswith('data:image/png;base64,'))

    def test_profile_image_rejects_non_image(self):
        response = self.client.patch('/api/v1/auth/me/', {'image_data': 'data:image/png;base64,aGVsbG8gd29ybGQ='}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('image_data', response.data)

    def test_profile_image_rejects_oversized_canvas(self):
        response = self.client.patch('/api/v1/auth/me/', {'image_data': TestDataFactory.oversized_png_data_url()}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('image_data', response.data)

    def test_profile_image_rejects_bad_base64(self):
        response = self.client.patch('/api/v1/auth/me/', {'image_data': '%%%not-base64%%%'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_me_soft_deletes(self):
        response = self.client.delete('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['is_deleted'])
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_deleted)
        self.assertFalse(self.user.is_active)

    def test_deleted_user_token_is_rejected(self):
        self.user.soft_delete()
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_change_password(self):
        response = self.client.post('/api/v1/auth/change-password/', {
            'current_password': 'Grain-pass-123',
            'new_password': 'Planed-and-sanded-7',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Planed-and-sanded-7'))

    def test_change_password_wrong_current(self):
        response = self.client.post('/api/v1/auth/change-password/', {
            'current_password': 'wrong',
            'new_password': 'Planed-and-sanded-7',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data)


class UserManagementTests(TestCase):
    """Test admin-only user listing and restore"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_user_list_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_user_list_hides_deleted_by_default(self):
        self.other.soft_delete()
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/')
        ids = [u['id'] for u in response.data]
        self.assertNotIn(self.other.id, ids)

        response = self.client.get('/api/v1/users/?include_deleted=true')
        ids = [u['id'] for u in response.data]
        self.assertIn(self.other.id, ids)

    def test_user_detail_self_and_others(self):
        self.client.authenticate_user(self.user)
        self.assertEqual(self.client.get(f'/api/v1/users/{self.user.id}/').status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(f'/api/v1/users/{self.other.id}/').status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(self.client.get('/api/v1/users/999999/').status_code, status.HTTP_404_NOT_FOUND)

    def test_admin_restores_user(self):
        self.other.soft_delete()
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/users/{self.other.id}/restore/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.other.refresh_from_db()
        self.assertFalse(self.other.is_deleted)
        self.assertTrue(self.other.is_active)


class UserSettingsTests(TestCase):
    """Test user settings endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_get_creates_defaults(self):
        response = self.client.get('/api/v1/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['currency'], 'USD')
        self.assertEqual(response.data['language'], 'en')
        self.assertEqual(response.data['theme_mode'], 'light')
        self.assertTrue(UserSettings.objects.filter(user=self.user).exists())

    def test_update_settings(self):
        response = self.client.patch('/api/v1/settings/', {'currency': 'CRC', 'theme_mode': 'dark'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['currency'], 'CRC')
        self.assertEqual(response.data['theme_mode'], 'dark')
        self.assertTrue(AuditLog.objects.filter(user=self.user, action='settings_update').exists())

    def test_invalid_currency(self):
        response = self.client.patch('/api/v1/settings/', {'currency': 'XXX'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuditLogTests(TestCase):
    """Test audit log visibility"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_user_sees_only_own_logs(self):
        own = AuditLog.objects.create(user=self.user, action='create', model_name='Lumber', object_id='1')
        foreign = AuditLog.objects.create(user=self.other, action='create', model_name='Lumber', object_id='2')
        response = self.client.get('/api/v1/audit-logs/')
        ids = [log['id'] for log in response.data]
        self.assertIn(own.id, ids)
        self.assertNotIn(foreign.id, ids)
        self.assertEqual(self.client.get(f'/api/v1/audit-logs/{foreign.id}/').status_code, status.HTTP_403_FORBIDDEN)

    def test_filter_by_action(self):
        AuditLog.objects.create(user=self.user, action='create', model_name='Lumber', object_id='1')
        AuditLog.objects.create(user=self.user, action='delete', model_name='Lumber', object_id='1')
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual([log['action'] for log in response.data], ['delete'])

    def test_filter_by_model_and_date(self):
        AuditLog.objects.create(user=self.user, action='create', model_name='Lumber', object_id='1')
        AuditLog.objects.create(user=self.user, action='create', model_name='Tool', object_id='1')
        today = timezone.localdate().isoformat()

        response = self.client.get('/api/v1/audit-logs/', {'model': 'Tool', 'date_from': today, 'date_to': today})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['model_name'] for log in response.data], ['Tool'])

        response = self.client.get('/api/v1/audit-logs/', {'date_from': '2000-01-01', 'date_to': '2000-01-02'})
        self.assertEqual(response.data, [])

    def test_malformed_date_rejected(self):
        response = self.client.get('/api/v1/audit-logs/?date_from=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date_from', response.data)

        response = self.client.get('/api/v1/audit-logs/?date_to=2024-13-45')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date_to', response.data)


class NormalizeTagsTests(TestCase):
    def test_trims_and_deduplicates(self):
        self.assertEqual(normalize_tags([' oak ', 'Oak', '', 'hardwood', '  ']), ['oak', 'hardwood'])

    def test_none_is_empty(self):
        self.assertEqual(normalize_tags(None), [])
