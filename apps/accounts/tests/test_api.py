import pytest
from django.urls import reverse
from rest_framework import status
from apps.accounts.models import User
from apps.accounts.services import register_user, update_profile, EmailAlreadyExistsError


# =============================================================================
# Registration Tests
# =============================================================================

@pytest.mark.django_db
class TestRegistration:
    """Tests for POST /api/auth/register/"""

    def test_register_success(self, api_client):
        """Successfully register a new user."""
        url = reverse('users:register')
        data = {
            'email': 'newuser@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
            'display_name': 'New User',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED
        assert 'access' in response.data['tokens']
        assert 'refresh' in response.data['tokens']
        assert response.data['user']['display_name'] == 'New User'
        assert User.objects.filter(email='newuser@example.com').exists()

    def test_register_without_display_name(self, api_client):
        """Display name is optional."""
        url = reverse('users:register')
        data = {
            'email': 'minimal@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_201_CREATED

    def test_register_duplicate_email(self, api_client, user):
        """Cannot register with existing email, whatever its case."""
        url = reverse('users:register')
        data = {
            'email': user.email.upper(),
            'password': 'SecurePass123!',
            'password_confirm': 'SecurePass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'error' in response.data

    def test_register_password_mismatch(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'mismatch@example.com',
            'password': 'SecurePass123!',
            'password_confirm': 'DifferentPass123!',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'password_confirm' in response.data

    def test_register_weak_password(self, api_client):
        url = reverse('users:register')
        data = {
            'email': 'weak@example.com',
            'password': '123',
            'password_confirm': '123',
        }
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login/"""

    def test_login_success(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data['tokens']
        assert response.data['user']['email'] == user.email

    def test_login_wrong_password(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'WrongPassword123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert 'error' in response.data

    def test_login_inactive_user(self, api_client, user_inactive):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user_inactive.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_login_updates_last_login(self, api_client, user):
        url = reverse('users:login')
        response = api_client.post(url, {'email': user.email, 'password': 'TestPass123!'})

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.last_login is not None

    def test_refresh_token(self, api_client, user):
        """Refresh token obtained at login yields a new access token."""
        login = api_client.post(
            reverse('users:login'),
            {'email': user.email, 'password': 'TestPass123!'}
        )
        response = api_client.post(
            reverse('token_refresh'),
            {'refresh': login.data['tokens']['refresh']}
        )

        assert response.status_code == status.HTTP_200_OK
        assert 'access' in response.data


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestCurrentUser:
    """Tests for GET/PATCH /api/auth/me/"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['uid'] == str(user.id)
        assert response.data['email'] == user.email
        assert response.data['display_name'] == 'Test User'
        assert response.data['photo_url'] == ''

    def test_get_current_user_unauthenticated(self, api_client):
        response = api_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_update_display_name_and_photo(self, authenticated_client, user):
        url = reverse('users:current-user')
        data = {
            'display_name': 'Updated Name',
            'photo_url': 'https://images.example.com/me.png',
        }
        response = authenticated_client.patch(url, data, format='json')

        assert response.status_code == status.HTTP_200_OK
        user.refresh_from_db()
        assert user.display_name == 'Updated Name'
        assert user.photo_url == 'https://images.example.com/me.png'

    def test_disable_notifications(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.patch(url, {'notifications_enabled': False}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['notifications_enabled'] is False
        user.refresh_from_db()
        assert user.preferences['notifications_enabled'] is False

    def test_cannot_update_email(self, authenticated_client, user):
        url = reverse('users:current-user')
        authenticated_client.patch(url, {'email': 'newemail@example.com'}, format='json')

        user.refresh_from_db()
        assert user.email == 'testuser@example.com'


# =============================================================================
# Service Tests
# =============================================================================

@pytest.mark.django_db
class TestAccountServices:

    def test_register_user_normalizes_email_domain(self):
        user = register_user(email='someone@EXAMPLE.com', password='SecurePass123!')

        assert user.email == 'someone@example.com'
        assert user.check_password('SecurePass123!')

    def test_register_user_duplicate_raises(self, user):
        with pytest.raises(EmailAlreadyExistsError):
            register_user(email='TestUser@example.com', password='SecurePass123!')

    def test_update_profile_keeps_other_preferences(self, user):
        user.preferences = {'theme': 'dark'}
        user.save()

        update_profile(user=user, notifications_enabled=False)

        user.refresh_from_db()
        assert user.preferences == {'theme': 'dark', 'notifications_enabled': False}
        assert user.notifications_enabled is False


class TestUserModel:
    """Tests for User model methods."""

    def test_create_superuser(self, db):
        user = User.objects.create_superuser(
            email='admin@example.com',
            password='AdminPass123!',
        )

        assert user.is_staff is True
        assert user.is_superuser is True

    def test_get_display_name(self, user):
        assert user.get_display_name() == 'Test User'

        user.display_name = ''
        assert user.get_display_name() == 'testuser'

    def test_notifications_enabled_by_default(self, user):
        assert user.notifications_enabled is True
