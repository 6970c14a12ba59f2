import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User


# =============================================================================
# Login Tests
# =============================================================================

@pytest.mark.django_db
class TestLogin:
    """Tests for POST /api/auth/login"""

    def test_login_success(self, api_client, user):
        """Login returns user profile and a token pair."""
        url = reverse('users:login')
        data = {'memberId': '1/74', 'password': 'TestPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Login successful'
        assert response.data['user']['memberId'] == '1/74'
        assert response.data['token']
        assert response.data['refreshToken']

    def test_login_wrong_password(self, api_client, user):
        """Wrong password is rejected with the credentials message."""
        url = reverse('users:login')
        data = {'memberId': '1/74', 'password': 'WrongPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['message'] == 'Invalid credentials'

    def test_login_nonexistent_user(self, api_client):
        """Unknown member id gets the same message as a wrong password."""
        url = reverse('users:login')
        data = {'memberId': '9/999', 'password': 'TestPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['message'] == 'Invalid credentials'

    def test_login_inactive_user(self, api_client, user_inactive):
        """Inactive accounts cannot log in."""
        url = reverse('users:login')
        data = {'memberId': '3/12', 'password': 'TestPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert 'deactivated' in response.data['message']

    def test_login_bad_member_id_format(self, api_client):
        """Member id must look like ward/house."""
        url = reverse('users:login')
        data = {'memberId': 'abc', 'password': 'TestPass123!'}
        response = api_client.post(url, data)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == 'Validation failed'
        assert 'memberId' in response.data['errors']

    def test_login_updates_last_login(self, api_client, user):
        """Successful login stamps last_login."""
        assert user.last_login is None
        url = reverse('users:login')
        api_client.post(url, {'memberId': '1/74', 'password': 'TestPass123!'})

        user.refresh_from_db()
        assert user.last_login is not None


# =============================================================================
# Refresh Token Tests
# =============================================================================

@pytest.mark.django_db
class TestRefreshToken:
    """Tests for POST /api/auth/refresh-token"""

    def test_refresh_returns_new_pair(self, api_client, user):
        """A valid refresh token yields a new token pair."""
        refresh = RefreshToken.for_user(user)
        url = reverse('users:refresh-token')
        response = api_client.post(url, {'refreshToken': str(refresh)})

        assert response.status_code == status.HTTP_200_OK
        assert set(response.data) == {'token', 'refreshToken'}
        assert response.data['refreshToken'] != str(refresh)

    def test_refreshed_token_authenticates(self, api_client, user):
        """The new access token is accepted by protected endpoints."""
        refresh = RefreshToken.for_user(user)
        response = api_client.post(
            reverse('users:refresh-token'), {'refreshToken': str(refresh)}
        )

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['token']}")
        me = api_client.get(reverse('users:current-user'))
        assert me.status_code == status.HTTP_200_OK
        assert me.data['user']['memberId'] == user.member_id

    def test_refresh_with_garbage_token(self, api_client):
        url = reverse('users:refresh-token')
        response = api_client.post(url, {'refreshToken': 'not-a-jwt'})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['message'] == 'Invalid or expired refresh token'

    def test_refresh_with_access_token(self, api_client, user):
        """An access token cannot be used as a refresh token."""
        access = RefreshToken.for_user(user).access_token
        url = reverse('users:refresh-token')
        response = api_client.post(url, {'refreshToken': str(access)})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_refresh_for_deactivated_user(self, api_client, user):
        """Deactivating a user invalidates their refresh token."""
        refresh = RefreshToken.for_user(user)
        User.objects.filter(id=user.id).update(is_active=False)

        url = reverse('users:refresh-token')
        response = api_client.post(url, {'refreshToken': str(refresh)})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['message'] == 'Invalid refresh token'

    def test_refresh_without_token(self, api_client):
        url = reverse('users:refresh-token')
        response = api_client.post(url, {})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'refreshToken' in response.data['errors']


# =============================================================================
# Logout Tests
# =============================================================================

@pytest.mark.django_db
class TestLogout:
    """Tests for POST /api/auth/logout"""

    def test_logout_success(self, authenticated_client):
        url = reverse('users:logout')
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Logged out successfully'

    def test_logout_unauthenticated(self, api_client):
        url = reverse('users:logout')
        response = api_client.post(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Current User Tests
# =============================================================================

@pytest.mark.django_db
class TestGetCurrentUser:
    """Tests for GET /api/auth/me"""

    def test_get_current_user(self, authenticated_client, user):
        url = reverse('users:current-user')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['user']['memberId'] == user.member_id
        assert response.data['user']['role'] == 'user'

    def test_get_current_user_unauthenticated(self, api_client):
        """Missing credentials are reported in the standard error shape."""
        url = reverse('users:current-user')
        response = api_client.get(url)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert 'message' in response.data
        assert response.data['code'] == 'not_authenticated'

    def test_expired_style_token_is_token_error(self, api_client):
        """A malformed bearer token reports a token error code."""
        api_client.credentials(HTTP_AUTHORIZATION='Bearer broken.token.value')
        response = api_client.get(reverse('users:current-user'))

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['code'] == 'token_not_valid'
