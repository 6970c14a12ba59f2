import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create and return a household login."""
    return User.objects.create_user(
        member_id='1/74',
        password='TestPass123!',
        name='Test Household',
    )


@pytest.fixture
def admin_user(db):
    """Create and return an office admin."""
    return User.objects.create_user(
        member_id='0/1',
        password='AdminPass123!',
        name='Office Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def user_inactive(db):
    """Create and return an inactive user."""
    return User.objects.create_user(
        member_id='3/12',
        password='TestPass123!',
        name='Inactive Household',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, user):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
