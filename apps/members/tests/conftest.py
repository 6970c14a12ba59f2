import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.members.models import Member


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def member(db):
    """Create a household in the directory."""
    return Member.objects.create(
        mahal_id='1/74',
        name='Abdul Rahman',
        address='Sheeja Manzil, Kalloor',
        phone='9876543210',
    )


@pytest.fixture
def household_user(db):
    """Login for the member fixture's household."""
    return User.objects.create_user(member_id='1/74', password='TestPass123!')


@pytest.fixture
def other_household_user(db):
    return User.objects.create_user(member_id='2/5', password='TestPass123!')


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        member_id='0/1',
        password='AdminPass123!',
        role=UserRole.ADMIN,
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def household_client(household_user):
    """Return API client authenticated as the household."""
    return _client_for(household_user)


@pytest.fixture
def other_household_client(other_household_user):
    return _client_for(other_household_user)


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as an office admin."""
    return _client_for(admin_user)
