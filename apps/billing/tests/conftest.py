import pytest
from decimal import Decimal
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.members.models import Member
from apps.billing.services import create_bill


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Users and members
# =============================================================================

@pytest.fixture
def admin_user(db):
    """Create the office admin."""
    return User.objects.create_user(
        member_id='0/1',
        password='AdminPass123!',
        name='Office Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def household_user(db):
    """Login for household 1/74."""
    return User.objects.create_user(
        member_id='1/74',
        password='TestPass123!',
        name='Abdul Rahman',
    )


@pytest.fixture
def other_household_user(db):
    """Login for household 2/5."""
    return User.objects.create_user(
        member_id='2/5',
        password='TestPass123!',
        name='Fathima Beevi',
    )


@pytest.fixture
def member(db):
    """Household 1/74 in the member directory."""
    return Member.objects.create(
        mahal_id='1/74',
        name='Abdul Rahman',
        address='Sheeja Manzil, Kalloor',
        phone='9876543210',
    )


@pytest.fixture
def other_member(db):
    """Household 2/5 in the member directory."""
    return Member.objects.create(
        mahal_id='2/5',
        name='Fathima Beevi',
        address='Puthen Veedu, Kalloor',
    )


def _client_for(user):
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def admin_client(admin_user):
    """Return API client authenticated as admin."""
    return _client_for(admin_user)


@pytest.fixture
def household_client(household_user):
    """Return API client authenticated as household 1/74."""
    return _client_for(household_user)


@pytest.fixture
def other_household_client(other_household_user):
    """Return API client authenticated as household 2/5."""
    return _client_for(other_household_user)


# =============================================================================
# Bills
# =============================================================================

@pytest.fixture
def make_bill(admin_user, member, other_member):
    """Factory issuing bills through the service as the admin."""
    def _make(**overrides):
        data = {
            'member_id': '1/74',
            'amount': Decimal('500.00'),
            'category': 'Jamaath',
            'account_type': 'Donation',
            'payment_method': 'Cash',
            'created_by': admin_user,
        }
        data.update(overrides)
        return create_bill(**data)
    return _make


@pytest.fixture
def bill(make_bill):
    """A single Paid bill for household 1/74."""
    return make_bill()


@pytest.fixture
def other_bill(make_bill):
    """A Paid bill for household 2/5."""
    return make_bill(member_id='2/5', amount=Decimal('250.00'), account_type='Marriage Fee')
