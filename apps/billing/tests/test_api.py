import pytest
from datetime import date
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.billing.models import Bill, BillStatus
from apps.billing.services import get_current, StorageError
from apps.billing.services import bill_management


# =============================================================================
# Creating bills
# =============================================================================

@pytest.mark.django_db
class TestCreateBill:
    """Tests for POST /api/bills/"""

    @property
    def url(self):
        return reverse('bills:bill-list')

    def test_admin_creates_bill(self, admin_client, member):
        response = admin_client.post(self.url, {
            'memberId': '1/74',
            'amount': '1500',
            'category': 'Jamaath',
            'accountType': 'Donation',
            'paymentMethod': 'UPI',
            'notes': 'Friday collection',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['message'] == 'Amount Credited Successfully'
        bill = response.data['bill']
        assert bill['receiptNo'] == 1
        assert bill['memberId'] == '1/74'
        assert bill['memberName'] == 'Abdul Rahman'
        assert bill['amount'] == Decimal('1500.00')
        assert bill['amountInWords'] == 'One Thousand Five Hundred Only'
        assert bill['accountType'] == 'Donation'
        assert bill['paymentMethod'] == 'UPI'
        assert bill['status'] == 'Paid'
        assert bill['createdBy'] == '0/1'

    def test_household_defaults_to_own_member_id(self, household_client, member):
        response = household_client.post(self.url, {
            'amount': 100,
            'accountType': 'Monthly Fee',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['bill']['memberId'] == '1/74'
        assert response.data['bill']['category'] == 'Madrassa'
        assert response.data['bill']['paymentMethod'] == 'Cash'

    def test_household_cannot_pay_for_other(self, household_client, member, other_member):
        response = household_client.post(self.url, {
            'memberId': '2/5',
            'amount': 100,
            'category': 'Jamaath',
            'accountType': 'Donation',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert get_current('receipts') == 0

    def test_invalid_account_type(self, admin_client, member):
        response = admin_client.post(self.url, {
            'memberId': '1/74',
            'amount': 100,
            'category': 'Jamaath',
            'accountType': 'Monthly Fee',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'accountType' in response.data['errors']
        assert get_current('receipts') == 0

    def test_invalid_amount(self, admin_client, member):
        response = admin_client.post(self.url, {
            'memberId': '1/74',
            'amount': '0',
            'category': 'Jamaath',
            'accountType': 'Donation',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'amount' in response.data['errors']

    def test_missing_fields(self, admin_client):
        response = admin_client.post(self.url, {'memberId': '1/74'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['message'] == 'Validation failed'
        assert 'amount' in response.data['errors']
        assert 'accountType' in response.data['errors']

    def test_unknown_member(self, admin_client, db):
        response = admin_client.post(self.url, {
            'memberId': '9/99',
            'amount': 100,
            'category': 'Jamaath',
            'accountType': 'Donation',
        }, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['message'] == 'Member 9/99 not found'

    def test_storage_unavailable(self, admin_client, member, monkeypatch):
        def unavailable(name):
            raise StorageError('database is locked')

        monkeypatch.setattr(bill_management, 'reserve_next', unavailable)

        response = admin_client.post(self.url, {
            'memberId': '1/74',
            'amount': 100,
            'category': 'Jamaath',
            'accountType': 'Donation',
        }, format='json')

        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert Bill.objects.count() == 0

    def test_unauthenticated(self, api_client):
        response = api_client.post(self.url, {'amount': 100}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


# =============================================================================
# Listing
# =============================================================================

@pytest.mark.django_db
class TestListBills:
    """Tests for GET /api/bills/"""

    @property
    def url(self):
        return reverse('bills:bill-list')

    def test_admin_sees_all(self, admin_client, bill, other_bill):
        response = admin_client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['pagination']['totalBills'] == 2
        assert [b['receiptNo'] for b in response.data['bills']] == [2, 1]

    def test_household_sees_own(self, household_client, bill, other_bill):
        response = household_client.get(self.url, {'memberId': '2/5'})

        assert response.status_code == status.HTTP_200_OK
        assert [b['memberId'] for b in response.data['bills']] == ['1/74']

    def test_filters_and_pagination(self, admin_client, make_bill):
        for amount in ('100', '200', '300'):
            make_bill(amount=amount)
        make_bill(amount='400', category='Land', account_type='Land Purchase')

        response = admin_client.get(self.url, {
            'category': 'Jamaath',
            'limit': 2,
            'page': 1,
            'sortBy': 'amount',
            'sortOrder': 'asc',
        })

        assert response.status_code == status.HTTP_200_OK
        assert [b['amount'] for b in response.data['bills']] == [Decimal('100.00'), Decimal('200.00')]
        assert response.data['pagination'] == {
            'currentPage': 1,
            'totalPages': 2,
            'totalBills': 3,
            'billsPerPage': 2,
            'hasNextPage': True,
            'hasPrevPage': False,
        }

    def test_invalid_sort(self, admin_client):
        response = admin_client.get(self.url, {'sortBy': 'memberName'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'sortBy' in response.data['errors']

    def test_invalid_date_range(self, admin_client):
        response = admin_client.get(self.url, {'startDate': '2024-03-01', 'endDate': '2024-02-01'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'endDate' in response.data['errors']


# =============================================================================
# Reports
# =============================================================================

@pytest.mark.django_db
class TestReports:
    """Tests for GET /api/bills/stats/ and /api/bills/monthly/"""

    def test_stats(self, admin_client, bill, other_bill):
        response = admin_client.get(reverse('bills:bill-stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['totalBills'] == 2
        assert response.data['totalRevenue'] == Decimal('750.00')
        assert response.data['avgBillAmount'] == Decimal('375.00')
        assert response.data['todayAmount'] == Decimal('750.00')
        assert response.data['revenueByAccount'][0]['accountType'] == 'Donation'

    def test_stats_admin_only(self, household_client, bill):
        response = household_client.get(reverse('bills:bill-stats'))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['message'] == 'Access denied. Required role: admin'

    def test_monthly_revenue(self, admin_client, make_bill):
        make_bill(payment_date=date(2023, 11, 5))

        response = admin_client.get(reverse('bills:monthly-revenue'), {'year': 2023})

        assert response.status_code == status.HTTP_200_OK
        assert response.data['year'] == 2023
        assert len(response.data['months']) == 12
        assert response.data['months'][10]['count'] == 1
        assert response.data['months'][10]['revenue'] == Decimal('500.00')


# =============================================================================
# Lookups
# =============================================================================

@pytest.mark.django_db
class TestLookups:
    """Tests for receipt number and member lookups"""

    def test_by_receipt_no(self, household_client, bill):
        url = reverse('bills:bill-by-receipt', kwargs={'receipt_no': bill.receipt_no})
        response = household_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bill']['id'] == str(bill.id)

    def test_by_receipt_no_other_household(self, household_client, other_bill):
        url = reverse('bills:bill-by-receipt', kwargs={'receipt_no': other_bill.receipt_no})
        response = household_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_by_receipt_no_missing(self, admin_client, db):
        url = reverse('bills:bill-by-receipt', kwargs={'receipt_no': 42})
        response = admin_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_member_bills(self, household_client, make_bill):
        make_bill(amount='500')
        make_bill(amount='250')

        url = reverse('bills:member-bills', kwargs={'ward': 1, 'house': 74})
        response = household_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['memberId'] == '1/74'
        assert response.data['totalAmountPaid'] == Decimal('750.00')
        assert response.data['pagination']['billsPerPage'] == 5

    def test_member_bills_other_household(self, household_client, other_bill):
        url = reverse('bills:member-bills', kwargs={'ward': 2, 'house': 5})
        response = household_client.get(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Single bill
# =============================================================================

@pytest.mark.django_db
class TestBillDetail:
    """Tests for GET/PATCH/DELETE /api/bills/{id}/"""

    def _url(self, bill):
        return reverse('bills:bill-detail', kwargs={'bill_id': bill.id})

    def test_get_own_bill(self, household_client, bill):
        response = household_client.get(self._url(bill))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bill']['receiptNo'] == bill.receipt_no

    def test_get_other_bill(self, household_client, other_bill):
        response = household_client.get(self._url(other_bill))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_patch_notes(self, admin_client, bill):
        response = admin_client.patch(self._url(bill), {
            'notes': 'Paid at office',
            'paymentMethod': 'Card',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['message'] == 'Bill updated successfully'
        assert response.data['bill']['notes'] == 'Paid at office'
        assert response.data['bill']['paymentMethod'] == 'Card'

    def test_patch_amount_rejected(self, admin_client, bill):
        response = admin_client.patch(self._url(bill), {'amount': '1.00'}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        bill.refresh_from_db()
        assert bill.amount == Decimal('500.00')

    def test_patch_receipt_no_rejected(self, admin_client, bill):
        response = admin_client.patch(self._url(bill), {'receiptNo': 99}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'receipt_no' in response.data['message']

    def test_household_cannot_patch(self, household_client, bill):
        response = household_client.patch(self._url(bill), {'notes': 'x'}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_soft_delete(self, admin_client, bill):
        response = admin_client.delete(self._url(bill))

        assert response.status_code == status.HTTP_200_OK
        assert Bill.objects.filter(id=bill.id, is_active=False).exists()
        assert admin_client.get(self._url(bill)).status_code == status.HTTP_404_NOT_FOUND

    def test_hard_delete(self, admin_client, bill):
        response = admin_client.delete(f'{self._url(bill)}?hard=true')

        assert response.status_code == status.HTTP_200_OK
        assert not Bill.objects.filter(id=bill.id).exists()

    def test_household_cannot_delete(self, household_client, bill):
        response = household_client.delete(self._url(bill))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert Bill.objects.filter(id=bill.id, is_active=True).exists()


@pytest.mark.django_db
class TestCancelAndReceipt:
    """Tests for cancel and receipt endpoints"""

    def test_cancel(self, admin_client, bill):
        url = reverse('bills:bill-cancel', kwargs={'bill_id': bill.id})
        response = admin_client.post(url, {'reason': 'Duplicate entry'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['bill']['status'] == BillStatus.CANCELLED
        assert response.data['bill']['cancelReason'] == 'Duplicate entry'

        again = admin_client.post(url, {}, format='json')
        assert again.status_code == status.HTTP_400_BAD_REQUEST

    def test_household_cannot_cancel(self, household_client, bill):
        url = reverse('bills:bill-cancel', kwargs={'bill_id': bill.id})
        response = household_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_receipt(self, household_client, bill):
        url = reverse('bills:bill-receipt', kwargs={'bill_id': bill.id})
        response = household_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        receipt = response.data['receipt']
        assert receipt['receiptNo'] == bill.receipt_no
        assert receipt['amountInWords'] == 'Five Hundred Only'
        assert receipt['organizationName']


@pytest.mark.django_db
class TestHealthCheck:
    """Tests for GET /api/health/"""

    def test_health(self, api_client):
        response = api_client.get('/api/health/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {'status': 'ok', 'database': 'ok'}

    def test_health_served_over_plain_http(self, api_client, settings):
        """Production security settings do not redirect the test client to https."""
        assert settings.SECURE_SSL_REDIRECT is False

        response = api_client.get('/api/health/', secure=False)

        assert response.status_code == status.HTTP_200_OK
