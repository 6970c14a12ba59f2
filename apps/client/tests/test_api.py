import asyncio
import json
import httpx
import pytest
from decimal import Decimal
from apps.client import BillingAPI


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def valid_server(server):
    """Server that accepts the session's current token."""
    server.valid_token = 'access-0'
    return server


class TestBillingAPI:
    """Tests for the BillingAPI wrapper"""

    def test_create_bill_sends_camel_case(self, valid_server, make_client):
        def create(request):
            assert request.headers['Authorization'] == 'Bearer access-0'
            return httpx.Response(201, json={
                'message': 'Amount Credited Successfully',
                'bill': {'receiptNo': 7, **json.loads(request.content)},
            })

        valid_server.routes['/api/bills/'] = create

        async def scenario():
            async with make_client() as client:
                return await BillingAPI(client).create_bill(
                    member_id='1/74',
                    amount=Decimal('1500.00'),
                    account_type='Donation',
                    category='Jamaath',
                    payment_method='UPI',
                )

        bill = run(scenario())

        assert bill == {
            'receiptNo': 7,
            'memberId': '1/74',
            'amount': '1500.00',
            'accountType': 'Donation',
            'category': 'Jamaath',
            'paymentMethod': 'UPI',
        }

    def test_list_bills_maps_filters(self, valid_server, make_client):
        async def scenario():
            async with make_client() as client:
                await BillingAPI(client).list_bills(
                    account_type='Donation', financial_year='2024-25', page=2, status=None,
                )

        run(scenario())

        params = dict(valid_server.requests[0].url.params)
        assert params == {'accountType': 'Donation', 'financialYear': '2024-25', 'page': '2'}

    def test_unknown_filter(self, valid_server, make_client):
        async def scenario():
            async with make_client() as client:
                await BillingAPI(client).list_bills(colour='red')

        with pytest.raises(TypeError):
            run(scenario())

    def test_member_bills_path(self, valid_server, make_client):
        async def scenario():
            async with make_client() as client:
                return await BillingAPI(client).get_member_bills('12/305')

        result = run(scenario())

        assert result['path'] == '/api/bills/member/12/305/'

    def test_get_receipt_refreshes_transparently(self, server, make_client):
        """An expired token is refreshed before the receipt is returned."""
        def receipt(request):
            if request.headers.get('Authorization') != f'Bearer {server.valid_token}':
                return httpx.Response(401, json={'message': 'Token is expired'})
            return httpx.Response(200, json={'receipt': {'receiptNo': 3}})

        server.routes['/api/bills/abc/receipt/'] = receipt

        async def scenario():
            async with make_client() as client:
                return await BillingAPI(client).get_receipt('abc')

        assert run(scenario()) == {'receiptNo': 3}
        assert server.refresh_calls == 1
