"""
Typed wrapper over the billing endpoints.

Python-side names go in, the API's camelCase query and body keys go out.
Responses are returned as the decoded JSON.
"""

from decimal import Decimal
from typing import Optional, Union

from .http_client import AuthenticatedClient

FILTER_PARAMS = {
    'member_id': 'memberId',
    'category': 'category',
    'account_type': 'accountType',
    'payment_method': 'paymentMethod',
    'status': 'status',
    'financial_year': 'financialYear',
    'start_date': 'startDate',
    'end_date': 'endDate',
    'min_amount': 'minAmount',
    'max_amount': 'maxAmount',
    'page': 'page',
    'limit': 'limit',
    'sort_by': 'sortBy',
    'sort_order': 'sortOrder',
}


def _params(filters: dict) -> dict:
    params = {}
    for name, value in filters.items():
        if value is None:
            continue
        if name not in FILTER_PARAMS:
            raise TypeError(f"Unknown filter: {name}")
        params[FILTER_PARAMS[name]] = str(value)
    return params


class BillingAPI:
    """Bill endpoints on top of an AuthenticatedClient."""

    def __init__(self, client: AuthenticatedClient):
        self.client = client

    async def create_bill(
        self,
        *,
        account_type: str,
        amount: Union[Decimal, int, str],
        member_id: Optional[str] = None,
        category: Optional[str] = None,
        payment_method: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> dict:
        """
        Issue a bill and return it.

        ``member_id`` defaults to the logged-in household on the server.
        """
        body = {'accountType': account_type, 'amount': str(amount)}
        if member_id:
            body['memberId'] = member_id
        if category:
            body['category'] = category
        if payment_method:
            body['paymentMethod'] = payment_method
        if notes:
            body['notes'] = notes

        data = await self.client.post('/bills/', json=body)
        return data['bill']

    async def list_bills(self, **filters) -> dict:
        """Bills and pagination. Filters use the names of ``FILTER_PARAMS``."""
        return await self.client.get('/bills/', params=_params(filters))

    async def get_bill(self, bill_id) -> dict:
        data = await self.client.get(f'/bills/{bill_id}/')
        return data['bill']

    async def get_bill_by_receipt_no(self, receipt_no: int) -> dict:
        data = await self.client.get(f'/bills/receipt/{int(receipt_no)}/')
        return data['bill']

    async def get_member_bills(self, member_id: str, *, page: int = 1, limit: int = 5) -> dict:
        ward, _, house = member_id.partition('/')
        return await self.client.get(
            f'/bills/member/{int(ward)}/{int(house)}/',
            params={'page': page, 'limit': limit},
        )

    async def cancel_bill(self, bill_id, reason: str = '') -> dict:
        data = await self.client.post(f'/bills/{bill_id}/cancel/', json={'reason': reason})
        return data['bill']

    async def get_receipt(self, bill_id) -> dict:
        data = await self.client.get(f'/bills/{bill_id}/receipt/')
        return data['receipt']

    async def get_stats(self, **filters) -> dict:
        return await self.client.get('/bills/stats/', params=_params(filters))

    async def get_monthly_revenue(self, year: Optional[int] = None, category: Optional[str] = None) -> dict:
        params = {}
        if year:
            params['year'] = year
        if category:
            params['category'] = category
        return await self.client.get('/bills/monthly/', params=params)
