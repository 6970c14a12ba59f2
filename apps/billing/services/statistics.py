"""Statistics service - billing aggregations for the admin dashboard."""

import calendar
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db.models import Count, DecimalField, Sum, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.billing.models import Bill, BillStatus

from .bill_management import apply_bill_filters

ZERO = Decimal('0.00')
MONEY = DecimalField(max_digits=14, decimal_places=2)

DATE_FILTERS = ('start_date', 'end_date')


def _revenue(queryset) -> Decimal:
    return queryset.aggregate(
        total=Coalesce(Sum('amount'), Value(ZERO), output_field=MONEY)
    )['total']


def get_stats(*, filters: Optional[dict] = None, today: Optional[date] = None) -> dict:
    """
    Calculate collection statistics over Paid, non-deleted bills.

    The date range filters (``start_date``/``end_date``) narrow the totals
    and the per-account breakdown. Today's and this month's collection
    always refer to the current day and month, narrowed only by the other
    filters (category, account type, payment method, member).

    Args:
        filters: Same keys as list_bills
        today: Override for the current local date

    Returns:
        Dictionary with:
        - total_bills: int
        - total_revenue: Decimal
        - avg_bill_amount: Decimal (2 places)
        - today_amount: Decimal
        - month_amount: Decimal
        - revenue_by_account: list of {account_type, category, count, revenue},
          highest revenue first

    Example:
        >>> get_stats(filters={'category': 'Jamaath'})['total_bills']
        42
    """
    filters = filters or {}
    today = today or timezone.localdate()

    paid = Bill.objects.filter(is_active=True, status=BillStatus.PAID)
    scoped = apply_bill_filters(
        paid, {k: v for k, v in filters.items() if k not in DATE_FILTERS}
    )
    ranged = apply_bill_filters(
        scoped, {k: v for k, v in filters.items() if k in DATE_FILTERS}
    )

    total_bills = ranged.count()
    total_revenue = _revenue(ranged)
    avg_bill_amount = (
        (total_revenue / total_bills).quantize(Decimal('0.01')) if total_bills else ZERO
    )

    revenue_by_account = [
        {
            'account_type': row['account_type'],
            'category': row['category'],
            'count': row['count'],
            'revenue': row['revenue'],
        }
        for row in (
            ranged
            .order_by()
            .values('account_type', 'category')
            .annotate(count=Count('id'), revenue=Sum('amount'))
            .order_by('-revenue', 'account_type')
        )
    ]

    return {
        'total_bills': total_bills,
        'total_revenue': total_revenue,
        'avg_bill_amount': avg_bill_amount,
        'today_amount': _revenue(scoped.filter(payment_date__date=today)),
        'month_amount': _revenue(scoped.filter(year=today.year, month=today.month)),
        'revenue_by_account': revenue_by_account,
    }


def get_monthly_revenue(*, year: int, filters: Optional[dict] = None) -> list:
    """
    Paid collection per calendar month of ``year``.

    Always returns twelve entries (January first); months without bills
    have zero count and revenue.
    """
    queryset = apply_bill_filters(
        Bill.objects.filter(is_active=True, status=BillStatus.PAID, year=year),
        filters,
    )
    rows = {
        row['month']: row
        for row in (
            queryset
            .order_by()
            .values('month')
            .annotate(count=Count('id'), revenue=Sum('amount'))
        )
    }

    return [
        {
            'month': month,
            'name': calendar.month_name[month],
            'count': rows[month]['count'] if month in rows else 0,
            'revenue': rows[month]['revenue'] if month in rows else ZERO,
        }
        for month in range(1, 13)
    ]
