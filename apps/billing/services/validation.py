"""
Bill request validation.

Checks the raw category / account type / amount / payment method of a bill
request and returns a normalized draft. Nothing here touches the database,
so a rejected request never reserves a receipt number.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple, Union

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.billing.constants import ACCOUNT_TYPES, MAX_AMOUNT
from apps.billing.models import BillCategory, PaymentMethod

from .exceptions import (
    InvalidCategoryError,
    InvalidAccountTypeError,
    InvalidAmountError,
    InvalidPaymentMethodError,
    InvalidMemberIdError,
)

MEMBER_ID_RE = re.compile(r'^(\d+)/(\d+)$')
CENTS = Decimal('0.01')


@dataclass(frozen=True)
class BillDraft:
    """Validated, canonical bill fields."""

    category: str
    account_type: str
    amount: Decimal
    payment_method: str


def _clean(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def _match(value: str, choices) -> Optional[str]:
    """Case-insensitive lookup returning the canonical spelling."""
    lowered = value.lower()
    for choice in choices:
        if choice.lower() == lowered:
            return choice
    return None


def category_for_account_type(account_type: str) -> str:
    """
    Find the category an account type belongs to.

    Raises:
        InvalidAccountTypeError: If no category lists the type
        InvalidCategoryError: If more than one category lists it ("Others")
    """
    cleaned = _clean(account_type)
    owners = [
        category for category, types in ACCOUNT_TYPES.items()
        if _match(cleaned, types)
    ]
    if not owners:
        raise InvalidAccountTypeError(f"Invalid account type: {cleaned or '(empty)'}")
    if len(owners) > 1:
        raise InvalidCategoryError(
            f"Account type '{cleaned}' exists in {', '.join(owners)}; category is required"
        )
    return owners[0]


def validate_amount(amount) -> Decimal:
    """
    Parse a positive money amount below 10^9 with at most two decimals.

    Raises:
        InvalidAmountError: On anything else
    """
    if amount is None or isinstance(amount, bool) or _clean(amount) == '':
        raise InvalidAmountError("Amount is required")

    try:
        value = Decimal(_clean(amount))
    except InvalidOperation:
        raise InvalidAmountError(f"Amount must be a number, got {amount!r}")

    if not value.is_finite():
        raise InvalidAmountError("Amount must be a finite number")
    if value <= 0:
        raise InvalidAmountError("Amount must be greater than zero")
    if value >= MAX_AMOUNT:
        raise InvalidAmountError("Amount must be less than 100 Crore")
    if value != value.quantize(CENTS):
        raise InvalidAmountError("Amount cannot have more than 2 decimal places")

    return value.quantize(CENTS)


def validate_bill_request(
    *,
    category,
    account_type,
    amount,
    payment_method=None,
) -> BillDraft:
    """
    Validate and normalize a bill creation request.

    Strings are trimmed and matched case-insensitively, and the draft carries
    the canonical spelling. A blank category is inferred from the account
    type when only one category lists it. A blank payment method means Cash.

    Args:
        category: Raw category (e.g. "Jamaath")
        account_type: Raw account type (e.g. "Donation")
        amount: Raw amount (number or numeric string)
        payment_method: Raw payment method, optional

    Returns:
        BillDraft with canonical values

    Raises:
        InvalidCategoryError: Unknown category
        InvalidAccountTypeError: Account type not listed for the category
        InvalidAmountError: Amount not positive, not finite, or too large
        InvalidPaymentMethodError: Unknown payment method
    """
    raw_category = _clean(category)
    raw_type = _clean(account_type)

    if raw_category:
        canonical_category = _match(raw_category, BillCategory.values)
        if canonical_category is None:
            raise InvalidCategoryError(f"Invalid category: {raw_category}")
    else:
        canonical_category = category_for_account_type(raw_type)

    canonical_type = _match(raw_type, ACCOUNT_TYPES[canonical_category]) if raw_type else None
    if canonical_type is None:
        raise InvalidAccountTypeError(
            f"Invalid account type '{raw_type or '(empty)'}' for category {canonical_category}"
        )

    value = validate_amount(amount)

    return BillDraft(
        category=canonical_category,
        account_type=canonical_type,
        amount=value,
        payment_method=validate_payment_method(payment_method),
    )


def validate_payment_method(payment_method) -> str:
    """
    Canonical spelling of a payment method, matched case-insensitively.

    A blank value means Cash.

    Raises:
        InvalidPaymentMethodError: Unknown payment method
    """
    raw_method = _clean(payment_method)
    if not raw_method:
        return PaymentMethod.CASH.value
    canonical_method = _match(raw_method, PaymentMethod.values)
    if canonical_method is None:
        raise InvalidPaymentMethodError(f"Invalid payment method: {raw_method}")
    return canonical_method


def validate_member_id(member_id) -> str:
    """Return the trimmed Mahal ID or raise InvalidMemberIdError."""
    cleaned = _clean(member_id)
    if not MEMBER_ID_RE.match(cleaned):
        raise InvalidMemberIdError(
            f"Member ID must be in format: ward/house (e.g., 1/2), got '{cleaned}'"
        )
    return cleaned


def parse_member_id(member_id) -> Tuple[int, int]:
    """Split a Mahal ID into ``(ward, house)``."""
    ward, house = MEMBER_ID_RE.match(validate_member_id(member_id)).groups()
    return int(ward), int(house)


def financial_year(payment_date: Union[date, datetime, str]) -> str:
    """
    Financial year label for a payment date. Years start in April.

    >>> financial_year('2024-02-15')
    '2023-24'
    >>> financial_year('2024-05-01')
    '2024-25'
    """
    day = _to_date(payment_date)
    start = day.year if day.month >= 4 else day.year - 1
    return f"{start}-{(start + 1) % 100:02d}"


def _to_date(value) -> date:
    if isinstance(value, datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        parsed = parse_datetime(value.strip())
        if parsed is not None:
            return _to_date(parsed)
        parsed = parse_date(value.strip())
        if parsed is not None:
            return parsed
        raise ValueError(f"Unrecognized date: {value!r}")
    raise TypeError(f"Expected a date, datetime or ISO string, not {type(value).__name__}")
