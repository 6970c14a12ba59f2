"""
Legacy bill import.

Older exports stored the same fact under different names depending on
which collection a record came from (``mahalId`` / ``Mahal_Id`` /
``mahal_ID``, ``Date`` / ``date`` / ``Date_time`` / ``createdAt`` and so on).
``normalize_legacy_record`` maps every known alias to the canonical field
names once, at import time; nothing past this module sees the aliases.
"""

import logging
import re
from datetime import datetime
from typing import Iterable, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from apps.billing.models import Bill, BillCategory, BillStatus
from apps.members.services import get_member, MemberNotFoundError

from .amount_words import amount_to_words
from .counter import ensure_at_least, reserve_next
from .exceptions import BillValidationError
from .validation import (
    validate_bill_request,
    validate_member_id,
    financial_year,
)

logger = logging.getLogger(__name__)

MEMBER_ID_KEYS = ('mahalId', 'Mahal_Id', 'mahal_ID', 'member_id', 'memberId')
DATE_KEYS = ('paymentDate', 'payment_date', 'Date_time', 'Date', 'date', 'createdAt')
ACCOUNT_TYPE_KEYS = ('accountType', 'account_type', 'type')
RECEIPT_KEYS = ('receiptNo', 'receipt_no', 'Sl_No')

RECEIPT_DIGITS_RE = re.compile(r'(\d+)\s*$')


def _first(record: dict, keys) -> Optional[object]:
    for key in keys:
        value = record.get(key)
        if value not in (None, ''):
            return value
    return None


def parse_receipt_no(value) -> Optional[int]:
    """
    Receipt number from an int or a string such as ``BILL-2024-000123``.

    Returns None for missing or placeholder values ("N/A").
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    match = RECEIPT_DIGITS_RE.search(str(value))
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def _parse_legacy_date(value) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        parsed = parse_datetime(text)
        if parsed is None:
            day = parse_date(text)
            if day is None:
                raise BillValidationError(f"Unrecognized date: {value!r}", field='paymentDate')
            parsed = datetime.combine(day, datetime.min.time())
    return parsed if timezone.is_aware(parsed) else timezone.make_aware(parsed)


def _split_name_address(value: str):
    name, _, address = str(value).partition(',')
    return name.strip(), address.strip()


def normalize_legacy_record(record: dict, *, default_category: Optional[str] = None) -> dict:
    """
    Map a legacy-shaped bill to canonical field names.

    The ``category`` key is a real category in newer exports and an account
    type in older ones; both are handled. Category is inferred from the
    account type when absent, falling back to ``default_category`` when
    the type exists in several categories.

    Returns:
        Dictionary with receipt_no (int or None), member_id, member_name,
        member_address, amount, category, account_type, payment_method,
        payment_date, status, notes, is_active

    Raises:
        BillValidationError: If the record cannot be made valid
    """
    member_id = validate_member_id(_first(record, MEMBER_ID_KEYS))

    raw_category = record.get('category')
    account_type = _first(record, ACCOUNT_TYPE_KEYS)
    category = None
    if raw_category:
        if str(raw_category).strip() in BillCategory.values:
            category = str(raw_category).strip()
        elif account_type is None:
            account_type = raw_category

    try:
        draft = validate_bill_request(
            category=category,
            account_type=account_type,
            amount=record.get('amount'),
            payment_method=record.get('paymentMethod'),
        )
    except BillValidationError:
        if category or not default_category:
            raise
        draft = validate_bill_request(
            category=default_category,
            account_type=account_type,
            amount=record.get('amount'),
            payment_method=record.get('paymentMethod'),
        )

    member_name = record.get('memberName') or ''
    member_address = record.get('memberAddress') or record.get('address') or ''
    if record.get('id_name_address'):
        combined_name, combined_address = _split_name_address(record['id_name_address'])
        member_name = member_name or combined_name
        member_address = member_address or combined_address

    status = str(record.get('status') or BillStatus.PAID).strip()
    if status not in BillStatus.values:
        raise BillValidationError(f"Invalid status: {status}", field='status')

    return {
        'receipt_no': parse_receipt_no(_first(record, RECEIPT_KEYS)),
        'member_id': member_id,
        'member_name': member_name.strip(),
        'member_address': member_address.strip(),
        'amount': draft.amount,
        'category': draft.category,
        'account_type': draft.account_type,
        'payment_method': draft.payment_method,
        'payment_date': _parse_legacy_date(_first(record, DATE_KEYS)) or timezone.now(),
        'status': status,
        'notes': (record.get('notes') or '').strip(),
        'is_active': record.get('isActive', True) is not False,
    }


def _member_name(member_id: str) -> str:
    try:
        return get_member(mahal_id=member_id).name
    except MemberNotFoundError:
        return 'Unknown'


def _save(normalized: dict, receipt_no: int) -> Bill:
    paid_at = timezone.localtime(normalized['payment_date'])
    with transaction.atomic():
        return Bill.objects.create(
            receipt_no=receipt_no,
            member_id=normalized['member_id'],
            member_name=normalized['member_name'] or _member_name(normalized['member_id']),
            member_address=normalized['member_address'],
            amount=normalized['amount'],
            amount_in_words=amount_to_words(normalized['amount']),
            category=normalized['category'],
            account_type=normalized['account_type'],
            status=normalized['status'],
            payment_method=normalized['payment_method'],
            payment_date=normalized['payment_date'],
            year=paid_at.year,
            month=paid_at.month,
            financial_year=financial_year(paid_at),
            notes=normalized['notes'],
            is_active=normalized['is_active'],
        )


def import_legacy_bills(
    records: Iterable[dict],
    *,
    default_category: Optional[str] = None,
    dry_run: bool = False,
) -> dict:
    """
    Import legacy bill records.

    Records keep their receipt numbers. The receipt counter is advanced
    past the highest imported number before anything is saved, and
    records without a number then get fresh ones, so no number is issued
    twice. Records whose number already exists are skipped. A record that
    got a fresh number but could not be saved counts as failed, and that
    number stays retired.

    Args:
        records: Iterable of legacy-shaped dicts
        default_category: Category for account types found in several
            categories (e.g. "Others")
        dry_run: Only normalize and report; save nothing

    Returns:
        Dictionary with valid, imported, skipped and failed counts, the list of
        errors as ``(index, message)`` and the counter value afterwards
    """
    counter_name = settings.BILLING_RECEIPT_COUNTER
    normalized = []
    errors = []

    for index, record in enumerate(records):
        try:
            normalized.append((index, normalize_legacy_record(record, default_category=default_category)))
        except (BillValidationError, ValueError, TypeError) as e:
            errors.append((index, str(e)))

    highest = max((n['receipt_no'] for _, n in normalized if n['receipt_no']), default=0)
    summary = {
        'valid': len(normalized),
        'imported': 0,
        'skipped': 0,
        'failed': len(errors),
        'errors': errors,
        'highest_receipt_no': highest,
    }
    if dry_run:
        return summary

    if highest:
        ensure_at_least(counter_name, highest)

    for index, item in normalized:
        receipt_no = item['receipt_no'] or reserve_next(counter_name)
        try:
            _save(item, receipt_no)
        except IntegrityError:
            if item['receipt_no']:
                summary['skipped'] += 1
                continue
            # A freshly reserved number is spent even though nothing was saved
            logger.error(
                "Receipt %d reserved but legacy record %d was not saved; number is retired",
                receipt_no, index,
            )
            summary['failed'] += 1
            errors.append((index, f"Receipt {receipt_no} was reserved but could not be saved"))
            continue
        summary['imported'] += 1

    logger.info(
        "Legacy import: %d imported, %d skipped, %d failed",
        summary['imported'], summary['skipped'], summary['failed'],
    )
    return summary
