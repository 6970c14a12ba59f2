"""
Bill management service.

Creates bills with a freshly reserved receipt number and handles the admin
actions on issued bills (notes/payment method edits, cancel, delete).

Creation order matters:
    1. Validate the request (no side effects)
    2. Resolve the household in the member directory
    3. Reserve the receipt number (committed on its own)
    4. Derive amount in words, year, month, financial year
    5. Save the bill

If step 5 fails the reserved number stays used and the caller gets
ReceiptGapError. Numbers are never handed out twice.
"""

import logging
import math
from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from django.conf import settings
from django.db import DatabaseError, transaction
from django.db.models import Sum
from django.utils import timezone

from apps.accounts.models import User
from apps.billing.constants import NOTES_MAX_LENGTH
from apps.billing.models import Bill, BillStatus
from apps.members.services import get_member, format_member_address

from .amount_words import amount_to_words
from .counter import reserve_next
from .exceptions import (
    BillValidationError,
    BillNotFoundError,
    ImmutableFieldError,
    InvalidStatusTransitionError,
    NotBillOwnerError,
    StorageError,
    ReceiptGapError,
)
from .validation import (
    validate_bill_request,
    validate_member_id,
    validate_payment_method,
    financial_year,
)

logger = logging.getLogger(__name__)

SORT_FIELDS = ('receipt_no', 'payment_date', 'amount', 'created_at')
UPDATABLE_FIELDS = ('notes', 'payment_method')


def _check_owner(user: Optional[User], member_id: str, action: str) -> None:
    if user is None or user.is_admin:
        return
    if user.member_id != member_id:
        raise NotBillOwnerError(f"Not authorized to {action}")


def _clean_notes(notes) -> str:
    notes = (notes or '').strip()
    if len(notes) > NOTES_MAX_LENGTH:
        raise BillValidationError(
            f"Notes cannot exceed {NOTES_MAX_LENGTH} characters", field='notes'
        )
    return notes


def _to_payment_datetime(value) -> datetime:
    if value is None:
        return timezone.now()
    if isinstance(value, datetime):
        return value if timezone.is_aware(value) else timezone.make_aware(value)
    if isinstance(value, date):
        return timezone.make_aware(datetime.combine(value, time.min))
    raise TypeError(f"payment_date must be a date or datetime, not {type(value).__name__}")


def create_bill(
    *,
    member_id: str,
    amount,
    category,
    account_type,
    payment_method=None,
    notes: str = '',
    created_by: Optional[User] = None,
    payment_date=None,
) -> Bill:
    """
    Issue a new bill.

    Households may only pay for their own Mahal ID; admins may bill anyone.

    Args:
        member_id: Mahal ID being billed
        amount: Amount in rupees (number or numeric string)
        category: Bill category (may be blank if the account type is unique)
        account_type: Account type within the category
        payment_method: Payment method (default Cash)
        notes: Optional free text
        created_by: User issuing the bill
        payment_date: Optional date/datetime (default now)

    Returns:
        The saved Bill

    Raises:
        BillValidationError: Any invalid input (nothing reserved)
        NotBillOwnerError: Household billing another household
        MemberNotFoundError: Mahal ID not in the directory
        StorageError: Database unavailable before reservation
        ReceiptGapError: Save failed after the receipt number was reserved
    """
    draft = validate_bill_request(
        category=category,
        account_type=account_type,
        amount=amount,
        payment_method=payment_method,
    )
    member_id = validate_member_id(member_id)
    notes = _clean_notes(notes)
    paid_at = _to_payment_datetime(payment_date)

    _check_owner(created_by, member_id, 'create bill for this member')

    try:
        member = get_member(mahal_id=member_id)
    except DatabaseError as e:
        raise StorageError("Member directory unavailable") from e

    receipt_no = reserve_next(settings.BILLING_RECEIPT_COUNTER)

    local_paid_at = timezone.localtime(paid_at)
    try:
        with transaction.atomic():
            bill = Bill.objects.create(
                receipt_no=receipt_no,
                member_id=member_id,
                member_name=member.name,
                member_address=format_member_address(member),
                amount=draft.amount,
                amount_in_words=amount_to_words(draft.amount),
                category=draft.category,
                account_type=draft.account_type,
                payment_method=draft.payment_method,
                payment_date=paid_at,
                year=local_paid_at.year,
                month=local_paid_at.month,
                financial_year=financial_year(local_paid_at),
                notes=notes,
                created_by=created_by,
            )
    except DatabaseError:
        logger.error(
            "Receipt %d reserved but bill for %s was not saved; number is retired",
            receipt_no, member_id, exc_info=True,
        )
        raise ReceiptGapError(receipt_no)

    logger.info(
        "Bill #%d issued: %s %s %s (%s)",
        bill.receipt_no, bill.member_id, bill.amount, bill.account_type, bill.payment_method,
    )
    return bill


def get_bill(*, bill_id: UUID, user: Optional[User] = None) -> Bill:
    """
    Get an active bill by ID.

    Raises:
        BillNotFoundError: If the bill doesn't exist or was deleted
        NotBillOwnerError: If a household asks for another household's bill
    """
    try:
        bill = Bill.objects.select_related('created_by').get(id=bill_id, is_active=True)
    except Bill.DoesNotExist:
        raise BillNotFoundError("Bill not found")

    _check_owner(user, bill.member_id, 'view this bill')
    return bill


def get_bill_by_receipt_no(*, receipt_no: int, user: Optional[User] = None) -> Bill:
    """Same as get_bill, looked up by receipt number."""
    try:
        bill = Bill.objects.select_related('created_by').get(receipt_no=receipt_no, is_active=True)
    except Bill.DoesNotExist:
        raise BillNotFoundError(f"Bill with receipt number {receipt_no} not found")

    _check_owner(user, bill.member_id, 'view this bill')
    return bill


def apply_bill_filters(queryset, filters: Optional[dict]):
    """
    AND together every filter that is present.

    Keys: member_id, category, account_type, payment_method, status,
    financial_year, start_date, end_date, min_amount, max_amount.
    """
    filters = filters or {}

    if filters.get('member_id'):
        queryset = queryset.filter(member_id=filters['member_id'])
    if filters.get('category'):
        queryset = queryset.filter(category=filters['category'])
    if filters.get('account_type'):
        queryset = queryset.filter(account_type__iexact=filters['account_type'])
    if filters.get('payment_method'):
        queryset = queryset.filter(payment_method=filters['payment_method'])
    if filters.get('status'):
        queryset = queryset.filter(status=filters['status'])
    if filters.get('financial_year'):
        queryset = queryset.filter(financial_year=filters['financial_year'])

    # Date range is inclusive on both ends
    if filters.get('start_date'):
        queryset = queryset.filter(payment_date__date__gte=filters['start_date'])
    if filters.get('end_date'):
        queryset = queryset.filter(payment_date__date__lte=filters['end_date'])

    if filters.get('min_amount') is not None:
        queryset = queryset.filter(amount__gte=filters['min_amount'])
    if filters.get('max_amount') is not None:
        queryset = queryset.filter(amount__lte=filters['max_amount'])

    return queryset


def _page_size(limit: Optional[int]) -> int:
    if not limit:
        return settings.BILLING_DEFAULT_PAGE_SIZE
    return max(1, min(int(limit), settings.BILLING_MAX_PAGE_SIZE))


def list_bills(
    *,
    filters: Optional[dict] = None,
    user: Optional[User] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'desc',
) -> dict:
    """
    List active bills with offset pagination.

    Households only ever see their own Mahal ID, whatever filter they send.

    Args:
        filters: See apply_bill_filters
        user: Requesting user (None means unrestricted)
        page: 1-based page number
        limit: Page size (clamped to BILLING_MAX_PAGE_SIZE)
        sort_by: One of receipt_no, payment_date, amount, created_at
        sort_order: "asc" or "desc"

    Returns:
        Dictionary with:
        - bills: list[Bill] for the page
        - pagination: current_page, total_pages, total_bills,
          bills_per_page, has_next_page, has_prev_page
    """
    if sort_by not in SORT_FIELDS:
        raise BillValidationError(f"Cannot sort by '{sort_by}'", field='sortBy')

    filters = dict(filters or {})
    if user is not None and not user.is_admin:
        filters['member_id'] = user.member_id

    queryset = apply_bill_filters(Bill.objects.filter(is_active=True), filters)

    ordering = sort_by if sort_order == 'asc' else f'-{sort_by}'
    queryset = queryset.order_by(ordering, '-receipt_no')

    limit = _page_size(limit)
    page = max(1, int(page or 1))
    total = queryset.count()
    total_pages = math.ceil(total / limit)
    offset = (page - 1) * limit

    return {
        'bills': list(queryset[offset:offset + limit]),
        'pagination': {
            'current_page': page,
            'total_pages': total_pages,
            'total_bills': total,
            'bills_per_page': limit,
            'has_next_page': page < total_pages,
            'has_prev_page': page > 1,
        },
    }


def get_member_bills(
    *,
    member_id: str,
    user: Optional[User] = None,
    page: int = 1,
    limit: Optional[int] = None,
) -> dict:
    """
    A household's billing history, newest first, with the total paid.

    Cancelled bills are listed but do not count towards ``total_amount_paid``.
    """
    member_id = validate_member_id(member_id)
    _check_owner(user, member_id, 'view these bills')

    result = list_bills(filters={'member_id': member_id}, page=page, limit=limit)
    total_paid = Bill.objects.filter(
        member_id=member_id,
        is_active=True,
        status=BillStatus.PAID,
    ).aggregate(total=Sum('amount'))['total']

    result['member_id'] = member_id
    result['total_amount_paid'] = total_paid or 0
    return result


@transaction.atomic
def update_bill(*, bill_id: UUID, user: Optional[User] = None, **changes) -> Bill:
    """
    Update the editable fields of a bill (admin only).

    Only ``notes`` and ``payment_method`` can change. Receipt number and
    amount are part of the audit trail.

    Raises:
        BillNotFoundError: If the bill doesn't exist
        ImmutableFieldError: If receipt_no or amount is in ``changes``
        BillValidationError: Unknown field or invalid value
    """
    for name in Bill.IMMUTABLE_FIELDS:
        if name in changes:
            raise ImmutableFieldError(f"{name} cannot be changed once a bill is issued")
    unknown = set(changes) - set(UPDATABLE_FIELDS)
    if unknown:
        raise BillValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

    try:
        bill = Bill.objects.select_for_update().get(id=bill_id, is_active=True)
    except Bill.DoesNotExist:
        raise BillNotFoundError("Bill not found")

    update_fields = []
    if changes.get('notes') is not None:
        bill.notes = _clean_notes(changes['notes'])
        update_fields.append('notes')
    if str(changes.get('payment_method') or '').strip():
        bill.payment_method = validate_payment_method(changes['payment_method'])
        update_fields.append('payment_method')

    if update_fields:
        bill.save(update_fields=update_fields + ['updated_at'])
        logger.info(
            "Bill #%d updated by %s: %s",
            bill.receipt_no, user.member_id if user else 'system', ', '.join(update_fields),
        )
    return bill


@transaction.atomic
def cancel_bill(*, bill_id: UUID, user: Optional[User] = None, reason: str = '') -> Bill:
    """
    Cancel a Paid or Pending bill (admin only).

    The receipt number stays retired; a replacement bill gets a new one.

    Raises:
        BillNotFoundError: If the bill doesn't exist
        InvalidStatusTransitionError: If the bill is already cancelled
    """
    try:
        bill = Bill.objects.select_for_update().get(id=bill_id, is_active=True)
    except Bill.DoesNotExist:
        raise BillNotFoundError("Bill not found")

    if bill.status == BillStatus.CANCELLED:
        raise InvalidStatusTransitionError(f"Bill #{bill.receipt_no} is already cancelled")

    bill.status = BillStatus.CANCELLED
    bill.cancelled_at = timezone.now()
    bill.cancelled_by = user
    bill.cancel_reason = _clean_notes(reason)
    bill.save(update_fields=['status', 'cancelled_at', 'cancelled_by', 'cancel_reason', 'updated_at'])

    logger.info(
        "Bill #%d cancelled by %s", bill.receipt_no, user.member_id if user else 'system'
    )
    return bill


@transaction.atomic
def delete_bill(*, bill_id: UUID, user: Optional[User] = None, hard: bool = False) -> None:
    """
    Delete a bill (admin only).

    Soft delete by default: the row is kept and hidden from every query.
    ``hard=True`` removes the row and is logged at WARNING.

    Raises:
        BillNotFoundError: If the bill doesn't exist (or is already soft-deleted
            and ``hard`` is False)
    """
    queryset = Bill.objects.select_for_update()
    if not hard:
        queryset = queryset.filter(is_active=True)

    try:
        bill = queryset.get(id=bill_id)
    except Bill.DoesNotExist:
        raise BillNotFoundError("Bill not found")

    actor = user.member_id if user else 'system'

    if hard:
        logger.warning(
            "Bill #%d (%s, %s) permanently deleted by %s",
            bill.receipt_no, bill.member_id, bill.amount, actor,
        )
        bill.delete()
        return

    bill.is_active = False
    bill.deleted_at = timezone.now()
    bill.deleted_by = user
    bill.save(update_fields=['is_active', 'deleted_at', 'deleted_by', 'updated_at'])
    logger.info("Bill #%d deleted by %s", bill.receipt_no, actor)


def build_receipt(bill: Bill) -> dict:
    """
    Printable receipt for a bill.

    Dates are shown in local time, e.g. ``15 February 2024`` and ``10:30 AM``.
    """
    paid_at = timezone.localtime(bill.payment_date)
    return {
        'organization_name': settings.BILLING_ORGANIZATION_NAME,
        'organization_address': settings.BILLING_ORGANIZATION_ADDRESS,
        'receipt_no': bill.receipt_no,
        'date': paid_at.strftime('%d %B %Y'),
        'time': paid_at.strftime('%I:%M %p'),
        'member_id': bill.member_id,
        'member_name': bill.member_name,
        'member_address': bill.member_address,
        'amount': bill.amount,
        'amount_in_words': bill.amount_in_words,
        'category': bill.category,
        'account_type': bill.account_type,
        'payment_method': bill.payment_method,
        'status': bill.status,
        'notes': bill.notes,
        'financial_year': bill.financial_year,
    }
