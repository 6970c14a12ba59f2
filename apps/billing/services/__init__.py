"""
Billing app services layer.

Receipt numbering, amount in words, bill validation, bill management,
statistics and the legacy import. State-changing operations run in
transactions; receipt numbers come from an atomic counter.
"""

from apps.members.services import MemberNotFoundError

from .exceptions import (
    BillingServiceError,
    BillValidationError,
    InvalidCategoryError,
    InvalidAccountTypeError,
    InvalidAmountError,
    InvalidPaymentMethodError,
    InvalidMemberIdError,
    StorageError,
    ReceiptGapError,
    BillNotFoundError,
    InvalidStatusTransitionError,
    ImmutableFieldError,
    NotBillOwnerError,
)

from .counter import (
    reserve_next,
    get_current,
    ensure_at_least,
)

from .amount_words import (
    to_words,
    amount_to_words,
)

from .validation import (
    BillDraft,
    validate_bill_request,
    validate_amount,
    validate_payment_method,
    validate_member_id,
    parse_member_id,
    category_for_account_type,
    financial_year,
)

from .bill_management import (
    create_bill,
    get_bill,
    get_bill_by_receipt_no,
    get_member_bills,
    list_bills,
    update_bill,
    cancel_bill,
    delete_bill,
    build_receipt,
)

from .statistics import (
    get_stats,
    get_monthly_revenue,
)

from .legacy import (
    normalize_legacy_record,
    import_legacy_bills,
)


__all__ = [
    # Exceptions
    'BillingServiceError',
    'BillValidationError',
    'InvalidCategoryError',
    'InvalidAccountTypeError',
    'InvalidAmountError',
    'InvalidPaymentMethodError',
    'InvalidMemberIdError',
    'StorageError',
    'ReceiptGapError',
    'BillNotFoundError',
    'MemberNotFoundError',
    'InvalidStatusTransitionError',
    'ImmutableFieldError',
    'NotBillOwnerError',

    # Receipt counter
    'reserve_next',
    'get_current',
    'ensure_at_least',

    # Amount in words
    'to_words',
    'amount_to_words',

    # Validation
    'BillDraft',
    'validate_bill_request',
    'validate_amount',
    'validate_payment_method',
    'validate_member_id',
    'parse_member_id',
    'category_for_account_type',
    'financial_year',

    # Bill management
    'create_bill',
    'get_bill',
    'get_bill_by_receipt_no',
    'get_member_bills',
    'list_bills',
    'update_bill',
    'cancel_bill',
    'delete_bill',
    'build_receipt',

    # Statistics
    'get_stats',
    'get_monthly_revenue',

    # Legacy import
    'normalize_legacy_record',
    'import_legacy_bills',
]
