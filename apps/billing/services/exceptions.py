"""
Domain-specific exceptions for the billing app.

Services raise these; views convert them to HTTP responses. Validation
errors are always raised before a receipt number is reserved.
"""


class BillingServiceError(Exception):
    """Base exception for all billing service errors."""
    pass


class BillValidationError(BillingServiceError):
    """Raised when a bill request has a bad shape or value."""

    field = None

    def __init__(self, message, field=None):
        super().__init__(message)
        if field is not None:
            self.field = field


class InvalidCategoryError(BillValidationError):
    """Raised when the category is not one of the five bill categories."""
    field = 'category'


class InvalidAccountTypeError(BillValidationError):
    """Raised when the account type is not listed for the category."""
    field = 'accountType'


class InvalidAmountError(BillValidationError):
    """Raised when the amount is missing, not a number, or out of range."""
    field = 'amount'


class InvalidPaymentMethodError(BillValidationError):
    """Raised when the payment method is unknown."""
    field = 'paymentMethod'


class InvalidMemberIdError(BillValidationError):
    """Raised when a Mahal ID is not in ward/house form."""
    field = 'memberId'


class StorageError(BillingServiceError):
    """Raised when the database is unavailable. No receipt number was used."""
    pass


class ReceiptGapError(BillingServiceError):
    """Raised when a bill could not be saved after its receipt number was reserved."""

    def __init__(self, receipt_no, message=None):
        self.receipt_no = receipt_no
        super().__init__(message or f"Bill could not be saved; receipt number {receipt_no} was not used")


class BillNotFoundError(BillingServiceError):
    """Raised when a bill does not exist or was deleted."""
    pass


class InvalidStatusTransitionError(BillingServiceError):
    """Raised when a status change is not allowed (e.g. cancelling twice)."""
    pass


class ImmutableFieldError(BillingServiceError):
    """Raised when trying to change receipt number or amount of a stored bill."""
    pass


class NotBillOwnerError(BillingServiceError):
    """Raised when a user acts on another household's bill."""
    pass
