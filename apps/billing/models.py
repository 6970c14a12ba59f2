from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from decimal import Decimal
import uuid

from apps.accounts.models import member_id_validator
from .constants import NOTES_MAX_LENGTH


class BillCategory(models.TextChoices):
    JAMAATH = 'Jamaath', 'Jamaath'
    MADRASSA = 'Madrassa', 'Madrassa'
    LAND = 'Land', 'Land'
    NERCHA = 'Nercha', 'Nercha'
    SADHU = 'Sadhu', 'Sadhu'


class BillStatus(models.TextChoices):
    PAID = 'Paid', 'Paid'
    PENDING = 'Pending', 'Pending'
    CANCELLED = 'Cancelled', 'Cancelled'


class PaymentMethod(models.TextChoices):
    CASH = 'Cash', 'Cash'
    CARD = 'Card', 'Card'
    UPI = 'UPI', 'UPI'
    BANK_TRANSFER = 'Bank Transfer', 'Bank Transfer'
    CHEQUE = 'Cheque', 'Cheque'


class Counter(models.Model):
    """Named integer sequence. Receipt numbers come from the "receipts" row."""

    name = models.CharField(max_length=50, unique=True)
    count = models.PositiveBigIntegerField(default=0)
    last_updated = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'counters'

    def __str__(self):
        return f"{self.name}: {self.count}"


class Bill(models.Model):
    """
    Payment receipt.

    ``receipt_no`` and ``amount`` are fixed once the bill is saved; a wrong
    bill is cancelled and a new one issued.
    """

    IMMUTABLE_FIELDS = ('receipt_no', 'amount')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    receipt_no = models.PositiveBigIntegerField(unique=True)

    # Household (Mahal ID, not a foreign key: the census is kept separately)
    member_id = models.CharField(
        max_length=20,
        db_index=True,
        validators=[member_id_validator],
    )
    member_name = models.CharField(max_length=150)
    member_address = models.TextField(blank=True)

    # Money
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    amount_in_words = models.CharField(max_length=255)

    # Classification
    category = models.CharField(max_length=20, choices=BillCategory.choices)
    account_type = models.CharField(max_length=50)
    status = models.CharField(
        max_length=20,
        choices=BillStatus.choices,
        default=BillStatus.PAID
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PaymentMethod.choices,
        default=PaymentMethod.CASH
    )

    # Derived from payment_date
    payment_date = models.DateTimeField(default=timezone.now)
    year = models.PositiveSmallIntegerField()
    month = models.PositiveSmallIntegerField()
    financial_year = models.CharField(max_length=7, db_index=True)

    notes = models.TextField(blank=True, max_length=NOTES_MAX_LENGTH)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bills_created'
    )

    # Cancellation
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancelled_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bills_cancelled'
    )
    cancel_reason = models.CharField(max_length=NOTES_MAX_LENGTH, blank=True)

    # Soft delete
    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    deleted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bills_deleted'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bills'
        indexes = [
            models.Index(fields=['member_id', 'payment_date'], name='bills_member_date_idx'),
            models.Index(fields=['category', 'account_type'], name='bills_category_type_idx'),
            models.Index(fields=['status', 'is_active'], name='bills_status_active_idx'),
            models.Index(fields=['payment_date'], name='bills_payment_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gte=0),
                name='bills_amount_non_negative',
            ),
        ]
        ordering = ['-receipt_no']

    def __str__(self):
        return f"#{self.receipt_no} {self.member_id} {self.amount} ({self.account_type})"

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._loaded_values = {
            name: value
            for name, value in zip(field_names, values)
            if name in cls.IMMUTABLE_FIELDS
        }
        return instance

    def save(self, *args, **kwargs):
        """Refuse to change receipt number or amount of a stored bill."""
        loaded = getattr(self, '_loaded_values', None)
        if loaded and not self._state.adding:
            from .services.exceptions import ImmutableFieldError

            for name, original in loaded.items():
                if self._stored_value(name) != original:
                    raise ImmutableFieldError(f"{name} cannot be changed once a bill is issued")
        super().save(*args, **kwargs)
        # The instance now mirrors the stored row
        deferred = self.get_deferred_fields()
        self._loaded_values = {
            name: self._stored_value(name)
            for name in self.IMMUTABLE_FIELDS
            if name not in deferred
        }

    def _stored_value(self, name):
        return self._meta.get_field(name).to_python(getattr(self, name))

    @property
    def is_cancelled(self):
        return self.status == BillStatus.CANCELLED
