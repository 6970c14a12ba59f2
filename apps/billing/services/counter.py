"""
Counter service.

Named sequences backed by the ``counters`` table. Every reservation is one
``UPDATE ... SET count = count + 1`` so concurrent requests can never read
the same value.
"""

import logging

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.billing.models import Counter

from .exceptions import StorageError

logger = logging.getLogger(__name__)


def reserve_next(counter_name: str) -> int:
    """
    Reserve the next value of a named counter.

    The row is created with ``count = 0`` on first use, so the first value
    handed out is 1. The reservation is committed on its own; if the caller
    later fails, the number stays used.

    Args:
        counter_name: Sequence name (e.g. "receipts")

    Returns:
        The new counter value

    Raises:
        StorageError: If the database is unavailable. Nothing was reserved.
    """
    try:
        with transaction.atomic():
            updated = _increment(counter_name)
            if not updated:
                try:
                    with transaction.atomic():
                        Counter.objects.create(name=counter_name, count=1)
                except IntegrityError:
                    # Another request created the row first
                    _increment(counter_name)

            value = (
                Counter.objects
                .filter(name=counter_name)
                .values_list('count', flat=True)
                .get()
            )
    except DatabaseError as e:
        logger.warning("Counter %s unavailable: %s", counter_name, e)
        raise StorageError(f"Could not reserve a number from counter '{counter_name}'") from e

    logger.debug("Reserved %s #%d", counter_name, value)
    return value


def _increment(counter_name: str) -> int:
    return Counter.objects.filter(name=counter_name).update(
        count=F('count') + 1,
        last_updated=timezone.now(),
    )


def get_current(counter_name: str) -> int:
    """Return the last value handed out, or 0 if the counter was never used."""
    try:
        return (
            Counter.objects
            .filter(name=counter_name)
            .values_list('count', flat=True)
            .first()
        ) or 0
    except DatabaseError as e:
        raise StorageError(f"Could not read counter '{counter_name}'") from e


@transaction.atomic
def ensure_at_least(counter_name: str, value: int) -> int:
    """
    Raise a counter to at least ``value``. Never lowers it.

    Used after importing bills that already carry receipt numbers, so the
    next reservation continues after the highest imported number.

    Returns:
        The counter value after the call
    """
    if value < 0:
        raise ValueError("Counter value cannot be negative")

    counter, _ = Counter.objects.select_for_update().get_or_create(name=counter_name)
    if counter.count < value:
        counter.count = value
        counter.last_updated = timezone.now()
        counter.save(update_fields=['count', 'last_updated'])
        logger.info("Counter %s advanced to %d", counter_name, value)
    return counter.count
