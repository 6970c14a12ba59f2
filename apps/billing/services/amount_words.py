"""
Amount in words, Indian numbering system.

Receipts print the whole-rupee amount using Crore, Lakh, Thousand and
Hundred groups::

    >>> to_words(201)
    'Two Hundred and One Only'
    >>> to_words(12345678)
    'One Crore Twenty Three Lakh Forty Five Thousand Six Hundred and Seventy Eight Only'
"""

from decimal import Decimal, InvalidOperation, ROUND_DOWN

from apps.billing.constants import MAX_AMOUNT

ONES = (
    '', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine',
    'Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
    'Seventeen', 'Eighteen', 'Nineteen',
)
TENS = (
    '', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety',
)

# (divisor, label), most significant first
GROUPS = (
    (10 ** 7, 'Crore'),
    (10 ** 5, 'Lakh'),
    (10 ** 3, 'Thousand'),
    (10 ** 2, 'Hundred'),
)


def _below_hundred(n: int) -> str:
    if n < 20:
        return ONES[n]
    tens, ones = divmod(n, 10)
    return f"{TENS[tens]} {ONES[ones]}".rstrip()


def to_words(amount: int) -> str:
    """
    Convert a whole-rupee amount to words.

    Args:
        amount: Integer in ``0 <= amount < 10**9``

    Returns:
        Words ending in "Only". Zero is "Zero Only".

    Raises:
        TypeError: If amount is not an int (bool included)
        ValueError: If amount is negative
        OverflowError: If amount has more than nine digits
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be an int, not {type(amount).__name__}")
    if amount < 0:
        raise ValueError("amount cannot be negative")
    if amount >= MAX_AMOUNT:
        raise OverflowError(f"amount {amount} has more than 9 digits")

    if amount == 0:
        return 'Zero Only'

    words = []
    rest = amount
    for divisor, label in GROUPS:
        group, rest = divmod(rest, divisor)
        if group:
            words.append(f"{_below_hundred(group)} {label}")

    if rest:
        if words:
            words.append('and')
        words.append(_below_hundred(rest))

    words.append('Only')
    return ' '.join(words)


def amount_to_words(amount) -> str:
    """
    Words for a money value. Paise are dropped, as on the printed receipt.

    Accepts ``Decimal``, ``int``, ``float`` or a numeric string.
    """
    if isinstance(amount, bool):
        raise TypeError("amount must be a number, not bool")
    if isinstance(amount, int):
        return to_words(amount)

    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValueError(f"amount {amount!r} is not a number")
    if not value.is_finite():
        raise ValueError("amount must be finite")
    if value < 0:
        raise ValueError("amount cannot be negative")

    return to_words(int(value.to_integral_value(rounding=ROUND_DOWN)))
