"""
Pricing service.

Computes order totals from cart lines with an optional percentage
discount. All currency rounding is round-half-up to whole units; there
is no fractional currency in this domain.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Iterable

MIN_DISCOUNT = Decimal('0')
MAX_DISCOUNT = Decimal('100')


def normalize_discount(value: Any) -> Decimal:
    """
    Coerce a user-entered discount percentage into [0, 100].

    Empty, missing or non-numeric input becomes 0; out of range values
    are clamped.
    """
    if value is None or isinstance(value, bool):
        return MIN_DISCOUNT
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return MIN_DISCOUNT
    try:
        discount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return MIN_DISCOUNT
    if discount.is_nan():
        return MIN_DISCOUNT
    return max(MIN_DISCOUNT, min(MAX_DISCOUNT, discount))


def round_currency(amount: Decimal) -> int:
    """Round half-up to the nearest whole currency unit."""
    return int(Decimal(str(amount)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def calculate_subtotal(lines: Iterable[Dict[str, Any]], qty_key: str = 'quantity') -> Decimal:
    """Sum of price x quantity over the lines."""
    subtotal = Decimal('0')
    for line in lines:
        subtotal += Decimal(str(line['price'])) * int(line[qty_key])
    return subtotal


def calculate_totals(lines: Iterable[Dict[str, Any]], discount: Any = 0, qty_key: str = 'quantity') -> Dict[str, Any]:
    """
    Calculate cart totals.

    Returns:
        Dict with subtotal, discount_percent and discount_amount (exact
        Decimals), total (rounded subtotal) and total_amount (rounded
        subtotal minus discount).
    """
    subtotal = calculate_subtotal(lines, qty_key=qty_key)
    discount_percent = normalize_discount(discount)
    discount_amount = subtotal * discount_percent / Decimal('100')

    return {
        'subtotal': subtotal,
        'discount_percent': discount_percent,
        'discount_amount': discount_amount,
        'total': round_currency(subtotal),
        'total_amount': round_currency(subtotal - discount_amount),
    }
