"""Money and quantity helpers shared by pricing, settlement and the API layer."""
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal('0.01')
MONEY_PATTERN = re.compile(r"^\$?\s*\d+(?:\.\d{1,2})?$")


def round2(value) -> Decimal:
    """Round to cents, half-up (what a register prints)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    """Whole number of cents in a monetary amount (rounded half-up)."""
    return int((round2(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def parse_money(value) -> Decimal:
    """
    Parse a price entered by a manager (e.g. "4.50", "$4.5", 4.5) to Decimal.

    Rules:
    - Optional leading dollar sign
    - At most 2 decimal digits
    - No negatives

    Raises:
        ValueError: if the value is invalid or empty.
    """
    if value is None or isinstance(value, bool):
        raise ValueError('Invalid price. Use a format like 4.50')

    cleaned = str(value).strip()
    if not cleaned or not MONEY_PATTERN.match(cleaned):
        raise ValueError('Invalid price. Use a format like 4.50')

    try:
        decimal_value = Decimal(cleaned.lstrip('$').strip())
    except (InvalidOperation, ValueError):
        raise ValueError('Invalid price. Use a format like 4.50')

    return decimal_value.quantize(CENT)


def parse_quantity(value, allow_zero=False) -> Decimal:
    """Parse a stock or recipe quantity; must be positive (or zero when allowed)."""
    if value is None or isinstance(value, bool):
        raise ValueError('Quantity is required')
    try:
        decimal_value = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError('Quantity must be a number')

    if not decimal_value.is_finite():
        raise ValueError('Quantity must be a number')
    if decimal_value < 0 or (decimal_value == 0 and not allow_zero):
        raise ValueError('Quantity must be a positive number' if not allow_zero else 'Quantity cannot be negative')
    return decimal_value


def parse_quantity_change(value) -> Decimal:
    """Parse a signed stock movement (e.g. -5 for spillage); zero is rejected."""
    if value is None or isinstance(value, bool):
        raise ValueError('quantity_change is required')
    try:
        decimal_value = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValueError('quantity_change must be a number')

    if not decimal_value.is_finite():
        raise ValueError('quantity_change must be a number')
    if decimal_value == 0:
        raise ValueError('quantity_change cannot be zero')
    return decimal_value
