"""
Utility functions for the NexCart commerce backend
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any

from django.conf import settings

from .exceptions import ValidationException

CENTS = Decimal("0.01")


def to_money(value: Any, field: str = "amount", quantize: bool = True) -> Decimal:
    """
    Coerce a client or database value to a 2-place Decimal.
    With ``quantize=False`` the parsed value is returned as given.
    Floats go through str() so 1060.0 becomes Decimal('1060.00'), not a binary artefact.
    """
    if isinstance(value, Decimal):
        amount = value
    else:
        try:
            amount = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationException(f"Invalid monetary value for {field}: {value!r}", field=field)
    if not amount.is_finite():
        raise ValidationException(f"Invalid monetary value for {field}: {value!r}", field=field)
    if not quantize:
        return amount
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(amount: Decimal, currency: str = None) -> str:
    currency = currency or getattr(settings, "CURRENCY", "BDT")
    return f"{to_money(amount):,.2f} {currency}"
