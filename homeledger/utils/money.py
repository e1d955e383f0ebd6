"""Decimal money and point helpers.

All cash values inside the ledger are ``Decimal``. Floats are only accepted at
the boundary and are converted through ``str()`` so ``10.07`` stays ``10.07``.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from homeledger.config import config
from homeledger.errors import InvalidAmount

Number = Union[Decimal, int, float, str]

# Cash amounts must stay below 10**16, point counts at or below 10**15.
MAX_AMOUNT_EXPONENT = 15
MAX_POINTS = 10 ** 15


def to_decimal(value: Number, field: str = "amount") -> Decimal:
    """Convert user input to a finite Decimal.
    
    Args:
        value: Decimal, int, float or numeric string.
        field: Name used in the error message.
        
    Returns:
        The value as a Decimal.
        
    Raises:
        InvalidAmount: If the value is not a finite number or is too large.
    """
    if isinstance(value, bool):
        raise InvalidAmount(f"{field} must be a number")
    try:
        if isinstance(value, Decimal):
            result = value
        elif isinstance(value, float):
            result = Decimal(str(value))
        elif isinstance(value, (int, str)):
            result = Decimal(str(value).strip())
        else:
            raise InvalidAmount(f"{field} must be a number")
    except InvalidOperation:
        raise InvalidAmount(f"{field} must be a number, got {value!r}") from None
    
    if not result.is_finite():
        raise InvalidAmount(f"{field} must be a finite number")
    if result and result.adjusted() > MAX_AMOUNT_EXPONENT:
        raise InvalidAmount(f"{field} is too large")
    return result


def to_points(value, field: str = "points") -> int:
    """Validate an integer point count.
    
    Raises:
        InvalidAmount: If the value is not an integer, is negative or is too large.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{field} must be a whole number of points")
    if value < 0:
        raise InvalidAmount(f"{field} cannot be negative")
    if value > MAX_POINTS:
        raise InvalidAmount(f"{field} is too large")
    return value


def points_from_cash(amount: Decimal, rate: Decimal) -> int:
    """Points bought by a cash amount; always rounds down.

    Uses integer division so the quotient is never rounded to the context
    precision before flooring.

    Raises:
        InvalidAmount: If the point count does not fit the context precision.
    """
    try:
        whole, remainder = divmod(amount, rate)
    except InvalidOperation:
        raise InvalidAmount("amount is too large for the point rate") from None
    # Decimal divmod truncates toward zero
    if remainder and (amount < 0) != (rate < 0):
        whole -= 1
    return int(whole)


def cash_from_points(points: int, rate: Decimal) -> Decimal:
    """Exact cash value of a point count."""
    return rate * points


def currency_quantum(places: Optional[int] = None) -> Decimal:
    """Smallest representable currency unit, e.g. ``0.01``."""
    places = config.currency_places if places is None else places
    return Decimal(1).scaleb(-places)


def round_currency(amount: Number, places: Optional[int] = None) -> Decimal:
    """Round half-up to the currency precision."""
    return to_decimal(amount).quantize(currency_quantum(places), rounding=ROUND_HALF_UP)


def format_currency(
    amount: Number,
    symbol: Optional[str] = None,
    places: Optional[int] = None,
) -> str:
    """Format an amount for display, e.g. ``$40.00`` or ``-$5.50``."""
    symbol = config.currency_symbol if symbol is None else symbol
    value = round_currency(amount, places)
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,}"


def format_duration(seconds: float) -> str:
    """Format a duration as ``1h 2m 3s``, ``2m 3s`` or ``3s``."""
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    
    if hours > 0:
        return f"{hours}h {minutes}m {secs}s"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
