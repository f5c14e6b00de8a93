"""Price and amount rounding for orders.

All arithmetic uses ``Decimal``. Floats are converted through ``str`` so
that 0.15 means 0.15 and not its binary approximation.
"""

from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from types import MappingProxyType
from typing import Mapping, Tuple

from ..config import USDC_DECIMALS
from ..errors import ValidationError
from .types import Number, RoundingProfile, Side


# Tick size -> precision. Overridable per OrderBuilder.
DEFAULT_ROUNDING_PROFILES: Mapping[str, RoundingProfile] = MappingProxyType(
    {
        "0.1": RoundingProfile(price=1, size=2, amount=3),
        "0.01": RoundingProfile(price=2, size=2, amount=4),
        "0.001": RoundingProfile(price=3, size=2, amount=5),
        "0.0001": RoundingProfile(price=4, size=2, amount=6),
    }
)

_TOKEN_MULTIPLIER = Decimal(10) ** USDC_DECIMALS


def to_decimal(value: Number, name: str = "value") -> Decimal:
    """Convert a number to Decimal, rejecting NaN, infinity and garbage."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric, got bool")
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from exc
    if not result.is_finite():
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return result


def _quantum(digits: int) -> Decimal:
    return Decimal(1).scaleb(-digits)


def round_normal(x: Decimal, digits: int) -> Decimal:
    """Round half-up to ``digits`` decimal places."""
    return x.quantize(_quantum(digits), rounding=ROUND_HALF_UP)


def round_down(x: Decimal, digits: int) -> Decimal:
    """Round toward negative infinity at ``digits`` decimal places."""
    return x.quantize(_quantum(digits), rounding=ROUND_FLOOR)


def round_up(x: Decimal, digits: int) -> Decimal:
    """Round toward positive infinity at ``digits`` decimal places."""
    return x.quantize(_quantum(digits), rounding=ROUND_CEILING)


def decimal_places(x: Decimal) -> int:
    """Number of significant digits after the decimal point (0.150 -> 2)."""
    exponent = x.normalize().as_tuple().exponent
    return max(0, -exponent) if isinstance(exponent, int) else 0


def to_token_decimals(x: Decimal) -> int:
    """Convert a collateral/token amount to 6-decimal base units.

    Any fraction left after scaling is rounded half-up, never truncated.
    """
    scaled = x * _TOKEN_MULTIPLIER
    if decimal_places(scaled) > 0:
        scaled = round_normal(scaled, 0)
    return int(scaled)


def fit_amount(x: Decimal, amount_decimals: int) -> Decimal:
    """Bring a derived amount within ``amount_decimals`` places.

    Rounds up to ``amount_decimals + 4`` first and only truncates to
    ``amount_decimals`` if that is still too long.
    """
    if decimal_places(x) > amount_decimals:
        x = round_up(x, amount_decimals + 4)
        if decimal_places(x) > amount_decimals:
            x = round_down(x, amount_decimals)
    return x


def parse_side(side) -> Side:
    """Accept a Side or "BUY"/"SELL" (any case)."""
    if isinstance(side, Side):
        return side
    if isinstance(side, str) and side.upper() in (Side.BUY.value, Side.SELL.value):
        return Side(side.upper())
    raise ValidationError(f"invalid side: must be BUY or SELL, got {side!r}")


def get_order_amounts(
    side, size: Number, price: Number, profile: RoundingProfile
) -> Tuple[int, int, int]:
    """Compute maker/taker base units for a limit order.

    Args:
        side: BUY or SELL
        size: Outcome-token size
        price: Limit price
        profile: Rounding profile for the market's tick size

    Returns:
        (side index, maker amount, taker amount) in base units

    Raises:
        ValidationError: If side or numbers are invalid
    """
    side = parse_side(side)
    rounded_price = round_normal(to_decimal(price, "price"), profile.price)
    size_dec = to_decimal(size, "size")

    if side is Side.BUY:
        taker = round_down(size_dec, profile.size)
        maker = fit_amount(taker * rounded_price, profile.amount)
    else:
        maker = round_down(size_dec, profile.size)
        taker = fit_amount(maker * rounded_price, profile.amount)

    return side.index, to_token_decimals(maker), to_token_decimals(taker)


def get_market_order_amounts(
    side, amount: Number, price: Number, profile: RoundingProfile
) -> Tuple[int, int, int]:
    """Compute maker/taker base units for a market order.

    For BUY, ``amount`` is collateral and the taker side is
    ``amount / price``. For SELL, ``amount`` is outcome tokens and the taker
    side is ``amount * price``.

    Raises:
        ValidationError: If side is invalid or a BUY price rounds to zero
    """
    side = parse_side(side)
    rounded_price = round_normal(to_decimal(price, "price"), profile.price)
    maker = round_down(to_decimal(amount, "amount"), profile.size)

    if side is Side.BUY:
        if rounded_price == 0:
            raise ValidationError("price cannot be 0")
        taker = fit_amount(maker / rounded_price, profile.amount)
    else:
        taker = fit_amount(maker * rounded_price, profile.amount)

    return side.index, to_token_decimals(maker), to_token_decimals(taker)


def price_valid(price: Number, tick_size: Number) -> bool:
    """True if ``tick_size <= price <= 1 - tick_size``."""
    price_dec = to_decimal(price, "price")
    tick = to_decimal(tick_size, "tick_size")
    return tick <= price_dec <= 1 - tick


__all__ = [
    "DEFAULT_ROUNDING_PROFILES",
    "to_decimal",
    "round_normal",
    "round_down",
    "round_up",
    "decimal_places",
    "to_token_decimals",
    "fit_amount",
    "parse_side",
    "get_order_amounts",
    "get_market_order_amounts",
    "price_valid",
]
