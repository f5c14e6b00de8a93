"""Order Builder.

Computes rounded maker/taker amounts, assembles canonical exchange orders
and signs their EIP-712 digest.

Example usage:
    ```python
    from polymarket_sdk.config import get_contract_config
    from polymarket_sdk.orders import CreateOrderOptions, OrderArgs, OrderBuilder
    from polymarket_sdk.signer import LocalKeySigner

    builder = OrderBuilder(LocalKeySigner("0x..."), get_contract_config(137))
    signed = await builder.create_order(
        OrderArgs(token_id="1234", price="0.15", size="8", side="BUY"),
        CreateOrderOptions(tick_size="0.01", neg_risk=False),
    )
    ```
"""

from .builder import ORDER_STRUCT, OrderBuilder, generate_salt, resolve_fee_rate
from .payload import order_to_body, serialize_body
from .rounding import (
    DEFAULT_ROUNDING_PROFILES,
    decimal_places,
    fit_amount,
    get_market_order_amounts,
    get_order_amounts,
    parse_side,
    price_valid,
    round_down,
    round_normal,
    round_up,
    to_decimal,
    to_token_decimals,
)
from .types import (
    ORDER_TYPES,
    CanonicalOrder,
    CreateOrderOptions,
    MarketOrderArgs,
    OrderArgs,
    OrderType,
    RoundingProfile,
    Side,
    SignatureType,
    SignedOrder,
)

__all__ = [
    # Types
    "ORDER_TYPES",
    "CanonicalOrder",
    "CreateOrderOptions",
    "MarketOrderArgs",
    "OrderArgs",
    "OrderType",
    "RoundingProfile",
    "Side",
    "SignatureType",
    "SignedOrder",
    # Rounding
    "DEFAULT_ROUNDING_PROFILES",
    "decimal_places",
    "fit_amount",
    "get_market_order_amounts",
    "get_order_amounts",
    "parse_side",
    "price_valid",
    "round_down",
    "round_normal",
    "round_up",
    "to_decimal",
    "to_token_decimals",
    # Builder
    "ORDER_STRUCT",
    "OrderBuilder",
    "generate_salt",
    "resolve_fee_rate",
    # Payload
    "order_to_body",
    "serialize_body",
]
