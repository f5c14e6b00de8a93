"""Order submission body.

The body is serialized once. The same string is hashed for the L2 header
and sent on the wire.
"""

import json
from typing import Any, Dict, Union

from .types import OrderType, SignedOrder


def order_to_body(
    order: SignedOrder, owner: str, order_type: Union[OrderType, str] = OrderType.GTC
) -> Dict[str, Any]:
    """Wrap a signed order in the order endpoint's request shape.

    Args:
        order: Signed order
        owner: API key of the trading credential
        order_type: Time-in-force (GTC, FOK, GTD, FAK)
    """
    return {
        "order": order.to_dict(),
        "owner": owner,
        "orderType": OrderType(order_type).value,
    }


def serialize_body(body: Any) -> str:
    """Compact JSON rendering used for both signing and sending."""
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False)


__all__ = ["order_to_body", "serialize_body"]
