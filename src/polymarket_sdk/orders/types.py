"""Order Types for the CTF Exchange.

User-facing trade intents plus the canonical and signed order records.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union

from ..config import ZERO_ADDRESS


Number = Union[Decimal, int, float, str]


class Side(str, Enum):
    """Order side."""

    BUY = "BUY"
    SELL = "SELL"

    @property
    def index(self) -> int:
        """Contract encoding: 0 for BUY, 1 for SELL."""
        return 0 if self is Side.BUY else 1


class SignatureType(IntEnum):
    """How the exchange verifies the order signature."""

    EOA = 0
    POLY_PROXY = 1
    POLY_GNOSIS_SAFE = 2


class OrderType(str, Enum):
    """Time-in-force accepted by the order endpoint."""

    GTC = "GTC"
    FOK = "FOK"
    GTD = "GTD"
    FAK = "FAK"


@dataclass(frozen=True)
class RoundingProfile:
    """Decimal precision used for a market's tick size."""

    price: int
    """Decimal places for the price."""

    size: int
    """Decimal places for sizes and collateral amounts."""

    amount: int
    """Decimal places allowed for the derived (multiplied/divided) amount."""


@dataclass(frozen=True)
class OrderArgs:
    """A limit order intent. ``size`` is in outcome-token units."""

    token_id: str
    """Conditional token ID (decimal string)."""

    price: Number
    """Price from 0.00 to 1.00."""

    size: Number
    """Number of outcome tokens."""

    side: Union[Side, str]
    """BUY or SELL."""

    fee_rate_bps: int = 0
    """Fee rate in basis points. Must match the market's fee rate if both are non-zero."""

    nonce: int = 0
    """Exchange nonce, used for on-chain cancellation."""

    expiration: int = 0
    """Unix timestamp after which the order expires. 0 means never."""

    taker: str = ZERO_ADDRESS
    """Counterparty address. Zero means any taker."""


@dataclass(frozen=True)
class MarketOrderArgs:
    """A market order intent.

    For BUY, ``amount`` is in collateral units. For SELL it is in
    outcome-token units.
    """

    token_id: str
    amount: Number
    side: Union[Side, str]
    price: Number
    fee_rate_bps: int = 0
    nonce: int = 0
    taker: str = ZERO_ADDRESS
    order_type: OrderType = OrderType.FOK


@dataclass(frozen=True)
class CreateOrderOptions:
    """Market parameters. Missing values are fetched from the CLOB by the client."""

    tick_size: Optional[str] = None
    neg_risk: Optional[bool] = None


# EIP-712 type definitions for the exchange Order struct
ORDER_TYPES = {
    "Order": [
        {"name": "salt", "type": "uint256"},
        {"name": "maker", "type": "address"},
        {"name": "signer", "type": "address"},
        {"name": "taker", "type": "address"},
        {"name": "tokenId", "type": "uint256"},
        {"name": "makerAmount", "type": "uint256"},
        {"name": "takerAmount", "type": "uint256"},
        {"name": "expiration", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
        {"name": "feeRateBps", "type": "uint256"},
        {"name": "side", "type": "uint8"},
        {"name": "signatureType", "type": "uint8"},
    ]
}


@dataclass(frozen=True)
class CanonicalOrder:
    """The exact record hashed and verified by the exchange contract."""

    salt: int
    maker: str
    signer: str
    taker: str
    token_id: int
    maker_amount: int
    taker_amount: int
    expiration: int
    nonce: int
    fee_rate_bps: int
    side: int
    signature_type: int

    def message(self) -> Dict[str, Any]:
        """Field values keyed by their EIP-712 names."""
        return {
            "salt": self.salt,
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": self.maker_amount,
            "takerAmount": self.taker_amount,
            "expiration": self.expiration,
            "nonce": self.nonce,
            "feeRateBps": self.fee_rate_bps,
            "side": self.side,
            "signatureType": self.signature_type,
        }


@dataclass(frozen=True)
class SignedOrder(CanonicalOrder):
    """Canonical order with its signature."""

    signature: str = field(default="")
    """EIP-712 signature (65 bytes, 0x-prefixed hex)."""

    @property
    def side_label(self) -> str:
        return Side.BUY.value if self.side == 0 else Side.SELL.value

    def to_dict(self) -> Dict[str, Any]:
        """Order payload in the order endpoint's wire format."""
        return {
            "salt": self.salt,
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": str(self.token_id),
            "makerAmount": str(self.maker_amount),
            "takerAmount": str(self.taker_amount),
            "expiration": str(self.expiration),
            "nonce": str(self.nonce),
            "feeRateBps": str(self.fee_rate_bps),
            "side": self.side_label,
            "signatureType": self.signature_type,
            "signature": self.signature,
        }


__all__ = [
    "Number",
    "Side",
    "SignatureType",
    "OrderType",
    "RoundingProfile",
    "OrderArgs",
    "MarketOrderArgs",
    "CreateOrderOptions",
    "ORDER_TYPES",
    "CanonicalOrder",
    "SignedOrder",
]
