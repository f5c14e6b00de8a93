"""Safe Meta-Transaction Types.

Value objects exchanged with the relayer.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Optional

from ..config import ZERO_ADDRESS


class OperationType(IntEnum):
    """Safe call operation."""

    CALL = 0
    DELEGATE_CALL = 1


class TransactionType(str, Enum):
    """Relayer submission type."""

    SAFE = "SAFE"
    SAFE_CREATE = "SAFE-CREATE"


class RelayerTransactionState(str, Enum):
    """Lifecycle states reported by the relayer."""

    STATE_NEW = "STATE_NEW"
    STATE_EXECUTED = "STATE_EXECUTED"
    STATE_MINED = "STATE_MINED"
    STATE_INVALID = "STATE_INVALID"
    STATE_CONFIRMED = "STATE_CONFIRMED"
    STATE_FAILED = "STATE_FAILED"


@dataclass(frozen=True)
class SafeTransaction:
    """A single call to be executed by the Safe."""

    to: str
    """Target contract."""

    data: str
    """Call data (0x-prefixed hex)."""

    operation: OperationType = OperationType.CALL
    """CALL or DELEGATE_CALL."""

    value: str = "0"
    """Native token value in wei (decimal string)."""


@dataclass(frozen=True)
class SafeTransactionArgs:
    """Inputs for a Safe execution request."""

    from_address: str
    """Owner (signer) address of the Safe."""

    nonce: int
    """Current on-chain Safe nonce."""

    chain_id: int
    transactions: List[SafeTransaction]


@dataclass(frozen=True)
class SafeCreateTransactionArgs:
    """Inputs for a Safe deployment request."""

    from_address: str
    chain_id: int
    payment_token: str = ZERO_ADDRESS
    payment: str = "0"
    payment_receiver: str = ZERO_ADDRESS


@dataclass(frozen=True)
class SignatureParams:
    """Type-specific parameters sent next to the signature."""

    gas_price: Optional[str] = None
    operation: Optional[str] = None
    safe_txn_gas: Optional[str] = None
    base_gas: Optional[str] = None
    gas_token: Optional[str] = None
    refund_receiver: Optional[str] = None
    payment_token: Optional[str] = None
    payment: Optional[str] = None
    payment_receiver: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        fields = {
            "gasPrice": self.gas_price,
            "operation": self.operation,
            "safeTxnGas": self.safe_txn_gas,
            "baseGas": self.base_gas,
            "gasToken": self.gas_token,
            "refundReceiver": self.refund_receiver,
            "paymentToken": self.payment_token,
            "payment": self.payment,
            "paymentReceiver": self.payment_receiver,
        }
        return {key: value for key, value in fields.items() if value is not None}


@dataclass(frozen=True)
class TransactionRequest:
    """Relayer-facing envelope. One request is one relayer submission."""

    type: TransactionType
    from_address: str
    to: str
    proxy_wallet: str
    data: str
    signature: str
    signature_params: Optional[SignatureParams] = None
    value: Optional[str] = None
    nonce: Optional[str] = None
    metadata: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": self.type.value,
            "from": self.from_address,
            "to": self.to,
            "proxyWallet": self.proxy_wallet,
            "data": self.data,
            "signature": self.signature,
        }
        if self.signature_params is not None:
            body["signatureParams"] = self.signature_params.to_dict()
        for key in ("value", "nonce", "metadata"):
            if getattr(self, key) is not None:
                body[key] = getattr(self, key)
        return body


@dataclass(frozen=True)
class RelayerTransactionResponse:
    """Relayer acknowledgement of a submission."""

    transaction_id: str = ""
    transaction_hash: str = ""
    state: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "RelayerTransactionResponse":
        return cls(
            transaction_id=data.get("transactionID", ""),
            transaction_hash=data.get("transactionHash", ""),
            state=data.get("state"),
            raw=data,
        )


__all__ = [
    "OperationType",
    "TransactionType",
    "RelayerTransactionState",
    "SafeTransaction",
    "SafeTransactionArgs",
    "SafeCreateTransactionArgs",
    "SignatureParams",
    "TransactionRequest",
    "RelayerTransactionResponse",
]
