"""Aggregation of several Safe calls into one ``multiSend(bytes)`` call."""

from typing import List, Sequence

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from ..encoding import (
    checksum,
    encode_function_call,
    encode_packed,
    function_selector,
    prepend_0x,
    to_bytes,
    to_hex,
)
from ..errors import STAGE_ENCODING, EncodingError, ValidationError
from .types import OperationType, SafeTransaction


MULTISEND_SIGNATURE = "multiSend(bytes)"


def _parse_value(value: str) -> int:
    if not str(value).isdigit():
        raise ValidationError(f"invalid value: {value}", stage=STAGE_ENCODING)
    return int(value)


def encode_multisend_payload(txns: Sequence[SafeTransaction]) -> bytes:
    """Tight-pack each call as ``operation || to || value || len(data) || data``."""
    parts = []
    for txn in txns:
        data = to_bytes(txn.data)
        parts.append(
            encode_packed(
                ["uint8", "address", "uint256", "uint256", "bytes"],
                [int(txn.operation), txn.to, _parse_value(txn.value), len(data), data],
            )
        )
    return b"".join(parts)


def create_safe_multisend_transaction(
    txns: Sequence[SafeTransaction], safe_multisend: str
) -> SafeTransaction:
    """Wrap calls in a DELEGATE_CALL to the chain's multisend contract."""
    payload = encode_multisend_payload(txns)
    return SafeTransaction(
        to=checksum(safe_multisend),
        operation=OperationType.DELEGATE_CALL,
        data=encode_function_call(MULTISEND_SIGNATURE, ["bytes"], [payload]),
        value="0",
    )


def aggregate_transaction(
    txns: Sequence[SafeTransaction], safe_multisend: str
) -> SafeTransaction:
    """Return a single call unchanged, or a multisend call for two or more.

    Raises:
        ValidationError: If ``txns`` is empty
    """
    if not txns:
        raise ValidationError("at least one transaction is required", stage=STAGE_ENCODING)
    if len(txns) == 1:
        return txns[0]
    return create_safe_multisend_transaction(txns, safe_multisend)


def decode_multisend_transaction(data: str) -> List[SafeTransaction]:
    """Split ``multiSend(bytes)`` call data back into its calls.

    Raises:
        EncodingError: If the data is not a well-formed multisend call
    """
    raw = to_bytes(data)
    if raw[:4] != function_selector(MULTISEND_SIGNATURE):
        raise EncodingError("not a multiSend(bytes) call")
    try:
        (payload,) = decode(["bytes"], raw[4:])
    except DecodingError as exc:
        raise EncodingError(f"malformed multisend call data: {exc}") from exc

    txns: List[SafeTransaction] = []
    offset = 0
    while offset < len(payload):
        if offset + 85 > len(payload):
            raise EncodingError("truncated multisend entry")
        operation = payload[offset]
        if operation not in (OperationType.CALL, OperationType.DELEGATE_CALL):
            raise EncodingError(f"invalid multisend operation: {operation}")
        to = payload[offset + 1 : offset + 21]
        value = int.from_bytes(payload[offset + 21 : offset + 53], "big")
        length = int.from_bytes(payload[offset + 53 : offset + 85], "big")
        offset += 85
        if offset + length > len(payload):
            raise EncodingError("truncated multisend entry data")
        txns.append(
            SafeTransaction(
                to=checksum(to_hex(to)),
                operation=OperationType(operation),
                data=prepend_0x(payload[offset : offset + length].hex()),
                value=str(value),
            )
        )
        offset += length
    return txns


__all__ = [
    "MULTISEND_SIGNATURE",
    "encode_multisend_payload",
    "create_safe_multisend_transaction",
    "aggregate_transaction",
    "decode_multisend_transaction",
]
