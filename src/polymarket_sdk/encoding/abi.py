"""Packed and 32-byte ABI encoding.

Two flavors are supported:

- ``encode_packed``: tight Solidity packing, no padding. Used for the Safe
  multisend payload and the packed Safe signature.
- ``abi_encode``: standard 32-byte-per-field encoding. Used for EIP-712
  struct hashing and contract call data.

Type tags are checked up front and fixed-width byte values must match
their declared width exactly. Nothing is silently truncated or padded.
"""

import re
from typing import Any, Sequence

from eth_abi import encode
from eth_abi.exceptions import ABITypeError, ParseError
from eth_abi.exceptions import EncodingError as AbiEncodingError
from eth_abi.packed import encode_packed as _eth_encode_packed
from eth_utils import keccak

from ..errors import EncodingError
from .utils import checksum, to_bytes, to_hex


_INT_RE = re.compile(r"^(u?)int(\d*)$")
_FIXED_BYTES_RE = re.compile(r"^bytes(\d+)$")


def _check_type(type_tag: str, allow_arrays: bool) -> str:
    base = type_tag
    if base.endswith("[]"):
        if not allow_arrays:
            raise EncodingError(f"Unsupported packed type: {type_tag}")
        base = base[:-2]

    if base in ("address", "bool", "string", "bytes"):
        return base

    match = _INT_RE.match(base)
    if match:
        bits = int(match.group(2) or 256)
        if bits % 8 or not 8 <= bits <= 256:
            raise EncodingError(f"Unsupported type: {type_tag}")
        return base

    match = _FIXED_BYTES_RE.match(base)
    if match:
        if not 1 <= int(match.group(1)) <= 32:
            raise EncodingError(f"Unsupported type: {type_tag}")
        return base

    raise EncodingError(f"Unsupported type: {type_tag}")


def _normalize(base: str, value: Any) -> Any:
    if base == "address":
        return checksum(value) if isinstance(value, str) else value

    if base == "bytes":
        return to_bytes(value)

    match = _FIXED_BYTES_RE.match(base)
    if match:
        raw = to_bytes(value)
        width = int(match.group(1))
        if len(raw) != width:
            raise EncodingError(f"{base} value has {len(raw)} bytes, expected {width}")
        return raw

    if _INT_RE.match(base) and isinstance(value, bool):
        raise EncodingError(f"Expected integer for {base}, got bool")

    return value


def _prepare(types: Sequence[str], values: Sequence[Any], allow_arrays: bool) -> list:
    if len(types) != len(values):
        raise EncodingError(
            f"Type/value count mismatch: {len(types)} types, {len(values)} values"
        )

    prepared = []
    for type_tag, value in zip(types, values):
        base = _check_type(type_tag, allow_arrays)
        if type_tag.endswith("[]"):
            prepared.append([_normalize(base, item) for item in value])
        else:
            prepared.append(_normalize(base, value))
    return prepared


def encode_packed(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """Encode values with Solidity's tight packing (``abi.encodePacked``).

    Args:
        types: Solidity type tags, e.g. ["uint8", "address", "uint256", "bytes"]
        values: Values matching the type tags

    Returns:
        Packed bytes

    Raises:
        EncodingError: On an unsupported tag or a value that does not fit
    """
    prepared = _prepare(types, values, allow_arrays=False)
    try:
        return _eth_encode_packed(list(types), prepared)
    except (AbiEncodingError, ParseError, ABITypeError) as exc:
        raise EncodingError(f"Packed encoding failed: {exc}") from exc


def abi_encode(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """Encode values with standard 32-byte ABI encoding (``abi.encode``).

    Raises:
        EncodingError: On an unsupported tag or a value that does not fit
    """
    prepared = _prepare(types, values, allow_arrays=True)
    try:
        return encode(list(types), prepared)
    except (AbiEncodingError, ParseError, ABITypeError) as exc:
        raise EncodingError(f"ABI encoding failed: {exc}") from exc


def function_selector(signature: str) -> bytes:
    """Return the 4-byte selector for a function signature like ``approve(address,uint256)``."""
    return keccak(text=signature)[:4]


def encode_function_call(
    signature: str, types: Sequence[str], values: Sequence[Any]
) -> str:
    """Build hex call data: selector followed by the ABI-encoded arguments.

    Args:
        signature: Canonical function signature, e.g. "transfer(address,uint256)"
        types: Argument type tags
        values: Argument values

    Returns:
        0x-prefixed call data
    """
    return to_hex(function_selector(signature) + abi_encode(types, values))


__all__ = [
    "encode_packed",
    "abi_encode",
    "function_selector",
    "encode_function_call",
]
