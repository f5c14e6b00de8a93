"""Hex and address helpers shared by the encoders."""

from typing import Union

from eth_utils import decode_hex, is_address, to_checksum_address

from ..errors import EncodingError


HexLike = Union[str, bytes]


def prepend_0x(value: str) -> str:
    """Add a 0x prefix if missing."""
    return value if value.startswith(("0x", "0X")) else "0x" + value


def strip_0x(value: str) -> str:
    """Remove a 0x prefix if present."""
    return value[2:] if value.startswith(("0x", "0X")) else value


def to_bytes(value: HexLike) -> bytes:
    """Convert a hex string (with or without 0x) or bytes to bytes.

    Raises:
        EncodingError: If the string is not valid hex
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if not isinstance(value, str):
        raise EncodingError(f"Expected hex string or bytes, got {type(value).__name__}")
    try:
        return decode_hex(prepend_0x(value))
    except ValueError as exc:
        raise EncodingError(f"Malformed hex: {value!r}") from exc


def to_hex(value: bytes) -> str:
    """Render bytes as a 0x-prefixed lowercase hex string."""
    return "0x" + bytes(value).hex()


def checksum(address: str) -> str:
    """Validate and checksum an address.

    Raises:
        EncodingError: If the address is invalid
    """
    if not isinstance(address, str) or not is_address(address):
        raise EncodingError(f"Invalid address: {address}")
    return to_checksum_address(address)


__all__ = [
    "HexLike",
    "prepend_0x",
    "strip_0x",
    "to_bytes",
    "to_hex",
    "checksum",
]
