"""Packed/structured encoding and EIP-712 hashing."""

from .abi import abi_encode, encode_function_call, encode_packed, function_selector
from .eip712 import (
    EIP712Domain,
    EIP712Struct,
    eip712_digest,
    hash_typed_data,
    personal_message_hash,
)
from .utils import checksum, prepend_0x, strip_0x, to_bytes, to_hex

__all__ = [
    # ABI
    "encode_packed",
    "abi_encode",
    "function_selector",
    "encode_function_call",
    # EIP-712
    "EIP712Domain",
    "EIP712Struct",
    "eip712_digest",
    "hash_typed_data",
    "personal_message_hash",
    # Utils
    "checksum",
    "prepend_0x",
    "strip_0x",
    "to_bytes",
    "to_hex",
]
