"""Deterministic Safe address derivation (CREATE2)."""

from eth_utils import keccak, to_canonical_address, to_checksum_address

from ..config import SAFE_INIT_CODE_HASH, ZERO_ADDRESS
from ..encoding import abi_encode, checksum, to_bytes


def get_create2_address(deployer: str, salt: bytes, init_code_hash: str) -> str:
    """``keccak(0xff || deployer || salt || initCodeHash)[12:]``, checksummed."""
    raw = keccak(
        b"\xff"
        + to_canonical_address(checksum(deployer))
        + salt
        + to_bytes(init_code_hash)
    )
    return to_checksum_address(raw[12:])


def derive_safe_address(owner: str, safe_factory: str) -> str:
    """Address of the Safe owned by ``owner``, deployed or not.

    Args:
        owner: Owner EOA
        safe_factory: Safe proxy factory for the chain

    Returns:
        Checksummed Safe address (the zero address for a zero owner)
    """
    owner = checksum(owner)
    if owner == ZERO_ADDRESS:
        return ZERO_ADDRESS
    salt = keccak(abi_encode(["address"], [owner]))
    return get_create2_address(safe_factory, salt, SAFE_INIT_CODE_HASH)


__all__ = ["get_create2_address", "derive_safe_address"]
