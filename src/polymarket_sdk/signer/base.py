"""Signer interface shared by the local-key and remote-custodial variants."""

from abc import ABC, abstractmethod

from ..encoding import personal_message_hash, to_bytes
from ..encoding.utils import HexLike
from ..errors import STAGE_SIGNING, SignatureError, ValidationError


SIGNATURE_LENGTH = 65
DIGEST_LENGTH = 32


def check_digest(digest: HexLike) -> bytes:
    """Return the digest as bytes, requiring exactly 32 of them."""
    raw = to_bytes(digest)
    if len(raw) != DIGEST_LENGTH:
        raise ValidationError(
            f"Digest must be {DIGEST_LENGTH} bytes, got {len(raw)}", stage=STAGE_SIGNING
        )
    return raw


def normalize_signature(signature: HexLike) -> bytes:
    """Validate a raw r||s||v signature and map v to 27/28.

    Raises:
        SignatureError: If the signature is not 65 bytes or v is not 0, 1, 27 or 28
    """
    raw = to_bytes(signature)
    if len(raw) != SIGNATURE_LENGTH:
        raise SignatureError(f"invalid signature length: {len(raw)}")
    v = raw[64]
    if v in (0, 1):
        v += 27
    elif v not in (27, 28):
        raise SignatureError(f"invalid v: {v}")
    return raw[:64] + bytes([v])


class Signer(ABC):
    """Signs 32-byte digests on behalf of one account.

    Implementations return 65-byte ``r || s || v`` signatures with ``v`` in
    {27, 28}.
    """

    supports_safe_transactions: bool = False
    """Whether this signer may authorize Safe meta-transactions."""

    @property
    @abstractmethod
    def address(self) -> str:
        """Checksummed address of the signing account."""

    @abstractmethod
    async def sign_digest(self, digest: HexLike) -> bytes:
        """Sign a raw 32-byte digest."""

    async def sign_personal_digest(self, digest: HexLike) -> bytes:
        """Sign a 32-byte digest wrapped as an Ethereum personal message."""
        return await self.sign_digest(personal_message_hash(check_digest(digest)))


__all__ = [
    "SIGNATURE_LENGTH",
    "Signer",
    "check_digest",
    "normalize_signature",
]
