"""In-process signer backed by a private key."""

from eth_account import Account

from ..encoding.utils import HexLike
from ..errors import PreconditionError
from .base import Signer, check_digest, normalize_signature


class LocalKeySigner(Signer):
    """Signs digests with a private key held in memory.

    Example:
        ```python
        signer = LocalKeySigner("0x...")
        signature = await signer.sign_digest(digest)
        ```
    """

    def __init__(self, private_key: str):
        if not private_key:
            raise PreconditionError(
                "a private key is needed to interact with this endpoint!"
            )
        self._account = Account.from_key(private_key)

    def __repr__(self) -> str:
        return f"LocalKeySigner(address={self.address})"

    @property
    def address(self) -> str:
        return self._account.address

    async def sign_digest(self, digest: HexLike) -> bytes:
        signed = self._account.unsafe_sign_hash(check_digest(digest))
        return normalize_signature(bytes(signed.signature))


__all__ = ["LocalKeySigner"]
