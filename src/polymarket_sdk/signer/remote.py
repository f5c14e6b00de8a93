"""Signer that delegates to an external custodial signing service.

The service is an opaque capability: given a target account and a
base64-encoded 32-byte digest, it returns a 65-byte signature. Any
integration (Turnkey or an HSM gateway) can be plugged in by
implementing ``CustodialSigningBackend``.
"""

import base64
from typing import Protocol, Union

import structlog
from eth_utils import is_address, to_checksum_address

from ..encoding.utils import HexLike
from ..errors import (
    ConfigurationError,
    RemoteSigningError,
    SignatureError,
)
from .base import Signer, check_digest, normalize_signature


logger = structlog.get_logger("polymarket_sdk.signer.remote")


class CustodialSigningBackend(Protocol):
    """Protocol for a remote service that signs raw digests."""

    async def sign_raw_payload(
        self, sign_with: str, payload_b64: str
    ) -> Union[str, bytes]:
        """Sign a base64-encoded digest with the given account.

        Returns the 65-byte signature as bytes or a hex string.
        """
        ...


class RemoteCustodialSigner(Signer):
    """Signs digests through a ``CustodialSigningBackend``.

    The logical account identifier is the custodial wallet's address. Safe
    meta-transactions are only supported through this variant.
    """

    supports_safe_transactions = True

    def __init__(self, backend: CustodialSigningBackend, account: str):
        if backend is None:
            raise ConfigurationError("custodial signing backend is required")
        if not is_address(account):
            raise ConfigurationError(f"Invalid custodial account: {account}")
        self._backend = backend
        self._account = to_checksum_address(account)

    def __repr__(self) -> str:
        return f"RemoteCustodialSigner(account={self._account})"

    @property
    def address(self) -> str:
        return self._account

    async def sign_digest(self, digest: HexLike) -> bytes:
        payload = base64.b64encode(check_digest(digest)).decode("ascii")
        try:
            raw = await self._backend.sign_raw_payload(self._account, payload)
        except Exception as exc:
            logger.warning(
                "remote_signer.backend_failed", account=self._account, error=str(exc)
            )
            raise RemoteSigningError(
                f"custodial signing failed for {self._account}: {exc}"
            ) from exc

        if raw is None:
            raise SignatureError("custodial backend returned no signature")
        return normalize_signature(raw)


__all__ = ["CustodialSigningBackend", "RemoteCustodialSigner"]
