"""HMAC-SHA256 request signatures (L2 and builder proofs)."""

import base64
import binascii
import hashlib
import hmac
import re
from typing import Optional, Union


_URLSAFE_B64 = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def _decode_secret(secret: str) -> bytes:
    # Strict URL-safe base64 only; anything else keys the HMAC as raw bytes
    if len(secret) % 4 or not _URLSAFE_B64.fullmatch(secret):
        return secret.encode("utf-8")
    try:
        return base64.urlsafe_b64decode(secret)
    except binascii.Error:
        return secret.encode("utf-8")


def build_hmac_signature(
    secret: str,
    timestamp: Union[str, int],
    method: str,
    request_path: str,
    body: Optional[str] = None,
) -> str:
    """Sign ``timestamp + method + path + body`` with the credential secret.

    The body must be the exact string that will be sent.

    Args:
        secret: URL-safe base64 secret (raw bytes are used if it does not decode)
        timestamp: Unix seconds
        method: HTTP method
        request_path: Path without host, e.g. "/order"
        body: Serialized request body, if any

    Returns:
        URL-safe base64 signature
    """
    message = f"{timestamp}{method}{request_path}"
    if body:
        message += body

    digest = hmac.new(
        _decode_secret(secret), message.encode("utf-8"), hashlib.sha256
    ).digest()
    return base64.b64encode(digest).decode("ascii").replace("+", "-").replace("/", "_")


def verify_hmac_signature(
    secret: str,
    timestamp: Union[str, int],
    method: str,
    request_path: str,
    body: Optional[str],
    signature: str,
) -> bool:
    """Constant-time check of a signature produced by ``build_hmac_signature``."""
    expected = build_hmac_signature(secret, timestamp, method, request_path, body)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


__all__ = ["build_hmac_signature", "verify_hmac_signature"]
