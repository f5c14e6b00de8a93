"""Request authentication headers.

Three proofs are supported:

- L1: an EIP-712 ``ClobAuth`` signature, used only to create or derive the
  API credential
- L2: an HMAC over the exact request, used for trading calls
- Builder: a second HMAC with a separate credential, layered on L2 to
  attribute the request to an integrating application
"""

import time
from typing import Dict, Optional

from ..encoding import EIP712Domain, EIP712Struct, eip712_digest, to_hex
from ..errors import STAGE_HEADERS, PreconditionError
from ..signer import Signer
from .credentials import ApiKeyCredential, BuilderCredential
from .hmac_signature import build_hmac_signature


CLOB_AUTH_DOMAIN_NAME = "ClobAuthDomain"
CLOB_AUTH_VERSION = "1"
CLOB_AUTH_MESSAGE = "This message attests that I control the given wallet"

L1_AUTH_UNAVAILABLE = "a private key is needed to interact with this endpoint!"
L2_AUTH_UNAVAILABLE = "API Credentials are needed to interact with this endpoint!"
BUILDER_AUTH_UNAVAILABLE = "builder API Credentials needed to interact with this endpoint!"

# Header names
POLY_ADDRESS = "POLY_ADDRESS"
POLY_SIGNATURE = "POLY_SIGNATURE"
POLY_TIMESTAMP = "POLY_TIMESTAMP"
POLY_NONCE = "POLY_NONCE"
POLY_API_KEY = "POLY_API_KEY"
POLY_PASSPHRASE = "POLY_PASSPHRASE"
POLY_BUILDER_API_KEY = "POLY_BUILDER_API_KEY"
POLY_BUILDER_TIMESTAMP = "POLY_BUILDER_TIMESTAMP"
POLY_BUILDER_PASSPHRASE = "POLY_BUILDER_PASSPHRASE"
POLY_BUILDER_SIGNATURE = "POLY_BUILDER_SIGNATURE"

CLOB_AUTH_TYPES = {
    "ClobAuth": [
        {"name": "address", "type": "address"},
        {"name": "timestamp", "type": "string"},
        {"name": "nonce", "type": "uint256"},
        {"name": "message", "type": "string"},
    ]
}

CLOB_AUTH_STRUCT = EIP712Struct.from_types("ClobAuth", CLOB_AUTH_TYPES["ClobAuth"])


def _now() -> str:
    return str(int(time.time()))


def build_clob_auth_digest(
    address: str, chain_id: int, timestamp: str, nonce: int = 0
) -> bytes:
    """EIP-712 digest of the ClobAuth attestation.

    Args:
        address: Signing wallet address
        chain_id: Chain ID bound into the domain
        timestamp: Unix seconds as a string (hashed as a string)
        nonce: Credential nonce (default: 0)
    """
    domain = EIP712Domain(
        name=CLOB_AUTH_DOMAIN_NAME, version=CLOB_AUTH_VERSION, chain_id=chain_id
    )
    struct_hash = CLOB_AUTH_STRUCT.hash_struct(
        {
            "address": address,
            "timestamp": str(timestamp),
            "nonce": nonce,
            "message": CLOB_AUTH_MESSAGE,
        }
    )
    return eip712_digest(domain.separator(), struct_hash)


async def create_l1_headers(
    signer: Optional[Signer],
    chain_id: int,
    nonce: Optional[int] = None,
    timestamp: Optional[str] = None,
) -> Dict[str, str]:
    """Build wallet-signature headers for API credential bootstrap.

    Raises:
        PreconditionError: If no signer is configured
    """
    if signer is None:
        raise PreconditionError(L1_AUTH_UNAVAILABLE, stage=STAGE_HEADERS)

    ts = str(timestamp) if timestamp is not None else _now()
    nonce = nonce or 0
    digest = build_clob_auth_digest(signer.address, chain_id, ts, nonce)
    signature = await signer.sign_digest(digest)

    return {
        POLY_ADDRESS: signer.address,
        POLY_SIGNATURE: to_hex(signature),
        POLY_TIMESTAMP: ts,
        POLY_NONCE: str(nonce),
    }


def create_l2_headers(
    address: str,
    creds: Optional[ApiKeyCredential],
    method: str,
    request_path: str,
    body: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> Dict[str, str]:
    """Build HMAC headers for a trading request.

    Raises:
        PreconditionError: If the credential is missing or incomplete
    """
    if creds is None or not creds.is_valid():
        raise PreconditionError(L2_AUTH_UNAVAILABLE, stage=STAGE_HEADERS)

    ts = str(timestamp) if timestamp is not None else _now()
    signature = build_hmac_signature(creds.secret, ts, method, request_path, body)

    return {
        POLY_ADDRESS: address,
        POLY_SIGNATURE: signature,
        POLY_TIMESTAMP: ts,
        POLY_API_KEY: creds.key,
        POLY_PASSPHRASE: creds.passphrase,
    }


def create_builder_headers(
    creds: Optional[BuilderCredential],
    method: str,
    request_path: str,
    body: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> Dict[str, str]:
    """Build builder-attribution headers. Their timestamp is independent of L2.

    Raises:
        PreconditionError: If the builder credential is missing or incomplete
    """
    if creds is None or not creds.is_valid():
        raise PreconditionError(BUILDER_AUTH_UNAVAILABLE, stage=STAGE_HEADERS)

    ts = str(timestamp) if timestamp is not None else _now()
    signature = build_hmac_signature(creds.secret, ts, method, request_path, body)

    return {
        POLY_BUILDER_API_KEY: creds.key,
        POLY_BUILDER_TIMESTAMP: ts,
        POLY_BUILDER_PASSPHRASE: creds.passphrase,
        POLY_BUILDER_SIGNATURE: signature,
    }


def inject_builder_headers(
    l2_headers: Dict[str, str], builder_headers: Dict[str, str]
) -> Dict[str, str]:
    """Return L2 headers with builder headers layered on top."""
    return {**l2_headers, **builder_headers}


__all__ = [
    "CLOB_AUTH_DOMAIN_NAME",
    "CLOB_AUTH_MESSAGE",
    "CLOB_AUTH_TYPES",
    "CLOB_AUTH_STRUCT",
    "L1_AUTH_UNAVAILABLE",
    "L2_AUTH_UNAVAILABLE",
    "BUILDER_AUTH_UNAVAILABLE",
    "POLY_ADDRESS",
    "POLY_SIGNATURE",
    "POLY_TIMESTAMP",
    "POLY_NONCE",
    "POLY_API_KEY",
    "POLY_PASSPHRASE",
    "POLY_BUILDER_API_KEY",
    "POLY_BUILDER_TIMESTAMP",
    "POLY_BUILDER_PASSPHRASE",
    "POLY_BUILDER_SIGNATURE",
    "build_clob_auth_digest",
    "create_l1_headers",
    "create_l2_headers",
    "create_builder_headers",
    "inject_builder_headers",
]
