"""Authentication Header Builder."""

from .credentials import ApiKeyCredential, BuilderCredential
from .headers import (
    BUILDER_AUTH_UNAVAILABLE,
    CLOB_AUTH_MESSAGE,
    CLOB_AUTH_TYPES,
    L1_AUTH_UNAVAILABLE,
    L2_AUTH_UNAVAILABLE,
    build_clob_auth_digest,
    create_builder_headers,
    create_l1_headers,
    create_l2_headers,
    inject_builder_headers,
)
from .hmac_signature import build_hmac_signature, verify_hmac_signature

__all__ = [
    # Credentials
    "ApiKeyCredential",
    "BuilderCredential",
    # HMAC
    "build_hmac_signature",
    "verify_hmac_signature",
    # Headers
    "BUILDER_AUTH_UNAVAILABLE",
    "CLOB_AUTH_MESSAGE",
    "CLOB_AUTH_TYPES",
    "L1_AUTH_UNAVAILABLE",
    "L2_AUTH_UNAVAILABLE",
    "build_clob_auth_digest",
    "create_builder_headers",
    "create_l1_headers",
    "create_l2_headers",
    "inject_builder_headers",
]
