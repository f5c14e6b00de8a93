"""Signer abstraction.

Two variants share one interface (``address``, ``sign_digest``,
``sign_personal_digest``):

- ``LocalKeySigner`` signs in-process with a private key
- ``RemoteCustodialSigner`` signs through an external custodial backend
"""

from .base import SIGNATURE_LENGTH, Signer, check_digest, normalize_signature
from .factory import signer_from_settings
from .local import LocalKeySigner
from .remote import CustodialSigningBackend, RemoteCustodialSigner

__all__ = [
    "SIGNATURE_LENGTH",
    "Signer",
    "check_digest",
    "normalize_signature",
    "LocalKeySigner",
    "RemoteCustodialSigner",
    "CustodialSigningBackend",
    "signer_from_settings",
]
