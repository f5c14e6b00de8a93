"""Error taxonomy for the Polymarket SDK.

Every error carries the ``stage`` that failed so callers can tell apart
"my input was invalid", "a dependency was unavailable" and "the server
rejected an otherwise well-formed request".

Local failures (precondition, validation, encoding) also subclass
``ValueError``. Remote failures do not.
"""

from typing import Any, Optional


# Stages
STAGE_CONFIGURATION = "configuration"
STAGE_ROUNDING = "rounding"
STAGE_ENCODING = "encoding"
STAGE_HASHING = "hashing"
STAGE_SIGNING = "signing"
STAGE_HEADERS = "headers"
STAGE_SUBMISSION = "submission"
STAGE_CHAIN_READ = "chain_read"


class PolymarketSDKError(Exception):
    """Base class for all SDK errors."""

    stage: str = "unknown"
    retryable: bool = False

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"[{self.stage}] {super().__str__()}"


class PreconditionError(PolymarketSDKError, ValueError):
    """A required input (signer, credential, chain, rounding profile) is missing."""

    stage = STAGE_CONFIGURATION


class ConfigurationError(PreconditionError):
    """The configuration is present but unusable (unknown chain, conflicting signers)."""


class UnsupportedSignerError(PreconditionError):
    """The configured signer variant cannot perform the requested flow."""

    stage = STAGE_SIGNING


class ValidationError(PolymarketSDKError, ValueError):
    """Caller-supplied input failed validation."""

    stage = STAGE_ROUNDING


class SignatureError(ValidationError):
    """A signature has the wrong length or recovery id."""

    stage = STAGE_SIGNING


class EncodingError(PolymarketSDKError, ValueError):
    """A value could not be encoded exactly as declared."""

    stage = STAGE_ENCODING


class RemoteError(PolymarketSDKError):
    """A remote dependency failed. Safe for the caller to retry."""

    stage = STAGE_SUBMISSION
    retryable = True


class RemoteSigningError(RemoteError):
    """The custodial signing backend failed."""

    stage = STAGE_SIGNING


class ChainReadError(RemoteError):
    """An on-chain read (nonce, allowance, approval) failed."""

    stage = STAGE_CHAIN_READ


class RelayerError(RemoteError):
    """The relayer could not be reached or returned garbage."""


class ServerRejectedError(RemoteError):
    """The server answered a well-formed request with an error status."""

    retryable = False

    def __init__(
        self,
        message: str,
        status_code: int,
        body: Any = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.status_code = status_code
        self.body = body


__all__ = [
    "STAGE_CONFIGURATION",
    "STAGE_ROUNDING",
    "STAGE_ENCODING",
    "STAGE_HASHING",
    "STAGE_SIGNING",
    "STAGE_HEADERS",
    "STAGE_SUBMISSION",
    "STAGE_CHAIN_READ",
    "PolymarketSDKError",
    "PreconditionError",
    "ConfigurationError",
    "UnsupportedSignerError",
    "ValidationError",
    "SignatureError",
    "EncodingError",
    "RemoteError",
    "RemoteSigningError",
    "ChainReadError",
    "RelayerError",
    "ServerRejectedError",
]
