"""Select the signer variant for an account from configuration."""

from typing import TYPE_CHECKING, Optional

from ..errors import ConfigurationError, PreconditionError
from .base import Signer
from .local import LocalKeySigner
from .remote import CustodialSigningBackend, RemoteCustodialSigner

if TYPE_CHECKING:
    from ..settings import Settings


def signer_from_settings(
    settings: "Settings", backend: Optional[CustodialSigningBackend] = None
) -> Signer:
    """Build the signer described by ``settings``.

    Exactly one of ``private_key`` or ``custodial_account`` must be set. A
    custodial account also needs a ``backend``.

    Raises:
        ConfigurationError: If both variants are configured
        PreconditionError: If no usable signer is configured
    """
    if settings.private_key and settings.custodial_account:
        raise ConfigurationError(
            "Configure either private_key or custodial_account, not both"
        )
    if settings.private_key:
        return LocalKeySigner(settings.private_key)
    if settings.custodial_account:
        if backend is None:
            raise PreconditionError(
                "custodial_account is set but no signing backend was provided"
            )
        return RemoteCustodialSigner(backend, settings.custodial_account)
    raise PreconditionError("a private key is needed to interact with this endpoint!")


__all__ = ["signer_from_settings"]
