"""API credential types."""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ApiKeyCredential:
    """Long-lived trading credential obtained through the L1 flow."""

    key: str
    """API key (sent as POLY_API_KEY and as the order ``owner``)."""

    secret: str
    """URL-safe base64 HMAC secret."""

    passphrase: str
    """Passphrase (sent as POLY_PASSPHRASE)."""

    def __repr__(self) -> str:
        return f"ApiKeyCredential(key={self.key!r})"

    def is_valid(self) -> bool:
        return bool(self.key and self.secret and self.passphrase)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ApiKeyCredential":
        """Parse the CLOB's ``{"apiKey", "secret", "passphrase"}`` response."""
        return cls(
            key=data["apiKey"],
            secret=data["secret"],
            passphrase=data["passphrase"],
        )


@dataclass(frozen=True)
class BuilderCredential:
    """Credential that attributes order flow to an integrating application."""

    key: str
    secret: str
    passphrase: str

    def __repr__(self) -> str:
        return f"BuilderCredential(key={self.key!r})"

    def is_valid(self) -> bool:
        return bool(self.key and self.secret and self.passphrase)


__all__ = ["ApiKeyCredential", "BuilderCredential"]
