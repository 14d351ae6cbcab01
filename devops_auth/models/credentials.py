"""
Domain models for credentials, tokens and the endpoints they belong to.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Optional
from urllib.parse import urlsplit

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

USERNAME_MAX_LENGTH = 511
SECRET_MAX_LENGTH = 2047

_SUPPORTED_SCHEMES = ("http", "https")


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Naive expiries are taken as UTC.
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class AuthenticationPreconditionError(ValueError):
    """Raised when an operation receives an argument it can never accept."""


class InvalidTargetError(AuthenticationPreconditionError):
    """Raised when a target endpoint is missing or structurally invalid."""


class InvalidCredentialError(AuthenticationPreconditionError):
    """Raised when a credential is missing or malformed."""


class InvalidOAuthResultError(AuthenticationPreconditionError):
    """Raised when an OAuth result is missing or of the wrong type."""


class TargetEndpoint(BaseModel):
    """Identity of a remote service instance, used as the key into every store."""

    model_config = ConfigDict(frozen=True)

    scheme: str
    host: str
    port: Optional[int] = None

    @classmethod
    def from_uri(cls, uri: str) -> "TargetEndpoint":
        """Parse an absolute http(s) URI, keeping only scheme, host and port."""
        if not isinstance(uri, str) or not uri.strip():
            raise InvalidTargetError("A target URI must be provided.")
        parts = urlsplit(uri.strip())
        try:
            port = parts.port
        except ValueError as exc:
            raise InvalidTargetError(f"Invalid port in target URI {uri!r}.") from exc
        endpoint = cls(
            scheme=parts.scheme.lower(),
            host=(parts.hostname or "").lower(),
            port=port,
        )
        validate_target(endpoint)
        return endpoint

    @property
    def authority(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None:
            return host
        return f"{host}:{self.port}"

    @property
    def uri(self) -> str:
        return f"{self.scheme}://{self.authority}"

    def target_name(self, prefix: str) -> str:
        """Key under which stores file values for this endpoint."""
        return f"{prefix}:{self.uri}"

    def __str__(self) -> str:
        return self.uri


class Credential(BaseModel):
    """A username/secret pair. Personal access tokens carry an empty username."""

    model_config = ConfigDict(frozen=True)

    username: str = ""
    secret: str = Field(..., repr=False)


class TokenKind(str, Enum):
    PERSONAL = "personal"
    REFRESH = "refresh"
    ACCESS = "access"


class Token(BaseModel):
    """A token value together with its expiry and the role it plays."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., repr=False)
    expires_on: UtcDatetime
    kind: TokenKind


class OAuthResult(BaseModel):
    """Outcome of an OAuth exchange performed by an interactive refresh flow."""

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(..., repr=False)
    access_token_type: str = "Bearer"
    refresh_token: str = Field(..., repr=False)
    expires_on: UtcDatetime


def validate_target(endpoint: Any) -> None:
    """Raise ``InvalidTargetError`` unless ``endpoint`` is a usable store key."""
    if not isinstance(endpoint, TargetEndpoint):
        raise InvalidTargetError(
            f"Expected a TargetEndpoint, received {type(endpoint).__name__}."
        )
    if endpoint.scheme not in _SUPPORTED_SCHEMES:
        raise InvalidTargetError(f"Unsupported target scheme {endpoint.scheme!r}.")
    if not endpoint.host or any(char.isspace() for char in endpoint.host):
        raise InvalidTargetError("Target endpoint is missing a valid host.")
    if endpoint.port is not None and not 0 < endpoint.port < 65536:
        raise InvalidTargetError(f"Target port {endpoint.port} is out of range.")


def validate_credential(credential: Any) -> None:
    """Raise ``InvalidCredentialError`` unless ``credential`` may be sent on the wire."""
    if not isinstance(credential, Credential):
        raise InvalidCredentialError(
            f"Expected a Credential, received {type(credential).__name__}."
        )
    if not credential.secret:
        raise InvalidCredentialError("Credential secret must not be empty.")
    if len(credential.username) > USERNAME_MAX_LENGTH:
        raise InvalidCredentialError(
            f"Credential username exceeds {USERNAME_MAX_LENGTH} characters."
        )
    if len(credential.secret) > SECRET_MAX_LENGTH:
        raise InvalidCredentialError(
            f"Credential secret exceeds {SECRET_MAX_LENGTH} characters."
        )


def validate_oauth_result(result: Any) -> None:
    if not isinstance(result, OAuthResult):
        raise InvalidOAuthResultError(
            f"Expected an OAuthResult, received {type(result).__name__}."
        )


__all__ = [
    "AuthenticationPreconditionError",
    "Credential",
    "InvalidCredentialError",
    "InvalidOAuthResultError",
    "InvalidTargetError",
    "OAuthResult",
    "SECRET_MAX_LENGTH",
    "TargetEndpoint",
    "Token",
    "TokenKind",
    "USERNAME_MAX_LENGTH",
    "validate_credential",
    "validate_oauth_result",
    "validate_target",
]
