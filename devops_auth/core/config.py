"""
Configuration models and helpers.

Centralizes settings management so the authentication service, the stores and
any host CLI share a consistent configuration surface. Every value can be
provided through ``DEVOPS_AUTH_*`` environment variables or a ``.env`` file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_CLIENT_ID = "872cd9fa-d31f-45e0-9eab-6e460a02d1f1"
DEFAULT_RESOURCE = "499b84ac-1321-427f-aa17-267ca6975798"
DEFAULT_PROFILE_URL = (
    "https://app.vssps.visualstudio.com/_apis/profile/profiles/me?api-version=1.0"
)
DEFAULT_SESSION_TOKEN_URL = (
    "https://app.vssps.visualstudio.com/_apis/token/sessiontokens"
    "?api-version=1.0&tokentype=compact"
)


class AuthoritySettings(BaseSettings):
    """Identity of the OAuth authority used by interactive refresh flows."""

    model_config = SettingsConfigDict(
        env_prefix="DEVOPS_AUTH_", env_file=".env", extra="ignore"
    )

    authority_host_url: AnyHttpUrl = Field(
        "https://login.microsoftonline.com/common",
        description="Authority that issues OAuth access and refresh tokens.",
    )
    client_id: str = DEFAULT_CLIENT_ID
    resource: str = DEFAULT_RESOURCE


class ServiceSettings(BaseSettings):
    """Endpoints of the remote DevOps service."""

    model_config = SettingsConfigDict(
        env_prefix="DEVOPS_AUTH_", env_file=".env", extra="ignore"
    )

    profile_url: AnyHttpUrl = Field(
        DEFAULT_PROFILE_URL,
        description="Profile endpoint called to validate a credential.",
    )
    session_token_url: AnyHttpUrl = Field(
        DEFAULT_SESSION_TOKEN_URL,
        description="Endpoint exchanging an OAuth access token for a compact PAT.",
    )
    timeout_seconds: float = Field(10.0, gt=0)


class StorageSettings(BaseSettings):
    """Settings for the bundled encrypted credential store."""

    model_config = SettingsConfigDict(
        env_prefix="DEVOPS_AUTH_", env_file=".env", extra="ignore"
    )

    db_path: Path = Field(
        Path.home() / ".devops-auth" / "credentials.db",
        description="SQLite database holding encrypted credentials and tokens.",
    )
    encryption_secret: Optional[str] = Field(
        None,
        description="Secret used to derive the symmetric key for stored secrets.",
    )
    previous_encryption_secrets: Annotated[tuple[str, ...], NoDecode] = Field(
        (),
        description=(
            "Comma-separated passphrases used before the current one. Rows written "
            "under them stay readable; new rows use the current secret."
        ),
    )

    @field_validator("db_path", mode="before")
    @classmethod
    def _expand_user(cls, value: str | Path) -> Path:
        """Allow ``~`` in configured database paths."""
        return Path(value).expanduser()

    @field_validator("previous_encryption_secrets", mode="before")
    @classmethod
    def _split_secrets(cls, value: str | tuple[str, ...] | list[str]) -> tuple[str, ...]:
        """Support providing previous secrets as a comma-separated string."""
        if isinstance(value, str):
            value = value.split(",")
        return tuple(item.strip() for item in value if item.strip())


class AppSettings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="DEVOPS_AUTH_", env_file=".env", extra="ignore"
    )

    log_level: str = "INFO"
    authority: AuthoritySettings = Field(default_factory=AuthoritySettings)
    service: ServiceSettings = Field(default_factory=ServiceSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "AuthoritySettings",
    "DEFAULT_CLIENT_ID",
    "DEFAULT_PROFILE_URL",
    "DEFAULT_RESOURCE",
    "DEFAULT_SESSION_TOKEN_URL",
    "ServiceSettings",
    "StorageSettings",
    "get_settings",
]
