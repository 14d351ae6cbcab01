"""
Factory functions providing shared stores and clients built from settings.
"""

from functools import lru_cache
from typing import TypeVar

from devops_auth.clients import DevOpsServiceClient, SQLiteStore
from devops_auth.core.config import get_settings
from devops_auth.services import (
    AuthenticationStores,
    BaseDevOpsAuthentication,
    TokenCipherService,
)

AuthT = TypeVar("AuthT", bound=BaseDevOpsAuthentication)


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_sqlite_store() -> SQLiteStore:
    """Provide the shared SQLite credential database."""
    return SQLiteStore(_settings().storage.db_path)


@lru_cache()
def get_token_cipher_service() -> TokenCipherService:
    """Provide symmetric encryption helper for stored secrets."""
    secret = _settings().storage.encryption_secret
    if not secret:
        raise RuntimeError(
            "DEVOPS_AUTH_ENCRYPTION_SECRET must be set to use the encrypted credential store."
        )
    return TokenCipherService(
        secret=secret,
        previous_secrets=_settings().storage.previous_encryption_secrets,
    )


@lru_cache()
def get_service_client() -> DevOpsServiceClient:
    """Provide the HTTP client for the remote DevOps service."""
    service = _settings().service
    return DevOpsServiceClient(
        profile_url=str(service.profile_url),
        session_token_url=str(service.session_token_url),
        timeout=service.timeout_seconds,
    )


@lru_cache()
def get_authentication_stores() -> AuthenticationStores:
    """Provide the process-wide storage tiers, sharing one in-memory cache."""
    return AuthenticationStores.encrypted(get_sqlite_store(), get_token_cipher_service())


def build_authentication(auth_class: type[AuthT], **overrides) -> AuthT:
    """Construct ``auth_class`` from the configured authority, stores and service client.

    Keyword ``overrides`` replace any of the constructor arguments, for example
    ``stores=`` in tests or ``logger=`` for a host-specific logger.
    """
    authority = _settings().authority
    kwargs = {"resource": authority.resource, "client_id": authority.client_id}
    kwargs.update(overrides)
    if "stores" not in kwargs:
        kwargs["stores"] = get_authentication_stores()
    if "service_client" not in kwargs:
        kwargs["service_client"] = get_service_client()
    return auth_class(str(authority.authority_host_url), **kwargs)


__all__ = [
    "build_authentication",
    "get_authentication_stores",
    "get_service_client",
    "get_sqlite_store",
    "get_token_cipher_service",
]
