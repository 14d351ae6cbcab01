"""Service layer exports."""

from .authentication import BaseDevOpsAuthentication
from .credential_stores import (
    AuthenticationStores,
    CredentialCache,
    CredentialStoreProtocol,
    SecureCredentialStore,
    SecureTokenStore,
    TokenStoreProtocol,
    UnreadableRecordError,
)
from .token_cipher import TokenCipherService

__all__ = [
    "AuthenticationStores",
    "BaseDevOpsAuthentication",
    "CredentialCache",
    "CredentialStoreProtocol",
    "SecureCredentialStore",
    "SecureTokenStore",
    "TokenCipherService",
    "TokenStoreProtocol",
    "UnreadableRecordError",
]
