"""
Credential and token stores keyed by target endpoint.

The authentication service only depends on the two protocols below, so any
backend (OS keychain, encrypted file, in-memory fake) can be substituted. The
concrete classes here are the bundled defaults: a process-local cache and an
encrypted SQLite store.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol, runtime_checkable

from devops_auth.clients.sqlite_store import SQLiteStore
from devops_auth.models.credentials import (
    Credential,
    TargetEndpoint,
    Token,
    TokenKind,
    validate_target,
)
from devops_auth.services.token_cipher import TokenCipherService

PERSONAL_ACCESS_TOKEN_PREFIX = "git"
USER_CREDENTIAL_PREFIX = "alt-git"
REFRESH_TOKEN_PREFIX = "adal-refresh"

_CREDENTIAL_RECORD = "credential"
_TOKEN_RECORD = "token"


class UnreadableRecordError(Exception):
    """Raised when a stored row exists but its secret cannot be recovered.

    Usually the encryption passphrase changed without listing the old one in
    ``DEVOPS_AUTH_PREVIOUS_ENCRYPTION_SECRETS``. The row is still present and
    can be deleted.
    """

    def __init__(self, target_name: str) -> None:
        super().__init__(f"Stored record for {target_name} cannot be decrypted.")
        self.target_name = target_name


@runtime_checkable
class CredentialStoreProtocol(Protocol):
    def read_credentials(self, target: TargetEndpoint) -> Optional[Credential]: ...

    def write_credentials(self, target: TargetEndpoint, credential: Credential) -> None: ...

    def delete_credentials(self, target: TargetEndpoint) -> None: ...


@runtime_checkable
class TokenStoreProtocol(Protocol):
    def read_token(self, target: TargetEndpoint) -> Optional[Token]: ...

    def write_token(self, target: TargetEndpoint, token: Token) -> None: ...

    def delete_token(self, target: TargetEndpoint) -> None: ...


class CredentialCache:
    """Process-local credential cache. Safe to evict at any time."""

    def __init__(self, prefix: str = PERSONAL_ACCESS_TOKEN_PREFIX) -> None:
        self._prefix = prefix
        self._entries: Dict[str, Credential] = {}
        self._lock = threading.Lock()

    def read_credentials(self, target: TargetEndpoint) -> Optional[Credential]:
        validate_target(target)
        with self._lock:
            return self._entries.get(target.target_name(self._prefix))

    def write_credentials(self, target: TargetEndpoint, credential: Credential) -> None:
        validate_target(target)
        with self._lock:
            self._entries[target.target_name(self._prefix)] = credential

    def delete_credentials(self, target: TargetEndpoint) -> None:
        validate_target(target)
        with self._lock:
            self._entries.pop(target.target_name(self._prefix), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class SecureCredentialStore:
    """Credentials persisted in SQLite with the secret encrypted at rest."""

    def __init__(
        self, store: SQLiteStore, cipher: TokenCipherService, *, prefix: str
    ) -> None:
        self._store = store
        self._cipher = cipher
        self._prefix = prefix

    def read_credentials(self, target: TargetEndpoint) -> Optional[Credential]:
        validate_target(target)
        name = target.target_name(self._prefix)
        record = self._store.get_item(target=name, kind=_CREDENTIAL_RECORD)
        if not record:
            return None
        try:
            secret = self._cipher.decrypt(record["secret_encrypted"])
        except (KeyError, ValueError) as exc:
            raise UnreadableRecordError(name) from exc
        return Credential(username=record.get("username", ""), secret=secret)

    def write_credentials(self, target: TargetEndpoint, credential: Credential) -> None:
        validate_target(target)
        self._store.put_item(
            {
                "target": target.target_name(self._prefix),
                "kind": _CREDENTIAL_RECORD,
                "username": credential.username,
                "secret_encrypted": self._cipher.encrypt(credential.secret),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )

    def delete_credentials(self, target: TargetEndpoint) -> None:
        validate_target(target)
        self._store.delete_item(
            target=target.target_name(self._prefix), kind=_CREDENTIAL_RECORD
        )


class SecureTokenStore:
    """Tokens persisted in SQLite with the token value encrypted at rest."""

    def __init__(
        self, store: SQLiteStore, cipher: TokenCipherService, *, prefix: str
    ) -> None:
        self._store = store
        self._cipher = cipher
        self._prefix = prefix

    def read_token(self, target: TargetEndpoint) -> Optional[Token]:
        validate_target(target)
        name = target.target_name(self._prefix)
        record = self._store.get_item(target=name, kind=_TOKEN_RECORD)
        if not record:
            return None
        try:
            value = self._cipher.decrypt(record["value_encrypted"])
            expires_on = datetime.fromisoformat(record["expires_on"])
            kind = TokenKind(record["token_kind"])
        except (KeyError, ValueError) as exc:
            raise UnreadableRecordError(name) from exc
        return Token(value=value, expires_on=expires_on, kind=kind)

    def write_token(self, target: TargetEndpoint, token: Token) -> None:
        validate_target(target)
        self._store.put_item(
            {
                "target": target.target_name(self._prefix),
                "kind": _TOKEN_RECORD,
                "token_kind": token.kind.value,
                "value_encrypted": self._cipher.encrypt(token.value),
                "expires_on": token.expires_on.isoformat(),
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )

    def delete_token(self, target: TargetEndpoint) -> None:
        validate_target(target)
        self._store.delete_item(
            target=target.target_name(self._prefix), kind=_TOKEN_RECORD
        )


@dataclass(slots=True)
class AuthenticationStores:
    """The four storage tiers consulted by the authentication service."""

    personal_access_tokens: CredentialStoreProtocol
    user_credentials: CredentialStoreProtocol
    refresh_tokens: TokenStoreProtocol
    personal_access_token_cache: CredentialStoreProtocol

    @classmethod
    def encrypted(
        cls, store: SQLiteStore, cipher: TokenCipherService
    ) -> "AuthenticationStores":
        """Bundle backed by one SQLite database and a fresh in-memory cache."""
        return cls(
            personal_access_tokens=SecureCredentialStore(
                store, cipher, prefix=PERSONAL_ACCESS_TOKEN_PREFIX
            ),
            user_credentials=SecureCredentialStore(
                store, cipher, prefix=USER_CREDENTIAL_PREFIX
            ),
            refresh_tokens=SecureTokenStore(store, cipher, prefix=REFRESH_TOKEN_PREFIX),
            personal_access_token_cache=CredentialCache(PERSONAL_ACCESS_TOKEN_PREFIX),
        )


__all__ = [
    "AuthenticationStores",
    "CredentialCache",
    "CredentialStoreProtocol",
    "PERSONAL_ACCESS_TOKEN_PREFIX",
    "REFRESH_TOKEN_PREFIX",
    "SecureCredentialStore",
    "SecureTokenStore",
    "TokenStoreProtocol",
    "USER_CREDENTIAL_PREFIX",
    "UnreadableRecordError",
]
