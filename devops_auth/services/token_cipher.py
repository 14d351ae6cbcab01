"""
Encryption of credential secrets before they reach the credential database.

Keys are derived from passphrases with HKDF. The current passphrase encrypts;
previous passphrases are kept for decryption only, so rotating
``DEVOPS_AUTH_ENCRYPTION_SECRET`` does not strand rows written earlier.
"""

from __future__ import annotations

import base64
from typing import Iterable

from cryptography.fernet import Fernet, InvalidToken, MultiFernet
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

_KEY_INFO = b"devops-auth/credential-store"


def _derive_fernet(passphrase: str) -> Fernet:
    key = HKDF(
        algorithm=hashes.SHA256(),
        length=32,
        salt=None,
        info=_KEY_INFO,
    ).derive(passphrase.encode("utf-8"))
    return Fernet(base64.urlsafe_b64encode(key))


class TokenCipherService:
    """Encrypt with the current passphrase, decrypt with the current or any previous one."""

    def __init__(self, *, secret: str, previous_secrets: Iterable[str] = ()) -> None:
        if not secret:
            raise ValueError("Credential encryption secret must be provided.")
        retired = [value for value in previous_secrets if value and value != secret]
        self._fernet = MultiFernet([_derive_fernet(secret)] + [_derive_fernet(value) for value in retired])

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: str) -> str:
        """Return the plaintext, or raise ``ValueError`` when no known key opens it."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Stored secret was encrypted with an unknown passphrase or is corrupt."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
