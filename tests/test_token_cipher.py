import pytest

from devops_auth.services.token_cipher import TokenCipherService


def test_token_cipher_hides_plaintext() -> None:
    cipher = TokenCipherService(secret="super-secret-key")

    encrypted = cipher.encrypt("compact-pat")

    assert "compact-pat" not in encrypted
    assert cipher.decrypt(encrypted) == "compact-pat"


def test_token_cipher_rejects_foreign_ciphertext() -> None:
    encrypted = TokenCipherService(secret="one-secret").encrypt("value")

    with pytest.raises(ValueError):
        TokenCipherService(secret="another-secret").decrypt(encrypted)
    with pytest.raises(ValueError):
        TokenCipherService(secret="another-secret").decrypt("not-valid")


def test_token_cipher_requires_secret() -> None:
    with pytest.raises(ValueError):
        TokenCipherService(secret="")


def test_token_cipher_decrypts_with_previous_secrets() -> None:
    legacy = TokenCipherService(secret="2023-passphrase").encrypt("old-pat")
    rotated = TokenCipherService(secret="2024-passphrase", previous_secrets=["2023-passphrase"])

    assert rotated.decrypt(legacy) == "old-pat"


def test_token_cipher_encrypts_with_current_secret_only() -> None:
    rotated = TokenCipherService(secret="2024-passphrase", previous_secrets=["2023-passphrase"])

    encrypted = rotated.encrypt("new-pat")

    assert TokenCipherService(secret="2024-passphrase").decrypt(encrypted) == "new-pat"
    with pytest.raises(ValueError):
        TokenCipherService(secret="2023-passphrase").decrypt(encrypted)
