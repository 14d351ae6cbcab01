from __future__ import annotations

from datetime import datetime, timezone

import httpx
import pytest

from devops_auth.models.credentials import (
    SECRET_MAX_LENGTH,
    USERNAME_MAX_LENGTH,
    Credential,
    InvalidCredentialError,
    InvalidTargetError,
    OAuthResult,
    TargetEndpoint,
    Token,
    TokenKind,
    validate_credential,
    validate_target,
)


def test_target_from_uri_keeps_scheme_host_and_port() -> None:
    endpoint = TargetEndpoint.from_uri("HTTPS://user@Dev.Azure.com:8443/org/project?x=1")

    assert endpoint.scheme == "https"
    assert endpoint.host == "dev.azure.com"
    assert endpoint.port == 8443
    assert endpoint.target_name("git") == "git:https://dev.azure.com:8443"


def test_target_from_uri_without_port() -> None:
    endpoint = TargetEndpoint.from_uri("https://contoso.visualstudio.com/")

    assert endpoint.target_name("alt-git") == "alt-git:https://contoso.visualstudio.com"
    assert str(endpoint) == "https://contoso.visualstudio.com"


@pytest.mark.parametrize(
    "uri",
    ["", "   ", "contoso.visualstudio.com", "/relative/path", "ftp://contoso.com", "https://host:99999"],
)
def test_target_from_uri_rejects_invalid_values(uri: str) -> None:
    with pytest.raises(InvalidTargetError):
        TargetEndpoint.from_uri(uri)


def test_validate_target_rejects_non_endpoints() -> None:
    with pytest.raises(InvalidTargetError):
        validate_target(None)
    with pytest.raises(InvalidTargetError):
        validate_target(TargetEndpoint(scheme="https", host=""))


def test_validate_credential_limits() -> None:
    validate_credential(Credential(username="", secret="pat"))

    with pytest.raises(InvalidCredentialError):
        validate_credential(Credential(username="a" * (USERNAME_MAX_LENGTH + 1), secret="x"))
    with pytest.raises(InvalidCredentialError):
        validate_credential(Credential(username="a", secret="x" * (SECRET_MAX_LENGTH + 1)))


def test_credential_repr_hides_secret() -> None:
    assert "hunter2" not in repr(Credential(username="alice", secret="hunter2"))


def test_target_from_uri_keeps_ipv6_brackets() -> None:
    endpoint = TargetEndpoint.from_uri("https://[::1]:8443/org")

    assert endpoint.host == "::1"
    assert endpoint.uri == "https://[::1]:8443"
    assert TargetEndpoint.from_uri("http://[FE80::1]").uri == "http://[fe80::1]"
    assert httpx.URL(endpoint.uri).port == 8443


def test_naive_expiries_are_taken_as_utc() -> None:
    naive = datetime(2030, 1, 1)

    token = Token(value="r", expires_on=naive, kind=TokenKind.REFRESH)
    result = OAuthResult(access_token="a", refresh_token="r", expires_on=naive)

    assert token.expires_on == datetime(2030, 1, 1, tzinfo=timezone.utc)
    assert result.expires_on.tzinfo is timezone.utc
