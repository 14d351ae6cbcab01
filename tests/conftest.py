"""Pytest configuration and in-memory store fakes shared across the suite."""

from __future__ import annotations

from typing import Callable, Optional

import httpx
import pytest

from devops_auth.clients import DevOpsServiceClient
from devops_auth.models.credentials import Credential, TargetEndpoint, Token
from devops_auth.services import AuthenticationStores, BaseDevOpsAuthentication


class FakeCredentialStore:
    def __init__(self) -> None:
        self._storage: dict[str, Credential] = {}
        self.reads: list[str] = []
        self.writes: list[str] = []
        self.deletes: list[str] = []
        self.fail_writes = False

    def read_credentials(self, target: TargetEndpoint) -> Optional[Credential]:
        self.reads.append(target.uri)
        return self._storage.get(target.uri)

    def write_credentials(self, target: TargetEndpoint, credential: Credential) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.writes.append(target.uri)
        self._storage[target.uri] = credential

    def delete_credentials(self, target: TargetEndpoint) -> None:
        self.deletes.append(target.uri)
        self._storage.pop(target.uri, None)

    def seed(self, target: TargetEndpoint, credential: Credential) -> None:
        self._storage[target.uri] = credential

    def peek(self, target: TargetEndpoint) -> Optional[Credential]:
        return self._storage.get(target.uri)


class FakeTokenStore:
    def __init__(self) -> None:
        self._storage: dict[str, Token] = {}
        self.writes: list[str] = []
        self.deletes: list[str] = []

    def read_token(self, target: TargetEndpoint) -> Optional[Token]:
        return self._storage.get(target.uri)

    def write_token(self, target: TargetEndpoint, token: Token) -> None:
        self.writes.append(target.uri)
        self._storage[target.uri] = token

    def delete_token(self, target: TargetEndpoint) -> None:
        self.deletes.append(target.uri)
        self._storage.pop(target.uri, None)

    def seed(self, target: TargetEndpoint, token: Token) -> None:
        self._storage[target.uri] = token

    def peek(self, target: TargetEndpoint) -> Optional[Token]:
        return self._storage.get(target.uri)


class StubAuthentication(BaseDevOpsAuthentication):
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.refresh_calls: list[TargetEndpoint] = []

    async def refresh_credentials(self, target: TargetEndpoint) -> bool:
        self.refresh_calls.append(target)
        return False


@pytest.fixture
def target() -> TargetEndpoint:
    return TargetEndpoint.from_uri("https://contoso.visualstudio.com/DefaultCollection/_git/repo")


@pytest.fixture
def stores() -> AuthenticationStores:
    return AuthenticationStores(
        personal_access_tokens=FakeCredentialStore(),
        user_credentials=FakeCredentialStore(),
        refresh_tokens=FakeTokenStore(),
        personal_access_token_cache=FakeCredentialStore(),
    )


@pytest.fixture
def make_auth(stores: AuthenticationStores) -> Callable[..., StubAuthentication]:
    """Build an authentication service whose HTTP calls go to ``handler``."""

    def _factory(handler: Callable[[httpx.Request], httpx.Response] | None = None) -> StubAuthentication:
        transport = httpx.MockTransport(handler) if handler is not None else None
        client = DevOpsServiceClient(transport=transport)
        return StubAuthentication(
            "https://login.microsoftonline.com/common",
            stores=stores,
            service_client=client,
        )

    return _factory
