"""
HTTP client for the DevOps identity endpoints.

Wraps the two calls the credential helpers make against the remote service:
probing the caller's profile with a basic-auth credential and exchanging an
OAuth access token for a compact session token.
"""

from __future__ import annotations

import base64
from typing import Optional

import httpx

from devops_auth.core.config import DEFAULT_PROFILE_URL, DEFAULT_SESSION_TOKEN_URL
from devops_auth.models.credentials import Credential


def basic_authorization(credential: Credential) -> str:
    """Build an ``Authorization`` header value for HTTP basic authentication."""
    raw = f"{credential.username}:{credential.secret}".encode("utf-8")
    return "Basic " + base64.b64encode(raw).decode("ascii")


class DevOpsServiceClient:
    """Issue profile and session-token requests against the remote service."""

    def __init__(
        self,
        *,
        profile_url: str = DEFAULT_PROFILE_URL,
        session_token_url: str = DEFAULT_SESSION_TOKEN_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.profile_url = str(profile_url)
        self.session_token_url = str(session_token_url)
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    async def fetch_profile(self, credential: Credential) -> httpx.Response:
        """GET the profile endpoint authenticated as ``credential``."""
        async with self._client() as client:
            return await client.get(
                self.profile_url,
                headers={"Authorization": basic_authorization(credential)},
            )

    async def create_session_token(
        self, *, access_token_type: str, access_token: str
    ) -> httpx.Response:
        """POST an empty JSON body to the session-token endpoint using a bearer-style token."""
        async with self._client() as client:
            return await client.post(
                self.session_token_url,
                content=b"",
                headers={
                    "Authorization": f"{access_token_type} {access_token}",
                    "Content-Type": "application/json; charset=utf-8",
                },
            )


__all__ = ["DevOpsServiceClient", "basic_authorization"]
