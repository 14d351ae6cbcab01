"""
Credential resolution and personal access token lifecycle for DevOps services.

``BaseDevOpsAuthentication`` owns four storage tiers: a persistent PAT store
shadowed by an in-memory cache, a persistent refresh-token store and a
persistent user-credential store. Subclasses supply ``refresh_credentials``,
which runs the OAuth exchange and then hands the result to
``generate_personal_access_token`` and ``store_refresh_token``.

Network and parsing problems during validation or issuance never escape as
exceptions; they are logged and reported as ``False``. Invalid arguments are
programmer errors and raise ``AuthenticationPreconditionError`` subclasses.
"""

from __future__ import annotations

import abc
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from devops_auth.clients.devops_service import DevOpsServiceClient
from devops_auth.core.config import DEFAULT_CLIENT_ID, DEFAULT_RESOURCE
from devops_auth.models.credentials import (
    Credential,
    OAuthResult,
    TargetEndpoint,
    Token,
    TokenKind,
    validate_credential,
    validate_oauth_result,
    validate_target,
)
from devops_auth.models.outcomes import (
    IssuanceOutcome,
    IssuanceResult,
    SessionTokenResponse,
    ValidationOutcome,
    ValidationResult,
)
from devops_auth.services.credential_stores import AuthenticationStores, UnreadableRecordError

module_logger = logging.getLogger(__name__)


class BaseDevOpsAuthentication(abc.ABC):
    """Shared credential handling for authentication flows against a DevOps service."""

    REDIRECT_URL = "urn:ietf:wg:oauth:2.0:oob"

    def __init__(
        self,
        authority_host_url: str,
        *,
        stores: AuthenticationStores,
        service_client: Optional[DevOpsServiceClient] = None,
        resource: str = DEFAULT_RESOURCE,
        client_id: str = DEFAULT_CLIENT_ID,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.authority_host_url = str(authority_host_url)
        self.resource = resource
        self.client_id = client_id
        self._stores = stores
        self._service = service_client or DevOpsServiceClient()
        self._logger = logger or module_logger

    @property
    def stores(self) -> AuthenticationStores:
        return self._stores

    def get_credentials(self, target: TargetEndpoint) -> Optional[Credential]:
        """Return the PAT for ``target`` from the cache or the PAT store, or ``None``.

        A value found only in the PAT store is copied into the cache before it
        is returned. Nothing is written on a cache hit or a total miss.
        """
        validate_target(target)
        cache = self._stores.personal_access_token_cache

        credential = cache.read_credentials(target)
        if credential is not None:
            self._logger.debug("Resolved cached credentials", extra={"target": str(target)})
            return credential

        self._logger.debug(
            "Credential cache miss, reading stored credentials",
            extra={"target": str(target)},
        )
        try:
            credential = self._stores.personal_access_tokens.read_credentials(target)
        except UnreadableRecordError:
            self._logger.warning(
                "Stored credentials cannot be decrypted, treating as absent",
                extra={"target": str(target)},
            )
            return None
        if credential is not None:
            cache.write_credentials(target, credential)
        return credential

    def delete_credentials(self, target: TargetEndpoint) -> None:
        """Remove the credential for ``target`` from the first store that holds one.

        Stores are checked in priority order: PAT store (also evicting the
        cache), then refresh-token store, then user-credential store. Only the
        first match is deleted; later stores are left untouched even if they
        also hold an entry. A row whose secret cannot be decrypted still counts
        as an entry.
        """
        validate_target(target)
        stores = self._stores

        if self._holds_entry(stores.personal_access_tokens.read_credentials, target):
            stores.personal_access_token_cache.delete_credentials(target)
            stores.personal_access_tokens.delete_credentials(target)
            deleted_from = "personal_access_tokens"
        elif self._holds_entry(stores.refresh_tokens.read_token, target):
            stores.refresh_tokens.delete_token(target)
            deleted_from = "refresh_tokens"
        elif self._holds_entry(stores.user_credentials.read_credentials, target):
            stores.user_credentials.delete_credentials(target)
            deleted_from = "user_credentials"
        else:
            self._logger.debug("No credentials to delete", extra={"target": str(target)})
            return

        self._logger.info(
            "Deleted credentials",
            extra={"target": str(target), "store": deleted_from},
        )

    def _holds_entry(self, read, target: TargetEndpoint) -> bool:
        try:
            return read(target) is not None
        except UnreadableRecordError as exc:
            self._logger.warning(
                "Found undecryptable stored entry", extra={"target": exc.target_name}
            )
            return True

    def read_user_credentials(self, target: TargetEndpoint) -> Optional[Credential]:
        validate_target(target)
        return self._stores.user_credentials.read_credentials(target)

    def store_user_credentials(self, target: TargetEndpoint, credential: Credential) -> None:
        """Persist a username/password pair in the secondary credential store."""
        validate_target(target)
        validate_credential(credential)
        self._stores.user_credentials.write_credentials(target, credential)

    @abc.abstractmethod
    async def refresh_credentials(self, target: TargetEndpoint) -> bool:
        """Acquire fresh credentials for ``target``; return ``True`` on success."""

    async def check_credentials(self, credential: Credential) -> ValidationResult:
        """Call the profile endpoint with ``credential`` and describe the outcome."""
        validate_credential(credential)

        try:
            response = await self._service.fetch_profile(credential)
        except httpx.HTTPError as exc:
            result = ValidationResult(ValidationOutcome.TRANSPORT_ERROR, detail=str(exc))
        except Exception as exc:
            self._logger.debug("Credential validation raised", exc_info=True)
            result = ValidationResult(ValidationOutcome.UNEXPECTED_ERROR, detail=repr(exc))
        else:
            if response.status_code == httpx.codes.OK:
                outcome = ValidationOutcome.ACCEPTED
            else:
                outcome = ValidationOutcome.REJECTED
            result = ValidationResult(outcome, status_code=response.status_code)

        level = logging.INFO if result.ok else logging.WARNING
        self._logger.log(
            level,
            "Credential validation finished",
            extra={"outcome": result.outcome.value, "status_code": result.status_code},
        )
        return result

    async def validate_credentials(self, credential: Credential) -> bool:
        """Return ``True`` only if the service currently accepts ``credential``."""
        result = await self.check_credentials(credential)
        return result.ok

    async def request_personal_access_token(
        self, target: TargetEndpoint, auth_result: OAuthResult
    ) -> IssuanceResult:
        """Exchange ``auth_result`` for a compact PAT and persist it for ``target``.

        The PAT store is written before the cache. If the store write fails
        nothing is persisted; if only the cache write fails the PAT is still
        durable and will be promoted by the next ``get_credentials`` call.
        """
        validate_target(target)
        validate_oauth_result(auth_result)
        log_extra = {"target": str(target)}

        self._logger.info("Requesting personal access token", extra=log_extra)
        result = await self._request_session_token(auth_result)
        if not result.ok:
            self._logger.warning(
                "Personal access token request failed",
                extra={**log_extra, "outcome": result.outcome.value, "status_code": result.status_code},
            )
            return result

        credential = result.credential
        try:
            self._stores.personal_access_tokens.write_credentials(target, credential)
        except Exception as exc:
            self._logger.warning(
                "Unable to persist personal access token", extra=log_extra, exc_info=True
            )
            return IssuanceResult(
                IssuanceOutcome.STORAGE_ERROR,
                status_code=result.status_code,
                detail=repr(exc),
            )

        try:
            self._stores.personal_access_token_cache.write_credentials(target, credential)
        except Exception:
            self._logger.warning(
                "Stored personal access token but could not cache it",
                extra=log_extra,
                exc_info=True,
            )

        self._logger.info("Personal access token stored", extra=log_extra)
        return result

    async def generate_personal_access_token(
        self, target: TargetEndpoint, auth_result: OAuthResult
    ) -> bool:
        result = await self.request_personal_access_token(target, auth_result)
        return result.ok

    async def _request_session_token(self, auth_result: OAuthResult) -> IssuanceResult:
        try:
            response = await self._service.create_session_token(
                access_token_type=auth_result.access_token_type,
                access_token=auth_result.access_token,
            )
        except httpx.HTTPError as exc:
            return IssuanceResult(IssuanceOutcome.TRANSPORT_ERROR, detail=str(exc))
        except Exception as exc:
            self._logger.debug("Session token request raised", exc_info=True)
            return IssuanceResult(IssuanceOutcome.UNEXPECTED_ERROR, detail=repr(exc))

        if response.status_code != httpx.codes.OK:
            return IssuanceResult(IssuanceOutcome.REJECTED, status_code=response.status_code)

        try:
            body = SessionTokenResponse.model_validate_json(response.content)
        except ValidationError as exc:
            return IssuanceResult(
                IssuanceOutcome.MALFORMED_RESPONSE,
                status_code=response.status_code,
                detail=f"{exc.error_count()} schema error(s) in session token response",
            )

        return IssuanceResult(
            IssuanceOutcome.ISSUED,
            status_code=response.status_code,
            credential=Credential(username="", secret=body.token),
        )

    def store_refresh_token(self, target: TargetEndpoint, auth_result: OAuthResult) -> None:
        """Persist the OAuth refresh token for ``target``. Refresh tokens are never cached."""
        validate_target(target)
        validate_oauth_result(auth_result)

        token = Token(
            value=auth_result.refresh_token,
            expires_on=auth_result.expires_on,
            kind=TokenKind.REFRESH,
        )
        self._stores.refresh_tokens.write_token(target, token)
        self._logger.info("Stored refresh token", extra={"target": str(target)})


__all__ = ["BaseDevOpsAuthentication"]
