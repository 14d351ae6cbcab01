"""
Structured results for operations whose failures are reported, not raised.

Callers that only need a yes/no answer use the boolean helpers on the
authentication service; these types keep the reason around for logging and
tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from devops_auth.models.credentials import Credential


class ValidationOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"
    UNEXPECTED_ERROR = "unexpected_error"


class IssuanceOutcome(str, Enum):
    ISSUED = "issued"
    REJECTED = "rejected"
    TRANSPORT_ERROR = "transport_error"
    MALFORMED_RESPONSE = "malformed_response"
    STORAGE_ERROR = "storage_error"
    UNEXPECTED_ERROR = "unexpected_error"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Result of probing the profile endpoint with a credential."""

    outcome: ValidationOutcome
    status_code: Optional[int] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is ValidationOutcome.ACCEPTED


@dataclass(frozen=True, slots=True)
class IssuanceResult:
    """Result of exchanging an OAuth access token for a personal access token."""

    outcome: IssuanceOutcome
    status_code: Optional[int] = None
    detail: Optional[str] = None
    credential: Optional[Credential] = None

    @property
    def ok(self) -> bool:
        return self.outcome is IssuanceOutcome.ISSUED


class SessionTokenResponse(BaseModel):
    """Body returned by the session-token endpoint. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", strict=True)

    token: str = Field(..., min_length=1, pattern=r"^\S+$", repr=False)


__all__ = [
    "IssuanceOutcome",
    "IssuanceResult",
    "SessionTokenResponse",
    "ValidationOutcome",
    "ValidationResult",
]
