"""
Data Model Module

Typed wire models for the upstream API, the relay envelope and the captcha
service, plus the FetchOutcome every fetch call reduces to.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from relayfetch.exceptions import CHALLENGE_CODE, RelayFetchException

T = TypeVar("T")


class UpstreamResponse(BaseModel, Generic[T]):
    """
    Upstream API reply: ``{"code": int, "message": ..., "data": ...}``.

    Fields the upstream adds next to ``data`` (``ttl`` and friends) are kept
    as extras so nothing in the raw payload is lost.
    """

    model_config = ConfigDict(extra="allow")

    code: int
    message: Any = ""
    data: Optional[T] = None

    @property
    def is_challenge(self) -> bool:
        """True when the upstream answered with its anti-scraping code."""
        return self.code == CHALLENGE_CODE


class UpstreamEnvelope(BaseModel):
    """Relay wrapper; ``content`` holds the upstream body as a string."""

    model_config = ConfigDict(extra="ignore")

    content: str


class CaptchaReply(BaseModel):
    """Captcha validation service reply."""

    model_config = ConfigDict(extra="ignore")

    success: bool


def response_type(model: Any = None) -> type[UpstreamResponse]:
    """Parametrize UpstreamResponse with the caller's payload type."""
    return UpstreamResponse[model if model is not None else Any]


class OutcomeKind(Enum):
    """How a fetch attempt ended."""
    SUCCESS = "success"
    DISQUALIFIED = "disqualified"
    TRANSPORT_ERROR = "transport_error"
    CREDENTIALS_EXHAUSTED = "credentials_exhausted"


@dataclass
class FetchOutcome:
    """Result of one fetch path."""

    kind: OutcomeKind
    url: str
    response: Optional[UpstreamResponse] = None
    error: Optional[RelayFetchException] = None
    credential_index: Optional[int] = None
    attempts: int = 1
    via_relay: bool = False

    @property
    def success(self) -> bool:
        """Check if the path produced a usable payload."""
        return self.kind is OutcomeKind.SUCCESS and self.response is not None

    @classmethod
    def ok(cls, url: str, response: UpstreamResponse, **kwargs: Any) -> "FetchOutcome":
        return cls(kind=OutcomeKind.SUCCESS, url=url, response=response, **kwargs)

    @classmethod
    def failed(cls, kind: OutcomeKind, url: str, error: RelayFetchException, **kwargs: Any) -> "FetchOutcome":
        return cls(kind=kind, url=url, error=error, **kwargs)
