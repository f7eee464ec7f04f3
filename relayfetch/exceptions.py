"""relayfetch exceptions.

Hierarchy:
    RelayFetchException (base)
    ├── TransportError        - network failure, timeout or non-2xx status
    ├── DecodeError           - body is not the expected JSON shape
    ├── UpstreamChallenge     - upstream answered with its anti-scraping code (412)
    ├── RelayQuotaExceeded    - relay answered 403 for the active credential
    ├── FetchFailure          - both fetch paths failed; surfaced to callers
    │   └── CredentialsExhausted - every relay credential hit its quota
    ├── RedirectError         - short link did not resolve to a 302
    └── ConfigurationError    - invalid startup configuration

Only FetchFailure, RedirectError and ConfigurationError are raised to callers.
The others describe why an attempt was absorbed and travel inside a FetchOutcome.
"""

from typing import Any

CHALLENGE_CODE = 412


class RelayFetchException(Exception):
    """Base exception for all relayfetch errors."""

    def __init__(self, message: str, url: str | None = None) -> None:
        self.message = message
        self.url = url
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.url:
            return f"{self.message} (URL: {self.url})"
        return self.message


class TransportError(RelayFetchException):
    """Raised when a request fails at the network or HTTP status level."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, url)
        self.status_code = status_code

    def __str__(self) -> str:
        parts = [self.message]
        if self.status_code:
            parts.append(f"status={self.status_code}")
        if self.url:
            parts.append(f"url={self.url}")
        return " | ".join(parts)


class DecodeError(RelayFetchException):
    """Raised when a response body cannot be decoded."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        content: str | None = None,
    ) -> None:
        super().__init__(message, url)
        self.content = content  # Raw body (for debugging)


class UpstreamChallenge(RelayFetchException):
    """The upstream API triggered its anti-scraping challenge."""

    def __init__(self, message: str, url: str | None = None, code: int = CHALLENGE_CODE) -> None:
        super().__init__(message, url)
        self.code = code


class RelayQuotaExceeded(RelayFetchException):
    """The relay rejected the active credential with HTTP 403."""

    def __init__(self, message: str, url: str | None = None, credential_index: int | None = None) -> None:
        super().__init__(message, url)
        self.credential_index = credential_index

    def __str__(self) -> str:
        base = super().__str__()
        if self.credential_index is not None:
            return f"{base} (credential={self.credential_index})"
        return base


class FetchFailure(RelayFetchException):
    """Raised when neither the direct nor the relay path produced a payload."""

    def __init__(self, message: str, url: str | None = None, outcome: Any = None) -> None:
        super().__init__(message, url)
        self.outcome = outcome


class CredentialsExhausted(FetchFailure):
    """Raised when every relay credential has been consumed."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        outcome: Any = None,
        pool_size: int | None = None,
    ) -> None:
        super().__init__(message, url, outcome)
        self.pool_size = pool_size

    def __str__(self) -> str:
        base = super().__str__()
        if self.pool_size is not None:
            return f"{base} (pool_size={self.pool_size})"
        return base


class RedirectError(RelayFetchException):
    """Raised when a short link does not resolve to a redirect target."""

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message, url)
        self.status_code = status_code


class ConfigurationError(RelayFetchException):
    """Raised at startup when required configuration is missing or invalid."""
