"""
Direct Fetcher Module

Single-shot, short-timeout probe against the upstream API without relay or
credential. Never raises: every failure becomes a FetchOutcome so the caller
can fall back to the relay.
"""

import logging
from typing import Any

import httpx
from pydantic import ValidationError

from relayfetch.config import config
from relayfetch.exceptions import DecodeError, TransportError, UpstreamChallenge
from relayfetch.models import FetchOutcome, OutcomeKind, response_type


logger = logging.getLogger(__name__)


class DirectFetcher:
    """
    Async fetcher that talks to the upstream API directly.

    Features:
    - One attempt per call, no retries
    - Short fixed timeout to bound user-facing latency
    - Classifies the reply as success, challenge or transport failure

    Example:
        fetcher = DirectFetcher()
        outcome = await fetcher.fetch("https://api.example.com/x/v2/reply?oid=1")
        if outcome.success:
            print(outcome.response.data)
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ):
        """
        Initialize the direct fetcher.

        Args:
            client: HTTP client to reuse (creates a long-lived one if None)
            timeout: Request timeout in seconds (default from config)
            user_agent: User-Agent header sent with every request (default from config)
        """
        self._timeout = timeout or config.direct.timeout
        self._headers = {"User-Agent": user_agent or config.user_agent}
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=True,
        )

    async def fetch(self, url: str, model: Any = None) -> FetchOutcome:
        """
        Fetch a URL straight from the upstream API.

        Args:
            url: Upstream API URL
            model: Type of the ``data`` field (raw JSON if None)

        Returns:
            FetchOutcome; SUCCESS, DISQUALIFIED (code 412) or TRANSPORT_ERROR
        """
        try:
            response = await self._client.get(url, headers=self._headers)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Direct request timed out: [{e!r}] url: [{url}]")
            return FetchOutcome.failed(
                OutcomeKind.TRANSPORT_ERROR, url, TransportError("Request timed out", url)
            )
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"Direct request rejected: status [{status}] url: [{url}]")
            return FetchOutcome.failed(
                OutcomeKind.TRANSPORT_ERROR,
                url,
                TransportError("Unexpected status", url, status_code=status),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Direct request failed: [{e!r}] url: [{url}]")
            return FetchOutcome.failed(OutcomeKind.TRANSPORT_ERROR, url, TransportError(str(e), url))

        try:
            payload = response_type(model).model_validate_json(response.content)
        except ValidationError as e:
            logger.warning(f"Direct response not decodable: [{e}] url: [{url}]")
            return FetchOutcome.failed(
                OutcomeKind.TRANSPORT_ERROR,
                url,
                DecodeError("Malformed upstream body", url, content=response.text),
            )

        if payload.is_challenge:
            logger.warning(f"Direct request hit upstream challenge: url: [{url}]")
            return FetchOutcome.failed(
                OutcomeKind.DISQUALIFIED, url, UpstreamChallenge("Upstream challenge", url)
            )

        return FetchOutcome.ok(url, payload)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
