"""
Relay Fetcher Module

Fetches upstream URLs through a scraping relay. The relay is authenticated
with the pool's active credential; a 403 from the relay retires that
credential and the request is retried with the next one.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from relayfetch.config import RelayConfig, config
from relayfetch.exceptions import (
    CredentialsExhausted,
    DecodeError,
    RelayFetchException,
    RelayQuotaExceeded,
    TransportError,
    UpstreamChallenge,
)
from relayfetch.models import FetchOutcome, OutcomeKind, UpstreamEnvelope, response_type
from relayfetch.rotation.credential_pool import CredentialPool


logger = logging.getLogger(__name__)

QUOTA_STATUS = 403


class RelayFetcher:
    """
    Async fetcher that routes upstream requests through the relay.

    Retry policy:
    - 403 (relay quota): retire the credential, retry with the next one;
      bounded by the pool size
    - malformed envelope or payload, upstream code 412: retry with the
      current credential after a backoff; bounded by ``max_soft_retries``
    - any other transport failure: give up immediately

    Example:
        pool = CredentialPool.from_config()
        fetcher = RelayFetcher(pool)
        outcome = await fetcher.fetch("https://api.example.com/x/v2/reply?oid=1")
    """

    def __init__(
        self,
        pool: CredentialPool,
        client: httpx.AsyncClient | None = None,
        relay_config: RelayConfig | None = None,
    ):
        """
        Initialize the relay fetcher.

        Args:
            pool: Shared credential pool
            client: HTTP client to reuse (creates a long-lived one if None)
            relay_config: Relay settings (default from global config)
        """
        self._pool = pool
        self._config = relay_config or config.relay
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    @property
    def pool(self) -> CredentialPool:
        """Shared credential pool."""
        return self._pool

    def build_relay_url(self, url: str) -> str:
        """Embed the percent-encoded target URL into the relay endpoint."""
        params = {**self._config.extra_params, self._config.url_param: url}
        return f"{self._config.base_url}?{urlencode(params)}"

    def _backoff(self, soft_failures: int) -> float:
        """Delay before the next soft retry."""
        delay = self._config.backoff_base * (2 ** (soft_failures - 1))
        return min(delay, self._config.backoff_max)

    async def fetch(self, url: str, model: Any = None) -> FetchOutcome:
        """
        Fetch an upstream URL through the relay.

        Args:
            url: Upstream API URL
            model: Type of the ``data`` field (raw JSON if None)

        Returns:
            FetchOutcome; SUCCESS, CREDENTIALS_EXHAUSTED, TRANSPORT_ERROR, or
            DISQUALIFIED once soft retries run out
        """
        relay_url = self.build_relay_url(url)
        parser = response_type(model)

        attempts = 0
        soft_failures = 0
        credential = await self._pool.current()

        while True:
            attempts += 1

            try:
                response = await self._client.get(
                    relay_url,
                    headers={self._config.key_header: credential.key},
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                logger.error(f"Relay request failed: [{e!r}] url: [{url}]")
                return FetchOutcome.failed(
                    OutcomeKind.TRANSPORT_ERROR,
                    url,
                    TransportError(str(e) or type(e).__name__, url),
                    credential_index=credential.index,
                    attempts=attempts,
                    via_relay=True,
                )

            if response.status_code == QUOTA_STATUS:
                quota = RelayQuotaExceeded("Relay limit exceeded", url, credential_index=credential.index)
                logger.warning(f"Warning: {quota}")

                result = await self._pool.advance_if_still_current(credential.index)
                if result.exhausted:
                    logger.error(f"All {self._pool.size} relay credentials exhausted, url: [{url}]")
                    return FetchOutcome.failed(
                        OutcomeKind.CREDENTIALS_EXHAUSTED,
                        url,
                        CredentialsExhausted(
                            "Relay credentials exhausted", url, pool_size=self._pool.size
                        ),
                        credential_index=credential.index,
                        attempts=attempts,
                        via_relay=True,
                    )
                if not result.advanced:
                    logger.debug(f"Credential {credential.index} already retired, now on {result.index}")

                credential = await self._pool.current()
                continue

            if not response.is_success:
                logger.error(f"Relay rejected request: status [{response.status_code}] url: [{url}]")
                return FetchOutcome.failed(
                    OutcomeKind.TRANSPORT_ERROR,
                    url,
                    TransportError("Unexpected relay status", url, status_code=response.status_code),
                    credential_index=credential.index,
                    attempts=attempts,
                    via_relay=True,
                )

            error: RelayFetchException
            try:
                envelope = UpstreamEnvelope.model_validate_json(response.content)
                payload = parser.model_validate_json(envelope.content)
            except ValidationError as e:
                error = DecodeError("Malformed relay body", url, content=response.text)
                logger.warning(f"Relay response not decodable: [{e}] url: [{url}] content: [{response.text[:200]}]")
            else:
                if not payload.is_challenge:
                    return FetchOutcome.ok(
                        url,
                        payload,
                        credential_index=credential.index,
                        attempts=attempts,
                        via_relay=True,
                    )
                # A challenge does not retire the credential
                error = UpstreamChallenge("Upstream challenge through relay", url)
                logger.warning(f"Upstream challenge via credential {credential.index}: url: [{url}]")

            soft_failures += 1
            if soft_failures > self._config.max_soft_retries:
                logger.error(f"Giving up after {soft_failures} soft failures: [{error}]")
                return FetchOutcome.failed(
                    OutcomeKind.DISQUALIFIED,
                    url,
                    error,
                    credential_index=credential.index,
                    attempts=attempts,
                    via_relay=True,
                )

            delay = self._backoff(soft_failures)
            if delay > 0:
                await asyncio.sleep(delay)

            credential = await self._pool.current()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
