"""
Fetch Orchestrator Module

The central coordinator: probes the upstream directly and falls back to the
relay when the direct path is blocked, challenged or unreachable.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, List

from relayfetch.captcha import CaptchaVerifier
from relayfetch.config import FetcherConfig, config as default_config
from relayfetch.exceptions import CredentialsExhausted, FetchFailure
from relayfetch.fetchers.direct_fetcher import DirectFetcher
from relayfetch.fetchers.redirect_resolver import RedirectResolver
from relayfetch.fetchers.relay_fetcher import RelayFetcher
from relayfetch.models import FetchOutcome, OutcomeKind, UpstreamResponse
from relayfetch.rotation.credential_pool import CredentialPool


logger = logging.getLogger(__name__)


@dataclass
class FetchStats:
    """Statistics for the orchestrator's lifetime."""

    started_at: float = 0.0
    requests: int = 0
    direct_hits: int = 0
    relay_hits: int = 0
    fallbacks: int = 0
    failures: int = 0

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return time.time() - self.started_at

    @property
    def success_rate(self) -> float:
        """Success rate percentage."""
        if self.requests == 0:
            return 0.0
        return ((self.direct_hits + self.relay_hits) / self.requests) * 100

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "duration_seconds": round(self.duration, 2),
            "requests": self.requests,
            "direct_hits": self.direct_hits,
            "relay_hits": self.relay_hits,
            "fallbacks": self.fallbacks,
            "failures": self.failures,
            "success_rate": round(self.success_rate, 2),
        }


class FetchOrchestrator:
    """
    Direct-first fetcher with relay fallback.

    Workflow per URL:
    1. Direct request (one attempt, short timeout)
    2. On any failure or upstream challenge, relay request with credential rotation
    3. Relay failure is raised as FetchFailure (CredentialsExhausted when the pool ran dry)

    Owns one long-lived HTTP client per role; close it with ``aclose()`` or
    use it as an async context manager.

    Example:
        async with FetchOrchestrator() as orchestrator:
            reply = await orchestrator.fetch("https://api.example.com/x/v2/reply?oid=1")
            print(reply.data)
    """

    def __init__(
        self,
        config: FetcherConfig | None = None,
        pool: CredentialPool | None = None,
        direct_fetcher: DirectFetcher | None = None,
        relay_fetcher: RelayFetcher | None = None,
        captcha_verifier: CaptchaVerifier | None = None,
        redirect_resolver: RedirectResolver | None = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Custom configuration (uses global if None)
            pool: Credential pool (built from config if None)
            direct_fetcher: Direct path (created if None)
            relay_fetcher: Relay path (created on top of ``pool`` if None)
            captcha_verifier: Captcha verifier (created if None)
            redirect_resolver: Short-link resolver (created if None)

        Raises:
            ConfigurationError: If no relay credential is configured
        """
        self._config = config or default_config

        # Fail at startup, not on first fallback
        self._pool = pool or CredentialPool.from_config(self._config.relay)

        self._direct = direct_fetcher or DirectFetcher(
            timeout=self._config.direct.timeout,
            user_agent=self._config.user_agent,
        )
        self._relay = relay_fetcher or RelayFetcher(self._pool, relay_config=self._config.relay)
        self._captcha = captcha_verifier or CaptchaVerifier(captcha_config=self._config.captcha)
        self._redirect = redirect_resolver or RedirectResolver(
            timeout=self._config.redirect.timeout,
            user_agent=self._config.user_agent,
        )

        self._stats = FetchStats(started_at=time.time())

    async def try_fetch(self, url: str, model: Any = None) -> FetchOutcome:
        """
        Fetch a URL and return the final outcome without raising.

        Args:
            url: Upstream API URL
            model: Type of the ``data`` field (raw JSON if None)
        """
        self._stats.requests += 1

        outcome = await self._direct.fetch(url, model)
        if outcome.success:
            self._stats.direct_hits += 1
            return outcome

        logger.info(f"Falling back to relay ({outcome.kind.value}) for {url}")
        self._stats.fallbacks += 1

        outcome = await self._relay.fetch(url, model)
        if outcome.success:
            self._stats.relay_hits += 1
        else:
            self._stats.failures += 1
        return outcome

    async def fetch(self, url: str, model: Any = None) -> UpstreamResponse:
        """
        Fetch a URL, falling back to the relay if needed.

        Args:
            url: Upstream API URL
            model: Type of the ``data`` field (raw JSON if None)

        Returns:
            Decoded upstream response; never one carrying the challenge code

        Raises:
            CredentialsExhausted: If every relay credential hit its quota
            FetchFailure: If the relay path failed for any other reason
        """
        outcome = await self.try_fetch(url, model)
        if outcome.success:
            return outcome.response

        if outcome.kind is OutcomeKind.CREDENTIALS_EXHAUSTED:
            raise CredentialsExhausted(
                "Relay credentials exhausted",
                url,
                outcome=outcome,
                pool_size=self._pool.size,
            ) from outcome.error

        raise FetchFailure(f"Fetch failed: {outcome.error}", url, outcome=outcome) from outcome.error

    async def fetch_many(
        self,
        urls: List[str],
        model: Any = None,
        concurrency: int | None = None,
    ) -> List[FetchOutcome]:
        """
        Fetch multiple URLs with controlled concurrency.

        Args:
            urls: List of upstream URLs
            model: Type of the ``data`` field (raw JSON if None)
            concurrency: Maximum concurrent fetches (default from config)

        Returns:
            List of FetchOutcome objects, in input order
        """
        semaphore = asyncio.Semaphore(concurrency or self._config.concurrency)

        async def fetch_with_semaphore(url: str) -> FetchOutcome:
            async with semaphore:
                return await self.try_fetch(url, model)

        tasks = [fetch_with_semaphore(url) for url in urls]
        return await asyncio.gather(*tasks)

    async def verify_captcha(self, token: str, secret: str | None = None) -> bool:
        """Check a captcha token; False on any failure."""
        return await self._captcha.verify(token, secret)

    async def resolve_redirect(self, url: str) -> str:
        """Resolve a share short link to its target URL."""
        return await self._redirect.resolve(url)

    def get_stats(self) -> dict:
        """Get current statistics."""
        return {
            "fetcher": self._stats.to_dict(),
            "credentials": self._pool.get_stats(),
        }

    @property
    def pool(self) -> CredentialPool:
        """Shared credential pool."""
        return self._pool

    async def aclose(self) -> None:
        """Close every HTTP client."""
        await asyncio.gather(
            self._direct.aclose(),
            self._relay.aclose(),
            self._captcha.aclose(),
            self._redirect.aclose(),
        )

    async def __aenter__(self) -> "FetchOrchestrator":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
