"""
Redirect Resolver Module

Resolves share short links to their target URL by reading the 302
``Location`` header instead of following it.
"""

import logging

import httpx

from relayfetch.config import config
from relayfetch.exceptions import RedirectError


logger = logging.getLogger(__name__)

REDIRECT_STATUS = 302


class RedirectResolver:
    """Single best-effort GET with redirects disabled."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        user_agent: str | None = None,
    ):
        self._timeout = timeout or config.redirect.timeout
        self._headers = {"User-Agent": user_agent or config.user_agent}
        self._client = client or httpx.AsyncClient(
            timeout=self._timeout,
            follow_redirects=False,
        )

    async def resolve(self, url: str) -> str:
        """
        Return the redirect target of a short link.

        Raises:
            RedirectError: On transport failure or when the reply is not a
                302 carrying a Location header
        """
        try:
            response = await self._client.get(url, headers=self._headers, follow_redirects=False)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error(f"Exception: [{e!r}] url: [{url}]")
            raise RedirectError(str(e) or type(e).__name__, url) from e

        location = response.headers.get("location")
        if response.status_code != REDIRECT_STATUS or not location:
            logger.error(f"Not a redirect: status [{response.status_code}] url: [{url}]")
            raise RedirectError("Not Redirect Request", url, status_code=response.status_code)

        return location

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
