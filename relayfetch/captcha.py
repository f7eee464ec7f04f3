"""
Captcha Verifier Module

Checks a captcha token against the validation service. Fails closed: any
error means the token is treated as not verified.
"""

import logging

import httpx
from pydantic import ValidationError

from relayfetch.config import CaptchaConfig, config
from relayfetch.models import CaptchaReply


logger = logging.getLogger(__name__)


class CaptchaVerifier:
    """
    Posts captcha tokens to the validation endpoint.

    Example:
        verifier = CaptchaVerifier()
        if await verifier.verify(token):
            ...
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        captcha_config: CaptchaConfig | None = None,
    ):
        self._config = captcha_config or config.captcha
        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)

    async def verify(self, token: str, secret: str | None = None) -> bool:
        """
        Check whether a captcha token is valid.

        Args:
            token: Token produced by the client-side widget
            secret: Site secret (default from config)

        Returns:
            True only if the service confirmed the token
        """
        secret = secret if secret is not None else self._config.secret

        try:
            response = await self._client.post(
                self._config.verify_url,
                data={"response": token, "secret": secret},
            )
            response.raise_for_status()
            reply = CaptchaReply.model_validate_json(response.content)
        except (httpx.HTTPError, ValidationError) as e:
            logger.error(f"Captcha verification failed: [{e!r}]")
            return False

        return reply.success

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()
