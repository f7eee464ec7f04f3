"""
Shared fixtures: in-memory HTTP transports and fast relay settings.
"""

from typing import Any, Callable

import httpx
import pytest

from relayfetch.config import RelayConfig


@pytest.fixture
def make_client() -> Callable[..., httpx.AsyncClient]:
    """Factory for clients backed by a MockTransport handler."""

    def factory(handler: Callable[[httpx.Request], Any], **kwargs: Any) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler), **kwargs)

    return factory


@pytest.fixture
def relay_config() -> RelayConfig:
    """Three credentials, no backoff delay."""
    return RelayConfig(
        keys="k0;k1;k2",
        base_url="https://relay.test/v1/general",
        max_soft_retries=3,
        backoff_base=0.0,
    )
