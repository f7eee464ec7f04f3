"""Fetchers module - direct, relay and redirect requests."""

from .direct_fetcher import DirectFetcher
from .relay_fetcher import RelayFetcher
from .redirect_resolver import RedirectResolver

__all__ = ["DirectFetcher", "RelayFetcher", "RedirectResolver"]
