"""
relayfetch - Resilient upstream API fetching through a rotating scraping relay.

This package provides:
- Direct-first fetching with relay fallback
- Relay credential rotation safe under concurrency
- Typed upstream responses
- Captcha token verification
- Short-link redirect resolution
"""

from relayfetch.exceptions import CredentialsExhausted, FetchFailure
from relayfetch.models import FetchOutcome, UpstreamResponse
from relayfetch.orchestrator import FetchOrchestrator

__version__ = "1.0.0"

__all__ = [
    "CredentialsExhausted",
    "FetchFailure",
    "FetchOrchestrator",
    "FetchOutcome",
    "UpstreamResponse",
]
