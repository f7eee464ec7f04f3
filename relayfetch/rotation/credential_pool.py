"""
Credential Pool Module

Holds the ordered list of relay access keys and the cursor pointing at the
key currently in use. Keys are consumed in order and never reused once the
cursor moves past them.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Sequence

from relayfetch.config import RelayConfig, config
from relayfetch.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    """Snapshot of the active slot."""

    index: int
    key: str


@dataclass(frozen=True)
class AdvanceResult:
    """Result of a compare-and-advance on the pool cursor."""

    index: int  # Active index after the call
    exhausted: bool  # No credential left after the observed one
    advanced: bool  # This call moved the cursor


class CredentialPool:
    """
    Ordered relay credentials with an atomically advanced cursor.

    The cursor only moves forward. ``advance_if_still_current`` compares the
    index a caller observed with the active one and only advances when they
    match, so several tasks hitting a quota on the same key move the cursor
    by one slot, not one slot each.

    Example:
        pool = CredentialPool(["key-a", "key-b"])

        credential = await pool.current()
        # ... relay answered 403 for credential.key ...
        result = await pool.advance_if_still_current(credential.index)
        if result.exhausted:
            ...
    """

    def __init__(self, keys: Sequence[str]):
        """
        Initialize the pool.

        Args:
            keys: Access keys in the order they should be consumed

        Raises:
            ConfigurationError: If no key is given
        """
        keys = tuple(keys)
        if not keys:
            raise ConfigurationError("At least one relay credential must be configured")

        self._keys = keys
        self._active_index = 0
        self._exhausted = False
        self._lock = asyncio.Lock()

    @classmethod
    def from_config(cls, relay_config: RelayConfig | None = None) -> "CredentialPool":
        """
        Build the pool from the semicolon-delimited key setting.

        Args:
            relay_config: Relay settings (default from global config)
        """
        relay_config = relay_config or config.relay
        pool = cls(relay_config.key_list)
        logger.info(f"Loaded {pool.size} relay credentials")
        return pool

    async def current_index(self) -> int:
        """Return the active slot."""
        async with self._lock:
            return self._active_index

    async def current(self) -> Credential:
        """Return the active slot and its key as one consistent snapshot."""
        async with self._lock:
            return Credential(index=self._active_index, key=self._keys[self._active_index])

    async def advance_if_still_current(self, observed_index: int) -> AdvanceResult:
        """
        Retire the observed credential if nobody has done so yet.

        Args:
            observed_index: Index of the credential the caller was rejected with

        Returns:
            AdvanceResult. ``advanced`` is False when another caller already
            moved past ``observed_index``; the caller should simply retry
            with the current credential. ``exhausted`` is True when the
            observed credential was the last one.
        """
        async with self._lock:
            if self._exhausted:
                return AdvanceResult(index=self._active_index, exhausted=True, advanced=False)

            if observed_index < self._active_index:
                return AdvanceResult(index=self._active_index, exhausted=False, advanced=False)

            if self._active_index + 1 >= len(self._keys):
                self._exhausted = True
                return AdvanceResult(index=self._active_index, exhausted=True, advanced=False)

            self._active_index += 1
            logger.warning(
                f"Relay credential {observed_index} retired, "
                f"switching to {self._active_index}/{len(self._keys) - 1}"
            )
            return AdvanceResult(index=self._active_index, exhausted=False, advanced=True)

    def get_stats(self) -> dict:
        """Get pool statistics."""
        return {
            "total": len(self._keys),
            "active_index": self._active_index,
            "remaining": len(self._keys) - self._active_index,
            "exhausted": self._exhausted,
        }

    @property
    def size(self) -> int:
        """Total number of credentials in pool."""
        return len(self._keys)

    @property
    def exhausted(self) -> bool:
        """Whether the last credential has hit its quota."""
        return self._exhausted
