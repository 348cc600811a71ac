"""Short-lived token and counter storage.

Values live in a key-value store with per-key expiry. The store is a
Django cache backend passed in by the caller, so a multi-process
deployment can point it at Redis without code changes.
"""

import logging
from dataclasses import dataclass
from typing import final

from django.conf import settings
from django.core.cache import BaseCache, caches

logger = logging.getLogger(__name__)


@final
@dataclass(frozen=True, slots=True)
class RateLimitResult:
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int


@final
class TokenStore:
    """Key-value store with expiry for short-lived values and rate counters."""

    def __init__(self, backend: BaseCache) -> None:
        """Initialize the store.

        Args:
            backend: Cache backend providing get/set/delete with timeouts.
        """
        self._backend = backend

    def get(self, key: str) -> str | None:
        """Return the value stored under key, or None if absent/expired."""
        return self._backend.get(key)

    def set(self, key: str, value: str, ttl: int) -> None:  # noqa: WPS125
        """Store value under key for ttl seconds."""
        self._backend.set(key, value, timeout=ttl)

    def delete(self, key: str) -> None:
        """Remove key if present."""
        self._backend.delete(key)

    def check_rate_limit(
        self,
        identifier: str,
        limit: int,
        window: int,
    ) -> RateLimitResult:
        """Count a hit against a fixed-window rate limit.

        Args:
            identifier: What is being limited (e.g. 'upload:42').
            limit: Maximum hits per window.
            window: Window length in seconds.

        Returns:
            Whether the hit is allowed and how many hits remain.
        """
        key = f'rate:{identifier}'
        # add() only writes when the key is missing, which opens the window
        if self._backend.add(key, 1, timeout=window):
            count = 1
        else:
            try:
                count = self._backend.incr(key)
            except ValueError:
                # Window expired between add() and incr()
                self._backend.set(key, 1, timeout=window)
                count = 1

        if count > limit:
            logger.warning('Rate limit exceeded for %s', identifier)
            return RateLimitResult(allowed=False, remaining=0)
        return RateLimitResult(allowed=True, remaining=limit - count)


def get_token_store() -> TokenStore:
    """Build a token store on the configured cache alias.

    Returns:
        TokenStore backed by ``caches[TOKEN_STORE_CACHE_ALIAS]``.
    """
    alias = getattr(settings, 'TOKEN_STORE_CACHE_ALIAS', 'default')
    return TokenStore(caches[alias])
