"""
Login rate limiting.

Each client key (normally the source IP) gets a budget of attempts per
window. Spending the last point blocks the key for the block duration;
afterwards the entry expires and the key starts fresh.

RateLimitStore is the seam for swapping the in-memory store for a shared
one when running more than one process.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Mapping, Optional, Protocol

from dailyreport.utils.logger import get_logger

logger = get_logger(__name__)

LOGIN_MAX_ATTEMPTS = 5
LOGIN_WINDOW_SECONDS = 5 * 60
LOGIN_BLOCK_SECONDS = 5 * 60

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class ConsumeResult:
    success: bool
    remaining_points: Optional[int] = None
    retry_after_seconds: Optional[int] = None


class RateLimitStore(Protocol):
    def consume(self, key: str) -> ConsumeResult:
        ...

    def reset(self, key: str) -> None:
        ...


@dataclass
class RateLimitEntry:
    consumed: int
    window_started_at: float
    blocked_until: Optional[float] = None

    def expires_at(self, duration: float) -> float:
        if self.blocked_until is not None:
            return self.blocked_until
        return self.window_started_at + duration


class InMemoryRateLimitStore:
    """
    Process-local counter store.

    Features:
    - Fixed budget per window, anchored at the first attempt
    - Block period once the budget is spent
    - Lazy expiry on access, plus a sweep of every expired key at most
      once per window so unseen clients do not accumulate
    - One lock around every read-modify-write
    """

    def __init__(
        self,
        points: int,
        duration_seconds: float,
        block_duration_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        if points < 1:
            raise ValueError("points must be at least 1")
        self.points = points
        self.duration_seconds = duration_seconds
        self.block_duration_seconds = block_duration_seconds
        self._clock = clock
        self._entries: Dict[str, RateLimitEntry] = {}
        self._lock = Lock()
        self._last_sweep = clock()

    def consume(self, key: str) -> ConsumeResult:
        """Spend one point for key, or report how long key stays blocked."""
        with self._lock:
            now = self._clock()
            if now - self._last_sweep >= self.duration_seconds:
                self._sweep(now)
            entry = self._live_entry(key, now)

            if entry is None:
                entry = RateLimitEntry(consumed=0, window_started_at=now)
                self._entries[key] = entry

            if entry.blocked_until is not None:
                return ConsumeResult(
                    success=False,
                    retry_after_seconds=max(1, math.ceil(entry.blocked_until - now)),
                )

            entry.consumed += 1
            if entry.consumed >= self.points:
                entry.blocked_until = now + self.block_duration_seconds
                logger.warning("Rate limit budget exhausted", key=key, points=self.points)

            return ConsumeResult(success=True, remaining_points=self.points - entry.consumed)

    def reset(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def _live_entry(self, key: str, now: float) -> Optional[RateLimitEntry]:
        entry = self._entries.get(key)
        if entry is not None and now >= entry.expires_at(self.duration_seconds):
            del self._entries[key]
            return None
        return entry

    def _sweep(self, now: float) -> None:
        expired = [
            key
            for key, entry in self._entries.items()
            if now >= entry.expires_at(self.duration_seconds)
        ]
        for key in expired:
            del self._entries[key]
        self._last_sweep = now
        if expired:
            logger.debug("Expired rate limit entries removed", count=len(expired))

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class LoginRateLimiter:
    """Login-specific facade: consume on every attempt, reset on success."""

    def __init__(self, store: RateLimitStore):
        self.store = store

    def check(self, client_ip: str) -> ConsumeResult:
        return self.store.consume(client_ip)

    def reset(self, client_ip: str) -> None:
        """Clear the client's counter. Never raises: a successful login must complete."""
        try:
            self.store.reset(client_ip)
        except Exception as e:
            logger.error("Failed to reset login rate limit", client_ip=client_ip, error=str(e))


def create_login_rate_limiter(clock: Callable[[], float] = time.monotonic) -> LoginRateLimiter:
    """5 attempts per 5 minutes, then a 5 minute block."""
    store = InMemoryRateLimitStore(
        points=LOGIN_MAX_ATTEMPTS,
        duration_seconds=LOGIN_WINDOW_SECONDS,
        block_duration_seconds=LOGIN_BLOCK_SECONDS,
        clock=clock,
    )
    return LoginRateLimiter(store)


def get_client_ip(headers: Mapping[str, str], trust_proxy: bool) -> str:
    """
    Resolve the rate-limit key for a request.

    Forwarding headers are only honoured behind a trusted proxy. The last
    X-Forwarded-For hop is the one appended by our own proxy, so it is the
    one that cannot be spoofed by the client. Untrusted traffic shares the
    "unknown" bucket.
    """
    if trust_proxy:
        forwarded_for = headers.get("x-forwarded-for")
        if forwarded_for:
            ips = [ip.strip() for ip in forwarded_for.split(",")]
            return ips[-1] or UNKNOWN_CLIENT

        real_ip = headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    return UNKNOWN_CLIENT
