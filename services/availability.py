"""Circuit breaker deciding whether a remote sync attempt is worthwhile."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from core import get_logger, SyncDefaults

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class SyncAvailabilityState:
    configured: bool
    recently_failed: bool
    last_failure_timestamp: float


class SyncAvailabilityPolicy:
    """Two-state breaker: CLOSED, or OPEN until a cool-down expires.

    There is no gradual half-open probing. Once the cool-down has elapsed
    the next ``should_attempt`` call lets exactly one attempt through and
    clears the failure flag; if that attempt fails the breaker re-opens for
    a full cool-down.

    Whether a backend is configured is fixed at construction.
    """

    def __init__(
        self,
        configured: bool,
        cooldown: float = SyncDefaults.RETRY_AFTER_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._configured = configured
        self.cooldown = cooldown
        self._clock = clock or time.time
        self._recently_failed = False
        self._last_failure_time = 0.0

    @property
    def is_configured(self) -> bool:
        return self._configured

    @property
    def state(self) -> SyncAvailabilityState:
        """Snapshot of the breaker for display and tests."""
        return SyncAvailabilityState(
            configured=self._configured,
            recently_failed=self._recently_failed,
            last_failure_timestamp=self._last_failure_time,
        )

    def should_attempt(self) -> bool:
        """Check whether a remote call should be made right now.

        Returns:
            False when no backend is configured or the cool-down is still
            running, True otherwise
        """
        if not self._configured:
            return False
        if not self._recently_failed:
            return True

        if self._clock() - self._last_failure_time > self.cooldown:
            self._recently_failed = False
            logger.info("Sync cool-down elapsed, allowing a remote attempt")
            return True

        return False

    def mark_failed(self) -> None:
        """Record a remote failure; only the latest timestamp is kept."""
        if not self._recently_failed:
            logger.warning(
                f"Remote sync failed, pausing remote calls for {self.cooldown:.0f}s"
            )
        self._recently_failed = True
        self._last_failure_time = self._clock()

    def mark_succeeded(self) -> None:
        """Record a successful remote call."""
        if self._recently_failed:
            logger.info("Remote sync recovered")
        self._recently_failed = False
