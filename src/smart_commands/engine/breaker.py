"""Consecutive-failure circuit breaker guarding the AI service."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BreakerState:
    """Point-in-time view of a :class:`CircuitBreaker`."""

    failures: int
    last_failure: float | None
    open: bool


class CircuitBreaker:
    """Stops AI calls for a cool-down window after repeated failures.

    The breaker is open while ``failures >= failure_threshold`` and less than
    ``reset_timeout`` seconds have passed since the last failure. Once the
    window has passed, calls are let through again; a failure re-opens the
    breaker for another window and a success closes it.
    """

    def __init__(
        self,
        failure_threshold: int = 3,
        reset_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize breaker.

        Args:
            failure_threshold: Consecutive failures that open the breaker
            reset_timeout: Cool-down window in seconds
            clock: Monotonic time source
        """
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._failures = 0
        self._last_failure: float | None = None
        self._lock = threading.Lock()

    def _is_open(self) -> bool:
        if self._failures < self.failure_threshold or self._last_failure is None:
            return False
        return self._clock() - self._last_failure < self.reset_timeout

    @property
    def is_open(self) -> bool:
        with self._lock:
            return self._is_open()

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failures

    def allow_request(self) -> bool:
        """Whether the next AI call may go ahead."""
        with self._lock:
            if self._is_open():
                return False
            if self._failures >= self.failure_threshold:
                logger.info("Circuit breaker cool-down elapsed, allowing probe request")
            return True

    def record_success(self) -> None:
        with self._lock:
            if self._failures:
                logger.info(f"Circuit breaker reset after {self._failures} failure(s)")
            self._failures = 0

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            self._last_failure = self._clock()
            failures = self._failures

        if failures >= self.failure_threshold:
            logger.warning(f"Circuit breaker open after {failures} consecutive AI failures")
        else:
            logger.info(f"AI failure recorded ({failures}/{self.failure_threshold})")

    def reset(self) -> None:
        with self._lock:
            self._failures = 0
            self._last_failure = None

    def state(self) -> BreakerState:
        with self._lock:
            return BreakerState(
                failures=self._failures,
                last_failure=self._last_failure,
                open=self._is_open(),
            )
