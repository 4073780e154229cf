from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


class ProviderCircuitBreaker:
    """Tracks consecutive traffic provider failures.

    Once ``failure_threshold`` requests in a row have failed, the provider is
    left alone for ``recovery_timeout_seconds`` and segments are served from
    the fallback policy. After that window one trial request is let through;
    its outcome either closes the circuit or restarts the window.
    """

    def __init__(self, failure_threshold: int = 3, recovery_timeout_seconds: float = 30.0) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if recovery_timeout_seconds < 0:
            raise ValueError("recovery_timeout_seconds must be >= 0")
        self._failure_threshold = failure_threshold
        self._recovery_timeout_seconds = recovery_timeout_seconds
        self._consecutive_failures = 0
        self._opened_at: float | None = None

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def allow_request(self, now_seconds: float) -> bool:
        if self._opened_at is None:
            return True
        if now_seconds - self._opened_at < self._recovery_timeout_seconds:
            return False
        # trial request: one more failure reopens the circuit immediately
        self._opened_at = None
        self._consecutive_failures = self._failure_threshold - 1
        logger.info("provider_circuit_trial", extra={"component": "traffic_source"})
        return True

    def record_failure(self, now_seconds: float) -> None:
        self._consecutive_failures += 1
        if self._opened_at is None and self._consecutive_failures >= self._failure_threshold:
            self._opened_at = now_seconds
            logger.error(
                "provider_circuit_opened",
                extra={
                    "component": "traffic_source",
                    "consecutive_failures": self._consecutive_failures,
                    "retry_after_seconds": self._recovery_timeout_seconds,
                },
            )

    def record_success(self) -> None:
        if self._opened_at is not None or self._consecutive_failures:
            logger.info("provider_circuit_closed", extra={"component": "traffic_source"})
        self._consecutive_failures = 0
        self._opened_at = None
