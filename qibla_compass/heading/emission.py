"""Outbound event rate limiting."""

from typing import Optional


class EmissionGate:
    """Allow at most one emission per interval.

    Results arriving inside the interval are dropped, not queued. A
    timestamp earlier than the last emission restarts the interval.
    """

    def __init__(self, interval_ms: float = 66.0):
        self.interval_ms = interval_ms
        self._last_emit_ms: Optional[float] = None
        self.passed = 0
        self.dropped = 0

    def try_pass(self, now_ms: float) -> bool:
        """Record an emission attempt.

        Args:
            now_ms: Current time in milliseconds.

        Returns:
            True if the caller should emit now.
        """
        last = self._last_emit_ms
        # now_ms < last means the clock restarted, so let it through.
        if last is not None and last <= now_ms < last + self.interval_ms:
            self.dropped += 1
            return False

        self._last_emit_ms = now_ms
        self.passed += 1
        return True

    @property
    def last_emit_ms(self) -> Optional[float]:
        return self._last_emit_ms

    def reset(self) -> None:
        self._last_emit_ms = None
        self.passed = 0
        self.dropped = 0
