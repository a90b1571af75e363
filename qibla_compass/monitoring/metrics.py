"""Session metrics for the heading pipeline."""

import logging
from collections import deque
from typing import Deque, Optional
import numpy as np

from ..core.config import CompassConfig
from ..core.types import SessionStats

logger = logging.getLogger(__name__)


class SessionMonitor:
    """Counts pipeline activity and reports it periodically.

    Timing uses sample timestamps, so replayed recordings report the
    same figures as live sessions.
    """

    def __init__(self, config: CompassConfig):
        """Initialize monitor.

        Args:
            config: System configuration with monitoring settings.
        """
        self._mon_cfg = config.monitoring
        self._emit_intervals: Deque[float] = deque(maxlen=self._mon_cfg.window_size)
        self._stats = SessionStats()
        self._last_emit_ms: Optional[float] = None
        self._last_log_ms: Optional[float] = None

    def record_sample(self, now_ms: float) -> None:
        """Count a processed sample."""
        self._stats.samples_processed += 1
        self._maybe_log_stats(now_ms)

    def record_rejected(self) -> None:
        """Count a sample rejected by validation."""
        self._stats.samples_rejected += 1

    def record_spike(self, confirmed: bool) -> None:
        """Count a suppressed spike or a confirmed fast rotation."""
        if confirmed:
            self._stats.fast_rotations += 1
        else:
            self._stats.spikes_suppressed += 1

    def record_emission(self, now_ms: float) -> None:
        """Count a delivered heading event."""
        if self._last_emit_ms is not None:
            self._emit_intervals.append(now_ms - self._last_emit_ms)
        self._last_emit_ms = now_ms
        self._stats.events_emitted += 1

    def record_drop(self) -> None:
        """Count a heading suppressed by the emission gate."""
        self._stats.events_dropped += 1

    def _maybe_log_stats(self, now_ms: float) -> None:
        """Log statistics periodically."""
        if self._last_log_ms is None:
            self._last_log_ms = now_ms
            return

        if now_ms - self._last_log_ms >= self._mon_cfg.log_interval_s * 1000.0:
            stats = self.get_stats()
            logger.info(
                "Compass: samples=%d rejected=%d spikes=%d rotations=%d "
                "emitted=%d dropped=%d",
                stats.samples_processed,
                stats.samples_rejected,
                stats.spikes_suppressed,
                stats.fast_rotations,
                stats.events_emitted,
                stats.events_dropped,
            )
            self._last_log_ms = now_ms

    def get_stats(self) -> SessionStats:
        """Get a snapshot of the session counters."""
        mean_interval = None
        if self._emit_intervals:
            mean_interval = float(np.mean(np.array(self._emit_intervals)))

        return SessionStats(
            samples_processed=self._stats.samples_processed,
            samples_rejected=self._stats.samples_rejected,
            spikes_suppressed=self._stats.spikes_suppressed,
            fast_rotations=self._stats.fast_rotations,
            events_emitted=self._stats.events_emitted,
            events_dropped=self._stats.events_dropped,
            mean_emit_interval_ms=mean_interval,
        )

    def reset(self) -> None:
        """Reset all metrics."""
        self._emit_intervals.clear()
        self._stats = SessionStats()
        self._last_emit_ms = None
        self._last_log_ms = None
