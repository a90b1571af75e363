"""Tests for magnetic interference detection."""

import logging

import numpy as np
import pytest

from qibla_compass.heading.interference import InterferenceDetector, InterferenceStatus


class TestInterferenceDetector:
    """Tests for InterferenceDetector."""

    def test_earth_field_passes(self, config):
        """A typical Earth field is not interference."""
        detector = InterferenceDetector(config)
        status = detector.check(np.array([20.0, 0.0, -42.0]))  # ~46.5 uT
        assert not status.has_interference
        assert status.failure_reason is None
        assert status.magnitude == pytest.approx(np.hypot(20.0, 42.0))
        assert not detector.has_interference

    def test_weak_field(self, config):
        """Fields below 25 uT are flagged."""
        detector = InterferenceDetector(config)
        status = detector.check(np.array([10.0, 0.0, -10.0]))
        assert status.has_interference
        assert status.failure_reason == "magnitude_too_low"

    def test_strong_field(self, config):
        """Fields above 65 uT are flagged."""
        detector = InterferenceDetector(config)
        status = detector.check(np.array([100.0, 0.0, 0.0]))
        assert status.has_interference
        assert status.failure_reason == "magnitude_too_high"

    @pytest.mark.parametrize("magnitude,expected", [
        (25.0, False),
        (65.0, False),
        (24.9, True),
        (65.1, True),
    ])
    def test_band_edges_inclusive(self, config, magnitude, expected):
        """The band limits themselves are plausible fields."""
        detector = InterferenceDetector(config)
        assert detector.check(np.array([magnitude, 0.0, 0.0])).has_interference is expected

    def test_non_finite(self, config):
        """Non-finite readings are treated as interference."""
        detector = InterferenceDetector(config)
        status = detector.check(np.array([np.nan, 0.0, 40.0]))
        assert status.has_interference
        assert status.failure_reason == "non_finite_values"

    def test_flag_follows_latest_reading(self, config):
        """The flag clears as soon as the field is back in range."""
        detector = InterferenceDetector(config)
        detector.check(np.array([100.0, 0.0, 0.0]))
        assert detector.has_interference
        detector.check(np.array([30.0, 0.0, 30.0]))
        assert not detector.has_interference

    def test_logs_onset_once(self, config, caplog):
        """Onset is logged once per interference episode."""
        detector = InterferenceDetector(config)
        with caplog.at_level(logging.WARNING, logger="qibla_compass.heading.interference"):
            for _ in range(5):
                detector.check(np.array([100.0, 0.0, 0.0]))
        onset = [r for r in caplog.records if "interference detected" in r.getMessage()]
        assert len(onset) == 1

    def test_stats(self, config):
        """Statistics count checks and failures."""
        detector = InterferenceDetector(config)
        detector.check(np.array([30.0, 0.0, 30.0]))
        detector.check(np.array([100.0, 0.0, 0.0]))
        stats = detector.get_stats()
        assert stats['total_checks'] == 2
        assert stats['failures'] == 1
        assert stats['failure_rate'] == 0.5
        assert stats['has_interference'] is True

        detector.reset()
        assert detector.get_stats()['total_checks'] == 0
        assert not detector.has_interference


class TestInterferenceStatus:
    """Tests for InterferenceStatus."""

    def test_defaults(self):
        """Failure reason defaults to None."""
        status = InterferenceStatus(has_interference=False, magnitude=45.0)
        assert status.failure_reason is None
