"""Tests for orientation resolution."""

import numpy as np
import pytest
from numpy.testing import assert_array_almost_equal

from qibla_compass.core.angles import normalize_360
from qibla_compass.core.types import FusedRotation, Orientation, RawPair, ScreenRotation
from qibla_compass.heading.orientation import LowPassFilter, OrientationResolver
from qibla_compass.sensors.source import raw_vectors_for, rotation_vector_for


class TestLowPassFilter:
    """Tests for LowPassFilter."""

    def test_first_sample_seeds_output(self):
        """The first sample is returned unchanged."""
        lpf = LowPassFilter(alpha=0.15)
        out = lpf.update(np.array([1.0, 2.0, 3.0]))
        assert_array_almost_equal(out, [1.0, 2.0, 3.0])

    def test_blends_towards_sample(self):
        """Later samples move the output by alpha of the difference."""
        lpf = LowPassFilter(alpha=0.15)
        lpf.update(np.array([0.0, 0.0, 0.0]))
        out = lpf.update(np.array([10.0, 0.0, -10.0]))
        assert_array_almost_equal(out, [1.5, 0.0, -1.5])

    def test_returns_copy(self):
        """Mutating the result does not touch filter state."""
        lpf = LowPassFilter()
        out = lpf.update(np.array([1.0, 1.0, 1.0]))
        out[0] = 100.0
        assert_array_almost_equal(lpf.value, [1.0, 1.0, 1.0])

    def test_reset(self):
        """Reset forgets the baseline."""
        lpf = LowPassFilter()
        lpf.update(np.array([1.0, 1.0, 1.0]))
        lpf.reset()
        assert lpf.value is None
        assert_array_almost_equal(lpf.update(np.array([5.0, 5.0, 5.0])), [5.0, 5.0, 5.0])


class TestOrientationResolver:
    """Tests for OrientationResolver."""

    def test_fused_rotation(self, config):
        """Fused samples resolve to their heading."""
        resolver = OrientationResolver(config)
        sample = FusedRotation(rotation_vector=np.array(rotation_vector_for(123.0)))
        orientation = resolver.resolve(sample)
        assert orientation.azimuth_deg == pytest.approx(123.0, abs=1e-6)

    def test_raw_pair_requires_both_vectors(self, config):
        """No raw pair until gravity and field have been seen."""
        resolver = OrientationResolver(config)
        gravity, geomagnetic = raw_vectors_for(10.0)
        assert resolver.raw_pair() is None
        resolver.update_gravity(gravity)
        assert resolver.raw_pair() is None
        resolver.update_geomagnetic(geomagnetic)
        assert resolver.raw_pair() is not None

    def test_raw_pair_resolves(self, config):
        """Filtered raw vectors resolve to the simulated heading."""
        resolver = OrientationResolver(config)
        gravity, geomagnetic = raw_vectors_for(250.0)
        resolver.update_gravity(gravity)
        resolver.update_geomagnetic(geomagnetic)
        orientation = resolver.resolve(resolver.raw_pair())
        assert normalize_360(orientation.azimuth_deg) == pytest.approx(250.0, abs=1e-6)

    def test_degenerate_raw_pair(self, config):
        """A raw pair in free fall resolves to None."""
        resolver = OrientationResolver(config)
        sample = RawPair(gravity=np.zeros(3), geomagnetic=np.array([0.0, 20.0, -42.0]))
        assert resolver.resolve(sample) is None

    def test_unsupported_input(self, config):
        """Unknown input types are rejected."""
        resolver = OrientationResolver(config)
        with pytest.raises(TypeError):
            resolver.resolve(np.array([0.0, 0.0, 0.0, 1.0]))

    def test_screen_rotation_applied(self, config):
        """The provider's screen rotation remaps the axes."""
        resolver = OrientationResolver(config, lambda: ScreenRotation.ROTATION_90)
        sample = FusedRotation(rotation_vector=np.array([0.0, 0.0, 0.0, 1.0]))
        assert resolver.resolve(sample).azimuth_deg == pytest.approx(90.0)

    def test_screen_rotation_accepts_plain_int(self, config):
        """Providers may return the rotation in degrees."""
        resolver = OrientationResolver(config, lambda: 180)
        assert resolver.screen_rotation() == ScreenRotation.ROTATION_180

    def test_screen_rotation_failure_falls_back(self, config):
        """A failing provider falls back to the natural orientation."""
        def broken():
            raise RuntimeError("display unavailable")

        resolver = OrientationResolver(config, broken)
        assert resolver.screen_rotation() == ScreenRotation.ROTATION_0

        sample = FusedRotation(rotation_vector=np.array(rotation_vector_for(45.0)))
        assert resolver.resolve(sample).azimuth_deg == pytest.approx(45.0, abs=1e-6)

    def test_invalid_screen_rotation_falls_back(self, config):
        """An out-of-range rotation falls back to the natural orientation."""
        resolver = OrientationResolver(config, lambda: 45)
        assert resolver.screen_rotation() == ScreenRotation.ROTATION_0

    @pytest.mark.parametrize("pitch,roll,expected", [
        (0.0, 0.0, False),
        (30.0, 0.0, False),
        (31.0, 0.0, True),
        (0.0, -45.0, True),
        (-29.0, 29.0, False),
    ])
    def test_level_warning(self, config, pitch, roll, expected):
        """Level warning is raised when pitch or roll exceeds 30 degrees."""
        resolver = OrientationResolver(config)
        orientation = Orientation(azimuth_deg=0.0, pitch_deg=pitch, roll_deg=roll)
        assert resolver.needs_level_warning(orientation) is expected
