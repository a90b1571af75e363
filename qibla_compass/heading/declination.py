"""Magnetic declination correction.

Declination comes from the World Magnetic Model bundled with the ahrs
package, evaluated locally for the last known observer location.
"""

import datetime
import logging
import threading
import time
from typing import Callable, Optional, Tuple

from ahrs.utils import WMM

from ..core.angles import normalize_360
from ..core.types import UserLocation

logger = logging.getLogger(__name__)

DeclinationModel = Callable[[float, float, float, float], float]


def wmm_declination(
    latitude: float,
    longitude: float,
    altitude: float,
    time_ms: float
) -> float:
    """Magnetic declination from the World Magnetic Model.

    Args:
        latitude: Geodetic latitude in degrees.
        longitude: Geodetic longitude in degrees.
        altitude: Height above the ellipsoid in metres.
        time_ms: Unix time in milliseconds.

    Returns:
        Declination in degrees, east positive.
    """
    date = datetime.datetime.fromtimestamp(
        time_ms / 1000.0, tz=datetime.timezone.utc
    ).date()

    model = WMM(date)
    model.magnetic_field(latitude, longitude, height=altitude / 1000.0, date=date)
    return float(model.D)


def true_heading(magnetic_azimuth_deg: float, declination_deg: float) -> float:
    """Convert a magnetic azimuth to a true-north heading in [0, 360)."""
    return normalize_360(magnetic_azimuth_deg + declination_deg)


class DeclinationCorrector:
    """Adds local declination to magnetic azimuth.

    The location may be set from a different thread than the one
    delivering sensor samples, so it is guarded by a lock. Model results
    are cached per location and UTC day.
    """

    def __init__(
        self,
        model: DeclinationModel = wmm_declination,
        wall_clock: Callable[[], float] = time.time
    ):
        """Initialize corrector.

        Args:
            model: Callable (lat, lon, alt_m, time_ms) -> degrees.
            wall_clock: Returns Unix time in seconds.
        """
        self._model = model
        self._wall_clock = wall_clock
        self._lock = threading.Lock()
        self._location: Optional[UserLocation] = None
        self._cache_key: Optional[Tuple[UserLocation, datetime.date]] = None
        self._cached_declination = 0.0

    def set_location(self, latitude: float, longitude: float, altitude: float = 0.0) -> None:
        """Replace the observer location."""
        location = UserLocation(
            latitude=float(latitude),
            longitude=float(longitude),
            altitude=float(altitude),
        )
        with self._lock:
            self._location = location
        logger.info(
            "Location set: lat=%.4f lon=%.4f alt=%.1f m",
            location.latitude, location.longitude, location.altitude
        )

    @property
    def location(self) -> Optional[UserLocation]:
        """Current observer location, or None if unset."""
        with self._lock:
            return self._location

    def declination(self) -> float:
        """Declination in degrees for the current location and time.

        Returns 0 when no location is set or the model cannot be evaluated.
        A failure is cached like a result, so the model is not retried
        until the location or the UTC day changes.
        """
        location = self.location
        if location is None:
            return 0.0

        time_ms = self._wall_clock() * 1000.0
        day = datetime.datetime.fromtimestamp(
            time_ms / 1000.0, tz=datetime.timezone.utc
        ).date()
        key = (location, day)
        if key == self._cache_key:
            return self._cached_declination

        try:
            value = float(self._model(
                location.latitude,
                location.longitude,
                location.altitude,
                time_ms,
            ))
        except Exception:
            logger.warning(
                "Declination model failed, using 0 until location or day changes",
                exc_info=True
            )
            value = 0.0

        self._cache_key = key
        self._cached_declination = value
        logger.debug("Declination %.2f deg at %s", value, location)
        return value

    def correct(self, magnetic_azimuth_deg: float) -> float:
        """Magnetic azimuth to true heading in [0, 360)."""
        return true_heading(magnetic_azimuth_deg, self.declination())
