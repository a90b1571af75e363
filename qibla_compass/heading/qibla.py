"""Qibla bearing and alignment helpers."""

import math

from ..core.angles import angular_difference, normalize_360

KAABA_LATITUDE = 21.4225
KAABA_LONGITUDE = 39.8262
EARTH_RADIUS_KM = 6371.0
ALIGNMENT_TOLERANCE_DEG = 3.0


def qibla_bearing(latitude: float, longitude: float) -> float:
    """Initial great-circle bearing from an observer to the Kaaba.

    Args:
        latitude: Observer latitude in degrees.
        longitude: Observer longitude in degrees.

    Returns:
        Bearing in degrees from true north, in [0, 360).
    """
    kaaba_lat = math.radians(KAABA_LATITUDE)
    kaaba_lng = math.radians(KAABA_LONGITUDE)
    my_lat = math.radians(latitude)
    my_lng = math.radians(longitude)

    y = math.sin(kaaba_lng - my_lng) * math.cos(kaaba_lat)
    x = (math.cos(my_lat) * math.sin(kaaba_lat)
         - math.sin(my_lat) * math.cos(kaaba_lat) * math.cos(kaaba_lng - my_lng))

    return normalize_360(math.degrees(math.atan2(y, x)))


def distance_to_kaaba_km(latitude: float, longitude: float) -> float:
    """Haversine distance from an observer to the Kaaba in kilometres."""
    kaaba_lat = math.radians(KAABA_LATITUDE)
    kaaba_lng = math.radians(KAABA_LONGITUDE)
    lat = math.radians(latitude)
    lng = math.radians(longitude)

    d_lat = kaaba_lat - lat
    d_lng = kaaba_lng - lng

    a = (math.sin(d_lat / 2) ** 2
         + math.cos(lat) * math.cos(kaaba_lat) * math.sin(d_lng / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def qibla_offset(qibla_deg: float, heading_deg: float) -> float:
    """Needle rotation relative to the device's top edge, in [0, 360)."""
    return normalize_360(qibla_deg - heading_deg)


def is_aligned(
    qibla_deg: float,
    heading_deg: float,
    tolerance_deg: float = ALIGNMENT_TOLERANCE_DEG
) -> bool:
    """Whether the device points at the qibla within tolerance."""
    return angular_difference(qibla_deg, heading_deg) < tolerance_deg
