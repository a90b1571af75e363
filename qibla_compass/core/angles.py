"""Angle helpers for compass bearings in degrees."""

import math


def normalize_360(angle_deg: float) -> float:
    """Wrap an angle into [0, 360)."""
    wrapped = math.fmod(angle_deg, 360.0)
    if wrapped < 0.0:
        wrapped += 360.0
    # fmod of a tiny negative value can round up to exactly 360
    if wrapped >= 360.0:
        wrapped = 0.0
    return wrapped


def angular_difference(a_deg: float, b_deg: float) -> float:
    """Shortest-arc distance between two bearings, in [0, 180].

    Args:
        a_deg: First bearing in [0, 360).
        b_deg: Second bearing in [0, 360).
    """
    diff = abs(a_deg - b_deg)
    if diff > 180.0:
        diff = 360.0 - diff
    return diff


def signed_angular_difference(target_deg: float, current_deg: float) -> float:
    """Signed shortest rotation from current to target, in [-180, 180)."""
    return normalize_360(target_deg - current_deg + 180.0) - 180.0
