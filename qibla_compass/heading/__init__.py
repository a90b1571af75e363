"""Heading estimation pipeline."""

from .orientation import LowPassFilter, OrientationResolver
from .declination import DeclinationCorrector, true_heading, wmm_declination
from .interference import InterferenceDetector, InterferenceStatus
from .smoother import (
    CircularSmoother,
    HeadingHistory,
    HeadingSmoother,
    SmoothedHeading,
    SpikeTracker,
)
from .emission import EmissionGate
from .session import HeadingSession
from .pipeline import CompassPipeline
from .qibla import (
    distance_to_kaaba_km,
    is_aligned,
    qibla_bearing,
    qibla_offset,
)

__all__ = [
    "LowPassFilter",
    "OrientationResolver",
    "DeclinationCorrector",
    "true_heading",
    "wmm_declination",
    "InterferenceDetector",
    "InterferenceStatus",
    "CircularSmoother",
    "HeadingHistory",
    "HeadingSmoother",
    "SmoothedHeading",
    "SpikeTracker",
    "EmissionGate",
    "HeadingSession",
    "CompassPipeline",
    "distance_to_kaaba_km",
    "is_aligned",
    "qibla_bearing",
    "qibla_offset",
]
