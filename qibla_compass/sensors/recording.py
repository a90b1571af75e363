"""Sensor recordings for offline replay.

A recording is a JSON document holding the samples delivered by a
sensor source during one session, plus the screen rotation and
location in effect, so a session can be replayed through the pipeline.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from ..core.types import ScreenRotation, SensorEvent, SensorKind, UserLocation
from .source import SensorListener

logger = logging.getLogger(__name__)


@dataclass
class AccuracyChange:
    """Accuracy notification captured during a recording."""
    timestamp_ms: float
    kind: SensorKind
    accuracy: int


@dataclass
class SensorRecording:
    """Complete recording session."""
    description: str = ""
    screen_rotation: ScreenRotation = ScreenRotation.ROTATION_0
    location: Optional[UserLocation] = None
    events: List[SensorEvent] = field(default_factory=list)
    accuracy_changes: List[AccuracyChange] = field(default_factory=list)

    @property
    def duration_ms(self) -> float:
        if len(self.events) < 2:
            return 0.0
        return self.events[-1].timestamp_ms - self.events[0].timestamp_ms

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        location = None
        if self.location is not None:
            location = {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "altitude": self.location.altitude,
            }
        return {
            "description": self.description,
            "screen_rotation": int(self.screen_rotation),
            "location": location,
            "events": [
                {
                    "kind": e.kind.value,
                    "values": list(e.values),
                    "timestamp_ms": e.timestamp_ms,
                    "accuracy": int(e.accuracy),
                }
                for e in self.events
            ],
            "accuracy_changes": [
                {
                    "timestamp_ms": c.timestamp_ms,
                    "kind": c.kind.value,
                    "accuracy": c.accuracy,
                }
                for c in self.accuracy_changes
            ],
        }

    def save(self, filepath: str) -> None:
        """Save recording to JSON file."""
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info("Saved %d samples to %s", len(self.events), filepath)

    @classmethod
    def from_dict(cls, data: dict) -> "SensorRecording":
        """Build a recording from its JSON form.

        Raises:
            ValueError: If a sensor kind or screen rotation is unknown.
            KeyError: If a required field is missing.
        """
        location_data = data.get("location")
        location = UserLocation(**location_data) if location_data else None

        events = [
            SensorEvent(
                kind=SensorKind(e["kind"]),
                values=tuple(float(v) for v in e["values"]),
                timestamp_ms=float(e["timestamp_ms"]),
                accuracy=int(e.get("accuracy", 3)),
            )
            for e in data.get("events", [])
        ]
        changes = [
            AccuracyChange(
                timestamp_ms=float(c["timestamp_ms"]),
                kind=SensorKind(c["kind"]),
                accuracy=int(c["accuracy"]),
            )
            for c in data.get("accuracy_changes", [])
        ]

        return cls(
            description=data.get("description", ""),
            screen_rotation=ScreenRotation(int(data.get("screen_rotation", 0))),
            location=location,
            events=events,
            accuracy_changes=changes,
        )

    @classmethod
    def load(cls, filepath: str) -> "SensorRecording":
        """Load recording from JSON file."""
        path = Path(filepath)
        if not path.exists():
            raise FileNotFoundError(f"Recording not found: {filepath}")

        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        recording = cls.from_dict(data)
        logger.info("Loaded %d samples from %s", len(recording.events), filepath)
        return recording


class RecordingSensorSource:
    """Sensor source that replays a recording to registered listeners."""

    def __init__(self, recording: SensorRecording):
        self._recording = recording
        self._available = {e.kind for e in recording.events}
        self._listeners: Dict[SensorKind, List[SensorListener]] = {}

    def has_sensor(self, kind: SensorKind) -> bool:
        return kind in self._available

    def register(self, listener: SensorListener, kind: SensorKind) -> bool:
        if kind not in self._available:
            return False
        listeners = self._listeners.setdefault(kind, [])
        if listener not in listeners:
            listeners.append(listener)
        return True

    def unregister(self, listener: SensorListener) -> None:
        for listeners in self._listeners.values():
            if listener in listeners:
                listeners.remove(listener)

    def screen_rotation(self) -> ScreenRotation:
        return self._recording.screen_rotation

    def replay(self) -> int:
        """Deliver all samples and accuracy changes in timestamp order.

        Returns:
            Number of samples delivered to at least one listener.
        """
        changes = sorted(self._recording.accuracy_changes, key=lambda c: c.timestamp_ms)
        change_index = 0
        delivered = 0

        for event in self._recording.events:
            while change_index < len(changes) and changes[change_index].timestamp_ms <= event.timestamp_ms:
                change = changes[change_index]
                for listener in list(self._listeners.get(change.kind, [])):
                    listener.on_accuracy_changed(change.kind, change.accuracy)
                change_index += 1

            listeners = list(self._listeners.get(event.kind, []))
            for listener in listeners:
                listener.on_sensor_event(event)
            if listeners:
                delivered += 1

        return delivered
