#!/usr/bin/env python3
"""Replay a sensor recording through the compass pipeline.

Usage:
    qibla-compass-replay session.json                  # Minimal output
    qibla-compass-replay session.json --output json    # JSON lines
    qibla-compass-replay session.json --lat 48.85 --lon 2.35

Prints every heading event the pipeline delivers, at the same cadence a
live listener would receive them.
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from .core.config import load_config
from .core.types import AccuracyWarning, HeadingEvent
from .heading.pipeline import CompassPipeline
from .heading.qibla import is_aligned, qibla_bearing, qibla_offset
from .sensors.recording import RecordingSensorSource, SensorRecording
from .sensors.source import SensorUnavailableError

logger = logging.getLogger(__name__)


def format_event(event: HeadingEvent, output: str, qibla: Optional[float] = None) -> str:
    """Render a heading event in the requested output format."""
    if output == 'json':
        data = event.to_dict()
        data['timestamp_ms'] = event.timestamp_ms
        if qibla is not None:
            data['qiblaOffset'] = qibla_offset(qibla, event.heading)
            data['isAligned'] = is_aligned(qibla, event.heading)
        return json.dumps(data)

    if output == 'csv':
        return (f"{event.timestamp_ms:.0f},{event.heading:.2f},{event.pitch:.2f},"
                f"{event.roll:.2f},{int(event.is_stabilizing)},"
                f"{int(event.has_magnetic_interference)}")

    flags = ("S" if event.is_stabilizing else "-") + \
            ("M" if event.has_magnetic_interference else "-") + \
            ("L" if event.needs_level_warning else "-")
    line = f"t:{event.timestamp_ms:8.0f} H:{event.heading:6.1f} P:{event.pitch:6.1f} R:{event.roll:6.1f} [{flags}]"
    if qibla is not None:
        line += f" Q:{qibla_offset(qibla, event.heading):6.1f}"
    return line


def run_replay(args: argparse.Namespace) -> int:
    """Replay a recording and print delivered events.

    Returns:
        Process exit code.
    """
    config = load_config(args.config)
    recording = SensorRecording.load(args.recording)
    source = RecordingSensorSource(recording)

    kwargs = {}
    if args.declination is not None:
        fixed = args.declination
        kwargs["declination_model"] = lambda lat, lon, alt, time_ms: fixed

    pipeline = CompassPipeline(
        source,
        config=config,
        rotation_provider=source.screen_rotation,
        **kwargs
    )

    latitude, longitude, altitude = args.lat, args.lon, args.alt
    if (latitude is None or longitude is None) and recording.location is not None:
        latitude = recording.location.latitude
        longitude = recording.location.longitude
        altitude = recording.location.altitude

    qibla = None
    if latitude is not None and longitude is not None:
        pipeline.set_location(latitude, longitude, altitude)
        qibla = qibla_bearing(latitude, longitude)

    def on_heading(event: HeadingEvent) -> None:
        print(format_event(event, args.output, qibla))

    def on_warning(warning: AccuracyWarning) -> None:
        logger.warning("Calibration needed (accuracy=%d)", warning.sensor_accuracy)

    pipeline.add_listener(CompassPipeline.HEADING_CHANGED, on_heading)
    pipeline.add_listener(CompassPipeline.ACCURACY_WARNING, on_warning)

    try:
        pipeline.start_watching()
    except SensorUnavailableError as e:
        logger.error("%s", e)
        return 1

    if args.output == 'csv':
        print("timestamp_ms,heading,pitch,roll,stabilizing,interference")

    source.replay()
    stats = pipeline.get_stats()
    pipeline.stop_watching()

    logger.info(
        "Replayed %d samples in %.1f s: emitted=%d dropped=%d spikes=%d rotations=%d",
        len(recording.events),
        recording.duration_ms / 1000.0,
        stats.events_emitted,
        stats.events_dropped,
        stats.spikes_suppressed,
        stats.fast_rotations,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description='Replay a sensor recording through the compass pipeline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  qibla-compass-replay session.json                      # Minimal output
  qibla-compass-replay session.json --output json        # JSON for piping
  qibla-compass-replay session.json --lat 21.4 --lon 39.8
        """
    )

    parser.add_argument('recording', type=str,
                        help='Path to a JSON sensor recording')
    parser.add_argument('--output', '-o', type=str, default='minimal',
                        choices=['json', 'csv', 'minimal'],
                        help='Output format (default: minimal)')
    parser.add_argument('--config', '-c', type=str, default=None,
                        help='Path to YAML configuration (default: packaged)')
    parser.add_argument('--lat', type=float, default=None,
                        help='Observer latitude in degrees')
    parser.add_argument('--lon', type=float, default=None,
                        help='Observer longitude in degrees')
    parser.add_argument('--alt', type=float, default=0.0,
                        help='Observer altitude in metres (default: 0)')
    parser.add_argument('--declination', type=float, default=None,
                        help='Fixed declination in degrees instead of the WMM')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    return run_replay(args)


if __name__ == '__main__':
    sys.exit(main())
