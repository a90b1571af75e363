"""Monitoring module for the compass pipeline."""

from .metrics import SessionMonitor

__all__ = ["SessionMonitor"]
