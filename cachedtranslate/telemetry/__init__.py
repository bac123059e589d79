"""Telemetry and observability helpers.

This package logs cache/provider events and counts translation activity.
"""

from .logger import EventLogger
from .metrics import AnalyticsEvent, TranslationMetrics

__all__ = ["AnalyticsEvent", "EventLogger", "TranslationMetrics"]
