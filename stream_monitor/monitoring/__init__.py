"""Monitoring engine: capture, probe, classify, deliver."""

from .capture import AudioCapture
from .classifier import StatusClassifier
from .errors import (
    CaptureError,
    CaptureErrorKind,
    DeliveryError,
    ProbeError,
    ProbeErrorKind,
    StreamMonitorError,
)
from .loudness import LoudnessProbe, parse_max_volume
from .round import MonitoringRound
from .scheduler import RoundScheduler
from .sinks import DatabaseResultSink, QueueResultSink, ResultSink, create_result_sink

__all__ = [
    "AudioCapture",
    "CaptureError",
    "CaptureErrorKind",
    "DatabaseResultSink",
    "DeliveryError",
    "LoudnessProbe",
    "MonitoringRound",
    "ProbeError",
    "ProbeErrorKind",
    "QueueResultSink",
    "ResultSink",
    "RoundScheduler",
    "StatusClassifier",
    "StreamMonitorError",
    "create_result_sink",
    "parse_max_volume",
]
