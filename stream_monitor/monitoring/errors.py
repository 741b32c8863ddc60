"""Errors raised along a stream check pipeline."""

import enum


class StreamMonitorError(Exception):
    """Base class for errors raised while checking a stream."""
    pass


class CaptureErrorKind(str, enum.Enum):
    NETWORK = "network"


class CaptureError(StreamMonitorError):
    """The stream could not be read: unreachable, non-2xx, timeout or dropped."""

    def __init__(self, message: str, kind: CaptureErrorKind = CaptureErrorKind.NETWORK):
        super().__init__(message)
        self.kind = kind


class ProbeErrorKind(str, enum.Enum):
    NO_AUDIO_TRACK = "no_audio_track"
    TOOL_INVOCATION = "tool_invocation"


class ProbeError(StreamMonitorError):
    """The loudness of the captured audio could not be measured."""

    def __init__(self, message: str, kind: ProbeErrorKind):
        super().__init__(message)
        self.kind = kind


class DeliveryError(StreamMonitorError):
    """A check result could not be written or published."""
    pass
