"""Data models package."""

from .models import Base, Check, Stream, StreamStatus
from .registry import StreamRegistry, StreamSnapshot

__all__ = [
    "Base",
    "Check",
    "Stream",
    "StreamStatus",
    "StreamRegistry",
    "StreamSnapshot",
]
