"""Pydantic schemas."""

from .checks import CheckResult, QueueEvent, RoundSummary

__all__ = ["CheckResult", "QueueEvent", "RoundSummary"]
