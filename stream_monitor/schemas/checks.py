"""Schemas for check results, queue events and round summaries."""

import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from stream_monitor.models.models import StreamStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def _iso_utc(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


class CheckResult(BaseModel):
    """Outcome of one monitoring attempt for one stream."""

    id: str = Field(default_factory=_new_id)
    stream_id: str
    account_id: str
    status: StreamStatus
    volume_db: Optional[float] = None
    completed: bool = True
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)


class QueueEvent(BaseModel):
    """Message published for each check in queue mode."""

    stream_id: str
    account_id: str
    volume: float
    status: str
    timestamp: datetime

    @field_serializer("timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return _iso_utc(value)

    @classmethod
    def from_result(cls, result: CheckResult) -> "QueueEvent":
        return cls(
            stream_id=result.stream_id,
            account_id=result.account_id,
            volume=result.volume_db if result.volume_db is not None else 0.0,
            status=result.status.value,
            timestamp=result.timestamp,
        )


class RoundSummary(BaseModel):
    """Bookkeeping for one monitoring round."""

    started_at: datetime
    finished_at: Optional[datetime] = None
    total: int = 0
    statuses: Dict[str, int] = Field(default_factory=dict)
    delivered: int = 0
    failed_deliveries: int = 0

    @field_serializer("started_at", "finished_at")
    def serialize_times(self, value: Optional[datetime]) -> Optional[str]:
        return _iso_utc(value) if value else None

    def record(self, result: CheckResult, delivered: bool) -> None:
        self.total += 1
        key = result.status.value
        self.statuses[key] = self.statuses.get(key, 0) + 1
        if delivered:
            self.delivered += 1
        else:
            self.failed_deliveries += 1
