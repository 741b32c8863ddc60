import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StreamStatus(str, enum.Enum):
    """Possible classifications of a stream."""
    ONLINE = "online"
    DOWN = "down"
    SILENCE = "silence"
    ERROR = "error"


class Stream(Base):
    """A monitored audio endpoint owned by an account."""
    __tablename__ = "streams"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    url = Column(String, nullable=False)
    account_id = Column(String(36), nullable=False, index=True)
    # NULL until the first check completes
    status = Column(String, nullable=True)
    last_check = Column(DateTime(timezone=True), nullable=True)
    last_online = Column(DateTime(timezone=True), nullable=True)
    last_outage = Column(DateTime(timezone=True), nullable=True)

    checks = relationship("Check", back_populates="stream")

    def __repr__(self):
        return f"<Stream(id={self.id}, url={self.url}, status={self.status})>"


class Check(Base):
    """One classification attempt for one stream. Rows are never updated."""
    __tablename__ = "checks"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    stream_id = Column(String(36), ForeignKey("streams.id"), nullable=False)
    account_id = Column(String(36), nullable=False)
    status = Column(String, nullable=False)
    volume_db = Column(Float, nullable=True)
    completed = Column(Boolean, nullable=False, default=True)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    stream = relationship("Stream", back_populates="checks")

    __table_args__ = (
        Index("idx_checks_stream_timestamp", "stream_id", "timestamp"),
    )

    def __repr__(self):
        return f"<Check(id={self.id}, stream_id={self.stream_id}, status={self.status}, volume_db={self.volume_db})>"
