"""Delivery of check results to the registry or to a queue.

A deployment picks one sink at startup with ``create_result_sink``. Sinks
never raise to the caller: a failed delivery is logged and reported as
``False``.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Callable, Optional

from redis.exceptions import RedisError
from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stream_monitor.core.config import Settings
from stream_monitor.models.models import Check, Stream, StreamStatus
from stream_monitor.monitoring.errors import DeliveryError
from stream_monitor.schemas.checks import CheckResult, QueueEvent
from stream_monitor.utils.logging_config import log_with_category, setup_logging

logger = setup_logging(__name__)


class ResultSink(ABC):
    """Destination for check results."""

    mode: str = ""

    @abstractmethod
    async def deliver(self, result: CheckResult) -> bool:
        """Deliver result; return True if it was recorded."""

    async def close(self) -> None:
        pass


class DatabaseResultSink(ResultSink):
    """Inserts a check row, then refreshes the stream's status fields."""

    mode = "database"

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def deliver(self, result: CheckResult) -> bool:
        log_with_category(logger, "DELIVERY", "info", f"Inserting check into database for stream {result.stream_id}")
        try:
            # SQLAlchemy sessions are blocking; keep them off the event loop
            return await asyncio.to_thread(self._write, result)
        except DeliveryError as e:
            log_with_category(logger, "DELIVERY", "error", f"Failed to insert check for stream {result.stream_id}: {str(e)}")
            return False

    def _write(self, result: CheckResult) -> bool:
        with self.session_factory() as session:
            try:
                inserted = self._insert_check(session, result)
                if inserted < 1:
                    session.rollback()
                    log_with_category(
                        logger, "DELIVERY", "error",
                        f"Failed to insert check for stream {result.stream_id}. No records inserted."
                    )
                    return False

                self._update_stream(session, result)
                session.commit()
            except IntegrityError as e:
                session.rollback()
                log_with_category(
                    logger, "DELIVERY", "warning",
                    f"Check {result.id} was not inserted for stream {result.stream_id}: {e.orig}"
                )
                return False
            except SQLAlchemyError as e:
                session.rollback()
                raise DeliveryError(str(e)) from e

        log_with_category(logger, "DELIVERY", "info", f"Check inserted and stream updated for {result.stream_id}")
        return True

    def _insert_check(self, session: Session, result: CheckResult) -> int:
        outcome = session.execute(
            insert(Check).values(
                id=result.id,
                stream_id=result.stream_id,
                account_id=result.account_id,
                status=result.status.value,
                volume_db=result.volume_db,
                completed=result.completed,
                timestamp=result.timestamp,
            )
        )
        return outcome.rowcount

    def _update_stream(self, session: Session, result: CheckResult) -> None:
        values = {
            "status": result.status.value,
            "last_check": result.timestamp,
        }
        if result.status == StreamStatus.ONLINE:
            values["last_online"] = result.timestamp
        else:
            values["last_outage"] = result.timestamp

        outcome = session.execute(
            update(Stream)
            .where(Stream.id == result.stream_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if outcome.rowcount == 0:
            log_with_category(logger, "DELIVERY", "warning", f"Stream {result.stream_id} not found, status not updated")


class QueueResultSink(ResultSink):
    """Publishes one JSON event per check to a Redis list."""

    mode = "queue"

    def __init__(self, redis_client, queue_name: str):
        self.redis = redis_client
        self.queue_name = queue_name

    async def deliver(self, result: CheckResult) -> bool:
        log_with_category(logger, "QUEUE", "info", f"Posting message to {self.queue_name} for stream {result.stream_id}")
        body = QueueEvent.from_result(result).model_dump_json()
        try:
            await self.redis.rpush(self.queue_name, body)
        except (RedisError, OSError) as e:
            error = DeliveryError(f"Publish to {self.queue_name} failed: {str(e)}")
            log_with_category(logger, "QUEUE", "error", f"Failed to post message for stream {result.stream_id}: {error}")
            return False

        log_with_category(logger, "QUEUE", "info", f"Message posted for stream {result.stream_id}")
        return True


def create_result_sink(
    settings: Settings,
    session_factory: Optional[Callable[[], Session]] = None,
    redis_client=None,
) -> ResultSink:
    """Build the sink selected by DELIVERY_MODE.

    Raises:
        ValueError: If the dependency the selected mode needs is missing
    """
    if settings.DELIVERY_MODE == "queue":
        if redis_client is None:
            raise ValueError("Queue delivery requires a Redis client")
        return QueueResultSink(redis_client, settings.QUEUE_NAME)

    if session_factory is None:
        raise ValueError("Database delivery requires a session factory")
    return DatabaseResultSink(session_factory)
