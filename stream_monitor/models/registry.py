"""Read access to the stream registry."""

import logging
from dataclasses import dataclass
from typing import Callable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from stream_monitor.models.models import Stream

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StreamSnapshot:
    """The fields of a stream a check needs, detached from any session."""
    id: str
    url: str
    account_id: str


class StreamRegistry:
    """Loads the full list of monitored streams from the database."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def fetch_streams(self) -> List[StreamSnapshot]:
        """Return a snapshot of every registered stream."""
        logger.info("Fetching streams from the registry.")
        with self.session_factory() as session:
            rows = session.execute(select(Stream.id, Stream.url, Stream.account_id)).all()
        streams = [StreamSnapshot(id=row.id, url=row.url, account_id=row.account_id) for row in rows]
        logger.info(f"Fetched {len(streams)} streams.")
        return streams
