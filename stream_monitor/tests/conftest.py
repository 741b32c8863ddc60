"""Test configuration for the stream monitor."""

import asyncio
import logging
from typing import List

import pytest
from aioresponses import aioresponses
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from stream_monitor.core.config import Settings
from stream_monitor.models.models import Base, Stream
from stream_monitor.models.registry import StreamSnapshot
from stream_monitor.tests.helpers import ACCOUNT_ID, FakeFFmpeg, RecordingSink

# Logging configuration for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("test")


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """Install a FakeFFmpeg; configure it through its ``volumes`` dict."""
    fake = FakeFFmpeg()
    monkeypatch.setattr(asyncio, "create_subprocess_exec", fake)
    return fake


@pytest.fixture
def settings(tmp_path):
    """Settings with small budgets and a throwaway database."""
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'monitor.db'}",
        CAPTURE_BYTE_BUDGET=4096,
        CAPTURE_CHUNK_SIZE=512,
        READ_TIMEOUT=2.0,
        CONNECT_TIMEOUT=2.0,
        PROBE_TIMEOUT=2.0,
        POLL_INTERVAL=300.0,
        SHUTDOWN_GRACE_PERIOD=1.0,
    )


@pytest.fixture
def db_engine(tmp_path):
    """File-backed SQLite engine so worker threads get their own connections."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'checks.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autoflush=False, bind=db_engine)


@pytest.fixture
def seed_streams(session_factory):
    """Insert streams and return their snapshots."""
    def _seed(urls: List[str]) -> List[StreamSnapshot]:
        snapshots = []
        with session_factory() as session:
            for url in urls:
                stream = Stream(url=url, account_id=ACCOUNT_ID)
                session.add(stream)
                session.flush()
                snapshots.append(StreamSnapshot(id=stream.id, url=stream.url, account_id=stream.account_id))
            session.commit()
        return snapshots
    return _seed


@pytest.fixture
def mock_aioresponse():
    with aioresponses() as m:
        yield m


@pytest.fixture
def recording_sink():
    return RecordingSink()
