"""Startup and shutdown of the monitoring service."""

import logging
from typing import Optional

from stream_monitor.core.config import Settings, get_settings
from stream_monitor.core.config.redis import close_redis, init_redis
from stream_monitor.models.registry import StreamRegistry
from stream_monitor.monitoring.capture import AudioCapture
from stream_monitor.monitoring.classifier import StatusClassifier
from stream_monitor.monitoring.loudness import LoudnessProbe
from stream_monitor.monitoring.round import MonitoringRound
from stream_monitor.monitoring.scheduler import RoundScheduler
from stream_monitor.monitoring.sinks import ResultSink, create_result_sink

logger = logging.getLogger(__name__)


class EventManager:
    """Builds the monitoring engine at startup and tears it down at shutdown."""

    def __init__(self, settings: Optional[Settings] = None, session_factory=None, redis_client=None):
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.redis_client = redis_client
        self._owns_redis = False
        self.sink: Optional[ResultSink] = None
        self.scheduler: Optional[RoundScheduler] = None

    async def startup(self, start_scheduler: bool = True) -> RoundScheduler:
        """Wire the engine and start the periodic scheduler."""
        try:
            if self.session_factory is None:
                from stream_monitor.models.database import SessionLocal, init_db

                init_db()
                self.session_factory = SessionLocal
                logger.info("Database initialized")

            if self.settings.DELIVERY_MODE == "queue" and self.redis_client is None:
                self.redis_client = await init_redis(self.settings)
                self._owns_redis = True
                logger.info("Redis initialized")

            self.sink = create_result_sink(self.settings, self.session_factory, self.redis_client)
            logger.info(f"Results delivered in {self.sink.mode} mode")

            monitoring_round = MonitoringRound(
                registry=StreamRegistry(self.session_factory),
                capture=AudioCapture.from_settings(self.settings),
                probe=LoudnessProbe.from_settings(self.settings),
                classifier=StatusClassifier.from_settings(self.settings),
                sink=self.sink,
                max_concurrency=self.settings.MAX_CONCURRENT_CHECKS,
            )
            self.scheduler = RoundScheduler(
                monitoring_round,
                interval=self.settings.POLL_INTERVAL,
                grace_period=self.settings.SHUTDOWN_GRACE_PERIOD,
            )
            if start_scheduler:
                self.scheduler.start()
            return self.scheduler

        except Exception as e:
            logger.error(f"Error during startup: {e}")
            await self._close_redis()
            raise

    async def shutdown(self) -> None:
        """Stop the scheduler and release connections."""
        logger.info("Starting shutdown sequence")
        try:
            if self.scheduler is not None:
                await self.scheduler.stop()
            if self.sink is not None:
                await self.sink.close()
        finally:
            await self._close_redis()
        logger.info("Shutdown complete")

    async def _close_redis(self) -> None:
        if self._owns_redis:
            await close_redis(self.redis_client)
            self.redis_client = None
            self._owns_redis = False
