"""One monitoring pass over every registered stream."""

import asyncio
from datetime import datetime, timezone
from typing import List, Optional, Tuple

import aiohttp

from stream_monitor.models.models import StreamStatus
from stream_monitor.models.registry import StreamRegistry, StreamSnapshot
from stream_monitor.monitoring.capture import AudioCapture
from stream_monitor.monitoring.classifier import FAILURE_VOLUME_DB, StatusClassifier
from stream_monitor.monitoring.errors import CaptureError, ProbeError
from stream_monitor.monitoring.loudness import LoudnessProbe
from stream_monitor.monitoring.sinks import ResultSink
from stream_monitor.schemas.checks import CheckResult, RoundSummary
from stream_monitor.utils.logging_config import log_with_category, setup_logging

logger = setup_logging(__name__)


class MonitoringRound:
    """Fans out one independent check per stream and waits for all of them.

    Each check runs capture, probe, classification and delivery. A failure
    in one stream's check is absorbed at that stream's boundary and turned
    into a ``down`` result, so it never affects the other checks.
    """

    def __init__(
        self,
        registry: StreamRegistry,
        capture: AudioCapture,
        probe: LoudnessProbe,
        classifier: StatusClassifier,
        sink: ResultSink,
        max_concurrency: int = 0,
    ):
        self.registry = registry
        self.capture = capture
        self.probe = probe
        self.classifier = classifier
        self.sink = sink
        self.max_concurrency = max_concurrency

    async def run(self) -> RoundSummary:
        """Check every registered stream once.

        Returns:
            Summary of the round. A registry failure yields an empty summary.
        """
        summary = RoundSummary(started_at=datetime.now(timezone.utc))

        try:
            streams = await asyncio.to_thread(self.registry.fetch_streams)
        except Exception as e:
            log_with_category(logger, "ROUND", "error", f"Error fetching streams: {str(e)}", exc_info=True)
            summary.finished_at = datetime.now(timezone.utc)
            return summary

        log_with_category(logger, "ROUND", "info", f"Starting round for {len(streams)} streams")
        outcomes = await self._check_all(streams)

        for result, delivered in outcomes:
            summary.record(result, delivered)
        summary.finished_at = datetime.now(timezone.utc)

        log_with_category(
            logger, "ROUND", "info",
            f"Round finished: {summary.total} checks, {summary.statuses}, "
            f"{summary.failed_deliveries} failed deliveries"
        )
        return summary

    async def _check_all(self, streams: List[StreamSnapshot]) -> List[Tuple[CheckResult, bool]]:
        if not streams:
            return []

        semaphore = asyncio.Semaphore(self.max_concurrency) if self.max_concurrency > 0 else None

        async def bounded(stream: StreamSnapshot, session: aiohttp.ClientSession):
            if semaphore is None:
                return await self.check_stream(stream, session)
            async with semaphore:
                return await self.check_stream(stream, session)

        # limit=0 lifts aiohttp's default pool of 100 connections
        connector = aiohttp.TCPConnector(limit=self.max_concurrency)
        async with aiohttp.ClientSession(connector=connector) as session:
            outcomes = await asyncio.gather(
                *(bounded(stream, session) for stream in streams), return_exceptions=True
            )

        checked = []
        for stream, outcome in zip(streams, outcomes):
            if isinstance(outcome, BaseException):
                log_with_category(
                    logger, "STREAM", "error",
                    f"Check aborted for stream {stream.url}: {outcome!r}"
                )
                outcome = (self._aborted_result(stream), False)
            checked.append(outcome)
        return checked

    @staticmethod
    def _aborted_result(stream: StreamSnapshot) -> CheckResult:
        return CheckResult(
            stream_id=stream.id,
            account_id=stream.account_id,
            status=StreamStatus.DOWN,
            volume_db=FAILURE_VOLUME_DB,
        )

    async def check_stream(
        self, stream: StreamSnapshot, session: Optional[aiohttp.ClientSession] = None
    ) -> Tuple[CheckResult, bool]:
        """Run the full pipeline for one stream.

        Returns:
            The check result and whether the sink recorded it
        """
        log_with_category(logger, "STREAM", "info", f"Monitoring stream: {stream.url}")
        try:
            audio = await self.capture.capture(stream.url, session=session)
            reading = await self.probe.probe(audio)
        except CaptureError as e:
            log_with_category(logger, "STREAM", "error", f"Network error while monitoring stream {stream.url}: {str(e)}")
            reading = e
        except ProbeError as e:
            log_with_category(logger, "PROBE", "error", f"Probe failed ({e.kind.value}) for stream {stream.url}: {str(e)}")
            reading = e
        except Exception as e:
            log_with_category(logger, "STREAM", "error", f"Error monitoring stream {stream.url}: {str(e)}", exc_info=True)
            reading = e

        try:
            result = self.classifier.build_result(stream, reading)
        except Exception as e:
            log_with_category(logger, "STREAM", "error", f"Could not classify stream {stream.url}: {str(e)}", exc_info=True)
            return self._aborted_result(stream), False

        log_with_category(
            logger, "STREAM", "info",
            f"Stream {stream.url} is {result.status.value} with volume {result.volume_db} dB"
        )

        try:
            delivered = await self.sink.deliver(result)
        except Exception as e:
            log_with_category(logger, "DELIVERY", "error", f"Delivery failed for stream {stream.url}: {str(e)}", exc_info=True)
            delivered = False

        return result, delivered
