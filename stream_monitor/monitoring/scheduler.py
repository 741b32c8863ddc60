"""Periodic driver for monitoring rounds."""

import asyncio
from typing import Optional

from stream_monitor.monitoring.round import MonitoringRound
from stream_monitor.schemas.checks import RoundSummary
from stream_monitor.utils.logging_config import log_with_category, setup_logging

logger = setup_logging(__name__)


class RoundScheduler:
    """Starts a round every ``interval`` seconds.

    At most one round runs at a time: a tick that fires while the previous
    round is still running is skipped.
    """

    def __init__(self, monitoring_round: MonitoringRound, interval: float = 300.0, grace_period: float = 10.0):
        self.monitoring_round = monitoring_round
        self.interval = interval
        self.grace_period = grace_period
        self.last_summary: Optional[RoundSummary] = None
        self.skipped_rounds = 0
        self._current: Optional[asyncio.Task] = None
        self._loop_task: Optional[asyncio.Task] = None
        self._stopping = asyncio.Event()

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def round_in_progress(self) -> bool:
        return self._current is not None and not self._current.done()

    def trigger(self) -> bool:
        """Start a round now unless one is already running.

        Returns:
            True if a round was started
        """
        if self.round_in_progress:
            self.skipped_rounds += 1
            log_with_category(logger, "SCHEDULER", "warning", "Previous round still running, skipping this one")
            return False

        self._current = asyncio.create_task(self._run_round())
        return True

    async def run_once(self) -> Optional[RoundSummary]:
        """Run a round and wait for it; None if one was already running."""
        if not self.trigger():
            return None
        return await self._current

    async def _run_round(self) -> Optional[RoundSummary]:
        log_with_category(logger, "SCHEDULER", "info", "Fetching and monitoring streams")
        try:
            summary = await self.monitoring_round.run()
        except Exception as e:
            log_with_category(logger, "SCHEDULER", "error", f"Round failed: {str(e)}", exc_info=True)
            return None
        self.last_summary = summary
        return summary

    async def _loop(self) -> None:
        while not self._stopping.is_set():
            self.trigger()
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass

    def start(self) -> None:
        """Begin scheduling rounds; the first one starts immediately."""
        if self.is_running:
            return
        self._stopping.clear()
        self._loop_task = asyncio.create_task(self._loop())
        log_with_category(logger, "SCHEDULER", "info", f"Scheduler started with interval of {self.interval} seconds")

    async def stop(self) -> None:
        """Stop scheduling and let the in-flight round finish within the grace period."""
        self._stopping.set()
        if self._loop_task is not None:
            await self._loop_task
            self._loop_task = None

        if self.round_in_progress:
            log_with_category(logger, "SCHEDULER", "info", "Waiting for the current round to finish")
            try:
                await asyncio.wait_for(asyncio.shield(self._current), timeout=self.grace_period)
            except asyncio.TimeoutError:
                log_with_category(logger, "SCHEDULER", "warning", "Round did not finish in time, cancelling it")
                self._current.cancel()
                try:
                    await self._current
                except asyncio.CancelledError:
                    pass

        log_with_category(logger, "SCHEDULER", "info", "Scheduler stopped")
