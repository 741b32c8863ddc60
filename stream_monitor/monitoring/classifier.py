"""Maps loudness readings and pipeline failures to a stream status."""

from typing import Union

from stream_monitor.core.config import Settings
from stream_monitor.models.models import StreamStatus
from stream_monitor.models.registry import StreamSnapshot
from stream_monitor.schemas.checks import CheckResult

DEFAULT_THRESHOLD_DB = -30.0

# Volume recorded when no measurement could be taken
FAILURE_VOLUME_DB = 0.0

Reading = Union[float, BaseException]


class StatusClassifier:
    """Threshold classifier with no hysteresis.

    A stream hovering around the threshold can change status every round.
    In detailed mode a quiet stream is reported as ``silence`` and a failed
    capture or probe as ``error``; otherwise both are ``down``.
    """

    def __init__(self, threshold_db: float = DEFAULT_THRESHOLD_DB, detailed: bool = False):
        self.threshold_db = threshold_db
        self.detailed = detailed

    @classmethod
    def from_settings(cls, settings: Settings) -> "StatusClassifier":
        return cls(threshold_db=settings.VOLUME_THRESHOLD_DB, detailed=settings.DETAILED_STATUS)

    def classify(self, reading: Reading) -> StreamStatus:
        if isinstance(reading, BaseException):
            return StreamStatus.ERROR if self.detailed else StreamStatus.DOWN
        if reading < self.threshold_db:
            return StreamStatus.SILENCE if self.detailed else StreamStatus.DOWN
        return StreamStatus.ONLINE

    def build_result(self, stream: StreamSnapshot, reading: Reading) -> CheckResult:
        """Create the check record for one attempt on stream."""
        volume_db = FAILURE_VOLUME_DB if isinstance(reading, BaseException) else float(reading)
        return CheckResult(
            stream_id=stream.id,
            account_id=stream.account_id,
            status=self.classify(reading),
            volume_db=volume_db,
            completed=True,
        )
