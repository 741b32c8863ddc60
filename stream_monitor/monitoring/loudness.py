"""Peak volume measurement through ffmpeg's volumedetect filter."""

import asyncio
import os
import re
import tempfile
from typing import Tuple

from stream_monitor.core.config import Settings
from stream_monitor.monitoring.errors import ProbeError, ProbeErrorKind
from stream_monitor.utils.logging_config import log_with_category, setup_logging

logger = setup_logging(__name__)

MAX_VOLUME_PATTERN = re.compile(r"max_volume: (?P<volume>[-+]?\d+(?:\.\d+)?) dB")

# ffmpeg reports these when "-map 0:a:0" finds nothing to map
NO_AUDIO_MARKERS = (
    "matches no streams",
    "does not contain any stream",
)


def parse_max_volume(log: str) -> float:
    """Extract the first max_volume reading from ffmpeg output.

    Returns 0.0 when no reading is present. That value is a permissive
    default, not a measurement, and classifies as online.
    """
    match = MAX_VOLUME_PATTERN.search(log)
    return float(match.group("volume")) if match else 0.0


class LoudnessProbe:
    """Measures the peak volume of captured audio with ffmpeg."""

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: float = 30.0):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "LoudnessProbe":
        return cls(ffmpeg_path=settings.FFMPEG_PATH, timeout=settings.PROBE_TIMEOUT)

    def build_command(self, input_path: str) -> list:
        return [
            self.ffmpeg_path,
            "-hide_banner",
            "-nostats",
            "-i", input_path,
            "-map", "0:a:0",
            "-af", "volumedetect",
            "-f", "null",
            "-",
        ]

    async def probe(self, audio_bytes: bytes) -> float:
        """Measure the peak volume of audio_bytes in dB.

        Raises:
            ProbeError: NO_AUDIO_TRACK if ffmpeg finds no audio stream,
                TOOL_INVOCATION if ffmpeg cannot start, fails or times out
        """
        # ffmpeg reads files, not buffers
        with tempfile.NamedTemporaryFile(suffix=".audio", delete=False) as temp_file:
            temp_file.write(audio_bytes)
            temp_file_path = temp_file.name

        try:
            returncode, output = await self._run(temp_file_path)
        finally:
            try:
                os.unlink(temp_file_path)
            except FileNotFoundError:
                pass

        if any(marker in output for marker in NO_AUDIO_MARKERS):
            raise ProbeError("No audio track found in captured data", ProbeErrorKind.NO_AUDIO_TRACK)

        if returncode != 0:
            tail = output.strip().splitlines()[-1:] or [""]
            raise ProbeError(
                f"ffmpeg exited with code {returncode}: {tail[0]}",
                ProbeErrorKind.TOOL_INVOCATION,
            )

        volume = parse_max_volume(output)
        log_with_category(logger, "PROBE", "debug", f"Measured max volume {volume} dB")
        return volume

    async def _run(self, input_path: str) -> Tuple[int, str]:
        """Run ffmpeg on input_path and return its exit code and diagnostic text."""
        try:
            process = await asyncio.create_subprocess_exec(
                *self.build_command(input_path),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeError(
                f"Could not start {self.ffmpeg_path}: {str(e)}", ProbeErrorKind.TOOL_INVOCATION
            ) from e

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ProbeError(
                f"ffmpeg did not finish within {self.timeout} seconds", ProbeErrorKind.TOOL_INVOCATION
            ) from e
        except asyncio.CancelledError:
            process.kill()
            await asyncio.shield(process.wait())
            raise

        return process.returncode, stderr.decode("utf-8", errors="replace")
