"""Test doubles shared across the test suite."""

import asyncio
from typing import Dict, List, Optional

from stream_monitor.schemas.checks import CheckResult

ACCOUNT_ID = "0b7c6f55-6a0e-4c65-9a39-9e4d3b8f2a11"


def volumedetect_output(max_volume: str) -> bytes:
    """Stderr of an ffmpeg volumedetect run reporting max_volume."""
    return (
        "Input #0, mp3, from '/tmp/sample.audio':\n"
        "  Duration: N/A, start: 0.000000, bitrate: 128 kb/s\n"
        "  Stream #0:0: Audio: mp3, 44100 Hz, stereo, fltp, 128 kb/s\n"
        "[Parsed_volumedetect_0 @ 0x55d5c0a8e2c0] n_samples: 441000\n"
        "[Parsed_volumedetect_0 @ 0x55d5c0a8e2c0] mean_volume: -21.4 dB\n"
        f"[Parsed_volumedetect_0 @ 0x55d5c0a8e2c0] max_volume: {max_volume} dB\n"
        "[Parsed_volumedetect_0 @ 0x55d5c0a8e2c0] histogram_0db: 12\n"
    ).encode()


class FakeProcess:
    """Stand-in for an asyncio subprocess running ffmpeg."""

    def __init__(self, stderr: bytes = b"", returncode: int = 0, delay: float = 0.0):
        self._stderr = stderr
        self._exit_code = returncode
        self.delay = delay
        self.returncode: Optional[int] = None
        self.killed = False
        self.waited = False

    async def communicate(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        self.returncode = self._exit_code
        return b"", self._stderr

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        self.waited = True
        return self.returncode


class FakeFFmpeg:
    """Replaces asyncio.create_subprocess_exec and answers by audio content.

    ``volumes`` maps a captured payload prefix to the max_volume ffmpeg
    reports for it.
    """

    def __init__(self, volumes: Optional[Dict[bytes, str]] = None, default: bytes = b""):
        self.volumes = volumes or {}
        self.default = default
        self.calls: List[tuple] = []
        self.inputs: List[bytes] = []

    async def __call__(self, *cmd, **kwargs):
        self.calls.append(cmd)
        input_path = cmd[cmd.index("-i") + 1]
        with open(input_path, "rb") as f:
            data = f.read()
        self.inputs.append(data)
        for prefix, volume in self.volumes.items():
            if data.startswith(prefix):
                return FakeProcess(stderr=volumedetect_output(volume))
        return FakeProcess(stderr=self.default)


class RecordingSink:
    """Sink that keeps delivered results in memory."""

    mode = "memory"

    def __init__(self, fail_for: Optional[set] = None):
        self.results: List[CheckResult] = []
        self.fail_for = fail_for or set()

    async def deliver(self, result: CheckResult) -> bool:
        if result.stream_id in self.fail_for:
            raise RuntimeError("sink exploded")
        self.results.append(result)
        return True

    async def close(self) -> None:
        pass
