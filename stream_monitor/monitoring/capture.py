"""Module for capturing a bounded sample of an audio stream."""

import asyncio
from typing import Optional

import aiohttp

from stream_monitor.core.config import DEFAULT_CAPTURE_BYTE_BUDGET, Settings
from stream_monitor.monitoring.errors import CaptureError
from stream_monitor.utils.logging_config import log_with_category, setup_logging

logger = setup_logging(__name__)

DEFAULT_USER_AGENT = "tonearm-agent/1.0 (+https://www.usetonearm.com)"


class AudioCapture:
    """Reads at most a fixed number of bytes from a stream URL.

    The byte budget only approximates a sampling duration: it is sized for
    raw PCM and does not account for the stream's real codec or bitrate.
    """

    def __init__(
        self,
        byte_budget: int = DEFAULT_CAPTURE_BYTE_BUDGET,
        chunk_size: int = 4096,
        read_timeout: float = 10.0,
        connect_timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """Initialize the capture.

        Args:
            byte_budget: Maximum number of bytes read per capture
            chunk_size: Size of each read from the response body
            read_timeout: Seconds to wait for the next chunk
            connect_timeout: Seconds to wait for the connection

        Raises:
            ValueError: If byte_budget or chunk_size is less than or equal to 0
        """
        if byte_budget <= 0:
            raise ValueError("Byte budget must be greater than 0")

        if chunk_size <= 0:
            raise ValueError("Chunk size must be greater than 0")

        self.byte_budget = byte_budget
        self.chunk_size = chunk_size
        self.read_timeout = read_timeout
        self.connect_timeout = connect_timeout
        self.headers = {"User-Agent": user_agent}

    @classmethod
    def from_settings(cls, settings: Settings) -> "AudioCapture":
        return cls(
            byte_budget=settings.CAPTURE_BYTE_BUDGET,
            chunk_size=settings.CAPTURE_CHUNK_SIZE,
            read_timeout=settings.READ_TIMEOUT,
            connect_timeout=settings.CONNECT_TIMEOUT,
            user_agent=settings.USER_AGENT,
        )

    async def capture(
        self,
        url: str,
        byte_budget: Optional[int] = None,
        read_timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> bytes:
        """Capture up to byte_budget bytes of audio from url.

        Args:
            url: URL of the audio stream
            byte_budget: Optional override of the configured budget
            read_timeout: Optional override of the configured read timeout
            session: Shared client session; a temporary one is opened if omitted

        Returns:
            The captured bytes, never longer than the budget. A short read is
            returned as-is as long as at least one byte arrived.

        Raises:
            CaptureError: On connection failure, non-2xx response, read
                timeout, dropped connection or empty body
            ValueError: If byte_budget or read_timeout is less than or equal to 0
        """
        if not url:
            raise CaptureError("Stream URL cannot be empty")

        budget = self.byte_budget if byte_budget is None else byte_budget
        if budget <= 0:
            raise ValueError("Byte budget must be greater than 0")

        sock_read = self.read_timeout if read_timeout is None else read_timeout
        if sock_read <= 0:
            raise ValueError("Read timeout must be greater than 0")

        # Waiting for a free connection in the pool is not a network failure
        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.connect_timeout,
            sock_read=sock_read,
        )

        if session is None:
            async with aiohttp.ClientSession() as own_session:
                return await self._read(own_session, url, budget, timeout)
        return await self._read(session, url, budget, timeout)

    async def _read(
        self,
        session: aiohttp.ClientSession,
        url: str,
        budget: int,
        timeout: aiohttp.ClientTimeout,
    ) -> bytes:
        log_with_category(logger, "STREAM", "info", f"Capturing up to {budget} bytes from {url}")
        data = bytearray()

        try:
            async with session.get(url, headers=self.headers, timeout=timeout) as response:
                if not 200 <= response.status < 300:
                    raise CaptureError(f"Stream {url} answered with status {response.status}")

                async for chunk in response.content.iter_chunked(self.chunk_size):
                    data.extend(chunk[: budget - len(data)])
                    if len(data) >= budget:
                        break
        except asyncio.TimeoutError as e:
            raise CaptureError(f"Timed out reading stream {url}") from e
        except aiohttp.ClientError as e:
            raise CaptureError(f"Network error reading stream {url}: {str(e)}") from e

        if not data:
            raise CaptureError(f"No data received from {url}")

        log_with_category(logger, "STREAM", "info", f"Read {len(data)} bytes from {url}")
        return bytes(data)
