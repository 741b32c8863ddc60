"""Application settings for the stream monitor."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent.parent / ".env"
load_dotenv(env_path)

DELIVERY_MODES = ("database", "queue")

# 5 seconds of 44.1 kHz 16-bit PCM; a heuristic cap, the real codec is unknown
DEFAULT_CAPTURE_BYTE_BUDGET = 5 * 44100 * 2


class Settings(BaseSettings):
    """Application settings."""

    # Server
    ENV: str = "development"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite:///./stream_monitor.db"

    # Queue
    REDIS_URL: str = "redis://localhost:6379/0"
    QUEUE_NAME: str = "stream-checks"

    # Delivery: "database" updates the registry, "queue" publishes events
    DELIVERY_MODE: str = "database"

    # External analysis tool
    FFMPEG_PATH: str = "ffmpeg"
    PROBE_TIMEOUT: float = 30.0

    # Capture
    CAPTURE_BYTE_BUDGET: int = DEFAULT_CAPTURE_BYTE_BUDGET
    CAPTURE_CHUNK_SIZE: int = 4096
    CONNECT_TIMEOUT: float = 10.0
    READ_TIMEOUT: float = 10.0
    USER_AGENT: str = "tonearm-agent/1.0 (+https://www.usetonearm.com)"

    # Classification
    VOLUME_THRESHOLD_DB: float = -30.0
    DETAILED_STATUS: bool = False

    # Scheduling
    POLL_INTERVAL: float = 300.0  # 5 minutes
    MAX_CONCURRENT_CHECKS: int = 0  # 0 means unbounded
    SHUTDOWN_GRACE_PERIOD: float = 10.0

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("DELIVERY_MODE")
    @classmethod
    def validate_delivery_mode(cls, value: str) -> str:
        value = value.lower()
        if value not in DELIVERY_MODES:
            raise ValueError(f"DELIVERY_MODE must be one of {', '.join(DELIVERY_MODES)}")
        return value

    @field_validator("CAPTURE_BYTE_BUDGET", "CAPTURE_CHUNK_SIZE")
    @classmethod
    def validate_positive_size(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("Capture sizes must be greater than 0")
        return value

    @field_validator("POLL_INTERVAL", "READ_TIMEOUT", "CONNECT_TIMEOUT", "PROBE_TIMEOUT")
    @classmethod
    def validate_positive_duration(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Durations must be greater than 0")
        return value

    @field_validator("MAX_CONCURRENT_CHECKS")
    @classmethod
    def validate_concurrency(cls, value: int) -> int:
        if value < 0:
            raise ValueError("MAX_CONCURRENT_CHECKS cannot be negative")
        return value


@lru_cache()
def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
