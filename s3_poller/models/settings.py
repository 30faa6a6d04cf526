"""Configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Settings:
    """Configuration settings for s3_poller."""

    ENDPOINT: str | None
    REGION: str | None
    TIMEOUT_S: float
    BUCKET: str | None
    KEY: str | None
    POLL_INTERVAL_MS: float
    LOG_LEVEL: str
