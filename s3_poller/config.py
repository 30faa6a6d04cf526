"""Central configuration for s3_poller."""

from __future__ import annotations

import logging
import os

from .models.settings import Settings

logger = logging.getLogger(__name__)


def _float_env(name: str, default: float) -> float:
    """Read a float from the environment, falling back on missing or bad values.

    Example:
        >>> os.environ["S3_TIMEOUT_S"] = "oops"
        >>> _float_env("S3_TIMEOUT_S", 10.0)
        10.0
    """
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _read_settings() -> Settings:
    """Read all configuration from environment variables.

    Returns:
        Settings object with all configuration values.

    Note:
        Invalid numeric values fall back to defaults. Empty strings count as unset.
    """
    endpoint = (os.environ.get("S3_ENDPOINT") or "").rstrip("/") or None
    region = os.environ.get("S3_REGION") or os.environ.get("AWS_REGION") or None
    timeout_s = _float_env("S3_TIMEOUT_S", 10.0)
    if timeout_s <= 0:
        timeout_s = 10.0
    bucket = os.environ.get("S3_BUCKET") or None
    key = os.environ.get("S3_KEY") or None
    interval_ms = _float_env("S3_POLL_INTERVAL_MS", 60_000.0)
    if interval_ms <= 0:
        interval_ms = 60_000.0
    log_level = (os.environ.get("LOG_LEVEL") or "INFO").upper()

    return Settings(
        ENDPOINT=endpoint,
        REGION=region,
        TIMEOUT_S=timeout_s,
        BUCKET=bucket,
        KEY=key,
        POLL_INTERVAL_MS=interval_ms,
        LOG_LEVEL=log_level,
    )


settings = _read_settings()


def validate_settings() -> None:
    """Log warnings for configuration the runner cannot work without."""
    if settings.BUCKET is None:
        logger.warning("S3_BUCKET environment variable is not set")
    if settings.KEY is None:
        logger.warning("S3_KEY environment variable is not set")


# Exported constants
ENDPOINT: str | None = settings.ENDPOINT
REGION: str | None = settings.REGION
TIMEOUT_S: float = settings.TIMEOUT_S
BUCKET: str | None = settings.BUCKET
KEY: str | None = settings.KEY
POLL_INTERVAL_MS: float = settings.POLL_INTERVAL_MS
