"""Root logging setup for the s3-poller runner."""

import logging
import os

# Client libraries that log every request or credential lookup at INFO/DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore", "botocore", "aiobotocore", "urllib3")


def setup_logging(level_name: str | None = None) -> None:
    """Attach a stream handler to the root logger and set its level.

    `level_name` falls back to `LOG_LEVEL`, then INFO. An existing root handler is
    kept, so embedding applications keep their own formatting.
    """
    level_name = (level_name or os.environ.get("LOG_LEVEL") or "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(handler)
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


__all__ = ["setup_logging"]
