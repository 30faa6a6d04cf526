"""Entrypoint for watching a document from the command line.

Reads the bucket, key and interval from the environment (see `config`), logs the
current document and then every change until interrupted.
"""

from __future__ import annotations

import asyncio
import json
import logging

from . import config
from .errors import S3PollerError
from .logger import setup_logging
from .poller import S3Poller

logger = logging.getLogger(__name__)


def _log_document(value: object) -> None:
    logger.info("Document: %s", json.dumps(value, sort_keys=True))


async def run(bucket: str, key: str, interval_ms: float) -> None:
    async with S3Poller(bucket=bucket, key=key) as poller:
        try:
            _log_document(await poller.get_object())
        except S3PollerError as e:
            logger.warning("Initial fetch of s3://%s/%s failed: %s", bucket, key, e)

        poller.on_update(_log_document).poll(interval_ms)
        logger.info(
            "Watching s3://%s/%s (interval=%sms, endpoint=%s)",
            bucket,
            key,
            interval_ms,
            config.ENDPOINT or "AWS default",
        )
        await asyncio.Event().wait()


def main() -> None:
    setup_logging(config.settings.LOG_LEVEL)
    config.validate_settings()
    if config.BUCKET is None or config.KEY is None:
        raise SystemExit("S3_BUCKET and S3_KEY must be set")
    try:
        asyncio.run(run(config.BUCKET, config.KEY, config.POLL_INTERVAL_MS))
    except KeyboardInterrupt:
        logger.info("Stopped")


if __name__ == "__main__":
    main()
