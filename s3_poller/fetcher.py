"""One fetch attempt against the blob store, classified into an outcome."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from typing import Any

from .blobstore import BlobNotModified, BlobStore
from .errors import FetchError, ParseError
from .models.outcome import Changed, Failed, NotModified, Outcome, ParseFailure

logger = logging.getLogger(__name__)


def parse_document(body: bytes) -> Any:
    """Decode a UTF-8 body holding a single JSON value.

    Raises:
        ParseError: If the body is not UTF-8 or not valid JSON.
    """
    try:
        return json.loads(body.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ParseError(f"document is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"document is not valid JSON: {exc}") from exc


class ConditionalFetcher:
    def __init__(self, store: BlobStore) -> None:
        self.store = store

    async def fetch(
        self, bucket: str, key: str, last_modified: datetime | None = None
    ) -> Outcome:
        """Fetch the object and classify the result.

        A conditional request is made only when `last_modified` is given, so
        `NotModified` can only come back in that case.
        """
        try:
            obj = await self.store.get(bucket, key, if_modified_since=last_modified)
        except BlobNotModified:
            if last_modified is None:
                return Failed(
                    FetchError(
                        f"unexpected not-modified for unconditional GET s3://{bucket}/{key}",
                        bucket=bucket,
                        key=key,
                    )
                )
            logger.debug("s3://%s/%s not modified since %s", bucket, key, last_modified)
            return NotModified()
        except FetchError as exc:
            logger.debug("Fetch of s3://%s/%s failed: %s", bucket, key, exc)
            return Failed(exc)
        except Exception as exc:
            logger.debug("Fetch of s3://%s/%s failed", bucket, key, exc_info=True)
            err = FetchError(f"GET s3://{bucket}/{key} failed: {exc}", bucket=bucket, key=key)
            err.__cause__ = exc
            return Failed(err)

        try:
            value = parse_document(obj.body)
        except ParseError as exc:
            logger.debug("s3://%s/%s did not parse: %s", bucket, key, exc)
            return ParseFailure(exc)

        logger.debug("s3://%s/%s changed (Last-Modified %s)", bucket, key, obj.last_modified)
        return Changed(value=value, last_modified=obj.last_modified)
