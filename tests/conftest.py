"""Shared test fixtures and dummy classes."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from s3_poller.blobstore import BlobNotModified, BlobObject
from s3_poller.errors import FetchError

T1 = datetime(2000, 1, 1, tzinfo=timezone.utc)
T2 = datetime(2000, 1, 2, tzinfo=timezone.utc)

NOT_MODIFIED = object()


class DummyStore:
    """Scripted blob store.

    Each call pops the next response: a `BlobObject`, an exception instance, or
    `NOT_MODIFIED`. The last response repeats once the script runs out.
    """

    def __init__(self, *responses: Any, delay: float = 0.0) -> None:
        self.responses = list(responses)
        self.delay = delay
        self.calls: list[tuple[str, str, datetime | None]] = []

    def push(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def get(
        self, bucket: str, key: str, if_modified_since: datetime | None = None
    ) -> BlobObject:
        self.calls.append((bucket, key, if_modified_since))
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.responses:
            raise FetchError("no scripted response", bucket=bucket, key=key)
        resp = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if resp is NOT_MODIFIED:
            raise BlobNotModified("not modified")
        if isinstance(resp, BaseException):
            raise resp
        return resp


def blob(body: str | bytes, last_modified: datetime = T1) -> BlobObject:
    if isinstance(body, str):
        body = body.encode("utf-8")
    return BlobObject(body=body, last_modified=last_modified)


class Recorder:
    """Callable listener that records every value it receives."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def __call__(self, value: Any) -> None:
        self.values.append(value)
