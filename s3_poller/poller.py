"""Cached, change-aware access to one JSON document in a blob store."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from .blobstore import BlobStore
from .errors import ConfigurationError, S3PollerError
from .fetcher import ConditionalFetcher
from .listeners import Listener, ListenerRegistry
from .models.cache import ObjectCache
from .models.outcome import Changed, Failed, NotModified, ParseFailure
from .s3store import S3BlobStore
from .scheduler import PollScheduler

logger = logging.getLogger(__name__)


def _require_identifier(name: str, value: object) -> str:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{name} is required and should be a non-empty string")
    return value


class S3Poller:
    """Fetch, cache and watch a single JSON object.

    Args:
        bucket: Bucket holding the object.
        key: Key of the object.
        initial_value: Value to pre-populate the cache with.
        last_modified: Marker for `initial_value`; enables conditional fetches
            from the first update check.
        update_interval: Poll interval in milliseconds. Polling starts immediately,
            so the poller must then be built inside a running event loop.
        update_listener: Listener or list of listeners to register.
        store: Blob store to fetch from. Defaults to an `S3BlobStore`.
        store_config: Keyword arguments for the default `S3BlobStore`: client
            options such as `region_name`, `endpoint_url` or explicit credentials.

    Raises:
        ConfigurationError: On a missing bucket/key, a non-datetime marker or a
            bad listener.

    Example:
        >>> async with S3Poller(bucket="configs", key="flags.json") as poller:
        ...     poller.on_update(print).poll(30_000)
        ...     flags = await poller.get_object()
    """

    def __init__(
        self,
        bucket: str,
        key: str,
        initial_value: Any = None,
        last_modified: datetime | None = None,
        update_interval: float | None = None,
        update_listener: Listener | list[Listener] | tuple[Listener, ...] | None = None,
        store: BlobStore | None = None,
        store_config: dict[str, Any] | None = None,
    ) -> None:
        self.bucket = _require_identifier("bucket", bucket)
        self.key = _require_identifier("key", key)

        if last_modified is not None and not isinstance(last_modified, datetime):
            raise ConfigurationError("last_modified should be a datetime")

        self._cache = ObjectCache(value=initial_value, last_modified=last_modified)
        self._listeners = ListenerRegistry()
        self._scheduler = PollScheduler()
        self._inflight: asyncio.Task | None = None

        if store is None:
            store = S3BlobStore(**(store_config or {}))
            self._owned_store: S3BlobStore | None = store
        else:
            self._owned_store = None
        self._fetcher = ConditionalFetcher(store)

        if update_listener is not None:
            if isinstance(update_listener, (list, tuple)):
                self.on_update(*update_listener)
            else:
                self.on_update(update_listener)

        if update_interval:
            self.poll(update_interval)

    def __repr__(self) -> str:
        return (
            f"S3Poller(bucket={self.bucket!r}, key={self.key!r}, "
            f"last_modified={self._cache.last_modified!r}, "
            f"interval_ms={self._scheduler.interval_ms!r})"
        )

    async def __aenter__(self) -> S3Poller:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop polling, let an in-flight refresh finish, then close an owned store."""
        self.cancel_poll()
        task = self._inflight
        if task is not None and not task.done():
            await asyncio.wait({task})
        if self._owned_store is not None:
            await self._owned_store.aclose()

    async def get_object(self) -> Any:
        """Return the cached object, fetching it first if nothing is cached."""
        value = self._cache.current()
        if value is not None:
            return value
        return await self.get_update()

    def get_current_value(self) -> Any:
        """Return the cached object or None; never fetches."""
        return self._cache.current()

    async def get_update(self) -> Any:
        """Check the store for a newer version and return the current object.

        Only one refresh runs at a time: calls made while a refresh is in flight
        wait for that refresh and share its result or error.

        Raises:
            FetchError: The store could not be read.
            ParseError: The object is not valid JSON.
        """
        task = self._inflight
        if task is None or task.done():
            task = asyncio.create_task(self._refresh())
            self._inflight = task
            task.add_done_callback(self._clear_inflight)
        try:
            return await asyncio.shield(task)
        except S3PollerError as exc:
            # Every waiter re-raises the same instance; keep its traceback from piling up
            raise exc.with_traceback(None)

    def _clear_inflight(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
        # Retrieve the exception so an unobserved failure is not reported as unhandled
        if not task.cancelled():
            task.exception()

    async def _refresh(self) -> Any:
        marker = self._cache.conditional_marker()
        outcome = await self._fetcher.fetch(self.bucket, self.key, marker)

        if isinstance(outcome, NotModified):
            self._cache.noop()
            return self._cache.current()
        if isinstance(outcome, (Failed, ParseFailure)):
            self._cache.noop()
            raise outcome.cause
        if isinstance(outcome, Changed):
            self._cache.apply_changed(outcome.value, outcome.last_modified)
            logger.info(
                "s3://%s/%s updated (Last-Modified %s)",
                self.bucket,
                self.key,
                outcome.last_modified.isoformat(),
            )
            self._listeners.notify(outcome.value)
            return outcome.value
        raise TypeError(f"unknown fetch outcome: {outcome!r}")

    def get_last_modified(self) -> datetime | None:
        return self._cache.last_modified_marker()

    async def _scheduled_update(self) -> None:
        try:
            await self.get_update()
        except S3PollerError as exc:
            logger.debug("Scheduled update of s3://%s/%s failed: %s", self.bucket, self.key, exc)

    def poll(self, interval_ms: float) -> S3Poller:
        """Check for updates every `interval_ms`, replacing any previous interval."""
        self._scheduler.start(interval_ms, self._scheduled_update)
        return self

    def cancel_poll(self) -> S3Poller:
        """Stop polling. Listeners stay registered; an in-flight refresh completes."""
        self._scheduler.stop()
        return self

    def on_update(self, *listeners: Listener) -> S3Poller:
        """Register listeners called with the new object whenever it changes."""
        self._listeners.add(*listeners)
        return self

    def off_update(self, *listeners: Listener) -> S3Poller:
        self._listeners.remove(*listeners)
        return self

    def remove_listeners(self) -> S3Poller:
        self._listeners.clear()
        return self

    @property
    def is_polling(self) -> bool:
        return self._scheduler.active

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
