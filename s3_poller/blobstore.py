"""Blob store access: the protocol the poller needs and a plain-HTTP store.

`HttpBlobStore` issues unsigned path-style GETs, which suits public buckets and
unauthenticated S3-compatible gateways. The signed AWS store lives in `s3store.py`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import format_datetime, parsedate_to_datetime
from typing import Protocol, runtime_checkable
from urllib.parse import quote

import httpx

from . import config
from .errors import ConfigurationError, FetchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlobObject:
    body: bytes
    last_modified: datetime


class BlobNotModified(Exception):
    """The store reports no change since the supplied marker."""


@runtime_checkable
class BlobStore(Protocol):
    async def get(
        self, bucket: str, key: str, if_modified_since: datetime | None = None
    ) -> BlobObject:
        """Fetch an object, optionally only if changed since a marker.

        Raises:
            BlobNotModified: If `if_modified_since` was given and the object is unchanged.
            FetchError: For any other failure.
        """
        ...


def to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_http_date(dt: datetime) -> str:
    """Format a datetime as an RFC 7231 HTTP-date.

    Example:
        >>> format_http_date(datetime(2000, 1, 1, tzinfo=timezone.utc))
        'Sat, 01 Jan 2000 00:00:00 GMT'
    """
    return format_datetime(to_utc(dt), usegmt=True)


def parse_http_date(value: str | None) -> datetime | None:
    """Parse a Last-Modified header value, returning None if absent or malformed."""
    if not value:
        return None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    return to_utc(parsed)


class HttpBlobStore:
    """Unauthenticated blob store backed by an `httpx.AsyncClient`.

    For public buckets, CDN fronts and S3-compatible gateways that need no request
    signing. Private S3 buckets need `S3BlobStore` (see `s3store.py`).

    Args:
        endpoint: Base URL of the store, e.g. `https://my-bucket-host.example`.
        timeout_s: Per-request timeout; defaults to `config.TIMEOUT_S`.
        headers: Extra headers sent with every request (gateway API keys).
        client: Pre-built client to use instead of creating one. An injected client is
            never closed by `aclose()`.
    """

    def __init__(
        self,
        endpoint: str,
        timeout_s: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        if not endpoint:
            raise ConfigurationError("HttpBlobStore needs an endpoint")
        self.endpoint = endpoint.rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else config.TIMEOUT_S
        self.headers = dict(headers or {})
        self._client = client
        self._owns_client = client is None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout_s)
        return self._client

    async def aclose(self) -> None:
        """Close an owned client. Later `get()` calls fail instead of reconnecting."""
        self._closed = True
        if self._owns_client and self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    def object_url(self, bucket: str, key: str) -> str:
        return f"{self.endpoint}/{quote(bucket, safe='')}/{quote(key, safe='/')}"

    async def get(
        self, bucket: str, key: str, if_modified_since: datetime | None = None
    ) -> BlobObject:
        if self._closed:
            raise FetchError("store is closed", bucket=bucket, key=key)

        headers = dict(self.headers)
        if if_modified_since is not None:
            headers["If-Modified-Since"] = format_http_date(if_modified_since)

        url = self.object_url(bucket, key)
        try:
            resp = await self._get_client().get(url, headers=headers)
        except httpx.HTTPError as exc:
            raise FetchError(
                f"Request for s3://{bucket}/{key} failed: {exc}", bucket=bucket, key=key
            ) from exc

        if resp.status_code == 304:
            raise BlobNotModified(f"s3://{bucket}/{key} not modified")
        if not resp.is_success:
            snippet = resp.text[:200].replace("\n", " ")
            raise FetchError(
                f"GET s3://{bucket}/{key} returned HTTP {resp.status_code}: {snippet}",
                bucket=bucket,
                key=key,
                status_code=resp.status_code,
            )

        last_modified = parse_http_date(resp.headers.get("Last-Modified"))
        if last_modified is None:
            raise FetchError(
                f"GET s3://{bucket}/{key} returned no valid Last-Modified header",
                bucket=bucket,
                key=key,
                status_code=resp.status_code,
            )
        return BlobObject(body=resp.content, last_modified=last_modified)


__all__ = [
    "BlobObject",
    "BlobNotModified",
    "BlobStore",
    "HttpBlobStore",
    "format_http_date",
    "parse_http_date",
]
