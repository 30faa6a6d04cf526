"""Signed S3 access through aiobotocore."""

from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from datetime import datetime
from typing import Any

from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .blobstore import BlobNotModified, BlobObject, to_utc
from .errors import FetchError

logger = logging.getLogger(__name__)

_NOT_MODIFIED_CODES = {"304", "NotModified"}


def _client_error_status(exc: ClientError) -> int | None:
    return exc.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def _is_not_modified(exc: ClientError) -> bool:
    code = str(exc.response.get("Error", {}).get("Code", ""))
    return code in _NOT_MODIFIED_CODES or _client_error_status(exc) == 304


class S3BlobStore:
    """Blob store that calls S3 GetObject with a signed aiobotocore client.

    Credentials come from the usual AWS chain (environment, shared config, instance
    role) unless given explicitly.

    Args:
        client: Pre-built aiobotocore S3 client. An injected client is never closed by
            `aclose()`.
        **client_kwargs: Passed to `session.create_client("s3", ...)`, e.g.
            `region_name`, `endpoint_url`, `aws_access_key_id`,
            `aws_secret_access_key`, `aws_session_token`, `config`. `region` is
            accepted as an alias of `region_name`. `region_name` and `endpoint_url`
            default to `config.REGION` and `config.ENDPOINT`.

    Example:
        >>> store = S3BlobStore(region_name="eu-west-1")
        >>> obj = await store.get("configs", "flags.json")
    """

    def __init__(self, client: Any = None, **client_kwargs: Any) -> None:
        region = client_kwargs.pop("region", None)
        if region is not None:
            client_kwargs.setdefault("region_name", region)
        if config.REGION and "region_name" not in client_kwargs:
            client_kwargs["region_name"] = config.REGION
        if config.ENDPOINT and "endpoint_url" not in client_kwargs:
            client_kwargs["endpoint_url"] = config.ENDPOINT
        client_kwargs.setdefault(
            "config",
            Config(connect_timeout=config.TIMEOUT_S, read_timeout=config.TIMEOUT_S),
        )
        self.client_kwargs = client_kwargs
        self._client = client
        self._exit_stack: AsyncExitStack | None = None
        self._client_lock = asyncio.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _get_client(self) -> Any:
        async with self._client_lock:
            if self._closed:
                raise FetchError("store is closed")
            if self._client is None:
                stack = AsyncExitStack()
                self._client = await stack.enter_async_context(
                    get_session().create_client("s3", **self.client_kwargs)
                )
                self._exit_stack = stack
            return self._client

    async def aclose(self) -> None:
        """Close an owned client. Later `get()` calls fail instead of reconnecting."""
        async with self._client_lock:
            self._closed = True
            stack, self._exit_stack = self._exit_stack, None
        if stack is not None:
            await stack.aclose()

    async def get(
        self, bucket: str, key: str, if_modified_since: datetime | None = None
    ) -> BlobObject:
        if self._closed:
            raise FetchError("store is closed", bucket=bucket, key=key)

        params: dict[str, Any] = {"Bucket": bucket, "Key": key}
        if if_modified_since is not None:
            params["IfModifiedSince"] = to_utc(if_modified_since)

        try:
            client = await self._get_client()
            resp = await client.get_object(**params)
            async with resp["Body"] as stream:
                body = await stream.read()
        except ClientError as exc:
            if if_modified_since is not None and _is_not_modified(exc):
                raise BlobNotModified(f"s3://{bucket}/{key} not modified") from exc
            status = _client_error_status(exc)
            raise FetchError(
                f"GetObject s3://{bucket}/{key} failed: {exc}",
                bucket=bucket,
                key=key,
                status_code=status,
            ) from exc
        except BotoCoreError as exc:
            raise FetchError(
                f"GetObject s3://{bucket}/{key} failed: {exc}", bucket=bucket, key=key
            ) from exc

        last_modified = resp.get("LastModified")
        if not isinstance(last_modified, datetime):
            raise FetchError(
                f"GetObject s3://{bucket}/{key} returned no LastModified",
                bucket=bucket,
                key=key,
            )
        return BlobObject(body=body, last_modified=to_utc(last_modified))


__all__ = ["S3BlobStore"]
