"""Single repeating timer that drives periodic refreshes."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from .errors import ConfigurationError
from .models.poll_config import PollConfig

logger = logging.getLogger(__name__)

RefreshFn = Callable[[], Awaitable[object]]


class PollScheduler:
    """Run `refresh_fn` every `interval_ms` in a background task.

    The interval is measured start-to-start: time spent inside `refresh_fn` is
    subtracted from the following sleep. Failures raised by `refresh_fn` are
    discarded; reporting them is the refresh function's job.
    """

    def __init__(self) -> None:
        self._config: PollConfig | None = None

    @property
    def active(self) -> bool:
        return self._config is not None

    @property
    def interval_ms(self) -> float | None:
        return self._config.interval_ms if self._config else None

    def start(self, interval_ms: float, refresh_fn: RefreshFn) -> None:
        if not interval_ms or interval_ms <= 0:
            raise ConfigurationError(f"poll interval must be positive, got {interval_ms!r}")
        try:
            asyncio.get_running_loop()
        except RuntimeError as exc:
            raise ConfigurationError("polling requires a running event loop") from exc

        self.stop()
        config = PollConfig(interval_ms=interval_ms)
        config.task = asyncio.create_task(self._run(interval_ms / 1000.0, refresh_fn))
        self._config = config
        logger.debug("Polling started (interval=%sms)", interval_ms)

    def stop(self) -> None:
        config, self._config = self._config, None
        if config is None:
            return
        if config.task is not None and not config.task.done():
            config.task.cancel()
        logger.debug("Polling stopped (interval=%sms)", config.interval_ms)

    async def _run(self, interval_s: float, refresh_fn: RefreshFn) -> None:
        loop = asyncio.get_running_loop()
        await asyncio.sleep(interval_s)
        while True:
            start = loop.time()
            try:
                await refresh_fn()
            except asyncio.CancelledError:
                raise
            except Exception:
                pass
            elapsed = loop.time() - start
            await asyncio.sleep(max(0.0, interval_s - elapsed))
