"""Poll timer configuration."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass


@dataclass
class PollConfig:
    interval_ms: float
    task: asyncio.Task | None = None
