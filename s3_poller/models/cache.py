"""In-memory state for the cached document."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class ObjectCache:
    """Current document value and the marker it was fetched with."""

    value: Any = None
    last_modified: datetime | None = None

    def current(self) -> Any:
        return self.value

    def last_modified_marker(self) -> datetime | None:
        return self.last_modified

    def conditional_marker(self) -> datetime | None:
        """Return the marker only when a conditional fetch is possible."""
        if self.value is None or self.last_modified is None:
            return None
        return self.last_modified

    def apply_changed(self, value: Any, last_modified: datetime) -> None:
        self.value = value
        self.last_modified = last_modified

    def noop(self) -> None:
        return None
