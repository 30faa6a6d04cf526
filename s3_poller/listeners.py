"""Ordered registry of update listeners."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

from .errors import InvalidListenerError

logger = logging.getLogger(__name__)

Listener = Callable[[Any], object]


def _same_listener(registered: Listener, candidate: Listener) -> bool:
    if registered is candidate:
        return True
    return inspect.ismethod(registered) and inspect.ismethod(candidate) and registered == candidate


class ListenerRegistry:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, *callbacks: Listener) -> None:
        """Append callbacks in call order. Duplicates are kept and fire once each.

        Raises:
            InvalidListenerError: If any argument is not callable. Nothing is
                registered in that case.
        """
        for cb in callbacks:
            if not callable(cb):
                raise InvalidListenerError(cb)
        self._listeners.extend(callbacks)

    def remove(self, *callbacks: Listener) -> None:
        """Drop every registered instance identical to one of `callbacks`.

        Bound methods are the one exception: `obj.method` builds a new object on
        every access, so two bound methods match when they wrap the same function
        on the same instance.
        """
        self._listeners = [
            cb for cb in self._listeners if not any(_same_listener(cb, c) for c in callbacks)
        ]

    def clear(self) -> None:
        self._listeners = []

    def notify(self, value: Any) -> None:
        # Snapshot: changes made by listeners apply from the next notification.
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Update listener %r failed", listener)
