"""Fetch outcome dataclasses."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from ..errors import FetchError, ParseError


@dataclass(frozen=True)
class Changed:
    value: Any
    last_modified: datetime


@dataclass(frozen=True)
class NotModified:
    pass


@dataclass(frozen=True)
class Failed:
    cause: FetchError


@dataclass(frozen=True)
class ParseFailure:
    cause: ParseError


Outcome = Union[Changed, NotModified, Failed, ParseFailure]
