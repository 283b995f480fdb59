"""Embedded element record plus the timestamp and session-id helpers."""

from __future__ import annotations

import enum
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

# group symbol prefixes shared by the emitter and the parser
NAMES_PREFIX = "s_BE_Names_"
DATAS_PREFIX = "s_BE_Datas_"
SIZES_PREFIX = "s_BE_Sizes_"
TIMES_PREFIX = "s_BE_Times_"

DEFINE_COUNT = "#define BINARY_EMBEDDER_ITEM_COUNT"
DEFINE_NAMES = "#define BINARY_EMBEDDER_NAMES"
DEFINE_DATAS = "#define BINARY_EMBEDDER_DATAS"
DEFINE_SIZES = "#define BINARY_EMBEDDER_SIZES"
DEFINE_TIMES = "#define BINARY_EMBEDDER_TIMES"

_TICKS_AT_UNIX_EPOCH = 621_355_968_000_000_000
_KIND_UTC = 1 << 62
_TICKS_MASK = (1 << 62) - 1
_SESSION_RE = re.compile(r"^[0-9a-fA-F]{32}$")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class EmbedderError(Exception):
    """Base class for every error surfaced by a run."""


@dataclass(frozen=True, slots=True)
class EmbeddedElement:
    name: str
    data: str  # decimal byte values, each followed by ","
    size_in_bytes: int
    last_modify_time: int  # UTC, 100ns ticks since 0001-01-01
    uid: str = field(default="", compare=False)

    def is_complete(self) -> bool:
        return (
            self.name is not None
            and self.data is not None
            and self.size_in_bytes >= 0
            and self.last_modify_time != 0
        )


class Outcome(enum.Enum):
    """What the merge decided for one logical name."""

    REUSED = "reused"
    CONTENT_MATCH = "content-match"
    UPDATED = "updated"
    INSERTED = "inserted"
    RETAINED = "retained"
    REMOVED = "removed"

    @property
    def tagged(self) -> bool:
        return self not in (Outcome.RETAINED, Outcome.REMOVED)


def ticks_from_ns(ns: int) -> int:
    """Convert a POSIX `st_mtime_ns` value into 100ns ticks since year 1."""
    return ns // 100 + _TICKS_AT_UNIX_EPOCH


def ticks_to_binary(ticks: int) -> int:
    return (ticks & _TICKS_MASK) | _KIND_UTC


def ticks_from_binary(value: int) -> int:
    return value & _TICKS_MASK


def ticks_to_datetime(ticks: int) -> datetime:
    micros = (ticks - _TICKS_AT_UNIX_EPOCH) // 10
    return _EPOCH + timedelta(microseconds=micros)


def new_session_id() -> str:
    return uuid.uuid4().hex


def is_valid_session_id(value: str | None) -> bool:
    """Session ids end up inside C identifiers, so only plain hex is accepted."""
    if not value or not _SESSION_RE.match(value):
        return False
    try:
        uuid.UUID(hex=value)
    except ValueError:
        return False
    return True


def group_names(session_id: str) -> tuple[str, str, str, str]:
    """Return the (names, datas, sizes, times) symbols for *session_id*."""
    return (
        NAMES_PREFIX + session_id,
        DATAS_PREFIX + session_id,
        SIZES_PREFIX + session_id,
        TIMES_PREFIX + session_id,
    )
