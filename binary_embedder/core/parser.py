"""Read a previously generated output file back into embedded elements."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .model import (
    DEFINE_COUNT,
    DEFINE_DATAS,
    DEFINE_NAMES,
    DEFINE_SIZES,
    DEFINE_TIMES,
    NAMES_PREFIX,
    EmbeddedElement,
    EmbedderError,
    ticks_from_binary,
)
from .parse_utils import _decode_text, _split_lines, _strip_comment, _unescape

logger = logging.getLogger(__name__)

_STRING_RE = re.compile(r'"((?:\\.|[^"\\])*)"')
_BRACES_RE = re.compile(r"\{([^}]*)\}")


class OutputParseError(EmbedderError):
    """The prior output is present but does not follow the generated grammar."""


@dataclass(frozen=True, slots=True)
class ParsedOutput:
    elements: tuple[EmbeddedElement, ...]
    session_id: str | None


@dataclass(slots=True)
class _PendingElement:
    name: str | None = None
    data: str | None = None
    size_in_bytes: int = -1
    last_modify_time: int = 0

    def freeze(self, index: int) -> EmbeddedElement:
        element = EmbeddedElement(
            self.name,  # type: ignore[arg-type]
            self.data,  # type: ignore[arg-type]
            self.size_in_bytes,
            self.last_modify_time,
        )
        if not element.is_complete():
            raise OutputParseError(f"element {index} is incomplete")
        return element


@dataclass(frozen=True, slots=True)
class _Header:
    count: int
    names: str
    datas: str
    sizes: str
    times: str
    body_start: int


def read_existing(path: Path, encoding: str = "utf-16") -> ParsedOutput:
    """
    Rebuild the element list stored in *path*.

    A missing file yields no elements. Any other problem is logged and also
    yields no elements, so the caller re-embeds everything; the session id is
    kept whenever the header could be read.
    """
    if not path.exists():
        logger.info("Output file '%s' does not exist, will create a new one.", path)
        return ParsedOutput((), None)
    logger.info("Reading contents of the existing output file '%s'...", path)
    session_id: str | None = None
    try:
        lines = _split_lines(_decode_text(path.read_bytes(), encoding))
        header = _read_header(lines)
        if header is None:
            return ParsedOutput((), None)
        session_id = _session_from_group(header.names)
        if header.count == 0:
            return ParsedOutput((), session_id)
        elements = _read_body(lines[header.body_start :], header)
    except Exception as exc:
        logger.warning("error with reading file '%s' : %s", path, exc)
        logger.warning(
            "previous error will result in all the files getting re-embedded "
            "from scratch."
        )
        return ParsedOutput((), session_id)
    logger.info("Read %d existing elements.", len(elements))
    return ParsedOutput(elements, session_id)


def _session_from_group(names_group: str) -> str:
    if names_group.startswith(NAMES_PREFIX):
        return names_group[len(NAMES_PREFIX) :]
    return names_group


def _define_value(line: str, define: str) -> str | None:
    pos = line.find(define)
    if pos == -1:
        return None
    return line[pos + len(define) :].strip()


def _read_header(lines: list[str]) -> _Header | None:
    count = 0
    groups: dict[str, str] = {}
    defines = (
        ("names", DEFINE_NAMES),
        ("datas", DEFINE_DATAS),
        ("sizes", DEFINE_SIZES),
        ("times", DEFINE_TIMES),
    )
    for index, line in enumerate(lines):
        if count and len(groups) == len(defines):
            return _Header(count, body_start=index, **groups)
        value = _define_value(line, DEFINE_COUNT)
        if value is not None:
            count = int(value[value.index("(") + 1 : value.index(")")])
            continue
        for key, define in defines:
            value = _define_value(line, define)
            if value is not None:
                groups[key] = value
                break
    if count and len(groups) == len(defines):
        return _Header(count, body_start=len(lines), **groups)
    if "names" in groups:
        # header present but empty collection; keep the symbols stable
        return _Header(0, groups["names"], "", "", "", len(lines))
    return None


def _statements(lines: Iterable[str]) -> Iterator[str]:
    """Yield logical statements; one ends at the first line ending with `;`."""
    pending = ""
    for raw in lines:
        line = _strip_comment(raw).strip()
        if not line:
            continue
        pending += line
        if pending.endswith(";"):
            yield pending
            pending = ""
    if pending:
        yield pending


def _item_index(statement: str, group: str) -> int | None:
    match = re.search(re.escape(group) + r"_(\d+)\s*\[", statement)
    if match is None:
        return None
    return int(match.group(1))


def _parse_hex64(text: str) -> int:
    value = int(text, 16)
    if value >= 1 << 63:
        value -= 1 << 64
    return value


def _aggregate_values(statement: str) -> list[int]:
    match = _BRACES_RE.search(statement)
    if match is None:
        raise OutputParseError("Error reading sizes/times")
    return [
        _parse_hex64(item.strip())
        for item in match.group(1).split(",")
        if item.strip()
    ]


def _read_body(lines: list[str], header: _Header) -> tuple[EmbeddedElement, ...]:
    pending = [_PendingElement() for _ in range(header.count)]
    for statement in _statements(lines):
        if header.names + "_" in statement and header.names + "[]" not in statement:
            index = _item_index(statement, header.names)
            match = _STRING_RE.search(statement)
            if index is None or match is None:
                continue
            pending[index].name = _unescape(match.group(1))
        elif header.datas + "_" in statement and header.datas + "[]" not in statement:
            index = _item_index(statement, header.datas)
            if index is None:
                continue
            match = _BRACES_RE.search(statement) or _STRING_RE.search(statement)
            if match is None:
                continue
            pending[index].data = match.group(1)
        elif header.sizes + "[]" in statement:
            for index, value in enumerate(_aggregate_values(statement)):
                pending[index].size_in_bytes = value
        elif header.times + "[]" in statement:
            for index, value in enumerate(_aggregate_values(statement)):
                pending[index].last_modify_time = ticks_from_binary(value)
    return tuple(item.freeze(index) for index, item in enumerate(pending))
