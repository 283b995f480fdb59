from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import xxhash

from .model import EmbeddedElement, ticks_to_datetime
from .parser import read_existing


@dataclass(frozen=True, slots=True)
class ElementRow:
    index: int
    name: str
    size_in_bytes: int
    modified: str
    digest: str


def _data_digest(element: EmbeddedElement) -> str:
    # digest of the stored text form; lets two outputs be compared at a glance
    return xxhash.xxh64(element.data.encode("utf-8")).hexdigest()


def _format_ticks(ticks: int) -> str:
    try:
        return ticks_to_datetime(ticks).isoformat()
    except OverflowError:
        return f"ticks:{ticks}"


def inspect_output(
    path: Path, encoding: str = "utf-16"
) -> tuple[str | None, list[ElementRow]]:
    parsed = read_existing(path, encoding)
    rows = [
        ElementRow(
            index=i,
            name=element.name,
            size_in_bytes=element.size_in_bytes,
            modified=_format_ticks(element.last_modify_time),
            digest=_data_digest(element),
        )
        for i, element in enumerate(parsed.elements)
    ]
    return parsed.session_id, rows


def format_report(
    *, path: Path, session_id: str | None, rows: list[ElementRow]
) -> str:
    lines = [f"Embedded output: {path.as_posix()}"]
    lines.append(f"Session: {session_id or '-'}")
    if not rows:
        lines.append("No embedded elements found.")
        return "\n".join(lines)
    total = sum(row.size_in_bytes for row in rows)
    lines.append(f"Elements: {len(rows)} ({total} bytes)")
    for row in rows:
        lines.append(
            f"- [{row.index}] {row.name} size={row.size_in_bytes}"
            f" modified={row.modified} xxh64={row.digest}"
        )
    return "\n".join(lines)
