"""Serialize embedded elements into the self-describing C++ output file."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .atomic_io import replace_text_atomic
from .model import (
    DEFINE_COUNT,
    DEFINE_DATAS,
    DEFINE_NAMES,
    DEFINE_SIZES,
    DEFINE_TIMES,
    EmbeddedElement,
    group_names,
    ticks_to_binary,
)
from .parse_utils import _encode_text, _escape

logger = logging.getLogger(__name__)

_RULE = "/" * 74
_ITEM_INDENT = " " * 26
_CLOSE = " " * 29 + "};"
_UNDEFS = (
    "#undef BINARY_EMBEDDER_ITEM_COUNT",
    "#undef BINARY_EMBEDDER_NAMES",
    "#undef BINARY_EMBEDDER_DATAS",
    "#undef BINARY_EMBEDDER_SIZES",
    "#undef BINARY_EMBEDDER_TIMES",
)


def _hex(value: int) -> str:
    return f"0x{value & 0xFFFFFFFFFFFFFFFF:x}"


def _aggregate(decl: str, values: Sequence[str]) -> list[str]:
    lines = [f"{decl}[] = {{"]
    lines.extend(f"{_ITEM_INDENT}{value}," for value in values)
    lines.append(_CLOSE)
    return lines


def render(elements: Sequence[EmbeddedElement], session_id: str) -> str:
    """Return the full output text; equal inputs always give equal text."""
    names, datas, sizes, times = group_names(session_id)
    count = len(elements)
    lines = [
        _RULE,
        "//Automatically generated by the BinaryEmbedder tool",
        _RULE,
        "",
        *_UNDEFS,
        f"{DEFINE_COUNT} ({count})",
        f"{DEFINE_NAMES} {names}",
        f"{DEFINE_DATAS} {datas}",
        f"{DEFINE_SIZES} {sizes}",
        f"{DEFINE_TIMES} {times}",
        "",
        "// Elements (names)",
    ]
    for i, element in enumerate(elements):
        lines.append(
            f'static wchar_t {names}_{i}[] = L"{_escape(element.name)}";'
        )
    lines += ["", "// Elements (data)"]
    for i, element in enumerate(elements):
        lines.append(f"static unsigned char {datas}_{i}[] = {{{element.data}}};")
    lines.append("")

    lines.append("// Array of element names")
    lines += _aggregate(
        f"static wchar_t * {names}", [f"{names}_{i}" for i in range(count)]
    )
    lines.append("// Array of element data")
    lines += _aggregate(
        f"static unsigned char * {datas}", [f"{datas}_{i}" for i in range(count)]
    )
    lines.append("// Array of element data sizes")
    lines += _aggregate(
        f"static __int64 {sizes}", [_hex(e.size_in_bytes) for e in elements]
    )
    lines.append("// Array of element data timestamps")
    lines += _aggregate(
        f"static __int64 {times}",
        [_hex(ticks_to_binary(e.last_modify_time)) for e in elements],
    )
    return "\n".join(lines) + "\n"


def encoded_with(path: Path, encoding: str) -> bool:
    """True when *path* starts with the header rule encoded as *encoding*."""
    prefix = _encode_text(_RULE, encoding)
    try:
        with open(path, "rb") as handle:
            return handle.read(len(prefix)) == prefix
    except OSError:
        return False


def write(
    path: Path,
    elements: Sequence[EmbeddedElement],
    session_id: str,
    *,
    encoding: str = "utf-16",
) -> None:
    """Overwrite *path* with the rendered elements; never patches in place."""
    logger.info("Writing to '%s' ...", path)
    replace_text_atomic(path, render(elements, session_id), encoding=encoding)
    logger.info("Done, written %d elements.", len(elements))
