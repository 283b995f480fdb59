"""Test module for the output emitter, checked against the parser."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from binary_embedder.core.emitter import render, write
from binary_embedder.core.merge import encode_bytes
from binary_embedder.core.model import EmbeddedElement
from binary_embedder.core.parser import read_existing

_SESSION = "0123456789abcdef0123456789abcdef"
_TICKS = 634_609_728_000_000_000


def test_render_single_element_golden() -> None:
    """Verify the exact generated text for one element."""
    element = EmbeddedElement("embedded:\\foo.bin", "1,2,3,4,", 4, _TICKS)
    names = f"s_BE_Names_{_SESSION}"
    datas = f"s_BE_Datas_{_SESSION}"
    sizes = f"s_BE_Sizes_{_SESSION}"
    times = f"s_BE_Times_{_SESSION}"
    item = " " * 26
    close = " " * 29 + "};"
    expected = [
        "/" * 74,
        "//Automatically generated by the BinaryEmbedder tool",
        "/" * 74,
        "",
        "#undef BINARY_EMBEDDER_ITEM_COUNT",
        "#undef BINARY_EMBEDDER_NAMES",
        "#undef BINARY_EMBEDDER_DATAS",
        "#undef BINARY_EMBEDDER_SIZES",
        "#undef BINARY_EMBEDDER_TIMES",
        "#define BINARY_EMBEDDER_ITEM_COUNT (1)",
        f"#define BINARY_EMBEDDER_NAMES {names}",
        f"#define BINARY_EMBEDDER_DATAS {datas}",
        f"#define BINARY_EMBEDDER_SIZES {sizes}",
        f"#define BINARY_EMBEDDER_TIMES {times}",
        "",
        "// Elements (names)",
        f'static wchar_t {names}_0[] = L"embedded:\\\\foo.bin";',
        "",
        "// Elements (data)",
        f"static unsigned char {datas}_0[] = {{1,2,3,4,}};",
        "",
        "// Array of element names",
        f"static wchar_t * {names}[] = {{",
        f"{item}{names}_0,",
        close,
        "// Array of element data",
        f"static unsigned char * {datas}[] = {{",
        f"{item}{datas}_0,",
        close,
        "// Array of element data sizes",
        f"static __int64 {sizes}[] = {{",
        f"{item}0x4,",
        close,
        "// Array of element data timestamps",
        f"static __int64 {times}[] = {{",
        f"{item}0x{5_246_295_746_427_387_904:x},",
        close,
    ]
    assert render([element], _SESSION) == "\n".join(expected) + "\n"


def test_render_is_deterministic_and_ordered() -> None:
    """Verify rendering twice gives identical text and keeps element order."""
    elements = [
        EmbeddedElement("b", "9,", 1, _TICKS),
        EmbeddedElement("a", "", 0, _TICKS + 1),
    ]
    text = render(elements, _SESSION)
    assert text == render(list(elements), _SESSION)
    assert text.index('L"b"') < text.index('L"a"')


def test_write_encodes_utf16_with_bom_by_default(tmp_path: Path) -> None:
    """Verify the default output encoding is UTF-16 LE with a BOM."""
    out = tmp_path / "out.cpp"
    write(out, [EmbeddedElement("n", "1,", 1, _TICKS)], _SESSION)
    raw = out.read_bytes()
    assert raw.startswith(b"\xff\xfe")
    assert raw[2:].decode("utf-16-le") == render(
        [EmbeddedElement("n", "1,", 1, _TICKS)], _SESSION
    )


def test_write_utf8_has_no_bom(tmp_path: Path) -> None:
    """Verify UTF-8 output is written without a BOM."""
    out = tmp_path / "out.cpp"
    write(out, [], _SESSION, encoding="utf-8")
    assert out.read_bytes().startswith(b"////")


def test_empty_collection_round_trips_with_session(tmp_path: Path) -> None:
    """Verify an empty output parses back to no elements but keeps the session."""
    out = tmp_path / "out.cpp"
    write(out, [], _SESSION)
    parsed = read_existing(out)
    assert parsed.elements == ()
    assert parsed.session_id == _SESSION


_NAME = st.text(
    alphabet=st.characters(exclude_categories=("Cs",)),
    min_size=1,
    max_size=40,
)
_ELEMENT = st.tuples(
    _NAME,
    st.binary(max_size=64),
    st.integers(min_value=1, max_value=(1 << 62) - 1),
)


@given(st.lists(_ELEMENT, max_size=12, unique_by=lambda item: item[0]))
@settings(max_examples=40, deadline=None)
def test_property_emit_then_parse_preserves_elements(
    items: list[tuple[str, bytes, int]],
) -> None:
    """Parsing emitted output yields the same names, data, sizes and times."""
    elements = tuple(
        EmbeddedElement(name, encode_bytes(data), len(data), ticks)
        for name, data, ticks in items
    )
    with tempfile.TemporaryDirectory() as tmp:
        out = Path(tmp) / "out.cpp"
        write(out, elements, _SESSION)
        parsed = read_existing(out)
    assert parsed.session_id == _SESSION
    assert parsed.elements == elements


@pytest.mark.parametrize(
    "sep", ["\n", "\r", "\r\n", "\u2028", "\u2029", "\x85", "\x0b"]
)
def test_names_with_line_breaks_round_trip(tmp_path: Path, sep: str) -> None:
    """Verify a name containing a line break reads back unchanged."""
    elements = (EmbeddedElement(f"embedded:\\x{sep}y.bin", "1,", 1, _TICKS),)
    out = tmp_path / "out.cpp"
    write(out, elements, _SESSION)
    assert read_existing(out).elements == elements
