from __future__ import annotations

import codecs

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r"}
_UNESCAPES = {'"': '"', "\\": "\\", "n": "\n", "r": "\r"}


def _escape(raw: str) -> str:
    """Escape backslashes, quotes and line breaks for a C wide-string literal."""
    if not any(ch in raw for ch in _ESCAPES):
        return raw
    return "".join(_ESCAPES.get(ch, ch) for ch in raw)


def _unescape(raw: str) -> str:
    """Undo the escapes `_escape` writes; keep any other escape literal."""
    if "\\" not in raw:
        return raw
    out: list[str] = []
    i = 0
    while i < len(raw):
        ch = raw[i]
        if ch == "\\" and i + 1 < len(raw):
            nxt = raw[i + 1]
            if nxt in _UNESCAPES:
                out.append(_UNESCAPES[nxt])
                i += 2
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def _strip_comment(line: str) -> str:
    """Cut a trailing `//` comment that is not inside a string literal."""
    if "//" not in line:
        return line
    in_string = False
    i = 0
    while i < len(line):
        ch = line[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "/" and line.startswith("//", i):
            return line[:i]
        i += 1
    return line


def _resolve_encoding(encoding: str, raw: bytes) -> tuple[str, int]:
    """Return (codec, bom_length); a BOM wins over the configured encoding."""
    if raw.startswith(codecs.BOM_UTF8):
        return "utf-8", 3
    if raw.startswith(codecs.BOM_UTF16_LE):
        return "utf-16-le", 2
    if raw.startswith(codecs.BOM_UTF16_BE):
        return "utf-16-be", 2
    enc = encoding.lower().replace("_", "-")
    if enc in {"utf-8-sig", "utf8-sig"}:
        return "utf-8", 0
    if enc in {"utf-16", "utf16"}:
        if not raw:
            return "utf-16-le", 0
        even_zeros = sum(1 for i in range(0, len(raw), 2) if raw[i] == 0)
        odd_zeros = sum(1 for i in range(1, len(raw), 2) if raw[i] == 0)
        if even_zeros > odd_zeros:
            return "utf-16-be", 0
        return "utf-16-le", 0
    return encoding, 0


def _decode_text(raw: bytes, encoding: str) -> str:
    """Decode generated output strictly; a bad byte means a corrupt file."""
    codec, bom_len = _resolve_encoding(encoding, raw)
    return raw[bom_len:].decode(codec)


def _encode_text(text: str, encoding: str) -> bytes:
    """Encode output with a platform-independent BOM policy."""
    enc = encoding.lower().replace("_", "-")
    if enc in {"utf-16", "utf16"}:
        return codecs.BOM_UTF16_LE + text.encode("utf-16-le")
    return text.encode(encoding)


def _split_lines(text: str) -> list[str]:
    """Split on LF only (dropping a CR before it); other breaks stay in the line."""
    return [line.removesuffix("\r") for line in text.split("\n")]
