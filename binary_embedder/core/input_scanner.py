"""Resolve configured input sets into (path, logical name) pairs."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .app_config import load_toml
from .merge import InputFile
from .model import EmbedderError

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "embedded:\\"


class ConfigurationError(EmbedderError):
    """Input sets cannot be resolved as given."""


@dataclass(frozen=True, slots=True)
class InputSet:
    """One wildcard or file path, optionally searched below *directory*."""

    pattern: str
    directory: Path | None = None
    prefix: str = DEFAULT_PREFIX


@dataclass(frozen=True, slots=True)
class Manifest:
    sets: tuple[InputSet, ...]
    output: Path | None = None
    append: bool | None = None


def resolve_inputs(
    sets: Iterable[InputSet],
    *,
    recursive: bool = False,
    separator: str = "\\",
) -> list[InputFile]:
    """
    Expand every input set, in order, into concrete input files.

    Without a directory the pattern names one existing file and the logical
    name is prefix + file name. With a directory the pattern must be a bare
    wildcard; matches are sorted and named prefix + relative path.
    """
    out: list[InputFile] = []
    for input_set in sets:
        found = _resolve_set(input_set, recursive=recursive, separator=separator)
        logger.info(
            "Searching for '%s' file(s) in '%s'... found %d.",
            input_set.pattern,
            input_set.directory or "",
            len(found),
        )
        out.extend(found)
    return out


def _resolve_set(
    input_set: InputSet, *, recursive: bool, separator: str
) -> list[InputFile]:
    if input_set.directory is None:
        path = Path(input_set.pattern)
        if not path.is_file():
            raise ConfigurationError(f"Unable to open file '{input_set.pattern}'")
        return [InputFile(path, input_set.prefix + path.name)]

    if "/" in input_set.pattern or "\\" in input_set.pattern:
        raise ConfigurationError(
            f"'{input_set.pattern}' cannot be a path if a directory is specified"
        )
    directory = input_set.directory
    if not directory.is_dir():
        raise ConfigurationError(f"Unable to find directory '{directory}'")
    matches = directory.rglob(input_set.pattern) if recursive else directory.glob(
        input_set.pattern
    )
    files = sorted(p for p in matches if p.is_file())
    return [
        InputFile(p, input_set.prefix + separator.join(p.relative_to(directory).parts))
        for p in files
    ]


def _manifest_set(raw: Any, *, base: Path, index: int) -> InputSet:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"[[input]] entry {index} must be a table")
    pattern = raw.get("pattern")
    if not isinstance(pattern, str) or not pattern.strip():
        raise ConfigurationError(f"[[input]] entry {index} needs a 'pattern'")
    directory = raw.get("directory")
    prefix = raw.get("prefix", DEFAULT_PREFIX)
    if directory is not None and not isinstance(directory, str):
        raise ConfigurationError(f"[[input]] entry {index}: bad 'directory'")
    if not isinstance(prefix, str):
        raise ConfigurationError(f"[[input]] entry {index}: bad 'prefix'")
    return InputSet(
        pattern=pattern.strip(),
        directory=base / directory if directory else None,
        prefix=prefix,
    )


def load_manifest(path: Path, *, default_prefix: str = DEFAULT_PREFIX) -> Manifest:
    """Read `[[input]]` tables (plus optional `output`/`append`) from a TOML file."""
    if not path.is_file():
        raise ConfigurationError(f"Unable to open manifest '{path}'")
    data = load_toml(path)
    entries = data.get("input", [])
    if not isinstance(entries, list) or not entries:
        raise ConfigurationError(f"Manifest '{path}' lists no [[input]] tables")
    base = path.parent
    sets = []
    for index, raw in enumerate(entries):
        if isinstance(raw, dict) and "prefix" not in raw:
            raw = {**raw, "prefix": default_prefix}
        sets.append(_manifest_set(raw, base=base, index=index))
    output = data.get("output")
    append = data.get("append")
    return Manifest(
        sets=tuple(sets),
        output=base / output if isinstance(output, str) and output else None,
        append=append if isinstance(append, bool) else None,
    )
