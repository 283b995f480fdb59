"""Application configuration loading utilities for repository-local settings."""

from __future__ import annotations

import codecs
import importlib
from dataclasses import dataclass, replace
from functools import lru_cache
from pathlib import Path
from types import ModuleType
from typing import Any

tomllib: ModuleType | None
try:  # Python 3.11+
    tomllib = importlib.import_module("tomllib")
except ModuleNotFoundError:  # pragma: no cover
    tomllib = None

CONFIG_RELPATH = Path("config") / "app.toml"
_SEPARATORS = ("\\", "/")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Store effective output and naming settings."""

    output_encoding: str = "utf-16"
    name_prefix: str = "embedded:\\"
    name_separator: str = "\\"
    recursive: bool = False


def _candidate_roots(root: Path | None) -> list[Path]:
    roots = [Path.cwd()]
    if root is not None:
        roots.append(root)
    seen: set[Path] = set()
    out: list[Path] = []
    for entry in roots:
        entry = entry.resolve()
        if entry in seen:
            continue
        seen.add(entry)
        out.append(entry)
    return out


def load_toml(path: Path) -> dict[str, Any]:
    if tomllib is None or not path.exists():
        return {}
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _normalize_encoding(value: Any, *, default: str) -> str:
    name = str(value).strip() if value is not None else ""
    if not name:
        return default
    try:
        codecs.lookup(name)
    except LookupError:
        return default
    return name


def _normalize_separator(value: Any, *, default: str) -> str:
    return value if value in _SEPARATORS else default


def _normalize_bool(value: Any, *, default: bool) -> bool:
    return value if isinstance(value, bool) else default


@lru_cache(maxsize=8)
def load(root: Path | None = None) -> AppConfig:
    """Load and merge app configuration from `config/app.toml` candidates."""
    cfg = AppConfig()
    for base in _candidate_roots(root):
        data = load_toml(base / CONFIG_RELPATH)
        output = data.get("output", {})
        names = data.get("names", {})
        scan = data.get("scan", {})
        if isinstance(output, dict):
            cfg = replace(
                cfg,
                output_encoding=_normalize_encoding(
                    output.get("encoding"), default=cfg.output_encoding
                ),
            )
        if isinstance(names, dict):
            prefix = names.get("prefix", cfg.name_prefix)
            cfg = replace(
                cfg,
                name_prefix=prefix if isinstance(prefix, str) else cfg.name_prefix,
                name_separator=_normalize_separator(
                    names.get("separator"), default=cfg.name_separator
                ),
            )
        if isinstance(scan, dict):
            cfg = replace(
                cfg,
                recursive=_normalize_bool(scan.get("recursive"), default=cfg.recursive),
            )
    return cfg
