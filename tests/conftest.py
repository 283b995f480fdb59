"""Shared fixtures for BinaryEmbedder tests."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from binary_embedder.core import app_config

# whole seconds, so coarse-mtime filesystems keep the exact value
T0_NS = 1_700_000_000 * 1_000_000_000
T1_NS = 1_700_000_500 * 1_000_000_000


@pytest.fixture(autouse=True)
def _fresh_app_config() -> Iterator[None]:
    app_config.load.cache_clear()
    yield
    app_config.load.cache_clear()


def set_mtime(path: Path, mtime_ns: int) -> None:
    os.utime(path, ns=(mtime_ns, mtime_ns))


@pytest.fixture()
def write_input(tmp_path: Path) -> Callable[..., Path]:
    def _write(rel: str, data: bytes, *, mtime_ns: int = T0_NS) -> Path:
        path = tmp_path / "inputs" / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        set_mtime(path, mtime_ns)
        return path

    return _write
