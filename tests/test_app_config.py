"""Test module for app config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from binary_embedder.core import app_config


def _write_config(tmp_path: Path, text: str) -> None:
    cfg = tmp_path / "config"
    cfg.mkdir(parents=True, exist_ok=True)
    (cfg / "app.toml").write_text(text, encoding="utf-8")


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)


def test_load_defaults(tmp_path: Path) -> None:
    """Verify defaults apply when no config file exists."""
    cfg = app_config.load(tmp_path)
    assert cfg.output_encoding == "utf-16"
    assert cfg.name_prefix == "embedded:\\"
    assert cfg.name_separator == "\\"
    assert cfg.recursive is False


def test_load_reads_overrides_from_toml(tmp_path: Path) -> None:
    """Verify output, naming and scan values are loaded from app.toml."""
    _write_config(
        tmp_path,
        """
[output]
encoding = "utf-8"

[names]
prefix = 'assets:/'
separator = "/"

[scan]
recursive = true
""".strip()
        + "\n",
    )
    cfg = app_config.load(tmp_path)
    assert cfg.output_encoding == "utf-8"
    assert cfg.name_prefix == "assets:/"
    assert cfg.name_separator == "/"
    assert cfg.recursive is True


def test_load_keeps_defaults_for_invalid_values(tmp_path: Path) -> None:
    """Verify unknown encodings and bad types fall back to defaults."""
    _write_config(
        tmp_path,
        """
[output]
encoding = "no-such-codec"

[names]
prefix = 12
separator = "|"

[scan]
recursive = "yes"
""".strip()
        + "\n",
    )
    cfg = app_config.load(tmp_path)
    assert cfg == app_config.AppConfig()


def test_load_ignores_malformed_toml(tmp_path: Path) -> None:
    """Verify a config file that does not parse is ignored."""
    _write_config(tmp_path, "[output\nencoding = \n")
    assert app_config.load(tmp_path) == app_config.AppConfig()


def test_load_is_cached_until_cleared(tmp_path: Path) -> None:
    """Verify repeated loads reuse the cached value."""
    first = app_config.load(tmp_path)
    _write_config(tmp_path, '[output]\nencoding = "utf-8"\n')
    assert app_config.load(tmp_path) is first
    app_config.load.cache_clear()
    assert app_config.load(tmp_path).output_encoding == "utf-8"
