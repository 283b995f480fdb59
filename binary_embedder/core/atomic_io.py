"""Replace the generated output in one step so readers never see half a file."""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

from .parse_utils import _encode_text


def replace_bytes_atomic(path: Path, data: bytes) -> None:
    """Write *data* to a sibling temp file, fsync it, then swap it in."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            with contextlib.suppress(OSError):
                os.fsync(handle.fileno())
        os.chmod(tmp, _target_mode(path))
        os.replace(tmp, path)
        _fsync_dir(path.parent)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def replace_text_atomic(path: Path, text: str, *, encoding: str = "utf-16") -> None:
    replace_bytes_atomic(path, _encode_text(text, encoding))


def _target_mode(path: Path) -> int:
    """Keep the mode of an existing output; otherwise honour the umask."""
    try:
        return path.stat().st_mode & 0o777
    except OSError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def _fsync_dir(path: Path) -> None:
    try:
        fd = os.open(path, getattr(os, "O_DIRECTORY", 0))
    except OSError:
        return
    try:
        os.fsync(fd)
    except OSError:
        pass
    finally:
        os.close(fd)
