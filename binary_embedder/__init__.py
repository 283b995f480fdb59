"""BinaryEmbedder – all public symbols are re-exported from .core."""

from importlib import metadata

from .core import (  # noqa: F401 – re-exports
    EmbeddedElement,
    EmbedRequest,
    InputFile,
    InputSet,
    Outcome,
    merge,
    read_existing,
    render,
    run,
)

try:
    __version__ = metadata.version("binary-embedder-py")
except metadata.PackageNotFoundError:  # editable install before first build
    __version__ = "0.0.0"
