"""Backend-core public surface – re-export runtime API."""

from __future__ import annotations

from .embedder import EmbedRequest, EmbedResult, run
from .emitter import render
from .input_scanner import ConfigurationError, InputSet, resolve_inputs
from .merge import InputFile, MergeResult, merge
from .model import EmbeddedElement, EmbedderError, Outcome
from .parser import ParsedOutput, read_existing

__all__ = [
    "run",
    "merge",
    "render",
    "read_existing",
    "resolve_inputs",
    "EmbedRequest",
    "EmbedResult",
    "EmbeddedElement",
    "EmbedderError",
    "ConfigurationError",
    "InputFile",
    "InputSet",
    "MergeResult",
    "Outcome",
    "ParsedOutput",
]
