"""One incremental embedding run: read prior output, merge, write if changed."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from . import emitter
from .merge import InputFile, MergeResult, merge
from .model import is_valid_session_id, new_session_id
from .parser import ParsedOutput, read_existing

logger = logging.getLogger(__name__)

TOOL_NAME = "BinaryEmbedder"


@dataclass(frozen=True, slots=True)
class EmbedRequest:
    output: Path
    inputs: Sequence[InputFile]
    append: bool = False
    clean: bool = False
    encoding: str = "utf-16"


@dataclass(frozen=True, slots=True)
class EmbedResult:
    output: Path
    session_id: str
    merge: MergeResult
    written: bool

    @property
    def count(self) -> int:
        return len(self.merge.elements)

    def summary(self) -> str:
        if self.written:
            return f"{TOOL_NAME}: {self.count} files embedded into '{self.output}'."
        return (
            f"{TOOL_NAME}: no modifications detected, '{self.output}' is up to date."
        )


def _prior_state(request: EmbedRequest) -> ParsedOutput:
    if request.clean:
        return ParsedOutput((), None)
    return read_existing(request.output, request.encoding)


def run(request: EmbedRequest) -> EmbedResult:
    """
    Regenerate `request.output` from `request.inputs`.

    Raises the merge errors unchanged; when one is raised nothing has been
    written and any existing output is left exactly as it was.
    """
    prior = _prior_state(request)
    session_id = prior.session_id
    if session_id is None or not is_valid_session_id(session_id):
        session_id = new_session_id()

    result = merge(request.inputs, prior.elements, append=request.append)
    changed = result.changed
    if (
        not changed
        and prior.session_id is not None
        and not emitter.encoded_with(request.output, request.encoding)
    ):
        logger.info(
            "Output encoding changed to '%s', rewriting '%s'.",
            request.encoding,
            request.output,
        )
        changed = True
    if not changed:
        logger.info("No modifications detected, '%s' is up to date.", request.output)
        return EmbedResult(request.output, session_id, result, written=False)

    emitter.write(
        request.output, result.elements, session_id, encoding=request.encoding
    )
    return EmbedResult(request.output, session_id, result, written=True)
