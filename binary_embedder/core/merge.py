"""Decide per input file whether to reuse, update or insert an embedded element."""

from __future__ import annotations

import logging
import os
import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from .model import EmbeddedElement, EmbedderError, Outcome, ticks_from_ns

logger = logging.getLogger(__name__)

MAX_INPUT_SIZE = 32 * 1024 * 1024
OPEN_RETRIES = 10
OPEN_RETRY_DELAY_S = 0.5

# not-found and wrong-kind errors never clear up by waiting
_PERMANENT_OPEN_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError)
_BYTE_TEXT = tuple(f"{value}," for value in range(256))


class UnsupportedInputError(EmbedderError):
    """Input file exceeds the maximum embeddable size."""


class InternalConsistencyError(EmbedderError):
    """Prior output claims the same timestamp but a different size."""


class EmbedAbortedError(EmbedderError):
    """Processing one input failed; the whole run is abandoned."""

    def __init__(self, *, path: Path, original: Exception) -> None:
        super().__init__(
            f"error with reading file '{path}' : {original}; "
            "files will not get embedded, aborting."
        )
        self.path = path
        self.original = original


@dataclass(frozen=True, slots=True)
class InputFile:
    path: Path
    name: str


@dataclass(frozen=True, slots=True)
class MergeResult:
    elements: tuple[EmbeddedElement, ...]
    outcomes: dict[str, Outcome]
    changed: bool

    @property
    def removed(self) -> list[str]:
        return [name for name, o in self.outcomes.items() if o is Outcome.REMOVED]

    def tagged(self, name: str) -> bool:
        outcome = self.outcomes.get(name)
        return outcome is not None and outcome.tagged

    def count(self, *outcomes: Outcome) -> int:
        return sum(1 for o in self.outcomes.values() if o in outcomes)


def encode_bytes(data: bytes) -> str:
    """Render bytes as the decimal list stored in the output (`1,2,3,`)."""
    return "".join(map(_BYTE_TEXT.__getitem__, data))


def open_shared(
    path: Path,
    *,
    retries: int = OPEN_RETRIES,
    delay_s: float = OPEN_RETRY_DELAY_S,
    opener: Callable[[Path], BinaryIO] | None = None,
    sleep: Callable[[float], None] | None = None,
) -> BinaryIO:
    """
    Open *path* for reading, riding out short-lived contention.

    Transient failures are retried `retries` times, `delay_s` apart; after
    that one last attempt is made without catching anything.
    """
    if opener is None:
        opener = _open_binary
    if sleep is None:
        sleep = time.sleep
    try:
        return opener(path)
    except _PERMANENT_OPEN_ERRORS:
        raise
    except OSError as exc:
        logger.warning("error reading file '%s' : %s - retrying...", path, exc)
    for _ in range(retries):
        sleep(delay_s)
        try:
            return opener(path)
        except OSError:
            continue
    return opener(path)


def _open_binary(path: Path) -> BinaryIO:
    return open(path, "rb")


def merge(
    inputs: Sequence[InputFile],
    prior: Iterable[EmbeddedElement],
    *,
    append: bool = False,
    open_input: Callable[[Path], BinaryIO] = open_shared,
) -> MergeResult:
    """
    Merge freshly scanned *inputs* into the *prior* elements.

    Prior elements keep their order; new names are appended in input order.
    Without *append*, prior names that were not scanned this time are pruned.
    """
    elements: dict[str, EmbeddedElement] = {}
    for element in prior:
        elements[element.name] = element
    outcomes: dict[str, Outcome] = {}
    changed = False

    logger.info("Processing %d files...", len(inputs))
    for item in inputs:
        try:
            outcome = _process(item, elements, open_input)
        except Exception as exc:
            logger.error("error with reading file '%s' : %s", item.path, exc)
            raise EmbedAbortedError(path=item.path, original=exc) from exc
        outcomes[item.name] = outcome
        if outcome in (Outcome.UPDATED, Outcome.INSERTED):
            changed = True

    untagged = [name for name in elements if name not in outcomes]
    if append:
        for name in untagged:
            outcomes[name] = Outcome.RETAINED
    elif untagged:
        for name in untagged:
            del elements[name]
            outcomes[name] = Outcome.REMOVED
        logger.info(
            "Not in append mode, removed %d existing entries.", len(untagged)
        )
        changed = True

    return MergeResult(tuple(elements.values()), outcomes, changed)


def _process(
    item: InputFile,
    elements: dict[str, EmbeddedElement],
    open_input: Callable[[Path], BinaryIO],
) -> Outcome:
    prev = elements.get(item.name)
    last_modify_time = ticks_from_ns(os.stat(item.path).st_mtime_ns)
    with open_input(item.path) as handle:
        size = os.fstat(handle.fileno()).st_size
        if prev is not None and prev.last_modify_time == last_modify_time:
            if size != prev.size_in_bytes:
                raise InternalConsistencyError(
                    "Error - timestamps match but sizes don't!"
                )
            logger.info(
                "File '%s': skipped (not modified since last time).", item.path
            )
            return Outcome.REUSED

        if size > MAX_INPUT_SIZE:
            raise UnsupportedInputError(
                f"File '{item.path}' bigger than supported size."
            )
        # the file may have grown since fstat
        raw = handle.read(MAX_INPUT_SIZE + 1)
    size = len(raw)
    if size > MAX_INPUT_SIZE:
        raise UnsupportedInputError(
            f"File '{item.path}' bigger than supported size."
        )
    data = encode_bytes(raw)

    if (
        prev is not None
        and prev.name == item.name
        and prev.size_in_bytes == size
        and prev.data == data
    ):
        # stored timestamp stays as captured; the file content is what matters
        logger.info(
            "File '%s': skipped (timestamps different, but data not modified "
            "since last time).",
            item.path,
        )
        return Outcome.CONTENT_MATCH

    elements[item.name] = EmbeddedElement(
        item.name, data, size, last_modify_time, uid=uuid.uuid4().hex
    )
    if prev is not None:
        logger.info("File '%s': done (existing overridden).", item.path)
        return Outcome.UPDATED
    logger.info("File '%s': done.", item.path)
    return Outcome.INSERTED
