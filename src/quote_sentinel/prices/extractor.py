"""Single-pass extraction of a date window from a streamed daily series.

The history provider returns one large JSON document keyed by date, newest
first, pretty-printed one field per line::

    "2022-11-22": {
        "1. open": "147.6000",
        ...
        "4. close": "149.1000"
    },
    "2022-11-21": {
    ...

Parsing the whole document to keep a handful of days is wasteful, so the
extractor scans lines and keeps only those between the record that opens the
later boundary date and the end of the record for the earlier one. The kept
lines are wrapped into a standalone object that ``json.loads`` accepts.

Scanning is a small state machine::

    IDLE -> READING -> FINISHING -> DONE
      \\________\\___________\\______-> FAILED

``ScanState`` is an immutable value. ``advance`` takes the current state and
one line and returns the next state plus whether to keep the line. The list
of kept lines belongs to the call that drives the scan.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, Iterable
from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum

from quote_sentinel.core.exceptions import DateNotFoundError, StockNotFoundError

logger = logging.getLogger(__name__)

OBJECT_START = "{"
OBJECT_END = "}"
SEPARATOR = ","

# Alpha Vantage answers unknown symbols with {"Error Message": "..."}
NOT_FOUND_MARKER = "Error Message"


class ScanPhase(StrEnum):
    """Where the scan is relative to the requested window."""

    IDLE = "idle"
    READING = "reading"
    FINISHING = "finishing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class ScanWindow:
    """Date tokens delimiting the window.

    The stream is newest first, so the later date opens the window and the
    earlier date closes it.
    """

    open_boundary: str
    close_boundary: str

    @classmethod
    def between(cls, start: date, end: date) -> ScanWindow:
        if start > end:
            raise ValueError(f"start ({start}) must not be after end ({end})")
        return cls(open_boundary=end.isoformat(), close_boundary=start.isoformat())


@dataclass(frozen=True)
class ScanState:
    phase: ScanPhase = ScanPhase.IDLE
    line_number: int = 0

    @property
    def finished(self) -> bool:
        return self.phase in (ScanPhase.DONE, ScanPhase.FAILED)


def advance(state: ScanState, line: str, window: ScanWindow) -> tuple[ScanState, bool]:
    """Feed one line to the scan.

    Returns:
        The next state and whether ``line`` belongs to the window.
    """
    if state.finished:
        return state, False

    line_number = state.line_number + 1

    if NOT_FOUND_MARKER in line:
        return ScanState(ScanPhase.FAILED, line_number), False

    phase = state.phase
    if phase == ScanPhase.IDLE:
        if not _opens_record(line, window.open_boundary):
            return replace(state, line_number=line_number), False
        phase = ScanPhase.READING

    # A single-day window opens and starts finishing on the same line.
    if phase == ScanPhase.READING and _opens_record(line, window.close_boundary):
        phase = ScanPhase.FINISHING

    if phase == ScanPhase.FINISHING and OBJECT_END in line:
        phase = ScanPhase.DONE

    return ScanState(phase, line_number), True


def close_window(lines: list[str]) -> str:
    """Wrap kept lines into a standalone object.

    The last kept line ends a record that is followed by a separator unless
    it was the final record of the source document.
    """
    body = "\n".join(lines).rstrip()
    if body.endswith(SEPARATOR):
        body = body[:-1]
    return f"{OBJECT_START}\n{body}\n{OBJECT_END}"


class StreamWindowExtractor:
    """Carves the inclusive window ``[start, end]`` out of a line stream.

    The extractor holds only the immutable window, so one instance may be
    shared by concurrent scans over independent sources. Each source is read
    once and reading stops as soon as the window is closed or the scan fails.

    Raises (from ``extract`` / ``aextract``):
        StockNotFoundError: a line carried the provider's not-found marker.
        DateNotFoundError: the source ended before the window was closed.
    """

    def __init__(self, start: date, end: date) -> None:
        self._window = ScanWindow.between(start, end)

    @property
    def window(self) -> ScanWindow:
        return self._window

    def extract(self, lines: Iterable[str | bytes]) -> str:
        state = ScanState()
        kept: list[str] = []
        for raw in lines:
            line = _decode(raw)
            state, keep = advance(state, line, self._window)
            if keep:
                kept.append(line)
            if state.finished:
                break
        return self._result(state, kept)

    async def aextract(self, lines: AsyncIterable[str | bytes]) -> str:
        state = ScanState()
        kept: list[str] = []
        async for raw in lines:
            line = _decode(raw)
            state, keep = advance(state, line, self._window)
            if keep:
                kept.append(line)
            if state.finished:
                break
        return self._result(state, kept)

    def _result(self, state: ScanState, kept: list[str]) -> str:
        if state.phase == ScanPhase.FAILED:
            raise StockNotFoundError(
                "History stream reported an unknown symbol",
                context={"line_number": state.line_number},
            )
        if state.phase != ScanPhase.DONE:
            raise DateNotFoundError(
                f"Window {self._window.close_boundary}..{self._window.open_boundary} "
                "not found in history stream",
                context={
                    "open_boundary": self._window.open_boundary,
                    "close_boundary": self._window.close_boundary,
                    "phase": str(state.phase),
                },
            )

        logger.debug(
            "Extracted %d lines for %s..%s after scanning %d",
            len(kept),
            self._window.close_boundary,
            self._window.open_boundary,
            state.line_number,
        )
        return close_window(kept)


def _opens_record(line: str, date_token: str) -> bool:
    return date_token in line and OBJECT_START in line


def _decode(raw: str | bytes) -> str:
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return raw.rstrip("\r\n")
