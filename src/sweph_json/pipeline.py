"""Batch pipeline: iterate items into a bounded JSON document with graceful truncation."""

from __future__ import annotations

import enum
import logging
import re
from collections.abc import Callable, Iterable

from sweph_json.constants import (
    BASE_TRUNCATION_MARGIN,
    EARTH,
    INTP_PERG,
    MAX_ASTEROID_LIST,
    MAX_ASTEROID_NUMBER,
    PLUTO,
    SUN,
)
from sweph_json.emitters import largest_record_bytes
from sweph_json.models import BatchSummary
from sweph_json.writer import BoundedWriter

logger = logging.getLogger(__name__)

_ID_TOKEN_RE = re.compile(r'\s*[0-9]+\s*')

# Stop iterating once less than this many unreserved bytes remain: never below
# the base margin and always room for the largest record the emitters produce.
TRUNCATION_MARGIN = max(BASE_TRUNCATION_MARGIN, largest_record_bytes())

# Emits one item: (item, separator, sink) -> (result with .ok, written)
EmitOne = Callable[[int, str, Callable[[str], bool]], tuple[object, bool]]


class BatchState(enum.Enum):
    """Lifecycle of one batch document."""

    INIT = 'init'
    ITERATING = 'iterating'
    TRUNCATED = 'truncated'
    COMPLETED = 'completed'
    CLOSED = 'closed'


def truncation_notice(kind: str, item: int) -> str:
    """Warning record written in place of the items that did not fit."""
    return f' {{ "warning": "Buffer limit reached, truncating results at {kind} {item}" }} '


def summary_member(summary: BatchSummary) -> str:
    """Trailing summary member of a batch document."""
    return (
        f', "summary": {{ "calculated": {summary.calculated}, "errors": {summary.errored}, '
        f'"total_requested": {summary.requested} }}'
    )


def summary_reserve(requested: int) -> int:
    """Bytes needed for the summary member of a batch of requested items."""
    return len(summary_member(BatchSummary(requested, requested, requested)).encode('utf-8'))


class BatchPipeline:
    """Writes one JSON document through a BoundedWriter.

    Every structural write is atomic (all of the fragment or none of it) and
    stays clear of a reserve that holds each pending closing bracket, the
    truncation notice and any trailing member the caller reserved, so the
    document can always be closed well-formed. Once truncated, only reserved
    closing text is written.

    State: INIT -> ITERATING -> (TRUNCATED | COMPLETED) -> CLOSED.
    """

    def __init__(self, writer: BoundedWriter, *, margin: int = TRUNCATION_MARGIN) -> None:
        self.writer = writer
        self.margin = margin
        self.state = BatchState.INIT
        self.truncated = False
        self._closers: list[str] = []
        self._reserved = 0

    @property
    def reserved(self) -> int:
        """Bytes currently held back for closing text."""
        return self._reserved

    def reserve(self, nbytes: int) -> None:
        """Hold back nbytes for closing text written later with write_reserved()."""
        self._reserved += nbytes

    def write(self, text: str) -> bool:
        """Write a structural fragment if it fits outside the reserve.

        Returns:
            True if written; False (and the pipeline becomes truncated) otherwise.
        """
        if self.truncated or self.state is BatchState.CLOSED:
            return False
        if not self.writer.fits(text, self._reserved):
            self._mark_truncated()
            return False
        self.writer.append(text)
        return True

    def open(self, text: str, closer: str) -> bool:
        """Write an opening fragment and remember the text that closes it."""
        if not self.write(text):
            return False
        self._closers.append(closer)
        self._reserved += len(closer.encode('utf-8'))
        return True

    def close(self) -> None:
        """Write the closer of the innermost open structure."""
        closer = self._closers.pop()
        self._reserved -= len(closer.encode('utf-8'))
        self.writer.append(closer)

    def write_reserved(self, text: str, nbytes: int) -> None:
        """Write closing text into space held back with reserve(nbytes)."""
        self._reserved -= nbytes
        self.writer.append(text)

    def close_all(self) -> str:
        """Close every open structure, enter CLOSED and return the document text."""
        while self._closers:
            self.close()
        self.state = BatchState.CLOSED
        return self.writer.getvalue()

    def iterate(
        self, items: Iterable[int], emit_one: EmitOne, *, kind: str = 'item'
    ) -> BatchSummary:
        """Emit one record per item, stopping early when capacity runs low.

        After each item, if more items remain and fewer than ``margin``
        unreserved bytes are left, a truncation notice is written and the loop
        stops. A record that does not fit at all truncates the same way.

        Parameters:
            items: Item ids in output order.
            emit_one: Fetches, renders and writes one item through the given sink.
            kind: Item label used in the truncation notice.

        Returns:
            Counters for this list; ``requested`` is the full item count.
        """
        ids = list(items)
        summary = BatchSummary(len(ids))
        if self.truncated:
            summary.truncated = bool(ids)
            return summary
        notice_bytes = len(truncation_notice(kind, -(2**31)).encode('utf-8'))
        self.reserve(notice_bytes)
        self.state = BatchState.ITERATING
        for i, item in enumerate(ids):
            last = i == len(ids) - 1
            result, written = emit_one(item, ' ' if last else ', ', self.write)
            if not written:
                self._write_notice(kind, item, notice_bytes, summary)
                return summary
            summary.record(bool(getattr(result, 'ok', False)))
            if not last and self.writer.is_near_capacity(self.margin + self._reserved):
                self._write_notice(kind, item, notice_bytes, summary)
                return summary
        self._reserved -= notice_bytes
        self.state = BatchState.COMPLETED
        return summary

    def _mark_truncated(self) -> None:
        self.truncated = True
        self.state = BatchState.TRUNCATED

    def _write_notice(self, kind: str, item: int, notice_bytes: int, summary: BatchSummary) -> None:
        self._mark_truncated()
        summary.truncated = True
        self.write_reserved(truncation_notice(kind, item), notice_bytes)
        logger.info(
            'Output capacity reached at %s %d: %d of %d items written',
            kind,
            item,
            summary.processed,
            summary.requested,
        )


# ---------------------------------------------------------------------------
# Iteration modes
# ---------------------------------------------------------------------------


def planet_ids() -> list[int]:
    """Major bodies and derived points for the planet list (Earth excluded)."""
    return [p for p in range(SUN, INTP_PERG + 1) if p != EARTH]


def node_body_ids(include_sun: bool = True) -> list[int]:
    """Bodies for the node/apsides batch: Sun (optional) through Pluto, Earth excluded."""
    first = SUN if include_sun else SUN + 1
    return [p for p in range(first, PLUTO + 1) if p != EARTH]


def asteroid_range(start: int, end: int) -> tuple[int, int]:
    """Normalize an asteroid number range: swap if reversed, clamp to 1..MAX_ASTEROID_NUMBER."""
    if start > end:
        start, end = end, start
    start = min(max(start, 1), MAX_ASTEROID_NUMBER)
    end = min(max(end, 1), MAX_ASTEROID_NUMBER)
    return (start, end)


def parse_id_list(text: str | None) -> list[int]:
    """Parse a comma-separated asteroid number list.

    Tokens that are not plain decimal numbers in 1..MAX_ASTEROID_NUMBER are dropped without
    error; at most MAX_ASTEROID_LIST numbers are kept, in input order.

    Parameters:
        text: e.g. ``"1,2,3,4,433"``.

    Returns:
        Parsed numbers.
    """
    numbers: list[int] = []
    if not text:
        return numbers
    for token in text.split(','):
        if len(numbers) >= MAX_ASTEROID_LIST:
            break
        if _ID_TOKEN_RE.fullmatch(token) is None:
            continue
        number = int(token)
        if 1 <= number <= MAX_ASTEROID_NUMBER:
            numbers.append(number)
    return numbers
