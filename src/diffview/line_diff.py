#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/line_diff.py
"""Line diff engine: change chunks to paired, numbered line records.

The engine takes two values, obtains a flat list of line-shaped change chunks
(plain line diff, or the structural optimizer for JSON/YAML), then expands
the chunks into :class:`~diffview.models.LineRecord` rows:

- unchanged lines fill both sides;
- removed lines fill the left side, or pair with the line at the same
  position of an immediately following added chunk to form a modified row;
- added lines not consumed by such a pairing fill the right side.

Rows that differ, plus rows forced visible through ``always_show_lines``,
are listed in ``changed_rows``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from diffview.compare_modes import CompareMethod, CompareMode, coerce_compare_method, diff_lines
from diffview.constants import (
    DEFAULT_DEFER_WORD_DIFF,
    DEFAULT_DISABLE_WORD_DIFF,
    DEFAULT_LINE_OFFSET,
    EMPTY_LINE_PLACEHOLDER,
    MAX_LINE_LENGTH_FOR_WORD_DIFF,
    StructuredFormat,
)
from diffview.exceptions import ParsingError, TextInputRequiredError
from diffview.models import ChangeChunk, ComputedLineInformation, DiffRecord, DiffType, LineRecord
from diffview.serialization import is_structured
from diffview.structural import structural_diff, structural_text_diff
from diffview.word_diff import compute_diff

logger = logging.getLogger(__name__)


def split_chunk_lines(value: str) -> list[str]:
    """Split a chunk value into its lines.

    One trailing newline ends the last line; an empty value has no lines.
    """
    if value == "":
        return []
    if value.endswith("\n"):
        value = value[:-1]
    return value.split("\n")


def _structured_format(mode: CompareMethod) -> StructuredFormat:
    return "yaml" if mode is CompareMode.YAML else "json"


def ensure_comparable(old_value: Any, new_value: Any, compare_mode: CompareMethod) -> None:
    """Reject structured values under a compare mode that only accepts text.

    Raises
    ------
    TextInputRequiredError
        If either value is structured and ``compare_mode`` is a custom comparator

    """
    if isinstance(compare_mode, CompareMode):
        return
    if is_structured(old_value) or is_structured(new_value):
        raise TextInputRequiredError(compare_mode)


def compute_change_chunks(
    old_value: Any,
    new_value: Any,
    compare_mode: CompareMethod = CompareMode.CHARS,
) -> list[ChangeChunk]:
    """Produce the line-shaped change chunks for two values.

    Two strings are line-diffed, except under the JSON and YAML modes, where
    the formatting-preserving structural variant is tried first and malformed
    input falls back to a plain line diff. When either value is structured,
    the structural optimizer renders and diffs both values.

    Raises
    ------
    TextInputRequiredError
        If a value is structured and ``compare_mode`` is a custom comparator

    """
    ensure_comparable(old_value, new_value, compare_mode)

    if not is_structured(old_value) and not is_structured(new_value):
        if isinstance(compare_mode, CompareMode) and compare_mode.is_structural:
            fmt = _structured_format(compare_mode)
            try:
                return structural_text_diff(old_value, new_value, fmt)
            except ParsingError as e:
                logger.debug(f"Falling back to line diff: {e}")
        return diff_lines(old_value, new_value)

    return structural_diff(old_value, new_value, _structured_format(compare_mode))


class _LineBuilder:
    """Expands change chunks into line records, keeping both line counters."""

    def __init__(
        self,
        chunks: Sequence[ChangeChunk],
        disable_word_diff: bool,
        compare_mode: CompareMethod,
        line_offset: int,
        always_show_lines: Iterable[str],
        defer_word_diff: bool,
    ) -> None:
        self.chunks = chunks
        self.chunk_lines = [split_chunk_lines(chunk.value) for chunk in chunks]
        self.disable_word_diff = disable_word_diff
        self.compare_mode = compare_mode
        self.defer_word_diff = defer_word_diff
        self.always_show = frozenset(always_show_lines)

        self.left_number = line_offset
        self.right_number = line_offset
        self.records: list[LineRecord] = []
        self.changed_rows: list[int] = []
        self._changed: set[int] = set()
        # (chunk index, line index) of added lines already used in a pairing
        self._consumed: set[tuple[int, int]] = set()

    def build(self) -> ComputedLineInformation:
        for index, chunk in enumerate(self.chunks):
            if chunk.removed:
                self._emit_removed(index)
            elif chunk.added:
                self._emit_added(index)
            else:
                self._emit_default(index)
        return ComputedLineInformation(line_records=self.records, changed_rows=self.changed_rows)

    def _mark(self, row: int) -> None:
        if row not in self._changed:
            self._changed.add(row)
            self.changed_rows.append(row)

    def _append(self, record: LineRecord, is_change: bool) -> None:
        row = len(self.records)
        self.records.append(record)
        if is_change:
            self._mark(row)
        left, right = record.left, record.right
        if (left.line_number is not None and f"L-{left.line_number}" in self.always_show) or (
            right.line_number is not None and f"R-{right.line_number}" in self.always_show
        ):
            self._mark(row)

    def _next_left(self) -> int:
        self.left_number += 1
        return self.left_number

    def _next_right(self) -> int:
        self.right_number += 1
        return self.right_number

    def _emit_default(self, index: int) -> None:
        for line in self.chunk_lines[index]:
            self._append(
                LineRecord(
                    left=DiffRecord(self._next_left(), DiffType.DEFAULT, line),
                    right=DiffRecord(self._next_right(), DiffType.DEFAULT, line),
                ),
                is_change=False,
            )

    def _emit_added(self, index: int) -> None:
        for line_index, line in enumerate(self.chunk_lines[index]):
            if (index, line_index) in self._consumed:
                continue
            self._append(
                LineRecord(right=DiffRecord(self._next_right(), DiffType.ADDED, line or EMPTY_LINE_PLACEHOLDER)),
                is_change=True,
            )

    def _pairable_lines(self, index: int) -> list[str]:
        """Added lines available for pairing with the removed chunk at ``index``.

        Pairing stops at the first empty added line so that right-side line
        numbers keep following the added chunk's order.
        """
        if index + 1 >= len(self.chunks) or not self.chunks[index + 1].added:
            return []
        candidates = self.chunk_lines[index + 1]
        for position, line in enumerate(candidates):
            if not line:
                return candidates[:position]
        return candidates

    def _emit_removed(self, index: int) -> None:
        partners = self._pairable_lines(index)
        for line_index, line in enumerate(self.chunk_lines[index]):
            left = DiffRecord(self._next_left(), DiffType.REMOVED, line or EMPTY_LINE_PLACEHOLDER)
            if line_index >= len(partners):
                self._append(LineRecord(left=left), is_change=True)
                continue

            self._consumed.add((index + 1, line_index))
            partner = partners[line_index]
            right = DiffRecord(self._next_right(), DiffType.CHANGED, partner)
            # Compared as displayed: a blank removed line matches a lone space
            if left.value == partner:
                left.type = right.type = DiffType.DEFAULT
                self._append(LineRecord(left=left, right=right), is_change=False)
                continue

            left.type = DiffType.CHANGED
            self._fill_word_diff(left, right, line, partner)
            self._append(LineRecord(left=left, right=right), is_change=True)

    def _fill_word_diff(self, left: DiffRecord, right: DiffRecord, old_line: str, new_line: str) -> None:
        too_long = max(len(old_line), len(new_line)) > MAX_LINE_LENGTH_FOR_WORD_DIFF
        if self.disable_word_diff or too_long:
            return
        if self.defer_word_diff:
            left.raw_value = old_line
            right.raw_value = new_line
            return
        computed = compute_diff(old_line, new_line, self.compare_mode)
        left.value = computed.left
        right.value = computed.right


def compute_line_information(
    old_value: Any,
    new_value: Any,
    disable_word_diff: bool = DEFAULT_DISABLE_WORD_DIFF,
    compare_mode: CompareMethod | str = CompareMode.CHARS,
    line_offset: int = DEFAULT_LINE_OFFSET,
    always_show_lines: Iterable[str] = (),
    defer_word_diff: bool = DEFAULT_DEFER_WORD_DIFF,
) -> ComputedLineInformation:
    """Compute the paired line records for two values.

    Parameters
    ----------
    old_value : str or Any
        Original text, or a parsed JSON/YAML value
    new_value : str or Any
        Updated text, or a parsed JSON/YAML value
    disable_word_diff : bool, default False
        Keep modified rows as whole-line strings
    compare_mode : CompareMode, str or callable, default CompareMode.CHARS
        Word diff granularity; JSON and YAML also select the structural diff
    line_offset : int, default 0
        Number added to every line number; the first line is ``line_offset + 1``
    always_show_lines : iterable of str, default ()
        ``"L-<n>"`` / ``"R-<n>"`` identifiers of rows to list as changed
    defer_word_diff : bool, default False
        Store raw strings on modified rows instead of computing word diffs

    Returns
    -------
    ComputedLineInformation
        Line records in display order and the indices of changed rows

    Raises
    ------
    TextInputRequiredError
        If a value is structured and ``compare_mode`` is a custom comparator
    ValidationError
        If ``compare_mode`` is an unknown mode name

    Examples
    --------
        >>> info = compute_line_information("test\\n\\n\\n    ", "test\\n\\n    ")
        >>> len(info.line_records), info.changed_rows
        (4, [2])

    """
    mode = coerce_compare_method(compare_mode)
    chunks = compute_change_chunks(old_value, new_value, mode)
    builder = _LineBuilder(chunks, disable_word_diff, mode, line_offset, always_show_lines, defer_word_diff)
    return builder.build()


__all__ = [
    "split_chunk_lines",
    "ensure_comparable",
    "compute_change_chunks",
    "compute_line_information",
]
