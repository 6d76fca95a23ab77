#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/models.py
"""Data model shared by the diff pipeline.

The pipeline turns raw input into a flat list of :class:`ChangeChunk` objects,
expands those into paired :class:`LineRecord` rows, and derives fold
:class:`Block` ranges from the rows. Presentation layers consume these
structures; nothing here knows how they are drawn.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Union


class DiffType(IntEnum):
    """Classification of a line side or an intra-line token."""

    DEFAULT = 0
    ADDED = 1
    REMOVED = 2
    CHANGED = 3


@dataclass(frozen=True, slots=True)
class ChangeChunk:
    """A contiguous run of text with a single classification.

    Both flags false means the chunk is unchanged.
    """

    value: str
    added: bool = False
    removed: bool = False

    @property
    def is_default(self) -> bool:
        """Whether the chunk is unchanged."""
        return not (self.added or self.removed)


@dataclass(frozen=True, slots=True)
class SubDiffToken:
    """One token of an intra-line (word-level) diff."""

    type: DiffType
    value: str


LineValue = Union[str, list[SubDiffToken]]


@dataclass(slots=True)
class DiffRecord:
    """One side of one rendered row.

    Parameters
    ----------
    line_number : int or None
        Line number on this side, or None when the side has no line
    type : DiffType or None
        Classification of the line; None for an empty side
    value : str or list of SubDiffToken
        Line text, or the word-diff tokens of a modified line
    raw_value : str or None
        Original line text when word diffing was deferred

    """

    line_number: int | None = None
    type: DiffType | None = None
    value: LineValue = ""
    raw_value: str | None = None

    @property
    def is_empty(self) -> bool:
        """Whether this side has no corresponding line."""
        return self.line_number is None

    @property
    def is_deferred(self) -> bool:
        """Whether the word diff for this side still has to be computed."""
        return self.raw_value is not None

    @property
    def text(self) -> str:
        """Plain text of the line, joining word-diff tokens if needed."""
        if isinstance(self.value, str):
            return self.value
        return "".join(token.value for token in self.value)


@dataclass(slots=True)
class LineRecord:
    """A rendered row: the left (old) and right (new) sides of one line."""

    left: DiffRecord = field(default_factory=DiffRecord)
    right: DiffRecord = field(default_factory=DiffRecord)

    @property
    def is_modification(self) -> bool:
        """Whether the row pairs a removed line with an added line."""
        return self.left.type == DiffType.CHANGED and self.right.type == DiffType.CHANGED


@dataclass(slots=True)
class ComputedLineInformation:
    """Output of the line diff engine.

    Attributes
    ----------
    line_records : list of LineRecord
        Rows in display order
    changed_rows : list of int
        Indices into ``line_records`` of rows that differ or are forced visible

    """

    line_records: list[LineRecord] = field(default_factory=list)
    changed_rows: list[int] = field(default_factory=list)


@dataclass(slots=True)
class ComputedDiffInformation:
    """Word-level diff of one modified line pair."""

    left: list[SubDiffToken] = field(default_factory=list)
    right: list[SubDiffToken] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Block:
    """A maximal run of foldable rows.

    Attributes
    ----------
    index : int
        Position of the block in the block list
    start_line : int
        Index of the first row in the run
    end_line : int
        Index of the last row in the run
    lines : int
        Number of rows in the run

    """

    index: int
    start_line: int
    end_line: int
    lines: int


@dataclass(slots=True)
class HiddenBlocks:
    """Fold blocks plus the row-to-block lookup."""

    block_of: dict[int, int] = field(default_factory=dict)
    blocks: list[Block] = field(default_factory=list)


__all__ = [
    "DiffType",
    "ChangeChunk",
    "SubDiffToken",
    "LineValue",
    "DiffRecord",
    "LineRecord",
    "ComputedLineInformation",
    "ComputedDiffInformation",
    "Block",
    "HiddenBlocks",
]
