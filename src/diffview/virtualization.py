#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/virtualization.py
"""Map folded line records to rendered rows and pick the visible window.

Rendering happens in row space, not line space: every line outside a
collapsed block is one row, and each collapsed block shrinks to a single fold
indicator row placed at its last line. :func:`build_row_map` performs that
mapping; :func:`visible_range` then selects, in O(log n), the rows a
virtualized display must build for a scroll position, using the cumulative
pixel offsets of the rows so that rows can have different heights.

Examples
--------
    >>> offsets = uniform_offsets(100, row_height=20)
    >>> visible_range(500, 200, offsets, buffer=5)
    (20, 40)

"""

from __future__ import annotations

import logging
import math
from bisect import bisect_right
from dataclasses import dataclass, field
from typing import Collection, Iterable, Sequence

from diffview.constants import DEFAULT_BUFFER_ROWS, ESTIMATED_ROW_HEIGHT
from diffview.exceptions import ValidationError
from diffview.models import Block, HiddenBlocks

logger = logging.getLogger(__name__)


def cumulative_offsets(row_heights: Iterable[float]) -> list[float]:
    """Turn row heights into start offsets, ending with the total height."""
    offsets: list[float] = [0]
    for height in row_heights:
        offsets.append(offsets[-1] + height)
    return offsets


def uniform_offsets(row_count: int, row_height: float = ESTIMATED_ROW_HEIGHT) -> list[float]:
    """Cumulative offsets for ``row_count`` rows of equal height."""
    return [row * row_height for row in range(row_count + 1)]


def estimate_row_heights(
    texts: Iterable[str],
    chars_per_row: int,
    row_height: float = ESTIMATED_ROW_HEIGHT,
) -> list[float]:
    """Estimate row heights for text that wraps at ``chars_per_row`` characters.

    Raises
    ------
    ValidationError
        If ``chars_per_row`` is not positive

    """
    if chars_per_row <= 0:
        raise ValidationError(
            f"chars_per_row must be positive, got {chars_per_row}",
            parameter_name="chars_per_row",
            parameter_value=chars_per_row,
        )
    return [row_height * max(1, math.ceil(len(text) / chars_per_row)) for text in texts]


def find_row_at_offset(offset: float, offsets: Sequence[float]) -> int:
    """Return the last row whose start offset is at or before ``offset``.

    Offsets past the end of the content resolve to the last row and offsets
    before the start resolve to row 0.

    Parameters
    ----------
    offset : float
        Pixel offset into the content
    offsets : sequence of float
        Non-decreasing row start offsets followed by the total height

    Returns
    -------
    int
        Row index

    """
    # The final entry is the total height, not the start of a row
    return max(0, bisect_right(offsets, offset, 0, max(0, len(offsets) - 1)) - 1)


def visible_range(
    scroll_offset: float,
    viewport_size: float,
    offsets: Sequence[float],
    buffer: int = DEFAULT_BUFFER_ROWS,
) -> tuple[int, int]:
    """Compute the inclusive row range to materialize for a viewport.

    Parameters
    ----------
    scroll_offset : float
        Pixel offset of the top of the viewport
    viewport_size : float
        Height of the viewport in pixels
    offsets : sequence of float
        Cumulative row offsets (row count + 1 entries)
    buffer : int, default 5
        Extra rows to include above and below the viewport

    Returns
    -------
    tuple of int
        ``(first_row, last_row)``. Only the first row is clamped; the last row
        may exceed the row count, and callers stop at the end of their rows.

    """
    first = max(0, find_row_at_offset(scroll_offset, offsets) - buffer)
    last = find_row_at_offset(scroll_offset + viewport_size, offsets) + buffer
    return first, last


@dataclass(slots=True)
class RowMap:
    """Correspondence between line indices and rendered rows.

    Attributes
    ----------
    line_to_row : dict of int to int
        Rendered row of every line that renders, including fold indicator lines
    row_to_line : list of int
        Line index shown by each rendered row
    fold_rows : dict of int to Block
        Rendered rows that are fold indicators, with the block they stand for

    """

    line_to_row: dict[int, int] = field(default_factory=dict)
    row_to_line: list[int] = field(default_factory=list)
    fold_rows: dict[int, Block] = field(default_factory=dict)

    @property
    def total_rows(self) -> int:
        return len(self.row_to_line)


@dataclass(frozen=True, slots=True)
class RenderedRow:
    """One row a presentation layer must build.

    ``block`` is set when the row is the fold indicator of a collapsed block.
    """

    row_index: int
    line_index: int
    block: Block | None = None

    @property
    def is_fold(self) -> bool:
        return self.block is not None


def build_row_map(
    line_count: int,
    hidden_blocks: HiddenBlocks,
    expanded_blocks: Collection[int] = (),
    show_diff_only: bool = True,
) -> RowMap:
    """Assign rendered rows to line indices.

    Parameters
    ----------
    line_count : int
        Number of line records
    hidden_blocks : HiddenBlocks
        Fold blocks of the line records
    expanded_blocks : collection of int, default ()
        Indices of blocks the user expanded
    show_diff_only : bool, default True
        Whether folding is active at all; when False every line is a row

    Returns
    -------
    RowMap
        The mapping; lines hidden inside a collapsed block are absent from
        ``line_to_row``

    """
    row_map = RowMap()
    expanded = frozenset(expanded_blocks)
    for line in range(line_count):
        block_index = hidden_blocks.block_of.get(line) if show_diff_only else None
        if block_index is not None and block_index not in expanded:
            block = hidden_blocks.blocks[block_index]
            if block.end_line != line:
                continue
            row_map.fold_rows[row_map.total_rows] = block
        row_map.line_to_row[line] = row_map.total_rows
        row_map.row_to_line.append(line)
    return row_map


def materialize_rows(row_map: RowMap, first_row: int, last_row: int) -> list[RenderedRow]:
    """List the rendered rows in ``[first_row, last_row]``, clipped to the map."""
    stop = min(last_row, row_map.total_rows - 1)
    return [
        RenderedRow(row, row_map.row_to_line[row], row_map.fold_rows.get(row))
        for row in range(max(0, first_row), stop + 1)
    ]


__all__ = [
    "cumulative_offsets",
    "uniform_offsets",
    "estimate_row_heights",
    "find_row_at_offset",
    "visible_range",
    "RowMap",
    "RenderedRow",
    "build_row_map",
    "materialize_rows",
]
