#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/hidden_blocks.py
"""Group long runs of unchanged rows into foldable blocks."""

from __future__ import annotations

import logging
import math
from bisect import bisect_left
from typing import Iterable, Sequence

from diffview.constants import DEFAULT_CONTEXT_LINES
from diffview.models import Block, HiddenBlocks, LineRecord

logger = logging.getLogger(__name__)


def normalize_context_lines(context_lines: float) -> int:
    """Round a context margin half-up and clamp it at zero."""
    if context_lines < 0:
        return 0
    return math.floor(context_lines + 0.5)


def _near_changed_row(row: int, changed: Sequence[int], margin: int) -> bool:
    position = bisect_left(changed, row - margin)
    return position < len(changed) and changed[position] <= row + margin


def compute_hidden_blocks(
    line_records: Sequence[LineRecord],
    changed_rows: Iterable[int],
    context_lines: float = DEFAULT_CONTEXT_LINES,
) -> HiddenBlocks:
    """Compute the foldable blocks of a line record sequence.

    A row can be folded when neither it nor any row within ``context_lines``
    positions of it is changed. Each maximal run of foldable rows becomes one
    :class:`~diffview.models.Block`, numbered from 0 in row order.

    Parameters
    ----------
    line_records : sequence of LineRecord
        Rows produced by the line diff engine
    changed_rows : iterable of int
        Indices of changed rows, in any order
    context_lines : float, default 3
        Rows kept visible on each side of a changed row; rounded half-up and
        clamped at 0

    Returns
    -------
    HiddenBlocks
        The blocks and the row-to-block lookup; rows outside every block are
        absent from ``block_of``

    """
    margin = normalize_context_lines(context_lines)
    changed = sorted(set(changed_rows))

    result = HiddenBlocks()
    start: int | None = None
    for row in range(len(line_records) + 1):
        foldable = row < len(line_records) and not _near_changed_row(row, changed, margin)
        if foldable:
            if start is None:
                start = row
            result.block_of[row] = len(result.blocks)
        elif start is not None:
            result.blocks.append(Block(index=len(result.blocks), start_line=start, end_line=row - 1, lines=row - start))
            start = None

    logger.debug(f"Computed {len(result.blocks)} hidden blocks over {len(line_records)} rows")
    return result


__all__ = ["normalize_context_lines", "compute_hidden_blocks"]
