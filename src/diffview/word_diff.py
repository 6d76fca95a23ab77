#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/word_diff.py
"""Intra-line (word-level) diffing of modified line pairs.

A modified row pairs one removed line with one added line. The functions here
split that pair into two parallel token sequences for highlighting, either
immediately while lines are computed or later on demand when the line diff
engine deferred the work. On-demand results live in a :class:`WordDiffCache`
owned by the consumer of the line records.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Hashable

from diffview.compare_modes import CompareMethod, CompareMode, resolve_comparator
from diffview.constants import DEFER_WORD_DIFF_MAX_CONTAINER_HEIGHT
from diffview.models import ComputedDiffInformation, DiffType, LineRecord, LineValue, SubDiffToken

logger = logging.getLogger(__name__)

CacheKey = tuple[int, str, str]


def compute_diff(
    old_line: str,
    new_line: str,
    compare_mode: CompareMethod = CompareMode.CHARS,
) -> ComputedDiffInformation:
    """Compute the word diff of one line pair.

    Unchanged tokens appear on both sides, removed tokens only on the left and
    added tokens only on the right. Joining the values of either side gives
    back that side's line. Structural compare modes diff by character.

    Parameters
    ----------
    old_line : str
        Text of the removed line
    new_line : str
        Text of the added line
    compare_mode : CompareMode or callable, default CompareMode.CHARS
        Token granularity, or a custom comparator

    Returns
    -------
    ComputedDiffInformation
        Parallel token sequences for the left and right side

    """
    computed = ComputedDiffInformation()
    for chunk in resolve_comparator(compare_mode)(old_line, new_line):
        if chunk.added:
            computed.right.append(SubDiffToken(DiffType.ADDED, chunk.value))
        elif chunk.removed:
            computed.left.append(SubDiffToken(DiffType.REMOVED, chunk.value))
        else:
            token = SubDiffToken(DiffType.DEFAULT, chunk.value)
            computed.left.append(token)
            computed.right.append(token)
    return computed


class WordDiffCache:
    """Store of on-demand word diffs keyed by ``(row_index, old_raw, new_raw)``.

    The cache belongs to whoever renders the line records. It is invalidated
    as a whole when the inputs that affect word diffs change, which callers
    signal through :meth:`reset_for`. All access goes through one lock, so a
    cache can be shared between a rendering thread and worker callbacks.

    Examples
    --------
    >>> cache = WordDiffCache()
    >>> cache.reset_for(("old", "new", "chars"))
    False
    >>> cache.reset_for(("old", "newer", "chars"))
    True

    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, ComputedDiffInformation] = {}
        self._signature: Hashable | None = None
        self._lock = threading.Lock()

    @staticmethod
    def make_key(row_index: int, old_raw: str, new_raw: str) -> CacheKey:
        """Build the cache key for one row."""
        return (row_index, old_raw, new_raw)

    @property
    def signature(self) -> Hashable | None:
        """Signature of the inputs the cached entries were computed for."""
        return self._signature

    def get(self, key: CacheKey) -> ComputedDiffInformation | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, value: ComputedDiffInformation) -> None:
        with self._lock:
            self._entries[key] = value

    def get_or_compute(
        self,
        key: CacheKey,
        compute: Callable[[], ComputedDiffInformation],
        signature: Hashable | None = None,
    ) -> ComputedDiffInformation:
        """Return the cached entry for ``key``, computing and storing it on a miss.

        The computation runs outside the lock; if two threads miss at once,
        the first stored result wins and both callers receive it.

        Parameters
        ----------
        key : CacheKey
            Row index and raw line pair
        compute : callable
            Produces the entry on a miss
        signature : Hashable, optional
            Signature the caller's inputs were computed under. When given,
            the cache is bypassed unless it matches the cache's current
            signature, so results for superseded inputs are never stored.

        """
        if signature is not None and signature != self.signature:
            return compute()

        with self._lock:
            cached = self._entries.get(key)
        if cached is not None:
            return cached

        computed = compute()
        with self._lock:
            if signature is not None and signature != self._signature:
                return computed
            return self._entries.setdefault(key, computed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def reset_for(self, signature: Hashable) -> bool:
        """Clear the cache if ``signature`` differs from the current one.

        Parameters
        ----------
        signature : Hashable
            Value identifying every input that affects word diffs (both
            values and the compare mode)

        Returns
        -------
        bool
            True if cached entries were discarded

        """
        with self._lock:
            if signature == self._signature:
                return False
            had_previous = self._signature is not None
            self._signature = signature
            dropped = len(self._entries)
            self._entries.clear()
        if had_previous:
            logger.debug(f"Word diff inputs changed; dropped {dropped} cached entries")
        return had_previous

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


def resolve_word_diff(
    line_record: LineRecord,
    row_index: int,
    compare_mode: CompareMethod = CompareMode.CHARS,
    cache: WordDiffCache | None = None,
    signature: Hashable | None = None,
) -> tuple[LineValue, LineValue]:
    """Return the left and right values to display for a row.

    Rows whose word diff was not deferred are returned as they are. Deferred
    rows are diffed from their raw strings and, when a cache is given, the
    result is stored under ``(row_index, left_raw, right_raw)``. A
    ``signature`` restricts caching to a cache holding entries for the same
    inputs (see :meth:`WordDiffCache.get_or_compute`).
    """
    left, right = line_record.left, line_record.right
    if left.raw_value is None or right.raw_value is None:
        return left.value, right.value

    old_raw, new_raw = left.raw_value, right.raw_value
    if cache is None:
        computed = compute_diff(old_raw, new_raw, compare_mode)
    else:
        computed = cache.get_or_compute(
            WordDiffCache.make_key(row_index, old_raw, new_raw),
            lambda: compute_diff(old_raw, new_raw, compare_mode),
            signature,
        )
    return computed.left, computed.right


def should_defer_word_diff(disable_word_diff: bool, virtualized: bool, container_height: float) -> bool:
    """Decide whether word diffs should be computed on demand.

    Deferral pays off only for a virtualized display in a bounded container,
    where just the visible rows are ever rendered.
    """
    return (
        not disable_word_diff
        and virtualized
        and 0 < container_height < DEFER_WORD_DIFF_MAX_CONTAINER_HEIGHT
    )


__all__ = [
    "CacheKey",
    "compute_diff",
    "WordDiffCache",
    "resolve_word_diff",
    "should_defer_word_diff",
]
