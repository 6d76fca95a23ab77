#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/session.py
"""Stateful consumer of the diff pipeline.

A :class:`DiffSession` is what a viewer holds on to between renders. It
memoizes computed diffs by a canonical key of all diff-affecting inputs,
sends new inputs to a :class:`~diffview.worker.DiffWorker`, discards results
that arrive after newer inputs were requested, and keeps the transient view
state (expanded fold blocks, on-demand word diffs) next to the latest result.

Examples
--------
    >>> session = DiffSession()
    >>> view = session.request("a\\nb\\n", "a\\nc\\n").result()
    >>> view.line_information.changed_rows
    [1]

"""

from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Optional, Sequence

from diffview.compare_modes import CompareMethod
from diffview.constants import DEFAULT_BUFFER_ROWS
from diffview.exceptions import DiffViewError
from diffview.hidden_blocks import compute_hidden_blocks
from diffview.models import ComputedLineInformation, HiddenBlocks, LineValue
from diffview.options import DiffOptions
from diffview.virtualization import RenderedRow, RowMap, build_row_map, materialize_rows, uniform_offsets, visible_range
from diffview.word_diff import WordDiffCache, resolve_word_diff
from diffview.worker import DiffWorker

logger = logging.getLogger(__name__)


def _key_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if callable(value):
        name = getattr(value, "__qualname__", type(value).__qualname__)
        return f"{getattr(value, '__module__', '')}.{name}#{id(value)}"
    return repr(value)


def _typed_keys(value: Any) -> Any:
    """Rewrite mappings as ordered ``[[key type, key], value]`` pairs.

    ``json.dumps`` turns every mapping key into a string, which would give
    ``{1: "a"}`` and ``{"1": "a"}`` the same key although YAML renders them
    differently.
    """
    if isinstance(value, dict):
        pairs = [[[type(key).__name__, _typed_keys(key)], _typed_keys(item)] for key, item in value.items()]
        return {"mapping": pairs}
    if isinstance(value, (list, tuple)):
        return [_typed_keys(item) for item in value]
    return value


def _canonical_json(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=_key_default)


def memo_key(old_value: Any, new_value: Any, options: DiffOptions) -> str:
    """Build the canonical key of every input that affects a diff.

    Two requests with equal keys always produce equal results.
    """
    payload: dict[str, Any] = {"old": _typed_keys(old_value), "new": _typed_keys(new_value)}
    for option in fields(options):
        payload[option.name] = getattr(options, option.name)
    return _canonical_json(payload)


def word_diff_signature(old_value: Any, new_value: Any, compare_mode: CompareMethod) -> str:
    """Build the key of the inputs that affect on-demand word diffs."""
    return _canonical_json(
        {"old": _typed_keys(old_value), "new": _typed_keys(new_value), "compare_mode": compare_mode}
    )


@dataclass(slots=True)
class DiffView:
    """A computed diff for one input configuration."""

    line_information: ComputedLineInformation
    hidden_blocks: HiddenBlocks
    options: DiffOptions
    word_signature: str = ""


class DiffSession:
    """Memoized, supersession-aware front end to the diff pipeline.

    Parameters
    ----------
    worker : DiffWorker, optional
        Where computations run; defaults to an inline worker
    word_cache : WordDiffCache, optional
        Store for on-demand word diffs; defaults to a new cache

    Notes
    -----
    Worker callbacks may complete on another thread. All session state is
    guarded by one lock; the futures returned by :meth:`request` complete
    outside it.

    """

    def __init__(self, worker: Optional[DiffWorker] = None, word_cache: Optional[WordDiffCache] = None) -> None:
        self._worker = worker or DiffWorker()
        self._word_cache = word_cache if word_cache is not None else WordDiffCache()
        self._memo: dict[str, DiffView] = {}
        self._pending: dict[str, Future[DiffView]] = {}
        self._latest_key: str | None = None
        self._current: DiffView | None = None
        self._expanded: list[int] = []
        self._lock = threading.RLock()

    @property
    def current(self) -> DiffView | None:
        """The result for the most recently requested inputs, once available."""
        with self._lock:
            return self._current

    @property
    def word_cache(self) -> WordDiffCache:
        return self._word_cache

    @property
    def expanded_blocks(self) -> tuple[int, ...]:
        with self._lock:
            return tuple(self._expanded)

    def request(self, old_value: Any, new_value: Any, options: Optional[DiffOptions] = None) -> Future[DiffView]:
        """Request the diff of two values.

        A memoized configuration resolves immediately. Requests for a
        configuration that is already being computed share one future. When
        the inputs differ from the previous request, expanded blocks are
        reset. Cached word diffs are invalidated once a view for different
        inputs becomes current.

        Parameters
        ----------
        old_value : str or Any
            Original text or parsed value
        new_value : str or Any
            Updated text or parsed value
        options : DiffOptions, optional
            Diff options; defaults to ``DiffOptions()``

        Returns
        -------
        Future
            Resolves to the :class:`DiffView` for these inputs

        Raises
        ------
        TextInputRequiredError
            If a value is structured and the compare mode is a custom comparator

        """
        options = options or DiffOptions()
        key = memo_key(old_value, new_value, options)

        with self._lock:
            if key != self._latest_key:
                self._expanded.clear()
                self._latest_key = key
            view = self._memo.get(key)
            if view is not None:
                logger.debug("Diff served from memo")
                self._make_current(view)
                done: Future[DiffView] = Future()
                done.set_result(view)
                return done

            pending = self._pending.get(key)
            if pending is not None:
                return pending
            outer: Future[DiffView] = Future()
            self._pending[key] = outer

        try:
            inner = self._worker.submit(old_value, new_value, options)
        except Exception:
            with self._lock:
                self._pending.pop(key, None)
            raise
        signature = word_diff_signature(old_value, new_value, options.compare_mode)
        inner.add_done_callback(lambda done: self._on_response(key, options, signature, outer, done))
        return outer

    def _on_response(
        self,
        key: str,
        options: DiffOptions,
        signature: str,
        outer: Future[DiffView],
        inner: Future[ComputedLineInformation],
    ) -> None:
        with self._lock:
            self._pending.pop(key, None)

        if inner.cancelled():
            outer.cancel()
            return
        exc = inner.exception()
        if exc is not None:
            outer.set_exception(exc)
            return

        info = inner.result()
        hidden_blocks = compute_hidden_blocks(info.line_records, info.changed_rows, options.context_lines)
        view = DiffView(info, hidden_blocks, options, signature)
        with self._lock:
            if key == self._latest_key:
                self._memo[key] = view
                self._make_current(view)
            else:
                logger.debug("Discarding diff result for superseded inputs")
        outer.set_result(view)

    def word_diff(self, row_index: int) -> tuple[LineValue, LineValue]:
        """Return the left and right display values of a row of the current view.

        Raises
        ------
        DiffViewError
            If no diff has been applied yet

        """
        view = self._require_current()
        record = view.line_information.line_records[row_index]
        return resolve_word_diff(
            record, row_index, view.options.compare_mode, self._word_cache, view.word_signature or None
        )

    def _make_current(self, view: DiffView) -> None:
        # Caller holds the lock
        self._current = view
        self._word_cache.reset_for(view.word_signature)

    def expand_block(self, index: int) -> None:
        with self._lock:
            if index not in self._expanded:
                self._expanded.append(index)

    def reset_code_blocks(self) -> bool:
        """Collapse all expanded blocks; returns True if any were expanded."""
        with self._lock:
            if not self._expanded:
                return False
            self._expanded.clear()
            return True

    def row_map(self, show_diff_only: bool = True) -> RowMap:
        """Map the current view's lines to rendered rows."""
        with self._lock:
            view = self._current
            expanded = tuple(self._expanded)
        if view is None:
            return RowMap()
        return build_row_map(len(view.line_information.line_records), view.hidden_blocks, expanded, show_diff_only)

    def visible_rows(
        self,
        scroll_offset: float,
        viewport_size: float,
        offsets: Optional[Sequence[float]] = None,
        buffer: int = DEFAULT_BUFFER_ROWS,
        show_diff_only: bool = True,
    ) -> list[RenderedRow]:
        """List the rendered rows a virtualized display must build.

        Parameters
        ----------
        scroll_offset : float
            Pixel offset of the top of the viewport
        viewport_size : float
            Height of the viewport in pixels
        offsets : sequence of float, optional
            Cumulative offsets of the rendered rows; uniform estimated row
            heights are assumed when omitted
        buffer : int, default 5
            Extra rows above and below the viewport
        show_diff_only : bool, default True
            Whether collapsed blocks are folded

        """
        row_map = self.row_map(show_diff_only)
        if offsets is None:
            offsets = uniform_offsets(row_map.total_rows)
        first, last = visible_range(scroll_offset, viewport_size, offsets, buffer)
        return materialize_rows(row_map, first, last)

    def _require_current(self) -> DiffView:
        view = self.current
        if view is None:
            raise DiffViewError("No diff has been computed yet")
        return view


__all__ = ["memo_key", "word_diff_signature", "DiffView", "DiffSession"]
