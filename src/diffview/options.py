#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/options.py
"""Configuration options for diff computation.

:class:`DiffOptions` collects every input besides the two values that
affects a diff. It is a frozen dataclass: derive variants with
:meth:`CloneFrozenMixin.create_updated` instead of mutating an instance.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from diffview.compare_modes import CompareMethod, CompareMode, coerce_compare_method
from diffview.constants import (
    DEFAULT_CONTEXT_LINES,
    DEFAULT_DEFER_WORD_DIFF,
    DEFAULT_DISABLE_WORD_DIFF,
    DEFAULT_LINE_OFFSET,
    SHOW_LINE_PATTERN,
)
from diffview.exceptions import ValidationError


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class DiffOptions(CloneFrozenMixin):
    """Options controlling line and word diff computation.

    Parameters
    ----------
    compare_mode : CompareMode, str or callable, default CompareMode.CHARS
        Word diff granularity. ``CompareMode.JSON`` and ``CompareMode.YAML``
        also switch text inputs to the structural diff. A custom comparator
        ``(old, new) -> list[ChangeChunk]`` only accepts text inputs.
    disable_word_diff : bool, default False
        Keep modified rows as whole-line strings
    line_offset : int, default 0
        Added to every line number
    always_show_lines : tuple of str, default ()
        ``"L-<n>"`` / ``"R-<n>"`` identifiers of rows that must never be folded
    context_lines : int, default 3
        Unchanged rows kept visible around each changed row
    defer_word_diff : bool, default False
        Store raw strings on modified rows and compute word diffs on demand

    """

    compare_mode: CompareMethod = field(
        default=CompareMode.CHARS,
        metadata={
            "help": "Word diff granularity (chars, words, words_with_space, lines, trimmed_lines, "
            "sentences, css, json, yaml) or a custom comparator",
            "importance": "core",
        },
    )
    disable_word_diff: bool = field(
        default=DEFAULT_DISABLE_WORD_DIFF,
        metadata={"help": "Show modified lines without intra-line highlighting", "importance": "core"},
    )
    line_offset: int = field(
        default=DEFAULT_LINE_OFFSET,
        metadata={"help": "Number added to every line number", "type": int, "importance": "advanced"},
    )
    always_show_lines: tuple[str, ...] = field(
        default=(),
        metadata={"help": "Line identifiers (L-<n> or R-<n>) that are never folded", "importance": "advanced"},
    )
    context_lines: int = field(
        default=DEFAULT_CONTEXT_LINES,
        metadata={"help": "Unchanged lines kept visible around each change", "type": int, "importance": "core"},
    )
    defer_word_diff: bool = field(
        default=DEFAULT_DEFER_WORD_DIFF,
        metadata={"help": "Compute word diffs on demand instead of up front", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Normalize and validate option values.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        try:
            object.__setattr__(self, "compare_mode", coerce_compare_method(self.compare_mode))
        except ValidationError as e:
            raise ValueError(e.message) from e

        if isinstance(self.always_show_lines, str):
            raise ValueError("always_show_lines must be a sequence of line identifiers, not a string")
        object.__setattr__(self, "always_show_lines", tuple(self.always_show_lines))
        for identifier in self.always_show_lines:
            if not isinstance(identifier, str) or not SHOW_LINE_PATTERN.match(identifier):
                raise ValueError(f"Invalid line identifier {identifier!r}; expected 'L-<n>' or 'R-<n>'")

        if self.line_offset < 0:
            raise ValueError(f"line_offset must be non-negative, got {self.line_offset}")

    @property
    def is_portable(self) -> bool:
        """Whether these options can be sent to another process."""
        return isinstance(self.compare_mode, CompareMode)

    def line_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :func:`diffview.line_diff.compute_line_information`."""
        return {
            "disable_word_diff": self.disable_word_diff,
            "compare_mode": self.compare_mode,
            "line_offset": self.line_offset,
            "always_show_lines": self.always_show_lines,
            "defer_word_diff": self.defer_word_diff,
        }


__all__ = ["CloneFrozenMixin", "DiffOptions"]
