#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/compare_modes.py
"""Sequence-diff primitives at every supported granularity.

Each compare mode tokenizes both strings and runs
``difflib.SequenceMatcher`` over the tokens, producing a flat, ordered list
of :class:`~diffview.models.ChangeChunk` objects. Within a replacement the
removed chunk always precedes the added chunk, which is the order the line
diff engine relies on for modification pairing.

Examples
--------
    >>> from diffview.compare_modes import CompareMode, diff_text
    >>> [(c.value, c.added, c.removed) for c in diff_text("a b", "a c", CompareMode.WORDS)]
    [('a ', False, False), ('b', False, True), ('c', True, False)]

"""

from __future__ import annotations

import difflib
import re
import sys
from enum import Enum
from typing import Callable, Sequence, Union

if sys.version_info >= (3, 11):
    from typing import assert_never
else:
    from typing_extensions import assert_never

from diffview.exceptions import ValidationError
from diffview.models import ChangeChunk


class CompareMode(Enum):
    """Granularity used to compare two strings."""

    CHARS = "chars"
    WORDS = "words"
    WORDS_WITH_SPACE = "words_with_space"
    LINES = "lines"
    TRIMMED_LINES = "trimmed_lines"
    SENTENCES = "sentences"
    CSS = "css"
    JSON = "json"
    YAML = "yaml"

    @property
    def is_structural(self) -> bool:
        """Whether the mode compares parsed JSON/YAML structure."""
        return self in (CompareMode.JSON, CompareMode.YAML)


Comparator = Callable[[str, str], list[ChangeChunk]]
CompareMethod = Union[CompareMode, Comparator]

_WORD_TOKEN_RE = re.compile(r"\s+|\w+|[^\w\s]")
_LINE_TOKEN_RE = re.compile(r"[^\n]*\n|[^\n]+")
_SENTENCE_SPLIT_RE = re.compile(r"(\S.+?[.!?])(?=\s+|$)")
_CSS_SPLIT_RE = re.compile(r"([{}:;,]|\s+)")


def _diff_tokens(
    old_tokens: Sequence[str],
    new_tokens: Sequence[str],
    old_keys: Sequence[str] | None = None,
    new_keys: Sequence[str] | None = None,
) -> list[ChangeChunk]:
    """Diff two token sequences, comparing on keys and emitting token text."""
    matcher = difflib.SequenceMatcher(
        None,
        old_tokens if old_keys is None else old_keys,
        new_tokens if new_keys is None else new_keys,
        autojunk=False,
    )
    chunks: list[ChangeChunk] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            chunks.append(ChangeChunk("".join(new_tokens[j1:j2])))
            continue
        if i2 > i1:
            chunks.append(ChangeChunk("".join(old_tokens[i1:i2]), removed=True))
        if j2 > j1:
            chunks.append(ChangeChunk("".join(new_tokens[j1:j2]), added=True))
    return chunks


def tokenize_lines(text: str) -> list[str]:
    """Split text into lines that keep their newline.

    A trailing newline ends the last line rather than starting an empty one.
    """
    return _LINE_TOKEN_RE.findall(text)


def tokenize_words(text: str) -> list[str]:
    """Split text into word, whitespace and punctuation tokens."""
    return _WORD_TOKEN_RE.findall(text)


def _split_keep(pattern: re.Pattern[str], text: str) -> list[str]:
    return [part for part in pattern.split(text) if part]


def diff_chars(old: str, new: str) -> list[ChangeChunk]:
    """Character-level diff."""
    return _diff_tokens(old, new)


def diff_words(old: str, new: str) -> list[ChangeChunk]:
    """Word-level diff where any two whitespace runs compare equal."""
    old_tokens = tokenize_words(old)
    new_tokens = tokenize_words(new)
    return _diff_tokens(
        old_tokens,
        new_tokens,
        [" " if token.isspace() else token for token in old_tokens],
        [" " if token.isspace() else token for token in new_tokens],
    )


def diff_words_with_space(old: str, new: str) -> list[ChangeChunk]:
    """Word-level diff where whitespace is significant."""
    return _diff_tokens(tokenize_words(old), tokenize_words(new))


def diff_lines(old: str, new: str) -> list[ChangeChunk]:
    """Line-level diff; each chunk holds whole lines including newlines."""
    return _diff_tokens(tokenize_lines(old), tokenize_lines(new))


def diff_trimmed_lines(old: str, new: str) -> list[ChangeChunk]:
    """Line-level diff ignoring leading and trailing whitespace."""
    old_tokens = tokenize_lines(old)
    new_tokens = tokenize_lines(new)
    return _diff_tokens(
        old_tokens,
        new_tokens,
        [token.strip() for token in old_tokens],
        [token.strip() for token in new_tokens],
    )


def diff_sentences(old: str, new: str) -> list[ChangeChunk]:
    """Sentence-level diff; whitespace between sentences is its own token."""
    return _diff_tokens(_split_keep(_SENTENCE_SPLIT_RE, old), _split_keep(_SENTENCE_SPLIT_RE, new))


def diff_css(old: str, new: str) -> list[ChangeChunk]:
    """Diff on CSS punctuation and whitespace boundaries."""
    return _diff_tokens(_split_keep(_CSS_SPLIT_RE, old), _split_keep(_CSS_SPLIT_RE, new))


def coerce_compare_method(value: CompareMethod | str) -> CompareMethod:
    """Turn a mode name into a :class:`CompareMode`, passing callables through.

    Raises
    ------
    ValidationError
        If the value is neither a known mode name, a member, nor a callable

    """
    if isinstance(value, CompareMode):
        return value
    if isinstance(value, str):
        try:
            return CompareMode(value)
        except ValueError as e:
            valid = ", ".join(mode.value for mode in CompareMode)
            raise ValidationError(
                f"Unknown compare mode: {value!r}. Must be one of: {valid}",
                parameter_name="compare_mode",
                parameter_value=value,
                original_error=e,
            ) from e
    if callable(value):
        return value
    raise ValidationError(
        f"compare_mode must be a CompareMode or a callable, got {type(value).__name__}",
        parameter_name="compare_mode",
        parameter_value=value,
    )


def resolve_comparator(method: CompareMethod) -> Comparator:
    """Return the string comparator for a compare method.

    The structural modes are not line-pair comparators; pairs of lines taken
    from a JSON or YAML diff are compared character by character.
    """
    if not isinstance(method, CompareMode):
        if callable(method):
            return method
        raise ValidationError(
            f"compare_mode must be a CompareMode or a callable, got {type(method).__name__}",
            parameter_name="compare_mode",
            parameter_value=method,
        )

    if method is CompareMode.CHARS or method is CompareMode.JSON or method is CompareMode.YAML:
        return diff_chars
    elif method is CompareMode.WORDS:
        return diff_words
    elif method is CompareMode.WORDS_WITH_SPACE:
        return diff_words_with_space
    elif method is CompareMode.LINES:
        return diff_lines
    elif method is CompareMode.TRIMMED_LINES:
        return diff_trimmed_lines
    elif method is CompareMode.SENTENCES:
        return diff_sentences
    elif method is CompareMode.CSS:
        return diff_css
    else:
        assert_never(method)


def diff_text(old: str, new: str, method: CompareMethod = CompareMode.CHARS) -> list[ChangeChunk]:
    """Diff two strings with the given compare method."""
    return resolve_comparator(method)(old, new)


__all__ = [
    "CompareMode",
    "Comparator",
    "CompareMethod",
    "tokenize_lines",
    "tokenize_words",
    "diff_chars",
    "diff_words",
    "diff_words_with_space",
    "diff_lines",
    "diff_trimmed_lines",
    "diff_sentences",
    "diff_css",
    "coerce_compare_method",
    "resolve_comparator",
    "diff_text",
]
