#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/structural.py
"""Structural diff of JSON- and YAML-shaped data.

Running a line diff over the full serialization of two large documents costs
time proportional to their size even when only a few leaves differ. The
functions here walk both trees instead: subtrees whose canonical text is
identical are emitted as a single unchanged chunk, keys or elements present
on one side only become fully added or removed blocks, and the line-diff
primitive is run only on leaves that really changed.

The output has the same shape as :func:`diffview.compare_modes.diff_lines`, so
the line diff engine consumes either without knowing which produced it.

Examples
--------
    >>> from diffview.structural import structural_diff
    >>> chunks = structural_diff({"a": 1, "b": 2}, {"a": 1, "b": 3})
    >>> [c.value for c in chunks if c.removed]
    ['  "b": 2\\n']

"""

from __future__ import annotations

import logging
import textwrap
from dataclasses import replace
from typing import Any, Sequence

from diffview.compare_modes import diff_lines
from diffview.constants import INDENT_UNIT, StructuredFormat
from diffview.models import ChangeChunk
from diffview.serialization import json_key_label, normalize, parse_structured, stringify, yaml_key_label

logger = logging.getLogger(__name__)

_MISSING = object()


def reindent(text: str, depth: int) -> str:
    """Indent every line but the first to ``depth`` levels.

    The first line is left alone because it is appended to a key or element
    prefix that already sits at the right indentation.
    """
    if depth == 0:
        return text
    pad = INDENT_UNIT * depth
    lines = text.split("\n")
    return "\n".join([lines[0], *(pad + line for line in lines[1:])])


def _edge_indices(chunks: Sequence[ChangeChunk], from_end: bool) -> list[int]:
    """Find the chunks that hold the first (or last) line of each side.

    An unchanged chunk belongs to both sides, so reaching one settles both.
    """
    order = range(len(chunks) - 1, -1, -1) if from_end else range(len(chunks))
    need_left = need_right = True
    found: list[int] = []
    for index in order:
        chunk = chunks[index]
        if chunk.is_default:
            found.append(index)
            break
        if chunk.removed and need_left:
            found.append(index)
            need_left = False
        elif chunk.added and need_right:
            found.append(index)
            need_right = False
        if not (need_left or need_right):
            break
    return found


def _append_to_last_line(value: str, suffix: str) -> str:
    if value.endswith("\n"):
        return value[:-1] + suffix + "\n"
    return value + suffix


def splice(chunks: Sequence[ChangeChunk], prefix: str = "", suffix: str = "") -> list[ChangeChunk]:
    """Return new chunks with a pending prefix and suffix applied.

    The prefix lands on the first line of both the old and the new side; the
    suffix (a trailing comma) lands on the last line of both sides. The input
    chunks are not modified.
    """
    result = list(chunks)
    if prefix:
        for index in _edge_indices(result, from_end=False):
            result[index] = replace(result[index], value=prefix + result[index].value)
    if suffix:
        for index in _edge_indices(result, from_end=True):
            result[index] = replace(result[index], value=_append_to_last_line(result[index].value, suffix))
    return result


# ---------------------------------------------------------------------------
# JSON layout
# ---------------------------------------------------------------------------


def _diff_json_leaf(old_text: str, new_text: str, depth: int) -> list[ChangeChunk]:
    return diff_lines(reindent(old_text, depth) + "\n", reindent(new_text, depth) + "\n")


def _diff_json_value(old: Any, new: Any, depth: int, old_text: str, new_text: str) -> list[ChangeChunk]:
    if old_text == new_text:
        return [ChangeChunk(reindent(old_text, depth) + "\n")]
    if isinstance(old, dict) and isinstance(new, dict):
        return _diff_json_objects(old, new, depth)
    if isinstance(old, list) and isinstance(new, list):
        return _diff_json_arrays(old, new, depth)
    return _diff_json_leaf(old_text, new_text, depth)


def _json_entry(label: str, old: Any, new: Any, depth: int, comma: str) -> list[ChangeChunk]:
    """Render one object member or array element present on either side."""
    if new is _MISSING:
        return [ChangeChunk(label + reindent(stringify(old), depth) + comma + "\n", removed=True)]
    if old is _MISSING:
        return [ChangeChunk(label + reindent(stringify(new), depth) + comma + "\n", added=True)]

    old_text = stringify(old)
    new_text = stringify(new)
    if old_text == new_text:
        return [ChangeChunk(label + reindent(old_text, depth) + comma + "\n")]
    return splice(_diff_json_value(old, new, depth, old_text, new_text), prefix=label, suffix=comma)


def _diff_json_objects(old: dict[Any, Any], new: dict[Any, Any], depth: int) -> list[ChangeChunk]:
    inner = INDENT_UNIT * (depth + 1)
    keys = [*new, *(key for key in old if key not in new)]

    chunks = [ChangeChunk("{\n")]
    for position, key in enumerate(keys):
        comma = "" if position == len(keys) - 1 else ","
        chunks.extend(
            _json_entry(
                inner + json_key_label(key) + ": ",
                old.get(key, _MISSING),
                new.get(key, _MISSING),
                depth + 1,
                comma,
            )
        )
    chunks.append(ChangeChunk(INDENT_UNIT * depth + "}\n"))
    return chunks


def _diff_json_arrays(old: list[Any], new: list[Any], depth: int) -> list[ChangeChunk]:
    inner = INDENT_UNIT * (depth + 1)
    size = max(len(old), len(new))

    chunks = [ChangeChunk("[\n")]
    for position in range(size):
        comma = "" if position == size - 1 else ","
        chunks.extend(
            _json_entry(
                inner,
                old[position] if position < len(old) else _MISSING,
                new[position] if position < len(new) else _MISSING,
                depth + 1,
                comma,
            )
        )
    chunks.append(ChangeChunk(INDENT_UNIT * depth + "]\n"))
    return chunks


# ---------------------------------------------------------------------------
# YAML layout
# ---------------------------------------------------------------------------


def _yaml_block(value: Any, depth: int) -> str:
    return textwrap.indent(stringify(value, "yaml") + "\n", INDENT_UNIT * depth)


def _is_nonempty(value: Any, kind: type) -> bool:
    return isinstance(value, kind) and len(value) > 0


def _diff_yaml_value(old: Any, new: Any, depth: int) -> list[ChangeChunk]:
    if _is_nonempty(old, dict) and _is_nonempty(new, dict):
        return _diff_yaml_mappings(old, new, depth)
    if _is_nonempty(old, list) and _is_nonempty(new, list):
        return _diff_yaml_sequences(old, new, depth)
    return diff_lines(_yaml_block(old, depth), _yaml_block(new, depth))


def _diff_yaml_mappings(old: dict[Any, Any], new: dict[Any, Any], depth: int) -> list[ChangeChunk]:
    chunks: list[ChangeChunk] = []
    for key in [*new, *(key for key in old if key not in new)]:
        if key not in new:
            chunks.append(ChangeChunk(_yaml_block({key: old[key]}, depth), removed=True))
            continue
        if key not in old:
            chunks.append(ChangeChunk(_yaml_block({key: new[key]}, depth), added=True))
            continue

        old_entry = _yaml_block({key: old[key]}, depth)
        new_entry = _yaml_block({key: new[key]}, depth)
        if old_entry == new_entry:
            chunks.append(ChangeChunk(old_entry))
        elif _is_nonempty(old[key], dict) and _is_nonempty(new[key], dict):
            chunks.append(ChangeChunk(INDENT_UNIT * depth + yaml_key_label(key) + "\n"))
            chunks.extend(_diff_yaml_mappings(old[key], new[key], depth + 1))
        elif _is_nonempty(old[key], list) and _is_nonempty(new[key], list):
            # Block sequences under a key are written without extra indentation
            chunks.append(ChangeChunk(INDENT_UNIT * depth + yaml_key_label(key) + "\n"))
            chunks.extend(_diff_yaml_sequences(old[key], new[key], depth))
        else:
            chunks.extend(diff_lines(old_entry, new_entry))
    return chunks


def _diff_yaml_sequences(old: list[Any], new: list[Any], depth: int) -> list[ChangeChunk]:
    chunks: list[ChangeChunk] = []
    for position in range(max(len(old), len(new))):
        if position >= len(new):
            chunks.append(ChangeChunk(_yaml_block([old[position]], depth), removed=True))
        elif position >= len(old):
            chunks.append(ChangeChunk(_yaml_block([new[position]], depth), added=True))
        else:
            old_item = _yaml_block([old[position]], depth)
            new_item = _yaml_block([new[position]], depth)
            if old_item == new_item:
                chunks.append(ChangeChunk(old_item))
            else:
                chunks.extend(diff_lines(old_item, new_item))
    return chunks


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------


def structural_diff(old_value: Any, new_value: Any, fmt: StructuredFormat = "json") -> list[ChangeChunk]:
    """Diff two parsed values by walking their structure.

    Parameters
    ----------
    old_value : Any
        Original value (mapping, sequence or scalar)
    new_value : Any
        Updated value
    fmt : {"json", "yaml"}, default "json"
        Syntax used to render the values

    Returns
    -------
    list of ChangeChunk
        Line-shaped chunks covering the rendering of both values. Object
        members follow the new value's key order, followed by keys that exist
        only in the old value.

    """
    old_text = stringify(old_value, fmt)
    new_text = stringify(new_value, fmt)
    if old_text == new_text:
        logger.debug("Structured values are identical; skipping structural walk")
        return [ChangeChunk(old_text)]

    if fmt == "yaml":
        return _diff_yaml_value(old_value, new_value, 0)
    return _diff_json_value(old_value, new_value, 0, old_text, new_text)


def structural_text_diff(old_text: str, new_text: str, fmt: StructuredFormat = "json") -> list[ChangeChunk]:
    """Diff JSON or YAML text while preserving its original formatting.

    The text is parsed only to detect structural equality. Equal documents
    come back as one unchanged chunk holding the original old text; otherwise
    the original strings are line-diffed, which keeps comments, key order and
    line numbers exactly as written.

    Raises
    ------
    ParsingError
        If either text is not valid in the requested format

    """
    old_value = parse_structured(old_text, fmt)
    new_value = parse_structured(new_text, fmt)

    if normalize(old_value, fmt) == normalize(new_value, fmt):
        logger.debug(f"{fmt.upper()} documents are structurally identical")
        return [ChangeChunk(old_text)]
    return diff_lines(old_text, new_text)


__all__ = [
    "reindent",
    "splice",
    "structural_diff",
    "structural_text_diff",
]
