#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/diffview/serialization.py
"""Canonical JSON and YAML text for structured values.

The structural optimizer compares and renders subtrees through these helpers,
so every textual form used for equality tests and for display comes from one
place. JSON keeps the insertion order of mapping keys; YAML is dumped in block
style with insertion key order, unlimited line width and no aliases.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from diffview.constants import STRUCTURED_INDENT, StructuredFormat
from diffview.exceptions import ParsingError

_YAML_DOCUMENT_END = "\n...\n"


class _CanonicalYamlDumper(yaml.SafeDumper):
    """Safe dumper that writes repeated objects in full instead of as aliases."""

    def ignore_aliases(self, data: Any) -> bool:
        return True


def _dump_yaml(value: Any) -> str:
    text = yaml.dump(
        value,
        Dumper=_CanonicalYamlDumper,
        indent=STRUCTURED_INDENT,
        width=float("inf"),
        allow_unicode=True,
        default_flow_style=False,
        sort_keys=False,
    )
    # Plain scalars are terminated with an explicit document end marker
    if text.endswith(_YAML_DOCUMENT_END):
        text = text[: -len(_YAML_DOCUMENT_END) + 1]
    return text


def stringify(value: Any, fmt: StructuredFormat = "json") -> str:
    """Render a value as indented JSON or block-style YAML.

    Parameters
    ----------
    value : Any
        Parsed JSON/YAML value (mapping, sequence or scalar)
    fmt : {"json", "yaml"}, default "json"
        Output syntax

    Returns
    -------
    str
        Rendered text without a trailing newline

    """
    if fmt == "yaml":
        return _dump_yaml(value).rstrip()
    return json.dumps(value, indent=STRUCTURED_INDENT, ensure_ascii=False, default=str)


def normalize(value: Any, fmt: StructuredFormat = "json") -> str:
    """Return the compact canonical form used to test structural equality."""
    if fmt == "yaml":
        return _dump_yaml(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"), default=str)


def json_key_label(key: Any) -> str:
    """Render a mapping key exactly as ``json.dumps`` writes it inside an object."""
    # json.dumps coerces int, float, bool and None keys to strings
    return json.dumps({key: None}, ensure_ascii=False)[1 : -len(": null}")]


def yaml_key_label(key: Any) -> str:
    """Render a mapping key the way a block-style YAML mapping writes it."""
    # A non-empty sequence value always starts on the line after the key
    return _dump_yaml({key: [None]}).split("\n", 1)[0]


def parse_structured(text: str, fmt: StructuredFormat = "json") -> Any:
    """Parse JSON or YAML text.

    Raises
    ------
    ParsingError
        If the text is not valid in the requested format

    """
    if fmt == "yaml":
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParsingError(f"Invalid YAML: {e}", data_format="yaml", original_error=e) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParsingError(f"Invalid JSON: {e}", data_format="json", original_error=e) from e


def is_structured(value: Any) -> bool:
    """Whether a diff input is a parsed value rather than raw text."""
    return not isinstance(value, str)


__all__ = [
    "stringify",
    "normalize",
    "json_key_label",
    "yaml_key_label",
    "parse_structured",
    "is_structured",
]
