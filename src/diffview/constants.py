#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Constants and default values for the diffview library.

Constants are organized by category:
1. Type Definitions - Literal types and type aliases
2. Line Diff Behavior - Word diff limits and line numbering
3. Folding - Context around changed rows
4. Virtualization - Row geometry and render buffers
5. Structured Data - Serialization settings for JSON and YAML
"""

from __future__ import annotations

import re
from typing import Literal

# =============================================================================
# Type Definitions
# =============================================================================

StructuredFormat = Literal["json", "yaml"]

# =============================================================================
# Line Diff Behavior
# =============================================================================

# Lines longer than this skip intra-line diffing; token-level diff cost can
# grow quadratically on adversarial input.
MAX_LINE_LENGTH_FOR_WORD_DIFF = 500

DEFAULT_LINE_OFFSET = 0
DEFAULT_DISABLE_WORD_DIFF = False
DEFAULT_DEFER_WORD_DIFF = False

# Empty removed/added lines are shown as a single space so they stay visible.
EMPTY_LINE_PLACEHOLDER = " "

# Identifiers accepted in ``always_show_lines``: "L-<n>" or "R-<n>".
SHOW_LINE_PATTERN = re.compile(r"^[LR]-\d+$")

# =============================================================================
# Folding
# =============================================================================

DEFAULT_CONTEXT_LINES = 3

# =============================================================================
# Virtualization
# =============================================================================

# Row height for a 12px font with a 1.6em line height.
ESTIMATED_ROW_HEIGHT = 19
DEFAULT_BUFFER_ROWS = 5

# Word diff is deferred only for virtualized containers shorter than this.
DEFER_WORD_DIFF_MAX_CONTAINER_HEIGHT = 2000

# =============================================================================
# Structured Data
# =============================================================================

STRUCTURED_INDENT = 2
INDENT_UNIT = " " * STRUCTURED_INDENT
