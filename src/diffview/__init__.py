"""diffview - Line-aligned diff models for side-by-side and unified viewers.

diffview computes everything a diff viewer needs except the drawing: paired
left/right line records with modification detection, intra-line word diffs
(immediate or on demand, with a cache), foldable blocks of unchanged lines,
and the window of rows a virtualized display must build for a scroll position.

Plain text is compared line by line. JSON and YAML, given either as text or
as parsed values, can be compared structurally so that only changed subtrees
are run through the sequence diff.

Key Features
------------
- Modification pairing of adjacent removed and added lines
- Word diffs at character, word, sentence, line or CSS-token granularity
- Structural JSON/YAML diffs that keep key order and original formatting
- Code folding with a configurable context margin
- Virtualized row windows with variable row heights
- Background computation on a process pool with inline fallback

Requirements
------------
- Python 3.10+
- PyYAML

Examples
--------
Computing line information directly:

    >>> from diffview import compute_line_information
    >>> info = compute_line_information("a\\nb\\n", "a\\nc\\n")
    >>> info.changed_rows
    [1]

Using a session that memoizes results and tracks fold state:

    >>> from diffview import DiffOptions, DiffSession
    >>> session = DiffSession()
    >>> view = session.request('{"a": 1}', '{"a": 2}', DiffOptions(compare_mode="json")).result()
    >>> len(view.hidden_blocks.blocks)
    0

"""

__version__ = "1.0.0"

from diffview.compare_modes import CompareMode, diff_text
from diffview.exceptions import (
    ComputationError,
    DiffViewError,
    ParsingError,
    TextInputRequiredError,
    ValidationError,
)
from diffview.hidden_blocks import compute_hidden_blocks
from diffview.line_diff import compute_line_information
from diffview.models import (
    Block,
    ChangeChunk,
    ComputedDiffInformation,
    ComputedLineInformation,
    DiffRecord,
    DiffType,
    HiddenBlocks,
    LineRecord,
    SubDiffToken,
)
from diffview.options import DiffOptions
from diffview.session import DiffSession, DiffView
from diffview.structural import structural_diff, structural_text_diff
from diffview.virtualization import build_row_map, find_row_at_offset, visible_range
from diffview.word_diff import WordDiffCache, compute_diff, resolve_word_diff, should_defer_word_diff
from diffview.worker import DiffWorker

__all__ = [
    "__version__",
    # Pipeline
    "compute_line_information",
    "compute_diff",
    "compute_hidden_blocks",
    "structural_diff",
    "structural_text_diff",
    "diff_text",
    "visible_range",
    "find_row_at_offset",
    "build_row_map",
    "resolve_word_diff",
    "should_defer_word_diff",
    # Stateful helpers
    "DiffSession",
    "DiffView",
    "DiffWorker",
    "WordDiffCache",
    # Options and models
    "CompareMode",
    "DiffOptions",
    "DiffType",
    "ChangeChunk",
    "SubDiffToken",
    "DiffRecord",
    "LineRecord",
    "ComputedLineInformation",
    "ComputedDiffInformation",
    "Block",
    "HiddenBlocks",
    # Exceptions
    "DiffViewError",
    "ValidationError",
    "TextInputRequiredError",
    "ParsingError",
    "ComputationError",
]
