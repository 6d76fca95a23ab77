"""Unit tests for fold block computation in diffview.hidden_blocks."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from diffview.hidden_blocks import compute_hidden_blocks, normalize_context_lines
from diffview.line_diff import compute_line_information
from diffview.models import Block, DiffRecord, DiffType, LineRecord


def _records(count):
    return [
        LineRecord(left=DiffRecord(i + 1, DiffType.DEFAULT, "x"), right=DiffRecord(i + 1, DiffType.DEFAULT, "x"))
        for i in range(count)
    ]


@pytest.mark.unit
class TestNormalizeContextLines:
    """Tests for context margin normalization."""

    @pytest.mark.parametrize("value,expected", [(3, 3), (2.5, 3), (2.4, 2), (0, 0), (-1, 0), (-0.2, 0)])
    def test_round_half_up_and_clamp(self, value, expected):
        """Test rounding half-up and clamping at zero."""
        assert normalize_context_lines(value) == expected


@pytest.mark.unit
class TestComputeHiddenBlocks:
    """Tests for compute_hidden_blocks."""

    def test_single_change_keeps_context(self, record_factory):
        """Test that rows within the margin of a change are not folded."""
        result = compute_hidden_blocks(record_factory(10), [5], 3)
        assert result.blocks == [Block(0, 0, 1, 2), Block(1, 9, 9, 1)]
        assert result.block_of == {0: 0, 1: 0, 9: 1}

    def test_no_changes_folds_everything(self, record_factory):
        """Test that a sequence without changes is one block."""
        result = compute_hidden_blocks(record_factory(5), [], 3)
        assert result.blocks == [Block(0, 0, 4, 5)]

    def test_zero_margin_folds_every_unchanged_row(self, record_factory):
        """Test that a margin of zero folds all unchanged rows."""
        result = compute_hidden_blocks(record_factory(5), [2], 0)
        assert result.blocks == [Block(0, 0, 1, 2), Block(1, 3, 4, 2)]
        assert 2 not in result.block_of

    def test_gap_of_twice_the_margin_is_not_folded(self, record_factory):
        """Test that a run no longer than twice the margin stays visible."""
        result = compute_hidden_blocks(record_factory(8), [0, 7], 3)
        assert result.blocks == []
        assert result.block_of == {}

    def test_gap_just_over_twice_the_margin(self, record_factory):
        """Test that one row outside both context windows is folded."""
        result = compute_hidden_blocks(record_factory(9), [0, 8], 3)
        assert result.blocks == [Block(0, 4, 4, 1)]

    def test_empty_records(self):
        """Test that no rows produce no blocks."""
        result = compute_hidden_blocks([], [], 3)
        assert result.blocks == []
        assert result.block_of == {}

    def test_unsorted_changed_rows(self, record_factory):
        """Test that changed rows may be given in any order."""
        records = record_factory(20)
        assert compute_hidden_blocks(records, [15, 2], 2) == compute_hidden_blocks(records, [2, 15], 2)

    def test_from_line_information(self):
        """Test folding the output of the line diff engine."""
        old = "".join(f"line {i}\n" for i in range(20))
        new = old.replace("line 10\n", "line ten\n")
        info = compute_line_information(old, new)
        result = compute_hidden_blocks(info.line_records, info.changed_rows)
        assert result.blocks == [Block(0, 0, 6, 7), Block(1, 14, 19, 6)]


@pytest.mark.unit
@pytest.mark.property
class TestHiddenBlockProperties:
    """Property tests for fold correctness."""

    @given(st.integers(min_value=1, max_value=60), st.data(), st.integers(min_value=0, max_value=6))
    def test_context_window_never_folded(self, n, data, margin):
        """Property: rows within the margin of the single change are never folded."""
        k = data.draw(st.integers(min_value=0, max_value=n - 1))
        result = compute_hidden_blocks(_records(n), [k], margin)
        for row in range(max(0, k - margin), min(n - 1, k + margin) + 1):
            assert row not in result.block_of
        for row in range(n):
            if abs(row - k) > margin:
                assert row in result.block_of

    @given(st.integers(min_value=0, max_value=60), st.sets(st.integers(min_value=0, max_value=59)), st.integers(0, 5))
    def test_blocks_are_maximal_and_consistent(self, n, changed, margin):
        """Property: blocks are disjoint maximal runs matching block_of."""
        changed = {row for row in changed if row < n}
        result = compute_hidden_blocks(_records(n), changed, margin)
        covered = {}
        for index, block in enumerate(result.blocks):
            assert block.index == index
            assert block.lines == block.end_line - block.start_line + 1
            for row in range(block.start_line, block.end_line + 1):
                covered[row] = index
            assert block.start_line - 1 not in result.block_of
            assert block.end_line + 1 not in result.block_of
        assert covered == result.block_of
        assert not (changed & set(result.block_of))
