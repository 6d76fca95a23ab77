"""Unit tests for the line diff engine in diffview.line_diff."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from diffview.compare_modes import CompareMode, tokenize_lines
from diffview.exceptions import TextInputRequiredError, ValidationError
from diffview.line_diff import compute_change_chunks, compute_line_information, split_chunk_lines
from diffview.models import ChangeChunk, DiffType, SubDiffToken

lines_text = st.lists(st.sampled_from(["a", "b", "c", "", "    x", "a b"]), max_size=12).map("\n".join)


@pytest.mark.unit
class TestSplitChunkLines:
    """Tests for split_chunk_lines."""

    def test_trailing_newline_ends_last_line(self):
        """Test that one trailing newline does not add a line."""
        assert split_chunk_lines("a\nb\n") == ["a", "b"]

    def test_blank_line(self):
        """Test that a lone newline is one empty line."""
        assert split_chunk_lines("\n") == [""]

    def test_empty(self):
        """Test that an empty value has no lines."""
        assert split_chunk_lines("") == []

    def test_only_one_newline_is_stripped(self):
        """Test that a trailing blank line is retained."""
        assert split_chunk_lines("a\n\n") == ["a", ""]


@pytest.mark.unit
class TestLiteralScenarios:
    """Tests for documented input/output scenarios."""

    def test_removed_blank_line(self):
        """Test that a removed blank line renders as a single space."""
        info = compute_line_information("test\n\n\n    ", "test\n\n    ")
        assert len(info.line_records) == 4
        record = info.line_records[2]
        assert record.left.type == DiffType.REMOVED
        assert record.left.value == " "
        assert record.right.is_empty
        assert info.changed_rows == [2]

    def test_unchanged_blank_line_stays_empty(self):
        """Test that an unchanged blank line keeps an empty value."""
        info = compute_line_information("test\n\n\n    ", "test\n\n    ")
        assert info.line_records[1].left.value == ""
        assert info.line_records[1].right.value == ""

    def test_identical_pair_is_demoted(self):
        """Test that a removed/added pair with equal text becomes unchanged."""
        info = compute_line_information("test", "test\n    newLine")
        assert len(info.line_records) == 2
        first, second = info.line_records
        assert first.left.type == DiffType.DEFAULT
        assert first.right.type == DiffType.DEFAULT
        assert (first.left.line_number, first.right.line_number) == (1, 1)
        assert second.left.is_empty
        assert second.right.type == DiffType.ADDED
        assert second.right.value == "    newLine"
        assert info.changed_rows == [1]

    def test_blank_line_paired_with_lone_space_is_demoted(self):
        """Test that a blank removed line and a single-space added line compare as displayed."""
        info = compute_line_information("a\n\nb\n", "a\n \nb\n")
        assert len(info.line_records) == 3
        record = info.line_records[1]
        assert (record.left.type, record.right.type) == (DiffType.DEFAULT, DiffType.DEFAULT)
        assert (record.left.value, record.right.value) == (" ", " ")
        assert info.changed_rows == []

    def test_modified_line_word_diff(self):
        """Test the token sequences of a modified line."""
        info = compute_line_information("    oldLine", "    newLine")
        assert len(info.line_records) == 1
        record = info.line_records[0]
        assert record.is_modification
        assert record.left.value == [
            SubDiffToken(DiffType.DEFAULT, "    "),
            SubDiffToken(DiffType.REMOVED, "old"),
            SubDiffToken(DiffType.DEFAULT, "Line"),
        ]
        assert record.right.value == [
            SubDiffToken(DiffType.DEFAULT, "    "),
            SubDiffToken(DiffType.ADDED, "new"),
            SubDiffToken(DiffType.DEFAULT, "Line"),
        ]
        assert info.changed_rows == [0]


@pytest.mark.unit
class TestModificationPairing:
    """Tests for pairing removed and added lines."""

    def test_pairs_by_position(self):
        """Test that lines pair with the same position of the following added chunk."""
        info = compute_line_information("a1\na2\nkeep\n", "b1\nb2\nkeep\n", disable_word_diff=True)
        assert [(r.left.value, r.right.value) for r in info.line_records] == [
            ("a1", "b1"),
            ("a2", "b2"),
            ("keep", "keep"),
        ]
        assert info.changed_rows == [0, 1]

    def test_extra_removed_lines_stand_alone(self):
        """Test that removed lines without a partner are left-only."""
        info = compute_line_information("a\nb\nc\n", "x\n", disable_word_diff=True)
        types = [(r.left.type, r.right.type) for r in info.line_records]
        assert types == [
            (DiffType.CHANGED, DiffType.CHANGED),
            (DiffType.REMOVED, None),
            (DiffType.REMOVED, None),
        ]
        assert [r.left.line_number for r in info.line_records] == [1, 2, 3]

    def test_extra_added_lines_follow_pairs(self):
        """Test that unpaired added lines come after the paired rows."""
        info = compute_line_information("a\n", "x\ny\nz\n", disable_word_diff=True)
        assert [(r.left.line_number, r.right.line_number) for r in info.line_records] == [
            (1, 1),
            (None, 2),
            (None, 3),
        ]
        assert info.line_records[1].right.type == DiffType.ADDED

    def test_empty_added_line_is_not_paired(self):
        """Test that an empty added line ends pairing and right numbers stay ordered."""
        info = compute_line_information("a\nb\nc\n", "x\n\nz\n", disable_word_diff=True)
        rights = [r.right.line_number for r in info.line_records if r.right.line_number is not None]
        assert rights == sorted(rights) == [1, 2, 3]
        assert info.line_records[0].is_modification
        assert info.line_records[1].right.is_empty
        assert info.line_records[-1].right.value == "z"

    def test_disable_word_diff_keeps_strings(self):
        """Test that modified lines stay whole strings when word diff is off."""
        info = compute_line_information("old\n", "new\n", disable_word_diff=True)
        record = info.line_records[0]
        assert record.left.value == "old"
        assert record.right.value == "new"
        assert record.is_modification

    def test_long_lines_skip_word_diff(self):
        """Test that lines over 500 characters are not word-diffed."""
        old = "a" * 501
        new = "b" * 501
        record = compute_line_information(old, new).line_records[0]
        assert record.left.value == old
        assert record.right.value == new
        assert record.left.type == DiffType.CHANGED

    def test_deferred_word_diff_stores_raw_values(self):
        """Test that deferred mode leaves raw strings on modified rows."""
        record = compute_line_information("old\n", "new\n", defer_word_diff=True).line_records[0]
        assert record.left.raw_value == "old"
        assert record.right.raw_value == "new"
        assert record.left.value == "old"
        assert record.left.is_deferred

    def test_word_mode(self):
        """Test that the compare mode selects word granularity."""
        record = compute_line_information("one two\n", "one three\n", compare_mode="words").line_records[0]
        assert record.right.value == [
            SubDiffToken(DiffType.DEFAULT, "one "),
            SubDiffToken(DiffType.ADDED, "three"),
        ]

    def test_custom_comparator_for_word_diff(self):
        """Test that a custom comparator is used for modified lines."""

        def whole_line(old, new):
            return [ChangeChunk(old, removed=True), ChangeChunk(new, added=True)]

        record = compute_line_information("x\n", "y\n", compare_mode=whole_line).line_records[0]
        assert record.left.value == [SubDiffToken(DiffType.REMOVED, "x")]
        assert record.right.value == [SubDiffToken(DiffType.ADDED, "y")]


@pytest.mark.unit
class TestNumberingAndOverrides:
    """Tests for line numbering and always-show identifiers."""

    def test_line_offset(self):
        """Test that numbering starts after the offset."""
        info = compute_line_information("a\nb\n", "a\nb\n", line_offset=10)
        assert [r.left.line_number for r in info.line_records] == [11, 12]
        assert [r.right.line_number for r in info.line_records] == [11, 12]

    def test_always_show_left_line(self):
        """Test that an L-<n> identifier marks an unchanged row."""
        info = compute_line_information("a\nb\nc\n", "a\nb\nc\n", always_show_lines=["L-2"])
        assert info.changed_rows == [1]

    def test_always_show_right_line(self):
        """Test that an R-<n> identifier marks an unchanged row once."""
        info = compute_line_information("a\nb\n", "a\nc\n", always_show_lines=["R-2", "L-2"])
        assert info.changed_rows == [1]

    def test_trailing_blank_line_is_kept(self):
        """Test that a trailing empty line is retained and numbered."""
        info = compute_line_information("a\n\n", "a\n\n")
        assert [r.left.line_number for r in info.line_records] == [1, 2]


@pytest.mark.unit
class TestDegenerateInputs:
    """Tests for empty and identical inputs."""

    def test_both_empty(self):
        """Test that two empty strings produce no rows."""
        info = compute_line_information("", "")
        assert info.line_records == []
        assert info.changed_rows == []

    def test_empty_old_is_all_added(self):
        """Test that an empty old value yields only added rows."""
        info = compute_line_information("", "a\nb\n")
        assert all(r.right.type == DiffType.ADDED and r.left.is_empty for r in info.line_records)
        assert info.changed_rows == [0, 1]

    def test_empty_new_is_all_removed(self):
        """Test that an empty new value yields only removed rows."""
        info = compute_line_information("a\nb\n", "")
        assert all(r.left.type == DiffType.REMOVED and r.right.is_empty for r in info.line_records)


@pytest.mark.unit
class TestInputDispatch:
    """Tests for choosing between line and structural diffs."""

    def test_json_text_equal_returns_original(self):
        """Test that structurally equal JSON text keeps its original lines."""
        old = '{\n    "a": 1\n}'
        info = compute_line_information(old, '{"a": 1}', compare_mode=CompareMode.JSON)
        assert [r.left.value for r in info.line_records] == ["{", '    "a": 1', "}"]
        assert info.changed_rows == []

    def test_malformed_json_falls_back_to_lines(self):
        """Test that invalid JSON is diffed as plain lines."""
        chunks = compute_change_chunks("{\nbad\n", "{\ngood\n", CompareMode.JSON)
        assert chunks == [
            ChangeChunk("{\n"),
            ChangeChunk("bad\n", removed=True),
            ChangeChunk("good\n", added=True),
        ]

    def test_malformed_yaml_falls_back_to_lines(self):
        """Test that invalid YAML does not raise."""
        info = compute_line_information("a: [1\n", "a: [2\n", compare_mode="yaml")
        assert info.changed_rows == [0]

    def test_structured_values_use_structural_diff(self):
        """Test that parsed values are rendered and compared structurally."""
        info = compute_line_information({"a": 1, "b": 2}, {"a": 1, "b": 3})
        assert [r.right.text for r in info.line_records] == ["{", '  "a": 1,', '  "b": 3', "}"]
        assert info.changed_rows == [2]

    def test_structured_values_in_yaml_mode(self):
        """Test that YAML mode renders parsed values as YAML."""
        info = compute_line_information({"a": 1}, {"a": 2}, compare_mode="yaml")
        assert info.line_records[0].right.text == "a: 2"

    def test_structured_value_with_custom_comparator(self):
        """Test that a custom comparator rejects structured input."""
        with pytest.raises(TextInputRequiredError, match="Both values must be text"):
            compute_line_information({"a": 1}, "text", compare_mode=lambda old, new: [])

    def test_unknown_mode_name(self):
        """Test that an unknown compare mode name is rejected."""
        with pytest.raises(ValidationError):
            compute_line_information("a", "b", compare_mode="nonsense")


@pytest.mark.unit
@pytest.mark.property
class TestLineDiffProperties:
    """Property tests for the line diff engine."""

    @given(lines_text, st.booleans(), st.booleans())
    def test_identical_inputs_have_no_changes(self, text, disable_word_diff, defer_word_diff):
        """Property: comparing a text with itself yields only unchanged rows."""
        info = compute_line_information(
            text, text, disable_word_diff=disable_word_diff, defer_word_diff=defer_word_diff
        )
        assert info.changed_rows == []
        for record in info.line_records:
            assert record.left.type == record.right.type == DiffType.DEFAULT
            assert record.left.line_number == record.right.line_number

    @given(lines_text, lines_text)
    def test_line_count_conservation(self, old, new):
        """Property: each side has one populated record per input line."""
        info = compute_line_information(old, new)
        assert sum(not r.left.is_empty for r in info.line_records) == len(tokenize_lines(old))
        assert sum(not r.right.is_empty for r in info.line_records) == len(tokenize_lines(new))

    @given(lines_text, lines_text, st.integers(min_value=0, max_value=50))
    def test_monotonic_numbering(self, old, new, offset):
        """Property: populated line numbers strictly increase from offset + 1."""
        info = compute_line_information(old, new, line_offset=offset)
        for side in ("left", "right"):
            numbers = [getattr(r, side).line_number for r in info.line_records]
            numbers = [n for n in numbers if n is not None]
            assert numbers == list(range(offset + 1, offset + 1 + len(numbers)))

    @given(lines_text, lines_text)
    def test_record_invariant(self, old, new):
        """Property: every row is paired, left-only REMOVED, or right-only ADDED."""
        info = compute_line_information(old, new)
        for index, record in enumerate(info.line_records):
            if record.left.is_empty:
                assert record.right.type == DiffType.ADDED
                assert index in info.changed_rows
            elif record.right.is_empty:
                assert record.left.type == DiffType.REMOVED
                assert index in info.changed_rows
            else:
                assert record.left.type == record.right.type
                assert record.left.type in (DiffType.DEFAULT, DiffType.CHANGED)
                assert (index in info.changed_rows) == (record.left.type == DiffType.CHANGED)

    @given(lines_text, lines_text)
    def test_sides_reconstruct_inputs(self, old, new):
        """Property: joining a side's rows gives back that side's lines."""
        info = compute_line_information(old, new, disable_word_diff=True)

        # Changed blank lines are shown as a single space; no input line is a lone space
        def shown(record):
            return "" if record.text == " " else record.text

        left = [shown(r.left) for r in info.line_records if not r.left.is_empty]
        right = [shown(r.right) for r in info.line_records if not r.right.is_empty]
        assert left == [line.rstrip("\n") for line in tokenize_lines(old)]
        assert right == [line.rstrip("\n") for line in tokenize_lines(new)]
