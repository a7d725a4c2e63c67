"""Tests for diff computation and rendering."""

import io

from rich.console import Console

from pydots.sync.diff import (
    ChangeTag,
    DiffChange,
    DiffRenderer,
    compute_diff,
    decode_text,
    inline_emphasis,
    line_number_width,
    split_lines,
)


def _numbered(count: int) -> str:
    return "".join(f"line {i}\n" for i in range(count))


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=120, color_system=None, highlight=False), buffer


class TestSplitLines:
    """Tests for split_lines."""

    def test_keeps_terminators(self):
        assert split_lines("a\nb\n") == ["a\n", "b\n"]

    def test_last_line_without_newline(self):
        assert split_lines("a\nb") == ["a\n", "b"]

    def test_empty_text(self):
        assert split_lines("") == []


class TestDecodeText:
    """Tests for decode_text."""

    def test_utf8(self):
        assert decode_text("héllo".encode()) == "héllo"

    def test_invalid_utf8_is_not_text(self):
        assert decode_text(b"\xff\xfe\x00\x81") is None


class TestComputeDiff:
    """Tests for compute_diff."""

    def test_identical_texts_have_no_groups(self):
        """Test that identical inputs produce zero change groups."""
        assert compute_diff("a\nb\n", "a\nb\n") == []
        assert compute_diff("", "") == []

    def test_single_replaced_line(self):
        """Test the smallest possible modification."""
        groups = compute_diff("a\nb\n", "a\nc\n")

        assert len(groups) == 1
        summary = [(c.tag, c.old_index, c.new_index, c.text) for c in groups[0]]
        assert summary == [
            (ChangeTag.EQUAL, 0, 0, "a"),
            (ChangeTag.DELETE, 1, None, "b"),
            (ChangeTag.INSERT, None, 1, "c"),
        ]

    def test_context_is_two_lines(self):
        """Test that two unchanged lines surround each change."""
        old = _numbered(10)
        new = old.replace("line 5\n", "line five\n")

        groups = compute_diff(old, new)

        assert len(groups) == 1
        changes = groups[0]
        assert [c.tag for c in changes] == [
            ChangeTag.EQUAL,
            ChangeTag.EQUAL,
            ChangeTag.DELETE,
            ChangeTag.INSERT,
            ChangeTag.EQUAL,
            ChangeTag.EQUAL,
        ]
        assert changes[0].old_index == 3
        assert changes[-1].old_index == 7

    def test_distant_changes_form_separate_groups(self):
        old = _numbered(20)
        new = old.replace("line 2\n", "line two\n").replace("line 15\n", "line fifteen\n")

        groups = compute_diff(old, new)

        assert len(groups) == 2

    def test_inserted_lines(self):
        groups = compute_diff("a\nb\n", "a\nx\nb\n")

        inserts = [c for c in groups[0] if c.tag == ChangeTag.INSERT]
        assert [(c.new_index, c.text) for c in inserts] == [(1, "x")]

    def test_deleted_lines(self):
        groups = compute_diff("a\nx\nb\n", "a\nb\n")

        deletes = [c for c in groups[0] if c.tag == ChangeTag.DELETE]
        assert [(c.old_index, c.text) for c in deletes] == [(1, "x")]

    def test_missing_trailing_newline_is_flagged(self):
        groups = compute_diff("a\nb", "a\nc")

        delete = next(c for c in groups[0] if c.tag == ChangeTag.DELETE)
        assert delete.text == "b"
        assert delete.missing_newline is True

    def test_replaced_lines_get_inline_emphasis(self):
        """Test that the changed word of a similar line is emphasized."""
        groups = compute_diff("let x = 1\n", "let x = 2\n")

        delete, insert = groups[0]
        assert delete.emphasis == [(8, 9)]
        assert insert.emphasis == [(8, 9)]


class TestInlineEmphasis:
    """Tests for inline_emphasis."""

    def test_similar_lines(self):
        old_ranges, new_ranges = inline_emphasis("vim.opt.number = true", "vim.opt.number = false")

        assert [("vim.opt.number = true")[s:e] for s, e in old_ranges] == ["true"]
        assert [("vim.opt.number = false")[s:e] for s, e in new_ranges] == ["false"]

    def test_unrelated_lines_are_not_emphasized(self):
        assert inline_emphasis("alpha", "completely different words") == ([], [])


class TestDiffChange:
    """Tests for DiffChange.segments."""

    def test_segments_split_on_emphasis(self):
        change = DiffChange(ChangeTag.INSERT, None, 0, "let x = 2", [(8, 9)])

        assert change.segments() == [(False, "let x = "), (True, "2")]

    def test_segments_without_emphasis(self):
        change = DiffChange(ChangeTag.EQUAL, 0, 0, "plain")

        assert change.segments() == [(False, "plain")]

    def test_empty_line(self):
        change = DiffChange(ChangeTag.EQUAL, 0, 0, "")

        assert change.segments() == [(False, "")]


class TestLineNumberWidth:
    """Tests for line_number_width."""

    def test_minimum_is_one(self):
        assert line_number_width(0, 0) == 1
        assert line_number_width(1, 1) == 1

    def test_uses_larger_count(self):
        assert line_number_width(10, 2) == 1
        assert line_number_width(2, 11) == 2
        assert line_number_width(101, 5) == 3


class TestDiffRenderer:
    """Tests for DiffRenderer."""

    def test_diff_lines_layout(self):
        """Test the header and line layout of a preview."""
        renderer = DiffRenderer(width=80)
        groups = compute_diff("a\nb\n", "a\nc\n")

        lines = [line.plain for line in renderer.diff_lines("init.lua", groups, 2, 2)]

        assert lines[0] == "═" * 5 + "╤" + "═" * 74
        assert lines[1] == "     │ init.lua"
        assert lines[2] == "─" * 5 + "┼" + "─" * 74
        assert lines[3:] == ["0 0  │ a", "1   -│ b", "  1 +│ c"]

    def test_groups_are_separated(self):
        renderer = DiffRenderer(width=80)
        old = _numbered(20)
        new = old.replace("line 2\n", "line two\n").replace("line 15\n", "line fifteen\n")
        groups = compute_diff(old, new)

        lines = [line.plain for line in renderer.diff_lines("f", groups, 20, 20)]

        separator = "─" * 7 + "┼" + "─" * 72
        assert lines.count(separator) == 2

    def test_emphasis_uses_bright_style(self):
        renderer = DiffRenderer(width=80)
        groups = compute_diff("let x = 1\n", "let x = 2\n")

        lines = renderer.diff_lines("f", groups, 1, 1)
        insert_line = lines[-1]

        styles = {str(span.style) for span in insert_line.spans}
        assert "bold italic bright_green" in styles

    def test_render_diff_prints_and_counts_groups(self):
        console, buffer = _console()
        renderer = DiffRenderer(console)

        count = renderer.render_diff("init.lua", "a\nb\n", "a\nc\n")

        output = buffer.getvalue()
        assert count == 1
        assert "│ init.lua" in output
        assert "-│ b" in output
        assert "+│ c" in output

    def test_render_diff_identical(self):
        console, _ = _console()

        assert DiffRenderer(console).render_diff("f", "same\n", "same\n") == 0

    def test_render_modified_marker(self):
        console, buffer = _console()

        DiffRenderer(console).render_modified("image.png")

        assert "  ~ │ image.png" in buffer.getvalue()

    def test_render_added_marker(self):
        console, buffer = _console()

        DiffRenderer(console).render_added("new.lua")

        assert "  + │ new.lua" in buffer.getvalue()
