"""Line diffs shown before pulling a file into the repository.

The repository copy is the old side, the live copy the new side. Lines are
aligned with ``difflib.SequenceMatcher`` and grouped into hunks with two
lines of context. Inside a replaced block, each old line is paired with a
new line and a second, word-level alignment marks the spans that actually
changed.
"""

import math
import re
from dataclasses import dataclass, field
from difflib import SequenceMatcher
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.text import Text

from ..utils import DIFF_CONTEXT_LINES, DIFF_WIDTH

_WORD_RE = re.compile(r"\w+|\s+|[^\w\s]")

# Below this similarity two lines are treated as unrelated and not emphasized
INLINE_RATIO_THRESHOLD = 0.5


class ChangeTag(str, Enum):
    """Kind of a diffed line."""

    EQUAL = "equal"
    DELETE = "delete"
    INSERT = "insert"


@dataclass
class DiffChange:
    """A single line of a diff."""

    tag: ChangeTag
    """Whether the line was kept, removed or added"""

    old_index: Optional[int]
    """0-based line index in the old text (None for insertions)"""

    new_index: Optional[int]
    """0-based line index in the new text (None for deletions)"""

    text: str
    """Line content without the line terminator"""

    emphasis: list[tuple[int, int]] = field(default_factory=list)
    """Character ranges of ``text`` that differ from the paired line"""

    missing_newline: bool = False
    """True for a last line without a trailing newline"""

    def segments(self) -> list[tuple[bool, str]]:
        """Split the text into (emphasized, value) runs."""
        result: list[tuple[bool, str]] = []
        pos = 0
        for start, end in self.emphasis:
            if start > pos:
                result.append((False, self.text[pos:start]))
            result.append((True, self.text[start:end]))
            pos = end
        if pos < len(self.text) or not result:
            result.append((False, self.text[pos:]))
        return result


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` keeping the terminators.

    Examples:
        >>> split_lines("a\\nb")
        ['a\\n', 'b']
    """
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def decode_text(data: bytes) -> Optional[str]:
    """Decode file contents as UTF-8, or None if they are not text."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def _strip_terminator(line: str) -> tuple[str, bool]:
    if line.endswith("\r\n"):
        return line[:-2], False
    if line.endswith("\n"):
        return line[:-1], False
    return line, True


def inline_emphasis(old: str, new: str) -> tuple[list[tuple[int, int]], list[tuple[int, int]]]:
    """Find the character ranges that differ between two similar lines.

    Args:
        old: Old line (without terminator)
        new: New line (without terminator)

    Returns:
        Tuple of (ranges in old, ranges in new); both empty when the lines
        are too different for a word-level comparison to be useful
    """
    old_words = _WORD_RE.findall(old)
    new_words = _WORD_RE.findall(new)
    matcher = SequenceMatcher(None, old_words, new_words, autojunk=False)
    if matcher.ratio() < INLINE_RATIO_THRESHOLD:
        return [], []

    def offsets(words: list[str]) -> list[int]:
        result = [0]
        for word in words:
            result.append(result[-1] + len(word))
        return result

    old_offsets = offsets(old_words)
    new_offsets = offsets(new_words)
    old_ranges: list[tuple[int, int]] = []
    new_ranges: list[tuple[int, int]] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            continue
        if i2 > i1:
            old_ranges.append((old_offsets[i1], old_offsets[i2]))
        if j2 > j1:
            new_ranges.append((new_offsets[j1], new_offsets[j2]))
    return old_ranges, new_ranges


def compute_diff(
    old: str, new: str, context: int = DIFF_CONTEXT_LINES
) -> list[list[DiffChange]]:
    """Compute the change groups between two texts.

    Args:
        old: Old text (repository copy)
        new: New text (live copy)
        context: Unchanged lines kept around each change

    Returns:
        List of change groups; empty if the texts are identical

    Examples:
        >>> groups = compute_diff("a\\nb\\n", "a\\nc\\n")
        >>> [(c.tag.value, c.text) for c in groups[0]]
        [('equal', 'a'), ('delete', 'b'), ('insert', 'c')]
    """
    old_lines = split_lines(old)
    new_lines = split_lines(new)
    matcher = SequenceMatcher(None, old_lines, new_lines, autojunk=False)

    groups: list[list[DiffChange]] = []
    for opcodes in matcher.get_grouped_opcodes(context):
        changes: list[DiffChange] = []
        for tag, i1, i2, j1, j2 in opcodes:
            if tag == "equal":
                for offset in range(i2 - i1):
                    text, missing = _strip_terminator(old_lines[i1 + offset])
                    changes.append(
                        DiffChange(
                            ChangeTag.EQUAL,
                            i1 + offset,
                            j1 + offset,
                            text,
                            missing_newline=missing,
                        )
                    )
                continue

            old_block = [_strip_terminator(line) for line in old_lines[i1:i2]]
            new_block = [_strip_terminator(line) for line in new_lines[j1:j2]]
            old_emphasis: list[list[tuple[int, int]]] = [[] for _ in old_block]
            new_emphasis: list[list[tuple[int, int]]] = [[] for _ in new_block]
            if tag == "replace":
                for k in range(min(len(old_block), len(new_block))):
                    old_emphasis[k], new_emphasis[k] = inline_emphasis(
                        old_block[k][0], new_block[k][0]
                    )

            for k, (text, missing) in enumerate(old_block):
                changes.append(
                    DiffChange(
                        ChangeTag.DELETE, i1 + k, None, text, old_emphasis[k], missing
                    )
                )
            for k, (text, missing) in enumerate(new_block):
                changes.append(
                    DiffChange(
                        ChangeTag.INSERT, None, j1 + k, text, new_emphasis[k], missing
                    )
                )
        groups.append(changes)
    return groups


def line_number_width(old_count: int, new_count: int) -> int:
    """Digits reserved for one line number column."""
    largest = max(old_count, new_count)
    if largest <= 1:
        return 1
    return math.ceil(math.log10(largest))


# (style, emphasized style, sign) per tag
_STYLES = {
    ChangeTag.DELETE: ("red", "bold italic bright_red", "-"),
    ChangeTag.INSERT: ("green", "bold italic bright_green", "+"),
    ChangeTag.EQUAL: ("dim", "dim", " "),
}


class DiffRenderer:
    """Renders pull previews to a rich console."""

    def __init__(self, console: Optional[Console] = None, width: int = DIFF_WIDTH):
        """Initialize the renderer.

        Args:
            console: Console to print to (defaults to a new stdout console)
            width: Column budget of the preview
        """
        self.console = console or Console(highlight=False)
        self.width = width

    def _rules(self, gutter: int) -> tuple[Text, Text]:
        body = self.width - gutter - 1
        top = Text("═" * gutter + "╤" + "═" * body)
        separator = Text("─" * gutter + "┼" + "─" * body)
        return top, separator

    def diff_lines(
        self,
        relative_path: str,
        groups: list[list[DiffChange]],
        old_count: int,
        new_count: int,
    ) -> list[Text]:
        """Build the rendered lines of a diff preview.

        Args:
            relative_path: Path shown in the header
            groups: Change groups from compute_diff
            old_count: Number of lines in the old text
            new_count: Number of lines in the new text

        Returns:
            List of rich Text lines
        """
        number_width = line_number_width(old_count, new_count)
        gutter = number_width * 2 + 3
        top, separator = self._rules(gutter)

        lines = [top, Text(" " * gutter + "│ " + relative_path), separator]
        for idx, group in enumerate(groups):
            # print separating line between changes
            if idx > 0:
                lines.append(separator.copy())

            for change in group:
                style, bright_style, sign = _STYLES[change.tag]
                old_no = "" if change.old_index is None else str(change.old_index)
                new_no = "" if change.new_index is None else str(change.new_index)

                line = Text()
                line.append(f"{old_no:>{number_width}} {new_no:>{number_width}} ", "dim")
                line.append(sign, style)
                line.append("│")
                line.append(" ", style)
                for emphasized, value in change.segments():
                    line.append(value, bright_style if emphasized else style)
                lines.append(line)
        return lines

    def marker_lines(self, relative_path: str, marker: str, style: str) -> list[Text]:
        """Build the lines of a one-line change marker (no diff body)."""
        top, _ = self._rules(4)
        line = Text("  ")
        line.append(marker, style)
        line.append(" │ " + relative_path)
        return [top, line]

    def render_diff(self, relative_path: str, old: str, new: str) -> int:
        """Print the diff between ``old`` and ``new``.

        Returns:
            Number of change groups printed
        """
        groups = compute_diff(old, new)
        for line in self.diff_lines(
            relative_path, groups, len(split_lines(old)), len(split_lines(new))
        ):
            self.console.print(line, soft_wrap=True)
        return len(groups)

    def render_modified(self, relative_path: str) -> None:
        """Print a "~" marker for a changed file that is not text."""
        for line in self.marker_lines(relative_path, "~", "cyan"):
            self.console.print(line, soft_wrap=True)

    def render_added(self, relative_path: str) -> None:
        """Print a "+" marker for a file that is new to the repository."""
        for line in self.marker_lines(relative_path, "+", "green"):
            self.console.print(line, soft_wrap=True)
