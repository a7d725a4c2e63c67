"""Utility functions for pydots."""

import os
import re
from pathlib import Path, PurePosixPath
from typing import Union

from .exceptions import DotsFilesystemError

# =============================================================================
# Constants
# =============================================================================

# Root marker of a dotfiles repository
ROOT_CONFIG_NAME: str = "dotfiles.toml"

# Per-configuration metadata file, never copied implicitly
CONFIG_FILE_NAME: str = "dotconfig.toml"

# Width of the diff preview in columns
DIFF_WIDTH: int = 80

# Unchanged lines of context kept around each change group
DIFF_CONTEXT_LINES: int = 2


# =============================================================================
# Path utilities
# =============================================================================


def expand_path(value: Union[str, Path]) -> Path:
    """Expand a leading ``~`` and return the path.

    Args:
        value: Path string from a configuration file

    Returns:
        Expanded path (not resolved, symlinks are kept)

    Examples:
        >>> expand_path("/etc/xdg")
        PosixPath('/etc/xdg')
    """
    return Path(os.path.expanduser(str(value)))


def normalize_relative_path(value: Union[str, Path], case_sensitive: bool = True) -> str:
    """Normalize a relative path for identity comparisons.

    Backslashes become forward slashes, ``.`` components and trailing
    separators are dropped. On case-insensitive filesystems the result is
    case-folded.

    Args:
        value: Relative path
        case_sensitive: Whether the underlying filesystem is case sensitive

    Returns:
        Normalized POSIX-style relative path

    Examples:
        >>> normalize_relative_path("./sub\\\\dotconfig.toml/")
        'sub/dotconfig.toml'
        >>> normalize_relative_path("DotConfig.toml", case_sensitive=False)
        'dotconfig.toml'
    """
    text = str(value).replace("\\", "/")
    normalized = PurePosixPath(text).as_posix()
    if normalized == ".":
        normalized = ""
    if not case_sensitive:
        normalized = normalized.casefold()
    return normalized


def is_dir_null_or_empty(path: Path) -> bool:
    """Check whether a directory is absent or has no entries.

    Args:
        path: Directory to check

    Returns:
        True if the path does not exist or is an empty directory

    Raises:
        DotsFilesystemError: If the path cannot be inspected
    """
    try:
        if not path.exists():
            return True
        if not path.is_dir():
            return False
        return next(path.iterdir(), None) is None
    except OSError as e:
        raise DotsFilesystemError(
            f"Could not inspect '{path}': {e.strerror or e}", path=path
        ) from e


# =============================================================================
# Glob utilities
# =============================================================================


class GlobSyntaxError(ValueError):
    """Raised by glob_to_regex for a malformed pattern."""


def _translate_class(pattern: str, start: int) -> tuple[str, int]:
    """Translate a ``[...]`` character class starting at ``start``.

    Returns:
        Tuple of (regex fragment, index after the closing bracket)
    """
    i = start + 1
    negated = False
    if i < len(pattern) and pattern[i] in "!^":
        negated = True
        i += 1

    items: list[str] = []
    first = True
    while i < len(pattern):
        char = pattern[i]
        if char == "]" and not first:
            break
        first = False
        if char == "\\":
            i += 1
            if i >= len(pattern):
                raise GlobSyntaxError("dangling escape in character class")
            char = pattern[i]
        # range like a-z, but a trailing '-' is a literal
        if i + 2 < len(pattern) and pattern[i + 1] == "-" and pattern[i + 2] != "]":
            end = pattern[i + 2]
            if end < char:
                raise GlobSyntaxError(f"invalid range '{char}-{end}'")
            items.append(f"{re.escape(char)}-{re.escape(end)}")
            i += 3
            continue
        items.append(re.escape(char))
        i += 1
    else:
        raise GlobSyntaxError("unclosed character class")

    body = "".join(items)
    return (f"[^{body}]" if negated else f"[{body}]"), i + 1


def glob_to_regex(pattern: str) -> re.Pattern:
    """Compile a glob pattern to a regular expression.

    Syntax: ``?`` matches one character, ``*`` any run of characters
    (path separators included), ``**`` as a whole component any number of
    components, ``[...]`` character classes (``!`` or ``^`` negates),
    ``{a,b}`` alternation and ``\\`` escapes. The whole path must match.

    Args:
        pattern: Glob pattern

    Returns:
        Compiled regex

    Raises:
        GlobSyntaxError: If the pattern is malformed

    Examples:
        >>> bool(glob_to_regex("*.log").match("cache/app.log"))
        True
        >>> bool(glob_to_regex("**/dotconfig.toml").match("dotconfig.toml"))
        True
    """
    parts: list[str] = []
    in_braces = False
    i = 0
    length = len(pattern)

    while i < length:
        char = pattern[i]

        if char == "*":
            if pattern.startswith("**", i):
                at_start = i == 0 or pattern[i - 1] == "/"
                after = i + 2
                if at_start and after == length:
                    parts.append(".*")
                    i = after
                    continue
                if at_start and pattern.startswith("/", after):
                    parts.append("(?:.*/)?")
                    i = after + 1
                    continue
                i = after
            else:
                i += 1
            parts.append(".*")
        elif char == "?":
            parts.append(".")
            i += 1
        elif char == "[":
            fragment, i = _translate_class(pattern, i)
            parts.append(fragment)
        elif char == "{":
            if in_braces:
                raise GlobSyntaxError("nested alternation is not supported")
            in_braces = True
            parts.append("(?:")
            i += 1
        elif char == "}":
            if not in_braces:
                raise GlobSyntaxError("unopened alternation")
            in_braces = False
            parts.append(")")
            i += 1
        elif char == "," and in_braces:
            parts.append("|")
            i += 1
        elif char == "\\":
            if i + 1 >= length:
                raise GlobSyntaxError("dangling escape")
            parts.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            parts.append(re.escape(char))
            i += 1

    if in_braces:
        raise GlobSyntaxError("unclosed alternation")

    return re.compile("".join(parts) + r"\Z", re.DOTALL)


def glob_match(pattern: str, path: str) -> bool:
    """Check whether a relative path matches a glob pattern.

    Args:
        pattern: Glob pattern
        path: POSIX-style relative path

    Returns:
        True if the whole path matches
    """
    return glob_to_regex(pattern).match(path) is not None
