"""Exclude pattern matching for sync operations.

Exclude patterns come from two places in a configuration file: the
configuration-level ``exclude`` list of the ``[deploy]`` or ``[pull]``
table, and the per-platform list (``[deploy.linux]``, ``[pull.windows]``
and so on). Both are unioned into a single predicate. Patterns are always
matched against the path relative to the enumeration root.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from ..exceptions import DotsGlobError
from ..utils import GlobSyntaxError, glob_to_regex, normalize_relative_path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExcludeRule:
    """A single compiled exclude pattern."""

    pattern: str
    """Glob pattern as written in the configuration"""

    source: str
    """Configuration section the pattern came from (e.g. ``deploy.linux``)"""

    regex: re.Pattern
    """Compiled pattern"""

    @classmethod
    def compile(cls, pattern: str, source: str) -> "ExcludeRule":
        """Compile a pattern.

        Args:
            pattern: Glob pattern
            source: Configuration section, used in error messages

        Returns:
            ExcludeRule instance

        Raises:
            DotsGlobError: If the pattern is malformed
        """
        try:
            regex = glob_to_regex(pattern)
        except GlobSyntaxError as e:
            raise DotsGlobError(pattern, source, str(e)) from e
        return cls(pattern=pattern, source=source, regex=regex)

    def matches(self, relative_path: str) -> bool:
        return self.regex.match(relative_path) is not None


class ExcludeMatcher:
    """Matches relative paths against a union of exclude patterns.

    Examples:
        >>> matcher = ExcludeMatcher.from_sources(
        ...     {"deploy": ["*.log"], "deploy.linux": ["cache/**"]}
        ... )
        >>> matcher.is_excluded("cache/state.json")
        True
        >>> matcher.is_excluded("init.lua")
        False
    """

    def __init__(self, rules: Iterable[ExcludeRule] = ()):
        self.rules = list(rules)

    @classmethod
    def from_sources(cls, sources: Mapping[str, Iterable[str]]) -> "ExcludeMatcher":
        """Compile patterns grouped by the section they were read from.

        Args:
            sources: Mapping of section name to its patterns

        Returns:
            ExcludeMatcher instance

        Raises:
            DotsGlobError: For the first malformed pattern
        """
        rules = [
            ExcludeRule.compile(pattern, source)
            for source, patterns in sources.items()
            for pattern in patterns
        ]
        return cls(rules)

    def __len__(self) -> int:
        return len(self.rules)

    def matching_rule(self, relative_path: str):
        """Return the first rule matching ``relative_path`` or None."""
        path = normalize_relative_path(relative_path)
        for rule in self.rules:
            if rule.matches(path):
                return rule
        return None

    def is_excluded(self, relative_path: str) -> bool:
        """Check if a relative path matches any exclude pattern.

        Args:
            relative_path: Path relative to the enumeration root

        Returns:
            True if the path should be skipped
        """
        rule = self.matching_rule(relative_path)
        if rule is not None:
            logger.debug(
                f"Excluding {relative_path} (pattern '{rule.pattern}' from {rule.source})"
            )
            return True
        return False
