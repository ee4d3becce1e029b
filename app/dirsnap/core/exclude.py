"""Exclusion rules for directory scans.

A rule is either an exact path or a regular expression. Exact paths
are resolved to absolute, slash-normalized form once and compared for
equality. Patterns are searched anywhere in the candidate's absolute,
slash-normalized path.
"""

import os
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from dirsnap.models.records import normalize_path

ExcludeRuleInput = str | os.PathLike[str] | re.Pattern[str]


def absolute_path(path: str | os.PathLike[str]) -> str:
    """Resolve a path against the working directory and normalize separators.

    Symlinks are not resolved.
    """
    return normalize_path(os.path.abspath(os.fspath(path)))


@dataclass(frozen=True, slots=True)
class ExactPathRule:
    """Excludes exactly one absolute path."""

    path: str

    def matches(self, candidate: str) -> bool:
        return candidate == self.path


@dataclass(frozen=True, slots=True)
class PatternRule:
    """Excludes every path the pattern matches."""

    pattern: re.Pattern[str]

    def matches(self, candidate: str) -> bool:
        return self.pattern.search(candidate) is not None


ExcludeRule = ExactPathRule | PatternRule


def build_rule(rule: ExcludeRuleInput) -> ExcludeRule:
    """Convert a caller-supplied rule into an ExcludeRule.

    Args:
        rule: A path (str or PathLike) for an exact match, or a compiled
            regular expression for a pattern match.

    Returns:
        The corresponding rule object.

    Raises:
        TypeError: If the rule has an unsupported type.
    """
    if isinstance(rule, re.Pattern):
        return PatternRule(rule)
    if isinstance(rule, (str, os.PathLike)):
        return ExactPathRule(absolute_path(rule))
    msg = f"Unsupported exclude rule: {rule!r}"
    raise TypeError(msg)


def build_rules(
    exclude_paths: Iterable[ExcludeRuleInput] = (),
    exclude_patterns: Iterable[str] = (),
) -> list[ExcludeRule]:
    """Build an ordered rule list from paths/patterns and regex sources.

    Args:
        exclude_paths: Exact paths or compiled patterns, in evaluation order.
        exclude_patterns: Regular expression sources, appended after
            ``exclude_paths``.

    Returns:
        Rules in evaluation order.

    Raises:
        re.error: If a pattern source does not compile.
    """
    rules = [build_rule(rule) for rule in exclude_paths]
    rules.extend(PatternRule(re.compile(source)) for source in exclude_patterns)
    return rules


def is_excluded(path: str, rules: Sequence[ExcludeRule]) -> bool:
    """Check if an absolute, slash-normalized path is excluded.

    Rules are evaluated in order and the first match wins.
    """
    return any(rule.matches(path) for rule in rules)
