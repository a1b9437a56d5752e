"""Pattern-based checks and repairs for Mermaid source.

These are heuristics aimed at inputs known to trip up the Mermaid parser,
not a grammar. Rules run in a fixed order and each one sees the output of
the rules before it.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field


class FixResult(BaseModel):
    """Outcome of a single fix pass."""

    fixed: str
    changes: list[str] = Field(default_factory=list)


# [Label<br/>Text (X-Y) More] -> [Label<br/>Text X-Y More]
_BR_PARENS = re.compile(r"(\[.*?<br/>.*?)\(([^)]+)\)([^\]]*\])")
# [Value (X+Y)] -> [Value X+Y]
_MATH_PARENS = re.compile(r"(\[.*?)\(([A-Za-z0-9]+[-+*/][A-Za-z0-9]+)\)(.*?\])")
# [Videos 1B-2B-3B] -> [Videos 1B to 2B to 3B]
_RANGE = re.compile(
    r"(\[.*?)\b([A-Za-z0-9]+)-([A-Za-z0-9]+)-([A-Za-z0-9]+)\b(.*?\])"
)
_MALFORMED_ARROW = re.compile(r"-->\s*>")
# Skips the tail of longer arrows such as `--->` and `<-->`.
_ARROW = re.compile(r"(?<![-<])\s*-->\s*")
_ARROW_SPACING = re.compile(r"-->(?:\S|\s{2,})")
_QUOTED_SUBGRAPH = re.compile(r'subgraph\s+"([^"]*)"(\s*\n)')

_CHECKS: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"\([^)]*[-+*/][^)]*\)"),
        "Mathematical expressions in parentheses may cause parsing issues",
    ),
    (
        re.compile(r"\[.*?\([^)]*-[^)]*\).*?\]"),
        "Parentheses with hyphens in node labels may cause parsing issues",
    ),
    (_MALFORMED_ARROW, "Malformed arrow syntax detected"),
    (_ARROW_SPACING, "Inconsistent spacing around arrows"),
    (re.compile(r'subgraph\s+[^"\s]'), "Subgraph labels should be quoted"),
]


def validate_mermaid_syntax(source: str) -> list[str]:
    """Return one description per known-bad pattern found in *source*.

    An empty list only means none of the known patterns matched.
    """
    return [message for pattern, message in _CHECKS if pattern.search(source)]


def _looks_like_range(match_text: str, tokens: tuple[str, ...]) -> bool:
    return "video" in match_text.lower() or any(c.isdigit() for t in tokens for c in t)


def _fix_ranges(source: str) -> tuple[str, list[str]]:
    converted: list[str] = []

    def _replace(m: re.Match[str]) -> str:
        prefix, start, middle, end, suffix = m.groups()
        if not _looks_like_range(m.group(0), (start, middle, end)):
            return m.group(0)
        converted.append(f"{start}-{middle}-{end} -> {start} to {middle} to {end}")
        return f"{prefix}{start} to {middle} to {end}{suffix}"

    return _RANGE.sub(_replace, source), converted


def fix_mermaid_syntax(source: str) -> FixResult:
    """Rewrite patterns that break the Mermaid parser.

    Each rule records at most one entry in ``changes``, and only when it
    actually altered the text.
    """
    fixed = source
    changes: list[str] = []

    fixed, count = _BR_PARENS.subn(r"\1\2\3", fixed)
    if count:
        changes.append(f"Removed {count} problematic parentheses in node labels")

    fixed, count = _MATH_PARENS.subn(r"\1\2\3", fixed)
    if count:
        changes.append(f"Fixed {count} mathematical expressions in node labels")

    fixed, converted = _fix_ranges(fixed)
    if converted:
        changes.append(
            f"Converted {len(converted)} range notation(s): " + "; ".join(converted)
        )

    if _MALFORMED_ARROW.search(fixed):
        fixed = _MALFORMED_ARROW.sub(" --> ", fixed)
        changes.append("Fixed malformed arrow syntax")

    # Whitespace before an arrow is tidied silently; only spacing the
    # checker flags counts as a change.
    normalized = _ARROW.sub(" --> ", fixed)
    if normalized != fixed and _ARROW_SPACING.search(fixed):
        changes.append("Normalized arrow spacing")
    fixed = normalized

    normalized = _QUOTED_SUBGRAPH.sub(r'subgraph "\1"\2', fixed)
    if normalized != fixed:
        fixed = normalized
        changes.append("Fixed subgraph quote formatting")

    return FixResult(fixed=fixed, changes=changes)
