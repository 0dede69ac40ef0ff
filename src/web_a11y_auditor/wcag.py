"""Severity and compliance-level orderings plus tag helpers.

Both rankings are fixed total orders: critical > serious > moderate > minor,
and AAA > AA > A > Unknown.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from web_a11y_auditor.models import AxeRuleResult, ViolationCounts, WcagCriterion, WcagLevel

SEVERITY_RANK: dict[str, int] = {
    "critical": 4,
    "serious": 3,
    "moderate": 2,
    "minor": 1,
}

LEVEL_RANK: dict[str, int] = {
    "AAA": 3,
    "AA": 2,
    "A": 1,
    "Unknown": 0,
}

COMPLIANCE_TAGS: tuple[str, ...] = (
    "wcag2a",
    "wcag2aa",
    "wcag21a",
    "wcag21aa",
    "wcag22aa",
    "section508",
)

CATEGORY_TAGS: tuple[str, ...] = (
    "cat.aria",
    "cat.color",
    "cat.forms",
    "cat.keyboard",
    "cat.language",
    "cat.name-role-value",
    "cat.parsing",
    "cat.semantics",
    "cat.sensory-and-visual-cues",
    "cat.structure",
    "cat.tables",
    "cat.text-alternatives",
    "cat.time-and-media",
)

# wcag2a, wcag21aa, wcag22aaa ...
_LEVEL_TAG = re.compile(r"^wcag(2\d?)(a{1,3})$")
# wcag111, wcag143, wcag1410 ...
_CRITERION_TAG = re.compile(r"^wcag(\d)(\d)(\d{1,2})$")

_LEVEL_BY_LENGTH: dict[int, WcagLevel] = {1: "A", 2: "AA", 3: "AAA"}


def severity_rank(impact: str | None) -> int:
    return SEVERITY_RANK.get(impact or "", 0)


def sort_by_severity(results: Sequence[AxeRuleResult]) -> list[AxeRuleResult]:
    """Return results ordered most severe first; ties keep discovery order."""
    return sorted(results, key=lambda r: -severity_rank(r.impact))


def count_by_severity(results: Iterable[AxeRuleResult]) -> ViolationCounts:
    counts = {level: 0 for level in SEVERITY_RANK}
    for result in results:
        if result.impact in counts:
            counts[result.impact] += 1
    return ViolationCounts(**counts)


def _tag_level(tag: str) -> WcagLevel:
    match = _LEVEL_TAG.match(tag)
    if not match:
        return "Unknown"
    return _LEVEL_BY_LENGTH[len(match.group(2))]


def extract_wcag_level(tags: Iterable[str]) -> WcagLevel:
    """Return the highest conformance level named by the tags."""
    best: WcagLevel = "Unknown"
    for tag in tags:
        level = _tag_level(tag)
        if LEVEL_RANK[level] > LEVEL_RANK[best]:
            best = level
    return best


def _guideline_for(tag: str) -> str:
    level_match = _LEVEL_TAG.match(tag)
    if level_match:
        version = level_match.group(1)
        return f"WCAG {version[0]}.{version[1:] or '0'}"
    criterion_match = _CRITERION_TAG.match(tag)
    if criterion_match:
        return ".".join(criterion_match.groups())
    return "Unknown"


def extract_wcag_criteria(tags: Iterable[str]) -> list[WcagCriterion]:
    """Map every wcag* tag to a criterion entry."""
    return [
        WcagCriterion(criterion=tag, level=_tag_level(tag), guideline=_guideline_for(tag))
        for tag in tags
        if tag.startswith("wcag")
    ]


def wcag_compliance_breakdown(violations: Sequence[AxeRuleResult]) -> dict[str, int]:
    """Count violations carrying each compliance tag."""
    return {tag: sum(1 for v in violations if tag in v.tags) for tag in COMPLIANCE_TAGS}


def category_breakdown(violations: Sequence[AxeRuleResult]) -> dict[str, int]:
    """Count violations per rule category, omitting empty categories."""
    breakdown: dict[str, int] = {}
    for category in CATEGORY_TAGS:
        count = sum(1 for v in violations if category in v.tags)
        if count:
            breakdown[category.removeprefix("cat.")] = count
    return breakdown
