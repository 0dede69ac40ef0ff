"""Accessibility scoring system with severity-weighted calculations.

Computes an overall accessibility score (0-100) from violation counts per
impact level, the number of passing rules, and the number of rules that
need manual review. The calculation is pure and has no I/O.
"""

from __future__ import annotations

import math

from pydantic import BaseModel

from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.models import AccessibilityScore, ViolationCounts


class ScoringWeights(BaseModel):
    """Penalty weights, bonus and caps used by the scorer."""

    critical: float = 25
    serious: float = 15
    moderate: float = 8
    minor: float = 3
    pass_bonus: float = 0.3
    pass_bonus_cap: float = 15
    incomplete_penalty: float = 2
    incomplete_penalty_cap: float = 10
    ratio_penalty: float = 20

    @classmethod
    def from_config(cls, config: AuditConfig) -> ScoringWeights:
        return cls(
            critical=config.score_weight_critical,
            serious=config.score_weight_serious,
            moderate=config.score_weight_moderate,
            minor=config.score_weight_minor,
            pass_bonus=config.score_pass_bonus,
            pass_bonus_cap=config.score_pass_bonus_cap,
            incomplete_penalty=config.score_incomplete_penalty,
            incomplete_penalty_cap=config.score_incomplete_penalty_cap,
            ratio_penalty=config.score_ratio_penalty,
        )


class AccessibilityScorer:
    """Calculates accessibility scores with configurable weights."""

    def __init__(self, weights: ScoringWeights | None = None) -> None:
        self.weights = weights or ScoringWeights()

    def calculate_score(
        self,
        counts: ViolationCounts,
        pass_count: int,
        incomplete_count: int,
    ) -> AccessibilityScore:
        """Calculate the score and its breakdown.

        Starts at 100, subtracts the severity-weighted penalty, adds a capped
        bonus for passing rules, subtracts a capped penalty for rules needing
        review, and subtracts a penalty proportional to the share of
        violations among all applicable rules. The result is clamped to
        [0, 100] and rounded.

        Args:
            counts: Violation totals per impact level.
            pass_count: Number of passing rules.
            incomplete_count: Number of rules needing manual review.

        Returns:
            AccessibilityScore with the overall score and each term.
        """
        w = self.weights
        severity_penalty = (
            counts.critical * w.critical
            + counts.serious * w.serious
            + counts.moderate * w.moderate
            + counts.minor * w.minor
        )
        coverage_bonus = min(pass_count * w.pass_bonus, w.pass_bonus_cap)
        ambiguity_penalty = min(incomplete_count * w.incomplete_penalty, w.incomplete_penalty_cap)

        violation_count = counts.total
        applicable = violation_count + pass_count + incomplete_count
        ratio_penalty = (violation_count / applicable) * w.ratio_penalty if applicable > 0 else 0.0

        raw = 100 - severity_penalty + coverage_bonus - ambiguity_penalty - ratio_penalty
        overall = max(0, min(100, math.floor(raw + 0.5)))

        return AccessibilityScore(
            overall_score=overall,
            severity_penalty=severity_penalty,
            coverage_bonus=coverage_bonus,
            ambiguity_penalty=ambiguity_penalty,
            ratio_penalty=ratio_penalty,
        )


def score(
    counts: ViolationCounts,
    pass_count: int,
    incomplete_count: int,
    weights: ScoringWeights | None = None,
) -> int:
    """Return only the overall 0-100 score."""
    return AccessibilityScorer(weights).calculate_score(counts, pass_count, incomplete_count).overall_score
