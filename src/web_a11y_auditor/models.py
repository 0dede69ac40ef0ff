"""Pydantic v2 data models for scan results, violations, scores, and audit records.

All core data structures used throughout the auditor live here.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

Impact = Literal["critical", "serious", "moderate", "minor"]
WcagLevel = Literal["AAA", "AA", "A", "Unknown"]
AuditStatus = Literal["pending", "processing", "completed", "failed"]
Effort = Literal["low", "medium", "high"]


class AxeNode(BaseModel):
    """One DOM node matched by a rule."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    target: list[str] = Field(default_factory=list)
    html: str = ""
    failure_summary: str | None = Field(None, alias="failureSummary")

    @field_validator("target", mode="before")
    @classmethod
    def _stringify_target(cls, value: object) -> list[str]:
        # Shadow DOM and iframe selectors come back as nested lists.
        if not isinstance(value, list):
            return []
        selectors: list[str] = []
        for item in value:
            if isinstance(item, list):
                selectors.append(" >>> ".join(str(part) for part in item))
            else:
                selectors.append(str(item))
        return selectors


class AxeRuleResult(BaseModel):
    """A single rule outcome as reported by the rule engine."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    impact: Impact = "moderate"
    description: str = ""
    help: str = ""
    help_url: str = Field("", alias="helpUrl")
    tags: list[str] = Field(default_factory=list)
    nodes: list[AxeNode] = Field(default_factory=list)

    @field_validator("impact", mode="before")
    @classmethod
    def _default_impact(cls, value: object) -> object:
        # Passes and inapplicable rules carry a null impact.
        return value or "moderate"


class ScanResult(BaseModel):
    """The four result buckets of one rule-engine run. Transient, never persisted."""

    violations: list[AxeRuleResult] = Field(default_factory=list)
    passes: list[AxeRuleResult] = Field(default_factory=list)
    incomplete: list[AxeRuleResult] = Field(default_factory=list)
    inapplicable: list[AxeRuleResult] = Field(default_factory=list)


class ViolationCounts(BaseModel):
    """Violation totals per impact level."""

    critical: int = Field(0, ge=0)
    serious: int = Field(0, ge=0)
    moderate: int = Field(0, ge=0)
    minor: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.critical + self.serious + self.moderate + self.minor


class WcagCriterion(BaseModel):
    """A compliance tag attached to a violation."""

    criterion: str
    level: WcagLevel
    guideline: str


class ViolationAnalysis(BaseModel):
    """Generated guidance for a single violation."""

    explanation: str
    fix_suggestion: str
    code_example: str | None = None


class Recommendation(BaseModel):
    """A ranked remediation recommendation for the whole page."""

    title: str
    description: str
    impact: Impact
    effort: Effort

    @field_validator("impact", "effort", mode="before")
    @classmethod
    def _lowercase(cls, value: object) -> object:
        return value.strip().lower() if isinstance(value, str) else value


class AuditSummary(BaseModel):
    """Executive summary and priority recommendations for an audit."""

    summary: str
    priority_recommendations: list[Recommendation] = Field(default_factory=list)


class AccessibilityScore(BaseModel):
    """Calculated accessibility score with the contribution of each term."""

    overall_score: int = Field(ge=0, le=100)
    severity_penalty: float = 0.0
    coverage_bonus: float = 0.0
    ambiguity_penalty: float = 0.0
    ratio_penalty: float = 0.0


class Violation(BaseModel):
    """A persisted, enriched rule violation. Immutable once written."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    audit_id: str
    violation_id: str
    description: str
    impact: Impact
    help_url: str = ""
    wcag_criteria: list[WcagCriterion] = Field(default_factory=list)
    wcag_level: WcagLevel = "Unknown"
    selector: str = ""
    html: str = ""
    target: list[str] = Field(default_factory=list)
    ai_explanation: str
    fix_suggestion: str
    code_example: str | None = None
    detected_by: list[str] = Field(default_factory=lambda: ["axe-core"])
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AuditRecord(BaseModel):
    """One audit run of a single URL and its lifecycle."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    url: str
    title: str | None = None
    status: AuditStatus = "pending"
    total_violations: int | None = None
    critical_count: int | None = None
    serious_count: int | None = None
    moderate_count: int | None = None
    minor_count: int | None = None
    overall_score: int | None = Field(None, ge=0, le=100)
    ai_summary: str | None = None
    priority_recommendations: list[Recommendation] = Field(default_factory=list)
    error_message: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
