"""Tests for Pydantic data models."""

from __future__ import annotations

import pytest
from fakes import make_rule
from pydantic import ValidationError

from web_a11y_auditor.models import (
    AccessibilityScore,
    AuditRecord,
    AxeNode,
    AxeRuleResult,
    Recommendation,
    ScanResult,
    Violation,
    ViolationCounts,
)


class TestAxeRuleResult:
    def test_from_engine_shape(self) -> None:
        rule = AxeRuleResult.model_validate(make_rule("image-alt", "critical", tags=["wcag2a", "cat.text-alternatives"]))
        assert rule.id == "image-alt"
        assert rule.impact == "critical"
        assert rule.help_url.endswith("/image-alt")
        assert rule.nodes[0].target == ["#image-alt"]
        assert rule.nodes[0].failure_summary == "Fix any of the following"

    def test_null_impact_defaults_to_moderate(self) -> None:
        rule = AxeRuleResult.model_validate(make_rule("region", None))
        assert rule.impact == "moderate"

    def test_invalid_impact_raises(self) -> None:
        with pytest.raises(ValidationError):
            AxeRuleResult.model_validate(make_rule("x", "catastrophic"))

    def test_extra_keys_ignored(self) -> None:
        data = make_rule("x")
        data["nodes"][0]["any"] = [{"id": "check"}]
        rule = AxeRuleResult.model_validate(data)
        assert rule.nodes[0].html == "<div></div>"


class TestAxeNode:
    def test_nested_targets_are_flattened(self) -> None:
        node = AxeNode.model_validate({"target": [["iframe", "#inner"], "#outer"], "html": "<a>"})
        assert node.target == ["iframe >>> #inner", "#outer"]

    def test_non_list_target(self) -> None:
        assert AxeNode.model_validate({"target": None}).target == []


class TestViolationCounts:
    def test_total(self) -> None:
        assert ViolationCounts(critical=1, serious=2, moderate=3, minor=4).total == 10

    def test_negative_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ViolationCounts(critical=-1)


class TestRecommendation:
    def test_case_insensitive_levels(self) -> None:
        rec = Recommendation(title="t", description="d", impact="Critical", effort="LOW")
        assert rec.impact == "critical"
        assert rec.effort == "low"

    def test_invalid_effort_raises(self) -> None:
        with pytest.raises(ValidationError):
            Recommendation(title="t", description="d", impact="minor", effort="huge")


class TestAuditRecord:
    def test_defaults(self) -> None:
        record = AuditRecord(url="https://example.com")
        assert record.status == "pending"
        assert record.overall_score is None
        assert record.priority_recommendations == []
        assert record.id

    def test_score_bounds(self) -> None:
        with pytest.raises(ValidationError):
            AuditRecord(url="https://example.com", overall_score=101)

    def test_invalid_status_raises(self) -> None:
        with pytest.raises(ValidationError):
            AuditRecord(url="https://example.com", status="stuck")


class TestViolation:
    def test_frozen(self) -> None:
        violation = Violation(
            audit_id="a",
            violation_id="label",
            description="d",
            impact="serious",
            ai_explanation="e",
            fix_suggestion="f",
        )
        with pytest.raises(ValidationError):
            violation.impact = "minor"

    def test_detected_by_default(self) -> None:
        violation = Violation(
            audit_id="a", violation_id="label", description="d", impact="serious", ai_explanation="e", fix_suggestion="f"
        )
        assert violation.detected_by == ["axe-core"]
        assert violation.code_example is None


class TestScanResultAndScore:
    def test_empty_scan(self) -> None:
        scan = ScanResult()
        assert scan.violations == [] and scan.passes == [] and scan.incomplete == [] and scan.inapplicable == []

    def test_score_range(self) -> None:
        with pytest.raises(ValidationError):
            AccessibilityScore(overall_score=-1)
