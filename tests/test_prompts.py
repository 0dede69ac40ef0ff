"""Tests for prompt construction and response decoding."""

from __future__ import annotations

import json

from fakes import make_axe_result, make_rule

from web_a11y_auditor.models import AxeRuleResult, ScanResult
from web_a11y_auditor.prompts import (
    FALLBACK_FIX_SUGGESTION,
    MISSING_EXPLANATION,
    MISSING_FIX_SUGGESTION,
    SUMMARY_MISSING,
    SUMMARY_UNPARSEABLE,
    build_summary_prompt,
    build_violation_prompt,
    parse_summary,
    parse_violation_analysis,
    strip_code_fences,
)


class TestViolationPrompt:
    def test_contains_rule_details(self) -> None:
        rule = AxeRuleResult.model_validate(
            make_rule("color-contrast", "serious", tags=["cat.color", "wcag2aa", "wcag143"], html='<p class="x">Hi</p>')
        )
        prompt = build_violation_prompt(rule, "https://example.com/")
        assert "- Rule ID: color-contrast" in prompt
        assert "- Impact Level: serious" in prompt
        assert "- WCAG Level: AA" in prompt
        assert "- Compliance Tags: wcag2aa, wcag143" in prompt
        assert "- Categories: cat.color" in prompt
        assert "- URL: https://example.com/" in prompt
        assert 'HTML ELEMENT: <p class="x">Hi</p>' in prompt
        assert "CSS SELECTOR: #color-contrast" in prompt
        assert '"fixSuggestion"' in prompt

    def test_missing_node(self) -> None:
        data = make_rule("bypass")
        data["nodes"] = []
        prompt = build_violation_prompt(AxeRuleResult.model_validate(data), "https://example.com/")
        assert "HTML ELEMENT: Not available" in prompt
        assert "CSS SELECTOR: Not available" in prompt

    def test_deterministic(self) -> None:
        rule = AxeRuleResult.model_validate(make_rule("label"))
        assert build_violation_prompt(rule, "https://a.test/") == build_violation_prompt(rule, "https://a.test/")


class TestSummaryPrompt:
    def test_aggregates(self) -> None:
        scan = ScanResult.model_validate(
            make_axe_result(
                [
                    make_rule("region", "moderate", tags=["cat.keyboard", "best-practice"]),
                    make_rule("image-alt", "critical", tags=["cat.text-alternatives", "wcag2a", "section508"]),
                ],
                passes=4,
                incomplete=1,
                inapplicable=6,
            )
        )
        prompt = build_summary_prompt(scan, "https://example.com/", "Home")
        assert "- Title: Home" in prompt
        assert "- Total Violations: 2" in prompt
        assert "- Total Passes: 4" in prompt
        assert "- Incomplete/Review Items: 1" in prompt
        assert "- Inapplicable Rules: 6" in prompt
        assert prompt.index("- image-alt (critical)") < prompt.index("- region (moderate)")
        assert "WCAG2A: 1 violations" in prompt
        assert "SECTION508: 1 violations" in prompt
        assert "keyboard: 1" in prompt
        assert "- Rule ID:" not in prompt

    def test_top_k_limits_listing(self) -> None:
        scan = ScanResult.model_validate(make_axe_result([make_rule(f"rule-{i}") for i in range(5)]))
        prompt = build_summary_prompt(scan, "https://example.com/", None, top_k=2)
        assert "- rule-1 (moderate)" in prompt
        assert "- rule-2 (moderate)" not in prompt
        assert "- Title: Untitled" in prompt

    def test_no_violations(self) -> None:
        prompt = build_summary_prompt(ScanResult(), "https://example.com/", "Home")
        assert "No major category issues found" in prompt


class TestStripCodeFences:
    def test_json_fence(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence(self) -> None:
        assert strip_code_fences('```\n{"a": 1}\n```\n') == '{"a": 1}'

    def test_no_fence(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestParseViolationAnalysis:
    def test_camel_case(self) -> None:
        text = json.dumps({"explanation": "E", "fixSuggestion": "F", "codeExample": "<img alt='x'>"})
        analysis = parse_violation_analysis(text)
        assert analysis.explanation == "E"
        assert analysis.fix_suggestion == "F"
        assert analysis.code_example == "<img alt='x'>"

    def test_fenced_snake_case(self) -> None:
        text = '```json\n{"explanation": "E", "fix_suggestion": "F", "code_example": null}\n```'
        analysis = parse_violation_analysis(text)
        assert analysis.fix_suggestion == "F"
        assert analysis.code_example is None

    def test_missing_fields_get_placeholders(self) -> None:
        analysis = parse_violation_analysis("{}")
        assert analysis.explanation == MISSING_EXPLANATION
        assert analysis.fix_suggestion == MISSING_FIX_SUGGESTION

    def test_null_string_code_example(self) -> None:
        text = json.dumps({"explanation": "E", "fixSuggestion": "F", "codeExample": "null"})
        assert parse_violation_analysis(text).code_example is None

    def test_free_text_is_truncated(self) -> None:
        analysis = parse_violation_analysis("x" * 400, max_raw_length=300)
        assert analysis.explanation == "x" * 300 + "..."
        assert analysis.fix_suggestion == FALLBACK_FIX_SUGGESTION
        assert analysis.code_example is None

    def test_short_free_text_kept(self) -> None:
        assert parse_violation_analysis("Add a label.").explanation == "Add a label."

    def test_json_array_is_not_an_object(self) -> None:
        assert parse_violation_analysis("[1, 2]").fix_suggestion == FALLBACK_FIX_SUGGESTION


class TestParseSummary:
    def test_valid(self) -> None:
        text = json.dumps({
            "summary": "Mostly fine.",
            "priorityRecommendations": [
                {"title": "Alt text", "description": "Add it", "impact": "Critical", "effort": "low"},
                {"title": "Contrast", "description": "Darken", "impact": "serious", "effort": "medium"},
            ],
        })
        summary = parse_summary(text)
        assert summary.summary == "Mostly fine."
        assert [r.title for r in summary.priority_recommendations] == ["Alt text", "Contrast"]
        assert summary.priority_recommendations[0].impact == "critical"

    def test_invalid_recommendations_dropped(self) -> None:
        text = json.dumps({
            "summary": "S",
            "priorityRecommendations": [
                {"title": "Good", "description": "d", "impact": "minor", "effort": "high"},
                {"title": "Bad effort", "description": "d", "impact": "minor", "effort": "enormous"},
                {"title": "No description"},
                "not an object",
            ],
        })
        assert [r.title for r in parse_summary(text).priority_recommendations] == ["Good"]

    def test_unparseable(self) -> None:
        summary = parse_summary("Here is my summary, not JSON.")
        assert summary.summary == SUMMARY_UNPARSEABLE
        assert summary.priority_recommendations == []

    def test_missing_summary(self) -> None:
        assert parse_summary('{"priorityRecommendations": []}').summary == SUMMARY_MISSING
