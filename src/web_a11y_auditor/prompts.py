"""Prompt construction and response decoding for the generation service.

Prompt builders are pure functions of their inputs. Decoders never raise:
anything that cannot be decoded strictly falls back to fixed content.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError as PydanticValidationError

from web_a11y_auditor.models import (
    AuditSummary,
    AxeRuleResult,
    Recommendation,
    ScanResult,
    ViolationAnalysis,
)
from web_a11y_auditor.wcag import (
    category_breakdown,
    extract_wcag_level,
    sort_by_severity,
    wcag_compliance_breakdown,
)

logger = logging.getLogger(__name__)

FALLBACK_EXPLANATION = "AI analysis temporarily unavailable"
FALLBACK_FIX_SUGGESTION = "Please refer to the help URL for guidance"
MISSING_EXPLANATION = "Analysis not available"
MISSING_FIX_SUGGESTION = "Please refer to the help URL"
SUMMARY_UNAVAILABLE = "AI summary temporarily unavailable"
SUMMARY_UNPARSEABLE = (
    "Comprehensive accessibility audit completed. "
    "Please review detailed results for specific violations and recommendations."
)
SUMMARY_MISSING = "Summary not available"

VIOLATION_SYSTEM_PROMPT = """\
You're a seasoned accessibility consultant who's passionate about creating inclusive digital experiences. \
You've worked with countless teams to solve real accessibility challenges, and you understand both the \
technical and human sides of this work.

Your approach:
- Start by acknowledging what the violation means for actual users
- Explain the accessibility barrier in plain language, then the technical details
- Provide step-by-step guidance that developers can follow immediately
- Include practical code examples that show the before and after
- Mention testing strategies so they can verify their fixes work

Always answer with a single JSON object and nothing else."""

SUMMARY_SYSTEM_PROMPT = """\
You're a senior accessibility consultant who translates technical findings into strategic insights for \
both technical teams and business stakeholders.

Your summary style:
- Start with the big picture: what the audit reveals about overall accessibility maturity
- Highlight the most critical issues that need immediate attention
- Explain user impact in human terms, not just technical jargon
- Connect findings to business outcomes such as audience reach and legal compliance
- Provide a prioritized action plan with specific next steps

Always answer with a single JSON object and nothing else."""

_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def build_violation_prompt(violation: AxeRuleResult, url: str) -> str:
    """Build the per-violation analysis prompt."""
    first_node = violation.nodes[0] if violation.nodes else None
    html = first_node.html if first_node and first_node.html else "Not available"
    selector = ", ".join(first_node.target) if first_node and first_node.target else "Not available"
    categories = ", ".join(tag for tag in violation.tags if tag.startswith("cat."))
    criteria = ", ".join(tag for tag in violation.tags if tag.startswith("wcag") or tag == "section508")

    return f"""Analyze this accessibility violation and provide expert guidance:

VIOLATION DETAILS:
- Rule ID: {violation.id}
- Description: {violation.description}
- Help: {violation.help}
- Impact Level: {violation.impact}
- WCAG Level: {extract_wcag_level(violation.tags)}
- Compliance Tags: {criteria or "None"}
- Categories: {categories or "None"}
- URL: {url}

HTML ELEMENT: {html}
CSS SELECTOR: {selector}

Please provide:
1. A clear explanation of why this is an accessibility issue and which users it affects
2. Specific, actionable steps to fix this violation
3. If possible, a code example showing the corrected version

Respond in JSON format:
{{
  "explanation": "Detailed explanation of the accessibility issue and user impact",
  "fixSuggestion": "Specific, actionable steps to fix this issue",
  "codeExample": "Code example showing the fix (or null if not applicable)"
}}"""


def _format_counts(counts: dict[str, int]) -> str:
    return ", ".join(f"{key.upper()}: {value} violations" for key, value in counts.items())


def build_summary_prompt(scan: ScanResult, url: str, title: str | None, top_k: int = 10) -> str:
    """Build the whole-audit summary prompt from aggregate statistics."""
    top = sort_by_severity(scan.violations)[:top_k]
    top_lines = "\n".join(f"- {v.id} ({v.impact}): {v.description}" for v in top) or "- None"
    categories = category_breakdown(scan.violations)
    category_text = ", ".join(f"{name}: {count}" for name, count in categories.items())

    return f"""Analyze this comprehensive accessibility audit and provide an executive summary:

WEBSITE INFORMATION:
- Title: {title or "Untitled"}
- URL: {url}
- Analysis Coverage: WCAG 2.0/2.1/2.2 (A, AA), Section 508, Best Practices

AUDIT RESULTS:
- Total Violations: {len(scan.violations)}
- Total Passes: {len(scan.passes)}
- Incomplete/Review Items: {len(scan.incomplete)}
- Inapplicable Rules: {len(scan.inapplicable)}

TOP VIOLATIONS BY IMPACT:
{top_lines}

WCAG COMPLIANCE ANALYSIS:
{_format_counts(wcag_compliance_breakdown(scan.violations))}

CATEGORY BREAKDOWN:
{category_text or "No major category issues found"}

Please provide:
1. An executive summary of the website's accessibility status
2. Assessment of WCAG compliance levels
3. Priority recommendations (top 5-8) focusing on the most critical issues
4. Overall accessibility maturity assessment

Respond in JSON format:
{{
  "summary": "Executive summary including WCAG compliance assessment and overall accessibility status",
  "priorityRecommendations": [
    {{
      "title": "Clear, actionable recommendation title",
      "description": "Detailed recommendation with implementation guidance",
      "impact": "critical|serious|moderate|minor",
      "effort": "low|medium|high"
    }}
  ]
}}"""


def strip_code_fences(text: str) -> str:
    """Remove a leading ```/```json marker and a trailing ``` marker."""
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text, count=1), count=1).strip()


def _decode_object(text: str) -> dict | None:
    try:
        data = json.loads(strip_code_fences(text))
    except (json.JSONDecodeError, TypeError):
        return None
    return data if isinstance(data, dict) else None


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.lower() in {"null", "none", "n/a"}:
        return None
    return text


def parse_violation_analysis(text: str, max_raw_length: int = 300) -> ViolationAnalysis:
    """Decode a per-violation response.

    Strict JSON first; otherwise the raw text (truncated) becomes the
    explanation and the other fields get placeholders.
    """
    data = _decode_object(text)
    if data is None:
        logger.warning("Generation response was not valid JSON; using raw text")
        raw = text.strip()
        if len(raw) > max_raw_length:
            raw = raw[:max_raw_length] + "..."
        return ViolationAnalysis(
            explanation=raw or MISSING_EXPLANATION,
            fix_suggestion=FALLBACK_FIX_SUGGESTION,
            code_example=None,
        )

    return ViolationAnalysis(
        explanation=_optional_text(data.get("explanation")) or MISSING_EXPLANATION,
        fix_suggestion=_optional_text(data.get("fixSuggestion") or data.get("fix_suggestion")) or MISSING_FIX_SUGGESTION,
        code_example=_optional_text(data.get("codeExample") or data.get("code_example")),
    )


def parse_summary(text: str) -> AuditSummary:
    """Decode the summary response, dropping malformed recommendations."""
    data = _decode_object(text)
    if data is None:
        logger.warning("Summary response was not valid JSON; using generic summary")
        return AuditSummary(summary=SUMMARY_UNPARSEABLE)

    raw_items = data.get("priorityRecommendations") or data.get("priority_recommendations") or []
    recommendations: list[Recommendation] = []
    if isinstance(raw_items, list):
        for item in raw_items:
            if not isinstance(item, dict):
                continue
            try:
                recommendations.append(Recommendation.model_validate(item))
            except PydanticValidationError:
                logger.warning("Dropping malformed recommendation: %r", item)

    return AuditSummary(
        summary=_optional_text(data.get("summary")) or SUMMARY_MISSING,
        priority_recommendations=recommendations,
    )
