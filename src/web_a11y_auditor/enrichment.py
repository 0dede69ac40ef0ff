"""Violation enrichment: one generation call per violation, run concurrently.

All calls start together and are joined with an all-settle gather. Each call
has its own timeout and a failing call is replaced by fixed fallback content,
so no item can delay, fail, or reorder its siblings.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Protocol

from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.models import AxeRuleResult, Violation, ViolationAnalysis
from web_a11y_auditor.prompts import (
    FALLBACK_EXPLANATION,
    FALLBACK_FIX_SUGGESTION,
    VIOLATION_SYSTEM_PROMPT,
    build_violation_prompt,
    parse_violation_analysis,
)
from web_a11y_auditor.wcag import extract_wcag_criteria, extract_wcag_level

logger = logging.getLogger(__name__)

FALLBACK_ANALYSIS = ViolationAnalysis(
    explanation=FALLBACK_EXPLANATION,
    fix_suggestion=FALLBACK_FIX_SUGGESTION,
    code_example=None,
)


class TextGenerator(Protocol):
    """Anything that can turn a prompt into text."""

    async def generate(self, prompt: str, system_prompt: str, max_tokens: int, timeout: float) -> str: ...


class ClosableGenerator(TextGenerator, Protocol):
    """A TextGenerator owned by one audit and released when the audit ends."""

    def close(self) -> None: ...


GeneratorFactory = Callable[[AuditConfig], ClosableGenerator]


class ViolationEnricher:
    """Produces explanation, fix suggestion and code example per violation."""

    def __init__(self, generator: TextGenerator, config: AuditConfig) -> None:
        self.generator = generator
        self.timeout = config.enrichment_timeout_seconds
        self.max_tokens = config.violation_max_tokens
        self.max_raw_length = config.raw_explanation_max_length

    async def analyze(self, violation: AxeRuleResult, url: str) -> ViolationAnalysis:
        """Analyze one violation, raising on service failure or timeout."""
        prompt = build_violation_prompt(violation, url)
        text = await asyncio.wait_for(
            self.generator.generate(prompt, VIOLATION_SYSTEM_PROMPT, self.max_tokens, self.timeout),
            timeout=self.timeout,
        )
        return parse_violation_analysis(text, self.max_raw_length)

    async def _analyze_or_fallback(self, index: int, violation: AxeRuleResult, url: str) -> tuple[int, ViolationAnalysis]:
        try:
            return index, await self.analyze(violation, url)
        except TimeoutError:
            logger.warning("Analysis of %s timed out after %.1fs", violation.id, self.timeout)
        except Exception as exc:
            logger.warning("Analysis of %s failed: %s", violation.id, exc)
        return index, FALLBACK_ANALYSIS

    async def enrich(self, violations: Sequence[AxeRuleResult], url: str) -> list[ViolationAnalysis]:
        """Analyze every violation concurrently.

        Args:
            violations: Violations to analyze, already severity-sorted and capped.
            url: The audited page URL, included in each prompt.

        Returns:
            One analysis per violation; result[i] belongs to violations[i].
        """
        if not violations:
            return []
        logger.info("Analyzing %d violations concurrently", len(violations))
        settled = await asyncio.gather(
            *(self._analyze_or_fallback(i, v, url) for i, v in enumerate(violations)),
        )
        results: list[ViolationAnalysis | None] = [None] * len(violations)
        for index, analysis in settled:
            results[index] = analysis
        return [analysis or FALLBACK_ANALYSIS for analysis in results]


def build_violation(
    audit_id: str,
    rule: AxeRuleResult,
    analysis: ViolationAnalysis,
    html_max_length: int = 500,
) -> Violation:
    """Combine a rule violation and its analysis into a persistable row."""
    first_node = rule.nodes[0] if rule.nodes else None
    target = list(first_node.target) if first_node else []
    html = first_node.html[:html_max_length] if first_node else ""
    return Violation(
        audit_id=audit_id,
        violation_id=rule.id,
        description=rule.description,
        impact=rule.impact,
        help_url=rule.help_url,
        wcag_criteria=extract_wcag_criteria(rule.tags),
        wcag_level=extract_wcag_level(rule.tags),
        selector=", ".join(target),
        html=html,
        target=target,
        ai_explanation=analysis.explanation,
        fix_suggestion=analysis.fix_suggestion,
        code_example=analysis.code_example,
    )
