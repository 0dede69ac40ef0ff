"""Executive summary and priority recommendations for a whole audit."""

from __future__ import annotations

import asyncio
import logging

from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.enrichment import TextGenerator
from web_a11y_auditor.models import AuditSummary, ScanResult
from web_a11y_auditor.prompts import (
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_UNAVAILABLE,
    build_summary_prompt,
    parse_summary,
)

logger = logging.getLogger(__name__)


class SummaryGenerator:
    """Makes one generation call over aggregate scan statistics."""

    def __init__(self, generator: TextGenerator, config: AuditConfig) -> None:
        self.generator = generator
        self.timeout = config.summary_timeout_seconds
        self.max_tokens = config.summary_max_tokens
        self.top_k = config.summary_top_violations

    async def summarize(self, scan: ScanResult, url: str, title: str | None) -> AuditSummary:
        """Generate the summary; any failure yields a generic summary with no recommendations."""
        prompt = build_summary_prompt(scan, url, title, top_k=self.top_k)
        try:
            text = await asyncio.wait_for(
                self.generator.generate(prompt, SUMMARY_SYSTEM_PROMPT, self.max_tokens, self.timeout),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.warning("Summary generation timed out after %.1fs", self.timeout)
            return AuditSummary(summary=SUMMARY_UNAVAILABLE)
        except Exception as exc:
            logger.warning("Summary generation failed: %s", exc)
            return AuditSummary(summary=SUMMARY_UNAVAILABLE)
        return parse_summary(text)
