"""Core audit engine that drives one audit from Pending to a terminal state.

The AuditEngine validates the target, scans it in a disposable browser
session, scores the result, enriches violations and summarizes the run, then
persists everything. Every exit path ends in Completed or Failed.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime

from web_a11y_auditor.browser import SessionFactory, launch
from web_a11y_auditor.client import GenerationClient
from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.enrichment import GeneratorFactory, ViolationEnricher, build_violation
from web_a11y_auditor.exceptions import AuditError, AuditPersistenceError, AuditStateError
from web_a11y_auditor.models import AuditRecord, AuditSummary, AxeRuleResult, ScanResult, ViolationAnalysis
from web_a11y_auditor.scanner import DEFAULT_RULE_CONFIG, AccessibilityScanner
from web_a11y_auditor.scoring import AccessibilityScorer, ScoringWeights
from web_a11y_auditor.storage import AuditStorage
from web_a11y_auditor.summary import SummaryGenerator
from web_a11y_auditor.validation import UrlValidator
from web_a11y_auditor.wcag import count_by_severity, sort_by_severity

logger = logging.getLogger(__name__)


class AuditEngine:
    """Runs the audit pipeline and owns every status transition."""

    def __init__(
        self,
        config: AuditConfig,
        storage: AuditStorage,
        generator_factory: GeneratorFactory | None = None,
        session_factory: SessionFactory | None = None,
        scanner: AccessibilityScanner | None = None,
        validator: UrlValidator | None = None,
        scorer: AccessibilityScorer | None = None,
    ) -> None:
        self.config = config
        self.storage = storage
        self.session_factory = session_factory or launch
        self.scanner = scanner or AccessibilityScanner(DEFAULT_RULE_CONFIG, config.axe_script_url)
        self.validator = validator or UrlValidator()
        self.scorer = scorer or AccessibilityScorer(ScoringWeights.from_config(config))
        self.generator_factory = generator_factory or GenerationClient

    async def run_url_audit(self, url: str) -> AuditRecord:
        """Create a Pending audit for a URL and process it."""
        record = self.storage.create_audit(url)
        return await self.process_audit(record.id)

    async def process_audit(self, audit_id: str) -> AuditRecord:
        """Process a Pending audit to completion or failure.

        Args:
            audit_id: ID of an audit record in Pending state.

        Returns:
            The audit record in its terminal state.

        Raises:
            AuditNotFoundError: If the audit does not exist.
            AuditStateError: If the audit is not Pending.
            AuditPersistenceError: If not even the Failed status can be stored.
        """
        record = self.storage.read(audit_id)
        if record.status != "pending":
            raise AuditStateError(
                f"Audit {audit_id} is {record.status}; only pending audits can be processed",
                details={"status": record.status},
            )

        logger.info("Starting audit %s for %s", audit_id, record.url)
        record = self.storage.update(
            audit_id,
            status="processing",
            processing_started_at=datetime.now(UTC),
        )

        try:
            return await self._run(record)
        except AuditError as exc:
            logger.error("Audit %s failed: %s", audit_id, exc)
            return self._fail(audit_id, str(exc))
        except Exception as exc:
            logger.exception("Audit %s failed unexpectedly", audit_id)
            return self._fail(audit_id, str(exc) or exc.__class__.__name__)

    async def _run(self, record: AuditRecord) -> AuditRecord:
        url = await asyncio.to_thread(self.validator.validate, record.url)
        title, scan = await self._scan_page(url)

        counts = count_by_severity(scan.violations)
        score = self.scorer.calculate_score(counts, len(scan.passes), len(scan.incomplete))
        logger.info("Audit %s scored %d/100", record.id, score.overall_score)

        selected = sort_by_severity(scan.violations)[: self.config.max_violations_to_analyze]
        analyses, summary = await self._enrich_and_summarize(selected, scan, url, title)

        violations = [
            build_violation(record.id, rule, analysis, self.config.html_snippet_max_length)
            for rule, analysis in zip(selected, analyses, strict=True)
        ]
        self.storage.bulk_insert_violations(record.id, violations)

        completed = self.storage.update(
            record.id,
            title=title,
            status="completed",
            total_violations=len(scan.violations),
            critical_count=counts.critical,
            serious_count=counts.serious,
            moderate_count=counts.moderate,
            minor_count=counts.minor,
            overall_score=score.overall_score,
            ai_summary=summary.summary,
            priority_recommendations=summary.priority_recommendations,
            error_message=None,
            processing_completed_at=datetime.now(UTC),
        )
        logger.info("Audit %s completed with %d violations", record.id, len(scan.violations))
        return completed

    async def _scan_page(self, url: str) -> tuple[str, ScanResult]:
        """Load the page in a fresh browser and scan it; the browser is always closed."""
        session = await self.session_factory(self.config)
        try:
            page = await session.navigate(url, self.config.navigation_timeout_ms)
            title = await page.title()
            scan = await self.scanner.scan(page)
        finally:
            await session.close()
        return title, scan

    async def _enrich_and_summarize(
        self,
        selected: list[AxeRuleResult],
        scan: ScanResult,
        url: str,
        title: str,
    ) -> tuple[list[ViolationAnalysis], AuditSummary]:
        """Run enrichment and the summary on a generator owned by this audit alone."""
        generator = self.generator_factory(self.config)
        try:
            analyses, summary = await asyncio.gather(
                ViolationEnricher(generator, self.config).enrich(selected, url),
                SummaryGenerator(generator, self.config).summarize(scan, url, title),
            )
        finally:
            generator.close()
        return analyses, summary

    def _fail(self, audit_id: str, message: str) -> AuditRecord:
        try:
            self.storage.delete_violations(audit_id)
            return self.storage.update(
                audit_id,
                status="failed",
                error_message=message or "Unknown error",
                processing_completed_at=datetime.now(UTC),
            )
        except AuditError as exc:
            raise AuditPersistenceError(f"Could not record failure of audit {audit_id}: {exc}") from exc
