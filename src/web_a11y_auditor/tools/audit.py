"""Audit trigger and inspection MCP tools.

Starts the pipeline for a new URL or an existing Pending audit, and reads
back audit records and their enriched violations.
"""

from __future__ import annotations

from web_a11y_auditor.engine import AuditEngine
from web_a11y_auditor.storage import AuditStorage


async def run_url_audit(engine: AuditEngine, url: str) -> dict:
    """Create a Pending audit for a URL and run it to a terminal state.

    Args:
        engine: Configured audit engine.
        url: The page to audit.

    Returns:
        Dict representation of the terminal AuditRecord.
    """
    record = await engine.run_url_audit(url)
    return record.model_dump(mode="json")


async def run_existing_audit(engine: AuditEngine, audit_id: str) -> dict:
    """Run the pipeline for an audit record that is already Pending."""
    record = await engine.process_audit(audit_id)
    return record.model_dump(mode="json")


def get_audit_status(storage: AuditStorage, audit_id: str) -> dict:
    """Return an audit record with the number of stored violations."""
    record = storage.read(audit_id)
    data = record.model_dump(mode="json")
    data["stored_violations"] = len(storage.load_violations(audit_id))
    return data


def get_audit_violations(storage: AuditStorage, audit_id: str, impact: str | None = None) -> dict:
    """Return the enriched violations of an audit, optionally filtered by impact.

    Args:
        storage: Audit storage instance.
        audit_id: The audit to read.
        impact: Optional impact filter (critical, serious, moderate, minor).

    Returns:
        Dict with the audit id, the filter, and the violations in stored order.
    """
    storage.read(audit_id)
    violations = storage.load_violations(audit_id)
    if impact:
        violations = [v for v in violations if v.impact == impact]
    return {
        "audit_id": audit_id,
        "filter": impact,
        "total_returned": len(violations),
        "violations": [v.model_dump(mode="json") for v in violations],
    }
