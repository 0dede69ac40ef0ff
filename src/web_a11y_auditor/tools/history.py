"""Audit history retrieval MCP tool."""

from __future__ import annotations

from web_a11y_auditor.models import AuditStatus
from web_a11y_auditor.storage import AuditStorage


def get_audit_history(storage: AuditStorage, status: AuditStatus | None = None, limit: int = 10) -> dict:
    """Retrieve a list of past audits.

    Args:
        storage: Audit storage instance.
        status: Optional filter by audit status.
        limit: Maximum number of results to return.

    Returns:
        Dict with list of audit summaries.
    """
    results = storage.list_audits(status=status, limit=limit)
    return {
        "audits": results,
        "total_returned": len(results),
        "filter": status,
    }
