"""FastMCP server entry point for the Web Accessibility Auditor.

Registers all MCP tools and starts the server. Each audit loads the target
page in its own headless browser, scans it with axe-core, and enriches the
findings through a text-generation service.
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from web_a11y_auditor.config import AuditConfig, get_config
from web_a11y_auditor.engine import AuditEngine
from web_a11y_auditor.exceptions import AuditError
from web_a11y_auditor.storage import AuditStorage
from web_a11y_auditor.tools.audit import (
    get_audit_status,
    get_audit_violations,
    run_existing_audit,
    run_url_audit,
)
from web_a11y_auditor.tools.compliance import list_scan_rules
from web_a11y_auditor.tools.history import get_audit_history

logger = logging.getLogger(__name__)

mcp = FastMCP("web-a11y-auditor")

# Module-level singletons initialized on first tool call
_config: AuditConfig | None = None
_storage: AuditStorage | None = None
_engine: AuditEngine | None = None


def _get_dependencies() -> tuple[AuditConfig, AuditStorage, AuditEngine]:
    """Lazily initialize and return the shared config, storage, and engine."""
    global _config, _storage, _engine  # noqa: PLW0603
    if _config is None:
        _config = get_config()
        _storage = AuditStorage(_config.audit_storage_path)
        _engine = AuditEngine(_config, _storage)
    return _config, _storage, _engine  # type: ignore[return-value]


@mcp.tool()
async def audit_url(url: str = "") -> dict:
    """Audit a public web page for accessibility issues and return the finished audit."""
    if not url:
        return {"status": "error", "message": "url is required"}
    _, _, engine = _get_dependencies()
    try:
        return await run_url_audit(engine, url)
    except AuditError as exc:
        return {"status": "error", "message": str(exc)}


@mcp.tool()
async def audit_run(audit_id: str = "") -> dict:
    """Run the audit pipeline for an existing pending audit record."""
    if not audit_id:
        return {"status": "error", "message": "audit_id is required"}
    _, _, engine = _get_dependencies()
    try:
        return await run_existing_audit(engine, audit_id)
    except AuditError as exc:
        return {"status": "error", "message": str(exc)}


@mcp.tool()
def audit_status(audit_id: str = "") -> dict:
    """Get the current state, score and summary of an audit."""
    if not audit_id:
        return {"status": "error", "message": "audit_id is required"}
    _, storage, _ = _get_dependencies()
    try:
        return get_audit_status(storage, audit_id)
    except AuditError as exc:
        return {"status": "error", "message": str(exc)}


@mcp.tool()
def audit_violations(audit_id: str = "", impact: str | None = None) -> dict:
    """List the enriched violations of an audit, optionally filtered by impact."""
    if not audit_id:
        return {"status": "error", "message": "audit_id is required"}
    _, storage, _ = _get_dependencies()
    try:
        return get_audit_violations(storage, audit_id, impact=impact)
    except AuditError as exc:
        return {"status": "error", "message": str(exc)}


@mcp.tool()
def audit_history(status: str | None = None, limit: int = 10) -> dict:
    """Retrieve past audits, newest first."""
    _, storage, _ = _get_dependencies()
    return get_audit_history(storage, status=status, limit=limit)  # type: ignore[arg-type]


@mcp.tool()
def scan_rules(tag_prefix: str | None = None) -> dict:
    """List the accessibility rules and compliance tags every scan runs with."""
    return list_scan_rules(tag_prefix=tag_prefix)


@mcp.tool()
def health_check() -> dict:
    """Verify the auditor server is running and its storage is usable."""
    try:
        config, storage, _ = _get_dependencies()
        storage.list_audits(limit=1)
        return {"status": "healthy", "storage": config.audit_storage_path, "model": config.generation_model}
    except Exception as exc:
        return {"status": "unhealthy", "error": str(exc)}


def main() -> None:
    """Entry point for the web-a11y-auditor MCP server."""
    config = get_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    logger.info("Starting web-a11y-auditor MCP server")
    mcp.run()
