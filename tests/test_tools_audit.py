"""Tests for the audit trigger and inspection tools."""

from __future__ import annotations

import pytest
from fakes import FakePage, FakeSession, make_axe_result, make_rule

from web_a11y_auditor.engine import AuditEngine
from web_a11y_auditor.exceptions import AuditNotFoundError, AuditStateError
from web_a11y_auditor.storage import AuditStorage
from web_a11y_auditor.tools.audit import (
    get_audit_status,
    get_audit_violations,
    run_existing_audit,
    run_url_audit,
)


@pytest.fixture
def scanned_page(fake_session: FakeSession) -> FakePage:
    fake_session.page = FakePage(
        make_axe_result(
            [make_rule("image-alt", "critical"), make_rule("label", "serious"), make_rule("region", "moderate")],
            passes=10,
        )
    )
    return fake_session.page


class TestRunUrlAudit:
    @pytest.mark.asyncio
    async def test_returns_json_ready_record(self, audit_engine: AuditEngine, scanned_page: FakePage) -> None:
        result = await run_url_audit(audit_engine, "https://example.com/")
        assert result["status"] == "completed"
        assert result["total_violations"] == 3
        assert isinstance(result["created_at"], str)
        assert result["priority_recommendations"][0]["impact"] == "critical"

    @pytest.mark.asyncio
    async def test_failed_audit_is_returned_not_raised(self, audit_engine: AuditEngine) -> None:
        result = await run_url_audit(audit_engine, "http://192.168.1.1/")
        assert result["status"] == "failed"
        assert "private/internal network" in result["error_message"]


class TestRunExistingAudit:
    @pytest.mark.asyncio
    async def test_pending(self, audit_engine: AuditEngine, audit_storage: AuditStorage) -> None:
        record = audit_storage.create_audit("https://example.com/")
        result = await run_existing_audit(audit_engine, record.id)
        assert result["id"] == record.id
        assert result["status"] == "completed"

    @pytest.mark.asyncio
    async def test_not_pending(self, audit_engine: AuditEngine, audit_storage: AuditStorage) -> None:
        record = audit_storage.create_audit("https://example.com/")
        audit_storage.update(record.id, status="failed")
        with pytest.raises(AuditStateError):
            await run_existing_audit(audit_engine, record.id)


class TestGetAuditStatus:
    @pytest.mark.asyncio
    async def test_completed(self, audit_engine: AuditEngine, audit_storage: AuditStorage, scanned_page: FakePage) -> None:
        record = await audit_engine.run_url_audit("https://example.com/")
        status = get_audit_status(audit_storage, record.id)
        assert status["status"] == "completed"
        assert status["stored_violations"] == 3

    def test_pending(self, audit_storage: AuditStorage) -> None:
        record = audit_storage.create_audit("https://example.com/")
        status = get_audit_status(audit_storage, record.id)
        assert status["status"] == "pending"
        assert status["stored_violations"] == 0

    def test_missing(self, audit_storage: AuditStorage) -> None:
        with pytest.raises(AuditNotFoundError):
            get_audit_status(audit_storage, "missing")


class TestGetAuditViolations:
    @pytest.mark.asyncio
    async def test_all_and_filtered(self, audit_engine: AuditEngine, audit_storage: AuditStorage, scanned_page: FakePage) -> None:
        record = await audit_engine.run_url_audit("https://example.com/")

        everything = get_audit_violations(audit_storage, record.id)
        assert everything["total_returned"] == 3
        assert [v["violation_id"] for v in everything["violations"]] == ["image-alt", "label", "region"]
        assert everything["filter"] is None

        serious = get_audit_violations(audit_storage, record.id, impact="serious")
        assert serious["total_returned"] == 1
        assert serious["violations"][0]["violation_id"] == "label"
        assert serious["violations"][0]["ai_explanation"] == "Explanation for label"

    def test_missing_audit(self, audit_storage: AuditStorage) -> None:
        with pytest.raises(AuditNotFoundError):
            get_audit_violations(audit_storage, "missing")
