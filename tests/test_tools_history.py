"""Tests for the audit history tool."""

from __future__ import annotations

from web_a11y_auditor.storage import AuditStorage
from web_a11y_auditor.tools.history import get_audit_history


class TestGetAuditHistory:
    def test_empty_history(self, audit_storage: AuditStorage) -> None:
        result = get_audit_history(audit_storage)
        assert result["total_returned"] == 0
        assert result["audits"] == []

    def test_returns_audits(self, audit_storage: AuditStorage) -> None:
        for i in range(3):
            audit_storage.create_audit(f"https://{i}.example.com/")
        result = get_audit_history(audit_storage)
        assert result["total_returned"] == 3

    def test_limit(self, audit_storage: AuditStorage) -> None:
        for i in range(5):
            audit_storage.create_audit(f"https://{i}.example.com/")
        result = get_audit_history(audit_storage, limit=2)
        assert result["total_returned"] == 2

    def test_filter_by_status(self, audit_storage: AuditStorage) -> None:
        failed = audit_storage.create_audit("https://a.example.com/")
        audit_storage.create_audit("https://b.example.com/")
        audit_storage.update(failed.id, status="failed", error_message="Failed to load page: 404 Not Found")
        result = get_audit_history(audit_storage, status="failed")
        assert result["total_returned"] == 1
        assert result["filter"] == "failed"
        assert result["audits"][0]["url"] == "https://a.example.com/"

    def test_default_limit_is_ten(self, audit_storage: AuditStorage) -> None:
        for i in range(12):
            audit_storage.create_audit(f"https://{i}.example.com/")
        assert get_audit_history(audit_storage)["total_returned"] == 10
