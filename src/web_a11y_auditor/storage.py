"""JSON-based file storage for audit records and violations.

Persists audits to the local filesystem under the configured
audit_storage_path. Writes are last-write-wins; each write replaces the file
atomically so a reader never sees a half-written record.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from web_a11y_auditor.exceptions import AuditNotFoundError, AuditPersistenceError
from web_a11y_auditor.models import AuditRecord, AuditStatus, Violation

logger = logging.getLogger(__name__)

_VIOLATION_LIST = TypeAdapter(list[Violation])


class AuditStorage:
    """Manages persistence of audit records and their violations."""

    def __init__(self, base_path: str) -> None:
        self.base_path = Path(base_path)
        self.audits_path = self.base_path / "audits"
        self.violations_path = self.base_path / "violations"
        self.audits_path.mkdir(parents=True, exist_ok=True)
        self.violations_path.mkdir(parents=True, exist_ok=True)

    def _write(self, file_path: Path, content: str | bytes) -> None:
        tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
        try:
            if isinstance(content, bytes):
                tmp_path.write_bytes(content)
            else:
                tmp_path.write_text(content)
            os.replace(tmp_path, file_path)
        except OSError as exc:
            raise AuditPersistenceError(f"Failed to write {file_path.name}: {exc}") from exc

    def create_audit(self, url: str) -> AuditRecord:
        """Create a new Pending audit record for a URL.

        Args:
            url: The URL to be audited.

        Returns:
            The stored AuditRecord.
        """
        record = AuditRecord(url=url)
        self.save(record)
        logger.info("Created audit %s for %s", record.id, url)
        return record

    def save(self, record: AuditRecord) -> str:
        """Persist a whole audit record, replacing any previous version."""
        self._write(self.audits_path / f"{record.id}.json", record.model_dump_json(indent=2))
        return record.id

    def read(self, audit_id: str) -> AuditRecord:
        """Load an audit record by ID.

        Raises:
            AuditNotFoundError: If the audit record does not exist.
            AuditPersistenceError: If the stored record cannot be read.
        """
        file_path = self.audits_path / f"{audit_id}.json"
        if not file_path.exists():
            raise AuditNotFoundError(f"Audit record not found: {audit_id}")
        try:
            return AuditRecord.model_validate_json(file_path.read_text())
        except (OSError, PydanticValidationError) as exc:
            raise AuditPersistenceError(f"Failed to read audit {audit_id}: {exc}") from exc

    def update(self, audit_id: str, **fields: object) -> AuditRecord:
        """Apply field updates to a stored audit record.

        Args:
            audit_id: The UUID of the audit record.
            **fields: AuditRecord fields to overwrite.

        Returns:
            The updated AuditRecord.
        """
        record = self.read(audit_id)
        data = record.model_dump()
        data.update(fields)
        data["updated_at"] = datetime.now(UTC)
        try:
            updated = AuditRecord.model_validate(data)
        except PydanticValidationError as exc:
            raise AuditPersistenceError(f"Invalid update for audit {audit_id}: {exc}") from exc
        self.save(updated)
        return updated

    def bulk_insert_violations(self, audit_id: str, violations: Sequence[Violation]) -> int:
        """Store all violations of an audit in one write.

        Returns:
            The number of violations written.
        """
        payload = _VIOLATION_LIST.dump_json(list(violations), indent=2)
        self._write(self.violations_path / f"{audit_id}.json", payload)
        logger.info("Saved %d violations for audit %s", len(violations), audit_id)
        return len(violations)

    def load_violations(self, audit_id: str) -> list[Violation]:
        """Load the violations of an audit, in stored order. Missing means none."""
        file_path = self.violations_path / f"{audit_id}.json"
        if not file_path.exists():
            return []
        try:
            return _VIOLATION_LIST.validate_json(file_path.read_text())
        except (OSError, PydanticValidationError) as exc:
            raise AuditPersistenceError(f"Failed to read violations for {audit_id}: {exc}") from exc

    def delete_violations(self, audit_id: str) -> None:
        file_path = self.violations_path / f"{audit_id}.json"
        try:
            file_path.unlink(missing_ok=True)
        except OSError as exc:
            raise AuditPersistenceError(f"Failed to delete violations for {audit_id}: {exc}") from exc

    def list_audits(self, status: AuditStatus | None = None, limit: int = 50) -> list[dict]:
        """List stored audits with optional status filtering.

        Args:
            status: Filter by status (pending, processing, completed, failed).
            limit: Maximum number of results to return.

        Returns:
            List of summary dicts, newest first.
        """
        results: list[dict] = []
        files = sorted(self.audits_path.glob("*.json"), key=lambda p: p.stat().st_mtime, reverse=True)

        for file_path in files:
            if len(results) >= limit:
                break
            try:
                data = json.loads(file_path.read_text())
                if status and data.get("status") != status:
                    continue
                results.append({
                    "id": data["id"],
                    "url": data["url"],
                    "title": data.get("title"),
                    "status": data.get("status"),
                    "overall_score": data.get("overall_score"),
                    "total_violations": data.get("total_violations"),
                    "created_at": data.get("created_at"),
                    "processing_completed_at": data.get("processing_completed_at"),
                })
            except (json.JSONDecodeError, KeyError) as exc:
                logger.warning("Skipping corrupt audit file %s: %s", file_path, exc)
                continue

        return results
