"""Custom exception hierarchy for the Web Accessibility Auditor.

Fatal pipeline failures (validation, navigation, scan, persistence) and
non-fatal generation failures are mapped to typed exceptions so the audit
engine can decide which ones abort a run and which ones degrade gracefully.
"""

from __future__ import annotations


class AuditError(Exception):
    """Base exception for all audit-related errors."""

    def __init__(self, message: str, details: dict | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class AuditValidationError(AuditError):
    """Raised when a target URL is malformed or points at a non-public network."""


class AuditBrowserError(AuditError):
    """Raised when the headless browser cannot be launched or driven."""


class AuditNavigationError(AuditError):
    """Raised when the target page fails to load or times out."""

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.status_code = status_code


class AuditScanError(AuditError):
    """Raised when the accessibility rule engine fails against the loaded page."""


class AuditPersistenceError(AuditError):
    """Raised when audit or violation records cannot be read or written."""


class AuditNotFoundError(AuditError):
    """Raised when a requested audit record does not exist."""


class AuditStateError(AuditError):
    """Raised when an audit is not in a state that allows the requested transition."""


class AuditEnrichmentError(AuditError):
    """Base for generation service failures; never fatal to an audit."""


class AuditConnectionError(AuditEnrichmentError):
    """Raised when the generation service is unreachable."""


class AuditAuthError(AuditEnrichmentError):
    """Raised when the generation service rejects the API key (401/403)."""


class AuditRateLimitError(AuditEnrichmentError):
    """Raised when the generation service returns a rate-limit response (429)."""

    def __init__(self, message: str, retry_after: int | None = None, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.retry_after = retry_after


class AuditAPIError(AuditEnrichmentError):
    """Raised for unexpected generation service errors (5xx, malformed response, etc)."""

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None) -> None:
        super().__init__(message, details)
        self.status_code = status_code
