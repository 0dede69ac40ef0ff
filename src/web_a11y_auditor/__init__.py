"""Web Accessibility Auditor - headless-browser accessibility audits with generated remediation guidance."""

__version__ = "0.1.0"

from web_a11y_auditor.config import AuditConfig, get_config
from web_a11y_auditor.exceptions import (
    AuditAPIError,
    AuditAuthError,
    AuditBrowserError,
    AuditConnectionError,
    AuditEnrichmentError,
    AuditError,
    AuditNavigationError,
    AuditNotFoundError,
    AuditPersistenceError,
    AuditRateLimitError,
    AuditScanError,
    AuditStateError,
    AuditValidationError,
)
from web_a11y_auditor.models import (
    AccessibilityScore,
    AuditRecord,
    AuditStatus,
    AuditSummary,
    AxeNode,
    AxeRuleResult,
    Impact,
    Recommendation,
    ScanResult,
    Violation,
    ViolationAnalysis,
    ViolationCounts,
    WcagCriterion,
    WcagLevel,
)
from web_a11y_auditor.scoring import AccessibilityScorer, ScoringWeights, score

__all__ = [
    "__version__",
    "AuditConfig",
    "get_config",
    "AuditError",
    "AuditValidationError",
    "AuditBrowserError",
    "AuditNavigationError",
    "AuditScanError",
    "AuditPersistenceError",
    "AuditNotFoundError",
    "AuditStateError",
    "AuditEnrichmentError",
    "AuditConnectionError",
    "AuditAuthError",
    "AuditRateLimitError",
    "AuditAPIError",
    "Impact",
    "WcagLevel",
    "AuditStatus",
    "AxeNode",
    "AxeRuleResult",
    "ScanResult",
    "ViolationCounts",
    "WcagCriterion",
    "ViolationAnalysis",
    "Recommendation",
    "AuditSummary",
    "AccessibilityScore",
    "AuditRecord",
    "Violation",
    "AccessibilityScorer",
    "ScoringWeights",
    "score",
]
