"""Accessibility scanning with axe-core against a loaded page.

Every rule the auditor relies on is enabled explicitly so coverage does not
drift when the engine changes its defaults between releases.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from web_a11y_auditor.browser import PageHandle
from web_a11y_auditor.exceptions import AuditBrowserError, AuditScanError
from web_a11y_auditor.models import ScanResult
from web_a11y_auditor.wcag import CATEGORY_TAGS

logger = logging.getLogger(__name__)

DEFAULT_AXE_SCRIPT_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

RESULT_BUCKETS: tuple[str, ...] = ("violations", "passes", "incomplete", "inapplicable")

_AXE_PRESENT_JS = "() => typeof window.axe !== 'undefined' && typeof window.axe.run === 'function'"

_AXE_RUN_JS = """
async (options) => {
  if (!window.axe || !window.axe.run) {
    return { error: 'axe not loaded' };
  }
  try {
    const results = await window.axe.run(document, options);
    return JSON.parse(JSON.stringify(results));
  } catch (err) {
    return { error: String(err && err.message ? err.message : err) };
  }
}
"""


class RuleConfig(BaseModel):
    """Immutable set of rules and tags passed to every scan."""

    model_config = ConfigDict(frozen=True)

    rules: tuple[str, ...]
    tags: tuple[str, ...]

    def to_run_options(self) -> dict[str, Any]:
        return {
            "runOnly": {"type": "tag", "values": list(self.tags)},
            "rules": {rule_id: {"enabled": True} for rule_id in self.rules},
            "resultTypes": list(RESULT_BUCKETS),
        }


DEFAULT_RULE_CONFIG = RuleConfig(
    rules=(
        # Color and contrast
        "color-contrast",
        "color-contrast-enhanced",
        # Forms
        "label",
        "label-title-only",
        "form-field-multiple-labels",
        # Images
        "image-alt",
        "image-redundant-alt",
        "object-alt",
        "input-image-alt",
        # Headings and structure
        "heading-order",
        "empty-heading",
        "p-as-heading",
        # Links
        "link-name",
        "link-in-text-block",
        "identical-links-same-purpose",
        # Tables
        "table-fake-caption",
        "td-headers-attr",
        "th-has-data-cells",
        # ARIA name, role and state
        "aria-allowed-attr",
        "aria-command-name",
        "aria-hidden-body",
        "aria-hidden-focus",
        "aria-input-field-name",
        "aria-meter-name",
        "aria-progressbar-name",
        "aria-required-attr",
        "aria-required-children",
        "aria-required-parent",
        "aria-roledescription",
        "aria-roles",
        "aria-toggle-field-name",
        "aria-tooltip-name",
        "aria-valid-attr",
        "aria-valid-attr-value",
        # Keyboard
        "accesskeys",
        "focus-order-semantics",
        "tabindex",
        # Language
        "html-has-lang",
        "html-lang-valid",
        "valid-lang",
        # Duplicate ids
        "duplicate-id",
        "duplicate-id-active",
        "duplicate-id-aria",
        # Bypass blocks
        "bypass",
        "skip-link",
        # Media and timing
        "audio-caption",
        "video-caption",
        "no-autoplay-audio",
        # Meta
        "meta-refresh",
        "meta-viewport",
    ),
    tags=(
        "wcag2a",
        "wcag2aa",
        "wcag21a",
        "wcag21aa",
        "wcag22aa",
        "section508",
        "best-practice",
        *CATEGORY_TAGS,
    ),
)


class AccessibilityScanner:
    """Runs the rule engine against a page and returns the categorized result."""

    def __init__(
        self,
        rule_config: RuleConfig = DEFAULT_RULE_CONFIG,
        axe_script_url: str = DEFAULT_AXE_SCRIPT_URL,
    ) -> None:
        self.rule_config = rule_config
        self.axe_script_url = axe_script_url

    async def scan(self, page: PageHandle) -> ScanResult:
        """Analyze the loaded page.

        Args:
            page: A page that has finished loading and settling.

        Returns:
            ScanResult with violations, passes, incomplete and inapplicable rules.

        Raises:
            AuditScanError: If the engine cannot be injected or run, or
                returns a malformed result.
        """
        try:
            if not await page.evaluate(_AXE_PRESENT_JS):
                await page.add_script(self.axe_script_url)
            raw = await page.evaluate(_AXE_RUN_JS, self.rule_config.to_run_options())
        except AuditBrowserError as exc:
            raise AuditScanError(f"Accessibility scan failed: {exc}") from exc

        if not isinstance(raw, dict):
            raise AuditScanError("Accessibility scan returned an unexpected result")
        if raw.get("error"):
            raise AuditScanError(f"Accessibility scan failed: {raw['error']}")

        try:
            result = ScanResult.model_validate({bucket: raw.get(bucket) or [] for bucket in RESULT_BUCKETS})
        except PydanticValidationError as exc:
            raise AuditScanError("Accessibility scan returned a malformed result", details={"errors": exc.errors()}) from exc

        logger.info(
            "Scan complete: %d violations, %d passes, %d incomplete, %d inapplicable",
            len(result.violations),
            len(result.passes),
            len(result.incomplete),
            len(result.inapplicable),
        )
        return result
