"""Scan rule listing MCP tool.

Reports which accessibility rules and compliance tags every scan runs with.
"""

from __future__ import annotations

from web_a11y_auditor.scanner import DEFAULT_RULE_CONFIG, RuleConfig


def list_scan_rules(rule_config: RuleConfig = DEFAULT_RULE_CONFIG, tag_prefix: str | None = None) -> dict:
    """List the enabled rules and the compliance tags of a rule configuration.

    Args:
        rule_config: The configuration to describe.
        tag_prefix: Optional prefix to filter tags by (e.g. 'wcag', 'cat.').

    Returns:
        Dict with rule ids, tags and counts.
    """
    tags = [t for t in rule_config.tags if not tag_prefix or t.startswith(tag_prefix)]
    return {
        "rules": list(rule_config.rules),
        "rule_count": len(rule_config.rules),
        "tags": tags,
        "tag_count": len(tags),
        "filter": tag_prefix,
    }
