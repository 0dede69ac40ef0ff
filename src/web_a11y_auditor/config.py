"""Configuration management for the Web Accessibility Auditor.

Loads settings from environment variables and .env files using pydantic-settings.
Provides a cached singleton via get_config().
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuditConfig(BaseSettings):
    """Application configuration sourced from environment variables."""

    # Generation service (OpenAI-compatible chat completions API)
    generation_api_key: str = Field(..., alias="GENERATION_API_KEY")
    generation_base_url: str = Field("https://openrouter.ai/api/v1", alias="GENERATION_BASE_URL")
    generation_model: str = Field("openai/gpt-4o", alias="GENERATION_MODEL")
    generation_temperature: float = Field(0.3, alias="GENERATION_TEMPERATURE")
    generation_max_retries: int = Field(1, alias="GENERATION_MAX_RETRIES")
    generation_app_url: str = Field("http://localhost:3000", alias="GENERATION_APP_URL")
    generation_app_title: str = Field("Accessibility Audit Helper", alias="GENERATION_APP_TITLE")
    violation_max_tokens: int = Field(1200, alias="VIOLATION_MAX_TOKENS")
    summary_max_tokens: int = Field(2000, alias="SUMMARY_MAX_TOKENS")

    # Browser session
    browser_executable_path: str | None = Field(None, alias="BROWSER_EXECUTABLE_PATH")
    browser_headless: bool = Field(True, alias="BROWSER_HEADLESS")
    browser_serverless: bool = Field(False, alias="BROWSER_SERVERLESS")
    navigation_timeout_ms: int = Field(30000, alias="NAVIGATION_TIMEOUT_MS")
    navigation_wait_until: str = Field("networkidle", alias="NAVIGATION_WAIT_UNTIL")
    settle_delay_seconds: float = Field(3.0, alias="SETTLE_DELAY_SECONDS")
    viewport_width: int = Field(1200, alias="VIEWPORT_WIDTH")
    viewport_height: int = Field(800, alias="VIEWPORT_HEIGHT")
    axe_script_url: str = Field(
        "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js",
        alias="AXE_SCRIPT_URL",
    )

    # Enrichment and summary
    max_violations_to_analyze: int = Field(25, alias="MAX_VIOLATIONS_TO_ANALYZE")
    enrichment_timeout_seconds: float = Field(20.0, alias="ENRICHMENT_TIMEOUT_SECONDS")
    summary_timeout_seconds: float = Field(20.0, alias="SUMMARY_TIMEOUT_SECONDS")
    summary_top_violations: int = Field(10, alias="SUMMARY_TOP_VIOLATIONS")
    html_snippet_max_length: int = Field(500, alias="HTML_SNIPPET_MAX_LENGTH")
    raw_explanation_max_length: int = Field(300, alias="RAW_EXPLANATION_MAX_LENGTH")

    # Scoring
    score_weight_critical: float = Field(25, alias="SCORE_WEIGHT_CRITICAL")
    score_weight_serious: float = Field(15, alias="SCORE_WEIGHT_SERIOUS")
    score_weight_moderate: float = Field(8, alias="SCORE_WEIGHT_MODERATE")
    score_weight_minor: float = Field(3, alias="SCORE_WEIGHT_MINOR")
    score_pass_bonus: float = Field(0.3, alias="SCORE_PASS_BONUS")
    score_pass_bonus_cap: float = Field(15, alias="SCORE_PASS_BONUS_CAP")
    score_incomplete_penalty: float = Field(2, alias="SCORE_INCOMPLETE_PENALTY")
    score_incomplete_penalty_cap: float = Field(10, alias="SCORE_INCOMPLETE_PENALTY_CAP")
    score_ratio_penalty: float = Field(20, alias="SCORE_RATIO_PENALTY")

    audit_storage_path: str = Field(".a11y-audit", alias="AUDIT_STORAGE_PATH")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_config() -> AuditConfig:
    """Return a cached singleton of AuditConfig."""
    return AuditConfig()
