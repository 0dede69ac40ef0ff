"""Shared test fixtures for the Web Accessibility Auditor test suite.

Unit tests replace the browser and the generation service with in-memory
fakes (see fakes.py) and use MagicMock to simulate HTTP responses from requests.
Integration tests (tests/integration/) require Chromium and a real API key.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fakes import FakeGenerator, FakeSession, GeneratorFactoryRecorder, SessionFactoryRecorder, public_resolver

from web_a11y_auditor.client import GenerationClient
from web_a11y_auditor.config import AuditConfig
from web_a11y_auditor.engine import AuditEngine
from web_a11y_auditor.storage import AuditStorage
from web_a11y_auditor.validation import UrlValidator


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def env_configured() -> bool:
    """Check whether the generation service environment variables are configured."""
    return bool(os.environ.get("GENERATION_API_KEY"))


@pytest.fixture
def audit_config() -> AuditConfig:
    """Return an AuditConfig with test values."""
    return AuditConfig(
        GENERATION_API_KEY="test-key",
        GENERATION_BASE_URL="https://llm.example.test/api/v1",
        GENERATION_MODEL="test/model",
        GENERATION_MAX_RETRIES=1,
        SETTLE_DELAY_SECONDS=0,
        ENRICHMENT_TIMEOUT_SECONDS=2,
        SUMMARY_TIMEOUT_SECONDS=2,
        AUDIT_STORAGE_PATH="/tmp/test-a11y-audit",
        LOG_LEVEL="DEBUG",
    )


@pytest.fixture
def mock_session() -> MagicMock:
    """Return a MagicMock that simulates a requests.Session."""
    session = MagicMock()
    response = MagicMock()
    response.ok = True
    response.status_code = 200
    response.json.return_value = {"choices": [{"message": {"role": "assistant", "content": "{}"}}]}
    session.request.return_value = response
    return session


@pytest.fixture
def generation_client(audit_config: AuditConfig, mock_session: MagicMock) -> Iterator[GenerationClient]:
    """Return a GenerationClient with a mocked HTTP session."""
    client = GenerationClient(audit_config)
    client.session = mock_session
    yield client
    client.close()


@pytest.fixture
def audit_storage(tmp_path: Path) -> AuditStorage:
    """Return an AuditStorage using a temp directory."""
    return AuditStorage(str(tmp_path / "audit-storage"))


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def session_factory(fake_session: FakeSession) -> SessionFactoryRecorder:
    return SessionFactoryRecorder(fake_session)


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def generator_factory(fake_generator: FakeGenerator) -> GeneratorFactoryRecorder:
    return GeneratorFactoryRecorder(fake_generator)


@pytest.fixture
def audit_engine(
    audit_config: AuditConfig,
    audit_storage: AuditStorage,
    generator_factory: GeneratorFactoryRecorder,
    session_factory: SessionFactoryRecorder,
) -> AuditEngine:
    """Return an AuditEngine wired to fakes; public hostnames resolve offline."""
    return AuditEngine(
        audit_config,
        audit_storage,
        generator_factory,
        session_factory=session_factory,
        validator=UrlValidator(resolver=public_resolver),
    )
