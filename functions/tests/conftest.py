"""Pytest configuration and shared fixtures for home assessment tests."""

import json
import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock, patch
from typing import Dict, Any


# ============================================================================
# Ensure local imports work (models/, services/, config/)
# ============================================================================
#
# The codebase uses absolute imports like `from models...` / `from services...`.
# This guarantees that `functions/` is importable as the top-level module root.
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)


from tests.fixtures.mock_assessment_data import (  # noqa: E402
    get_over_budget_raw_output,
    get_sample_complete_request,
    get_sample_raw_output,
    get_sample_wizard_request,
)


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture(autouse=True)
def mock_settings(monkeypatch):
    """Pin settings for all tests.

    Attributes are patched on the shared instance, so modules that imported
    ``settings`` at load time see the same values.
    """
    from config.settings import settings

    monkeypatch.setattr(settings, "_openai_api_key", "test-api-key")
    monkeypatch.setattr(settings, "llm_model", "gpt-4o")
    monkeypatch.setattr(settings, "default_budget_cap", 5000.0)
    monkeypatch.setattr(settings, "default_area_median_income", 80000.0)
    monkeypatch.setattr(settings, "report_organization_name", "HOMEase AI")
    monkeypatch.setattr(settings, "log_level", "INFO")
    yield settings


# ============================================================================
# LLM Mocks
# ============================================================================

@pytest.fixture
def mock_chat_openai():
    """Mock ChatOpenAI client answering with the sample assessment JSON."""
    mock = AsyncMock()
    mock.ainvoke.return_value = MagicMock(
        content=json.dumps(get_sample_raw_output()),
        response_metadata={"token_usage": {"total_tokens": 100}}
    )
    return mock


@pytest.fixture
def mock_gateway(mock_chat_openai):
    """AssessmentGateway wired to the mocked chat client."""
    from services.llm_service import AssessmentGateway

    with patch('services.llm_service.ChatOpenAI', return_value=mock_chat_openai):
        gateway = AssessmentGateway(api_key="test-api-key")
        gateway._client = mock_chat_openai
        return gateway


@pytest.fixture
def fake_renderer():
    """PDF renderer stand-in; WeasyPrint is not needed for pipeline tests."""
    return MagicMock(return_value=b"%PDF-1.7 fake report")


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def sample_wizard_request() -> Dict[str, Any]:
    return get_sample_wizard_request()


@pytest.fixture
def sample_complete_request() -> Dict[str, Any]:
    return get_sample_complete_request()


@pytest.fixture
def sample_raw_output() -> Dict[str, Any]:
    return get_sample_raw_output()


@pytest.fixture
def over_budget_raw_output() -> Dict[str, Any]:
    return get_over_budget_raw_output()


@pytest.fixture
def sample_assessment_input(sample_wizard_request):
    """Normalized AssessmentInput for the sample submission."""
    from services.request_normalizer import build_assessment_input_from_request

    return build_assessment_input_from_request(sample_wizard_request)


@pytest.fixture
def enriched_output(sample_raw_output, sample_assessment_input):
    """Sample model output after enrichment."""
    from services.enrichment import enrich

    return enrich(sample_raw_output, sample_assessment_input)


@pytest.fixture
def over_budget_output(over_budget_raw_output, sample_assessment_input):
    from services.enrichment import enrich

    return enrich(over_budget_raw_output, sample_assessment_input)
