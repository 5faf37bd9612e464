"""Unit tests for the AI gateway."""

import json

import pytest
from unittest.mock import MagicMock, patch

from config.errors import ConfigurationError, ErrorCode, GatewayError
from models.assessment_input import ImagePayload
from services.assessment_schema import get_response_format


@pytest.fixture
def payloads():
    return [
        ImagePayload(image_id="img-1", mime_type="image/png", data=b"png"),
        ImagePayload(image_id="img-2", mime_type="image/jpeg", data=b"jpg"),
    ]


class TestBuildMessages:

    def test_system_then_user_with_images(self, payloads):
        from langchain_core.messages import HumanMessage, SystemMessage
        from services.llm_service import build_messages
        from services.prompt_builder import FEDERAL_ASSESSMENT_SYSTEM_PROMPT

        messages = build_messages("Assess these photos", payloads)

        assert isinstance(messages[0], SystemMessage)
        assert messages[0].content == FEDERAL_ASSESSMENT_SYSTEM_PROMPT
        assert isinstance(messages[1], HumanMessage)

        parts = messages[1].content
        assert parts[0] == {"type": "text", "text": "Assess these photos"}
        assert parts[1]["image_url"]["url"] == "data:image/png;base64,cG5n"
        assert parts[2]["image_url"]["url"] == "data:image/jpeg;base64,anBn"


class TestAssessmentGateway:
    """Tests for AssessmentGateway."""

    def test_initialization(self):
        """Test explicit configuration."""
        with patch('services.llm_service.ChatOpenAI'):
            from services.llm_service import AssessmentGateway

            gateway = AssessmentGateway(
                model="gpt-4o-mini",
                temperature=0.1,
                top_p=0.5,
                max_tokens=2048,
                api_key="test-key"
            )

            assert gateway.model == "gpt-4o-mini"
            assert gateway.temperature == 0.1
            assert gateway.top_p == 0.5
            assert gateway.max_tokens == 2048
            assert gateway.api_key == "test-key"

    def test_default_initialization(self):
        """Test AssessmentGateway uses settings defaults."""
        with patch('services.llm_service.ChatOpenAI'):
            from services.llm_service import AssessmentGateway

            gateway = AssessmentGateway()

            assert gateway.model == "gpt-4o"
            assert gateway.temperature == 0.2
            assert gateway.top_p == 0.8
            assert gateway.max_tokens == 8192
            assert gateway.api_key == "test-api-key"

    def test_missing_api_key(self, monkeypatch, mock_settings):
        """Client creation fails without a credential."""
        from config.secrets import clear_secret_cache
        from services.llm_service import AssessmentGateway

        monkeypatch.setattr(mock_settings, "_openai_api_key", None)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        clear_secret_cache()

        gateway = AssessmentGateway()

        with pytest.raises(ConfigurationError) as exc_info:
            _ = gateway.client

        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR
        clear_secret_cache()

    def test_client_created_lazily(self):
        with patch('services.llm_service.ChatOpenAI') as chat_cls:
            from services.llm_service import AssessmentGateway

            gateway = AssessmentGateway(api_key="test-key")
            chat_cls.assert_not_called()

            _ = gateway.client
            _ = gateway.client

            chat_cls.assert_called_once()
            assert chat_cls.call_args.kwargs["model"] == "gpt-4o"
            assert chat_cls.call_args.kwargs["top_p"] == 0.8

    @pytest.mark.asyncio
    async def test_generate(self, mock_gateway, payloads, sample_raw_output):
        """Test generate returns the parsed object."""
        result = await mock_gateway.generate("prompt", payloads, schema=get_response_format())

        assert result == sample_raw_output

        call = mock_gateway._client.ainvoke.call_args
        assert call.kwargs["response_format"]["json_schema"]["name"] == "home_safety_assessment"
        assert len(call.args[0]) == 2

    @pytest.mark.asyncio
    async def test_generate_overrides(self, mock_gateway, payloads):
        await mock_gateway.generate("prompt", payloads, temperature=0.0, max_tokens=1000)

        call = mock_gateway._client.ainvoke.call_args
        assert call.kwargs["temperature"] == 0.0
        assert call.kwargs["max_tokens"] == 1000
        assert "response_format" not in call.kwargs

    @pytest.mark.asyncio
    async def test_generate_handles_markdown(self, mock_gateway, payloads):
        """Test generate handles markdown code blocks."""
        mock_gateway._client.ainvoke.return_value = MagicMock(
            content='```json\n{"detectedHazards": []}\n```',
            response_metadata={"token_usage": {"total_tokens": 50}}
        )

        result = await mock_gateway.generate("prompt", payloads)

        assert result == {"detectedHazards": []}

    @pytest.mark.asyncio
    async def test_generate_content_parts(self, mock_gateway, payloads):
        mock_gateway._client.ainvoke.return_value = MagicMock(
            content=[{"type": "text", "text": '{"limitations": '}, {"type": "text", "text": '["dark"]}'}],
            response_metadata={}
        )

        result = await mock_gateway.generate("prompt", payloads)

        assert result == {"limitations": ["dark"]}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", ["", "   ", "This is not JSON", json.dumps([1, 2, 3])])
    async def test_generate_invalid_response(self, mock_gateway, payloads, content):
        """Test generate raises on unusable output."""
        mock_gateway._client.ainvoke.return_value = MagicMock(
            content=content,
            response_metadata={"token_usage": {"total_tokens": 10}}
        )

        with pytest.raises(GatewayError) as exc_info:
            await mock_gateway.generate("prompt", payloads)

        assert exc_info.value.code == ErrorCode.INVALID_RESPONSE
        assert exc_info.value.message.startswith("Failed to analyze images:")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,code", [
        (Exception("Error code: 429 - rate_limit_exceeded"), ErrorCode.LLM_RATE_LIMIT),
        (Exception("This model's maximum context length is 128000 tokens"), ErrorCode.LLM_CONTEXT_TOO_LONG),
        (Exception("Connection reset by peer"), ErrorCode.GATEWAY_ERROR),
    ])
    async def test_generate_maps_client_errors(self, mock_gateway, payloads, error, code):
        mock_gateway._client.ainvoke.side_effect = error

        with pytest.raises(GatewayError) as exc_info:
            await mock_gateway.generate("prompt", payloads)

        assert exc_info.value.code == code
        assert exc_info.value.details["original_error"] == str(error)

    @pytest.mark.asyncio
    async def test_token_tracking(self, mock_gateway, payloads):
        """Test token usage tracking."""
        await mock_gateway.generate("prompt", payloads)
        await mock_gateway.generate("prompt", payloads)

        assert mock_gateway.total_tokens_used == 200
