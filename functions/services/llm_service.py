"""AI gateway for home safety assessments.

Sends the instruction document, the per-request prompt and the photos to a
multimodal chat model through LangChain, constrained by a JSON schema
response format, and returns the parsed JSON object. Any failure (network,
empty reply, malformed JSON) surfaces as a GatewayError. There is no retry.
"""

import base64
import json
from typing import Any, Dict, List, Optional, Sequence

import structlog
from langchain_openai import ChatOpenAI
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

from config.settings import settings
from config.errors import ConfigurationError, ErrorCode, GatewayError
from models.assessment_input import ImagePayload
from services.prompt_builder import FEDERAL_ASSESSMENT_SYSTEM_PROMPT

logger = structlog.get_logger()


def _strip_code_fences(content: str) -> str:
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _message_text(content: Any) -> str:
    """Flatten LangChain message content (str or list of parts) to text."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


def build_messages(
    prompt_text: str,
    images: Sequence[ImagePayload],
    system_prompt: str = FEDERAL_ASSESSMENT_SYSTEM_PROMPT,
) -> List[BaseMessage]:
    """System instruction, then one user message carrying the prompt and every image."""
    content: List[Dict[str, Any]] = [{"type": "text", "text": prompt_text}]
    for image in images:
        encoded = base64.b64encode(image.data).decode("ascii")
        content.append({
            "type": "image_url",
            "image_url": {"url": f"data:{image.mime_type};base64,{encoded}"},
        })
    return [SystemMessage(content=system_prompt), HumanMessage(content=content)]


class AssessmentGateway:
    """Multimodal chat model wrapper with token tracking and error mapping."""

    def __init__(
        self,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        top_p: Optional[float] = None,
        max_tokens: Optional[int] = None,
        api_key: Optional[str] = None
    ):
        """Initialize AssessmentGateway.

        Args:
            model: Model name (default from settings).
            temperature: Temperature (default from settings, 0.2).
            top_p: Nucleus sampling (default from settings, 0.8).
            max_tokens: Output token ceiling (default from settings, 8192).
            api_key: OpenAI API key (default from settings).
        """
        self.model = model or settings.llm_model
        self.temperature = temperature if temperature is not None else settings.llm_temperature
        self.top_p = top_p if top_p is not None else settings.llm_top_p
        self.max_tokens = max_tokens or settings.llm_max_tokens
        self.api_key = api_key or settings.openai_api_key

        self._client: Optional[ChatOpenAI] = None
        self._total_tokens_used = 0

    @property
    def client(self) -> ChatOpenAI:
        """Get LangChain ChatOpenAI client (lazy initialization)."""
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError(
                    "AI service not configured. Please set OPENAI_API_KEY environment variable.",
                    setting="OPENAI_API_KEY",
                )
            self._client = ChatOpenAI(
                model=self.model,
                temperature=self.temperature,
                top_p=self.top_p,
                max_tokens=self.max_tokens,
                api_key=self.api_key
            )
        return self._client

    @property
    def total_tokens_used(self) -> int:
        """Get total tokens used across all calls."""
        return self._total_tokens_used

    async def generate(
        self,
        prompt_text: str,
        images: Sequence[ImagePayload],
        schema: Optional[Dict[str, Any]] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> Dict[str, Any]:
        """Run one assessment call and return the parsed JSON object.

        Args:
            prompt_text: Per-request user prompt.
            images: Resolved image payloads, in submission order.
            schema: Response format (see services.assessment_schema.get_response_format).
            temperature: Per-call temperature override.
            max_tokens: Per-call output token ceiling override.

        Returns:
            The model's JSON output as a dict.

        Raises:
            ConfigurationError: If no API key is configured.
            GatewayError: On any client failure or unusable response.
        """
        messages = build_messages(prompt_text, images)

        kwargs: Dict[str, Any] = {}
        if schema:
            kwargs["response_format"] = schema
        if temperature is not None:
            kwargs["temperature"] = temperature
        if max_tokens:
            kwargs["max_tokens"] = max_tokens

        client = self.client
        try:
            response = await client.ainvoke(messages, **kwargs)
        except Exception as e:
            raise self._map_error(e) from e

        tokens_used = 0
        if hasattr(response, "response_metadata"):
            usage = response.response_metadata.get("token_usage", {}) or {}
            tokens_used = usage.get("total_tokens", 0)
            self._total_tokens_used += tokens_used

        text = _message_text(response.content)

        logger.info(
            "gateway_generated",
            model=self.model,
            image_count=len(images),
            tokens_used=tokens_used,
            content_length=len(text)
        )

        return self._parse(text)

    def _map_error(self, error: Exception) -> GatewayError:
        error_msg = str(error)
        lowered = error_msg.lower()

        logger.error("gateway_call_failed", model=self.model, error=error_msg)

        if "rate_limit" in lowered or "rate limit" in lowered:
            return GatewayError(
                "AI model rate limit exceeded",
                code=ErrorCode.LLM_RATE_LIMIT,
                details={"original_error": error_msg}
            )
        if "context_length" in lowered or "maximum context" in lowered:
            return GatewayError(
                "Input too long for model context",
                code=ErrorCode.LLM_CONTEXT_TOO_LONG,
                details={"original_error": error_msg}
            )
        return GatewayError(
            f"Failed to analyze images: {error_msg}",
            details={"original_error": error_msg}
        )

    @staticmethod
    def _parse(text: str) -> Dict[str, Any]:
        if not text or not text.strip():
            raise GatewayError(
                "Failed to analyze images: AI model returned an empty response",
                code=ErrorCode.INVALID_RESPONSE
            )

        try:
            parsed = json.loads(_strip_code_fences(text))
        except json.JSONDecodeError as e:
            raise GatewayError(
                "Failed to analyze images: AI model did not return valid JSON",
                code=ErrorCode.INVALID_RESPONSE,
                details={"parse_error": str(e), "raw_content": text[:500]}
            ) from e

        if not isinstance(parsed, dict):
            raise GatewayError(
                "Failed to analyze images: AI model returned JSON that is not an object",
                code=ErrorCode.INVALID_RESPONSE,
                details={"raw_content": text[:500]}
            )
        return parsed
