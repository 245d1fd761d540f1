"""
Model gateway over the Gemini SDK.
Builds request configs, applies timeout and retry policy, and decodes the
SDK response into a GatewayResponse.
"""

import time
import asyncio
import base64
from typing import Any
from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
from google import genai
from google.genai import types

from medisys.config import ConfigurationError, Settings
from medisys.models.schemas import (
    GatewayResponse,
    GroundingSource,
    InlineImagePart,
    ResponsePart,
    TextPart,
)
from medisys.utils.logger import get_logger
from medisys.utils.metrics import record_model_call

logger = get_logger(__name__)


class GatewayError(Exception):
    """Base exception for model gateway errors."""


class GatewayTimeoutError(GatewayError):
    """Raised when a model call exceeds the timeout threshold."""


def decode_part(raw: Any) -> ResponsePart | None:
    """
    Maps one SDK content part to a TextPart or InlineImagePart.
    Thought parts and parts carrying neither text nor inline data are dropped.
    """
    if getattr(raw, "thought", None) is True:
        return None

    inline_data = getattr(raw, "inline_data", None)
    if inline_data is not None and getattr(inline_data, "data", None):
        data = inline_data.data
        if isinstance(data, str):
            data = base64.b64decode(data)
        return InlineImagePart(
            mime_type=inline_data.mime_type or "image/png", data=data
        )

    text = getattr(raw, "text", None)
    if text:
        return TextPart(text=text)
    return None


def decode_response(response: Any) -> GatewayResponse:
    """
    Normalises an SDK GenerateContentResponse.
    Only the first candidate is considered.
    """
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return GatewayResponse()

    candidate = candidates[0]
    content = getattr(candidate, "content", None)
    parts = []
    for raw in getattr(content, "parts", None) or []:
        part = decode_part(raw)
        if part is not None:
            parts.append(part)

    sources = []
    metadata = getattr(candidate, "grounding_metadata", None)
    for chunk in getattr(metadata, "grounding_chunks", None) or []:
        web = getattr(chunk, "web", None)
        if web is not None and getattr(web, "uri", None):
            sources.append(GroundingSource(uri=web.uri, title=web.title))

    text = "".join(part.text for part in parts if isinstance(part, TextPart))
    return GatewayResponse(
        text=text or None, parts=parts, grounding_sources=sources
    )


class GeminiGateway:
    """
    Async access to Gemini text, structured and image generation.
    The SDK client is created on first use, so a gateway can be built
    before a credential is configured.
    """

    def __init__(
        self,
        api_key: str | None,
        max_retries: int = 1,
        timeout: int = 60,
        client: genai.Client | None = None,
    ):
        """
        Initialize the gateway.

        Args:
            api_key: Gemini API key
            max_retries: Attempts per call (1 disables retrying)
            timeout: Timeout in seconds for each attempt
            client: Preconfigured SDK client, mainly for tests
        """
        self.api_key = api_key
        self.max_retries = max_retries
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("Gemini API key is not configured")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    @staticmethod
    def build_config(
        system_instruction: str | None = None,
        use_search: bool = False,
        response_schema: dict | None = None,
        temperature: float | None = None,
        image_aspect_ratio: str | None = None,
    ) -> types.GenerateContentConfig:
        """Translates gateway options into an SDK request config."""
        return types.GenerateContentConfig(
            system_instruction=system_instruction,
            temperature=temperature,
            tools=(
                [types.Tool(google_search=types.GoogleSearch())]
                if use_search
                else None
            ),
            response_mime_type="application/json" if response_schema else None,
            response_schema=response_schema,
            image_config=(
                types.ImageConfig(aspect_ratio=image_aspect_ratio)
                if image_aspect_ratio
                else None
            ),
        )

    async def generate(
        self,
        prompt: str,
        *,
        model: str,
        system_instruction: str | None = None,
        use_search: bool = False,
        response_schema: dict | None = None,
        temperature: float | None = None,
        image_aspect_ratio: str | None = None,
    ) -> GatewayResponse:
        """
        Generates content with timeout and retry.

        Args:
            prompt: User content
            model: Model name
            system_instruction: Optional system instruction
            use_search: Attach the Google Search grounding tool
            response_schema: JSON schema; the returned text is JSON conforming to it
            temperature: Optional sampling temperature
            image_aspect_ratio: Request image output with this aspect ratio

        Returns:
            Normalised response

        Raises:
            GatewayTimeoutError: If the last attempt exceeds the timeout
            GatewayError: If the call fails after all attempts
            ConfigurationError: If no API key is configured; never retried
        """
        config = self.build_config(
            system_instruction=system_instruction,
            use_search=use_search,
            response_schema=response_schema,
            temperature=temperature,
            image_aspect_ratio=image_aspect_ratio,
        )
        if image_aspect_ratio:
            contents = types.Content(role="user", parts=[types.Part(text=prompt)])
        else:
            contents = prompt

        client = self.client
        start_time = time.time()

        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(GatewayError),
            reraise=True,
        ):
            with attempt:
                try:
                    logger.info(
                        "model_call_started",
                        model=model,
                        attempt=attempt.retry_state.attempt_number,
                        search=use_search,
                        structured=response_schema is not None,
                        image=bool(image_aspect_ratio),
                    )

                    response = await asyncio.wait_for(
                        client.aio.models.generate_content(
                            model=model, contents=contents, config=config
                        ),
                        timeout=self.timeout,
                    )

                    self._log_usage(response, time.time() - start_time)
                    return decode_response(response)

                except asyncio.TimeoutError as e:
                    logger.error(
                        "model_call_timeout",
                        model=model,
                        elapsed=time.time() - start_time,
                        timeout=self.timeout,
                        attempt=attempt.retry_state.attempt_number,
                    )
                    raise GatewayTimeoutError(
                        f"Model call exceeded timeout of {self.timeout}s"
                    ) from e
                except GatewayError:
                    raise
                except Exception as e:
                    logger.error(
                        "model_call_failed",
                        exc_info=True,
                        model=model,
                        elapsed=time.time() - start_time,
                        attempt=attempt.retry_state.attempt_number,
                        error=str(e),
                    )
                    raise GatewayError(f"Model call failed: {e}") from e

    def _log_usage(self, response: Any, elapsed: float) -> None:
        usage = getattr(response, "usage_metadata", None)
        input_tokens = getattr(usage, "prompt_token_count", None)
        output_tokens = getattr(usage, "candidates_token_count", None)
        input_tokens = input_tokens if isinstance(input_tokens, int) else 0
        output_tokens = output_tokens if isinstance(output_tokens, int) else 0
        record_model_call(input_tokens, output_tokens)
        logger.info(
            "model_call_completed",
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            elapsed=elapsed,
        )


def create_gateway(settings: Settings) -> GeminiGateway:
    """Factory building the process-wide gateway from settings."""
    return GeminiGateway(
        api_key=settings.google_api_key,
        max_retries=settings.llm_max_retries,
        timeout=settings.llm_timeout,
    )
