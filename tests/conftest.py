"""
Shared test fixtures and configuration.
"""

import json
import pytest
from types import SimpleNamespace
from unittest.mock import Mock, AsyncMock

from medisys.config import Settings
from medisys.models.schemas import (
    GatewayResponse,
    GroundingSource,
    InlineImagePart,
    TextPart,
)
from medisys.services.gateway import GeminiGateway

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-bytes"


@pytest.fixture
def settings() -> Settings:
    """Settings with a credential and no display delays."""
    return Settings(
        _env_file=None,
        google_api_key="test-api-key",
        handover_delay=0.0,
        idle_reset_delay=0.0,
    )


@pytest.fixture
def settings_without_key() -> Settings:
    """Settings with no credential configured."""
    return Settings(
        _env_file=None,
        google_api_key=None,
        handover_delay=0.0,
        idle_reset_delay=0.0,
    )


@pytest.fixture
def mock_gateway():
    """Mock model gateway for testing without API calls."""
    gateway = Mock(spec=GeminiGateway)
    gateway.generate = AsyncMock()
    return gateway


def intent_response(agent: str, reasoning: str, refined_prompt: str) -> GatewayResponse:
    """Gateway response carrying a structured routing decision."""
    payload = json.dumps(
        {"agent": agent, "reasoning": reasoning, "refinedPrompt": refined_prompt}
    )
    return GatewayResponse(text=payload, parts=[TextPart(text=payload)])


def text_response(
    text: str | None, sources: list[tuple[str, str]] | None = None
) -> GatewayResponse:
    """Gateway response from a text agent, optionally search-grounded."""
    return GatewayResponse(
        text=text,
        parts=[TextPart(text=text)] if text else [],
        grounding_sources=[
            GroundingSource(uri=uri, title=title) for uri, title in sources or []
        ],
    )


def image_response(caption: str | None = None, with_image: bool = True) -> GatewayResponse:
    """Gateway response from the image model."""
    parts = []
    if caption:
        parts.append(TextPart(text=caption))
    if with_image:
        parts.append(InlineImagePart(mime_type="image/png", data=PNG_BYTES))
    return GatewayResponse(text=caption, parts=parts)


@pytest.fixture
def sample_sources() -> list[tuple[str, str]]:
    """Five web grounding sources, in the order returned by search."""
    return [
        ("https://www.who.int/dengue", "WHO - Dengue"),
        ("https://www.kemkes.go.id/dbd", "Kemenkes - DBD"),
        ("https://www.cdc.gov/dengue/symptoms", "CDC - Dengue Symptoms"),
        ("https://medlineplus.gov/dengue.html", "MedlinePlus"),
        ("https://www.alodokter.com/demam-berdarah", "Alodokter"),
    ]


def sdk_part(text=None, mime_type=None, data=None, thought=None):
    """Stand-in for a google-genai content part."""
    inline_data = (
        SimpleNamespace(mime_type=mime_type, data=data) if data is not None else None
    )
    return SimpleNamespace(text=text, inline_data=inline_data, thought=thought)


def sdk_response(parts=None, web_chunks=None, usage=None):
    """Stand-in for a google-genai GenerateContentResponse."""
    grounding_metadata = None
    if web_chunks is not None:
        grounding_metadata = SimpleNamespace(
            grounding_chunks=[
                SimpleNamespace(
                    web=SimpleNamespace(uri=uri, title=title) if uri else None
                )
                for uri, title in web_chunks
            ]
        )
    candidate = SimpleNamespace(
        content=SimpleNamespace(parts=parts or []),
        grounding_metadata=grounding_metadata,
    )
    return SimpleNamespace(candidates=[candidate], usage_metadata=usage)
