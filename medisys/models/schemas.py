"""
Structured output schemas and the normalised shapes exchanged with the
model gateway.
All models use Field() with descriptions for clarity.
"""

import base64
from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from medisys.models.agents import AgentType, DISPATCHABLE_AGENTS


class IntentResult(BaseModel):
    """
    Routing decision produced by the coordinator for one user turn.
    The wire format uses camelCase for the refined prompt.
    """

    agent: AgentType = Field(description="Agent chosen to handle the request")
    reasoning: str = Field(description="Short reason for choosing the agent")
    refined_prompt: str = Field(
        alias="refinedPrompt",
        description="Prompt rewritten so the chosen agent can work at its best",
    )

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "example": {
                "agent": "AIP",
                "reasoning": "Pertanyaan umum tentang gejala penyakit.",
                "refinedPrompt": "Jelaskan gejala umum demam berdarah dengue.",
            }
        },
    )

    @field_validator("agent")
    @classmethod
    def agent_must_be_dispatchable(cls, value: AgentType) -> AgentType:
        if value not in DISPATCHABLE_AGENTS:
            raise ValueError(f"{value.value} cannot handle requests")
        return value


def intent_response_schema(descriptions: dict[str, str]) -> dict:
    """
    Builds the response schema sent to the model for intent classification.
    The agent enum is restricted to the dispatchable agents.

    Args:
        descriptions: Field descriptions keyed by wire field name
    """
    return {
        "type": "OBJECT",
        "properties": {
            "agent": {
                "type": "STRING",
                "enum": [agent.value for agent in DISPATCHABLE_AGENTS],
                "description": descriptions["agent"],
            },
            "reasoning": {
                "type": "STRING",
                "description": descriptions["reasoning"],
            },
            "refinedPrompt": {
                "type": "STRING",
                "description": descriptions["refinedPrompt"],
            },
        },
        "required": ["agent", "reasoning", "refinedPrompt"],
    }


class GroundingSource(BaseModel):
    """A web citation attached to a search-grounded response."""

    uri: str
    title: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class TextPart(BaseModel):
    """Plain text part of a model response."""

    text: str

    model_config = ConfigDict(frozen=True)


class InlineImagePart(BaseModel):
    """Inline binary image part of a model response."""

    mime_type: str
    data: bytes

    model_config = ConfigDict(frozen=True)

    def to_data_uri(self) -> str:
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"


ResponsePart = Union[TextPart, InlineImagePart]


class GatewayResponse(BaseModel):
    """Normalised result of one model gateway call."""

    text: Optional[str] = None
    parts: list[ResponsePart] = Field(default_factory=list)
    grounding_sources: list[GroundingSource] = Field(default_factory=list)


class ExecutionResult(BaseModel):
    """
    Uniform output of an agent: text, plus an image for PAVM or
    citations for search-grounded agents.
    """

    text: str
    image_url: Optional[str] = None
    grounding_sources: Optional[tuple[GroundingSource, ...]] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def sources_not_empty(self) -> "ExecutionResult":
        if self.grounding_sources is not None and not self.grounding_sources:
            raise ValueError("grounding_sources must be None or non-empty")
        return self
