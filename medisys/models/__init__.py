"""
Models package exports for the agent registry, schemas, and domain types.
"""

from medisys.models.agents import (
    AgentType,
    AgentDefinition,
    AGENTS,
    DISPATCHABLE_AGENTS,
    get_agent,
)
from medisys.models.schemas import (
    IntentResult,
    GroundingSource,
    ExecutionResult,
    GatewayResponse,
    TextPart,
    InlineImagePart,
    intent_response_schema,
)
from medisys.models.domain import Message, TurnState

__all__ = [
    "AgentType",
    "AgentDefinition",
    "AGENTS",
    "DISPATCHABLE_AGENTS",
    "get_agent",
    "IntentResult",
    "GroundingSource",
    "ExecutionResult",
    "GatewayResponse",
    "TextPart",
    "InlineImagePart",
    "intent_response_schema",
    "Message",
    "TurnState",
]
