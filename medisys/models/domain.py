"""
Domain models for the conversation log and the per-turn graph state.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional
from typing_extensions import TypedDict
from pydantic import BaseModel, ConfigDict, Field

from medisys.models.agents import AgentType
from medisys.models.schemas import ExecutionResult, GroundingSource, IntentResult


class Message(BaseModel):
    """
    One entry of the conversation log. Immutable once created.

    Attributes:
        id: Unique message id.
        role: "user" for submissions, "model" for agent output.
        content: Text or Markdown body.
        agent: Agent that produced the message (model messages only).
        timestamp: Creation time (UTC).
        image_url: Data URI of a generated image (PAVM only).
        grounding_sources: Full list of citations for search-grounded answers.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "model"]
    content: str
    agent: Optional[AgentType] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    image_url: Optional[str] = None
    grounding_sources: Optional[tuple[GroundingSource, ...]] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_execution(cls, agent: AgentType, result: ExecutionResult) -> "Message":
        """Builds the model message carrying an agent's output."""
        return cls(
            role="model",
            content=result.text,
            agent=agent,
            image_url=result.image_url,
            grounding_sources=result.grounding_sources,
        )


class TurnState(TypedDict, total=False):
    """
    State flowing through the turn pipeline graph.

    Attributes:
        query: The user's submitted text.
        intent: Routing decision from the coordinator.
        active_agent: Agent to show as active.
        status_message: Transient status line for display.
        result: Output of the executed agent.
    """

    query: str
    intent: IntentResult
    active_agent: AgentType
    status_message: str
    result: ExecutionResult
