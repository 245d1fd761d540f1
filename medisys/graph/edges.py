"""
Graph edge conditions for routing between nodes.
"""

from medisys.models.agents import AgentType, DISPATCHABLE_AGENTS
from medisys.models.domain import TurnState
from medisys.utils.logger import get_logger

logger = get_logger(__name__)

# Graph node name for each dispatchable agent
AGENT_NODES: dict[AgentType, str] = {
    AgentType.AIP: "patient_info",
    AgentType.PDM: "document",
    AgentType.PAVM: "visual",
    AgentType.APK: "research",
}

_missing = [a.value for a in DISPATCHABLE_AGENTS if a not in AGENT_NODES]
if _missing:
    raise RuntimeError(f"No graph node defined for agents: {_missing}")


def route_after_handover(state: TurnState) -> str:
    """
    Routes to the node of the agent chosen by the coordinator.

    Args:
        state: Current turn state

    Returns:
        Agent node name

    Raises:
        ValueError: If the state carries no routable intent
    """
    intent = state.get("intent")
    if intent is None or intent.agent not in AGENT_NODES:
        logger.error("invalid_state_in_routing", intent=intent)
        raise ValueError("Turn state has no routable intent")

    node = AGENT_NODES[intent.agent]
    logger.info("routing_to_agent", agent=intent.agent.value, node=node)
    return node
