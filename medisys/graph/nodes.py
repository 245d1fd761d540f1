"""
Graph nodes for one conversation turn.
Each node is thin and delegates to the coordinator or agent service.
"""

import asyncio

from medisys.models.agents import AgentType, get_agent
from medisys.models.domain import TurnState
from medisys.services.agent_service import AgentService
from medisys.services.coordinator_service import CoordinatorService
from medisys.utils.prompts import load_prompts
from medisys.utils.logger import get_logger, set_active_agent
from medisys.utils.metrics import start_node_timing, end_node_timing

logger = get_logger(__name__)
PROMPTS = load_prompts()


class GraphNodes:
    """
    Container for all graph node functions.
    Nodes return state updates, including the status line to display.
    """

    def __init__(
        self,
        coordinator_service: CoordinatorService,
        agent_service: AgentService,
        handover_delay: float = 0.0,
    ):
        """
        Initialize graph nodes with required services.

        Args:
            coordinator_service: Service classifying the query
            agent_service: Service executing the routed prompt
            handover_delay: Seconds to pause after routing
        """
        self.coordinator_service = coordinator_service
        self.agent_service = agent_service
        self.handover_delay = handover_delay

    async def coordinator_node(self, state: TurnState) -> dict:
        """Classifies the query and announces the handover."""
        logger.info("node_started", node="coordinator")
        start_node_timing("coordinator")

        intent = await self.coordinator_service.classify(state["query"])
        agent = get_agent(intent.agent)
        set_active_agent(intent.agent.value)

        end_node_timing("coordinator")
        return {
            "intent": intent,
            "active_agent": intent.agent,
            "status_message": PROMPTS["status"]["handover_template"].format(
                agent_name=agent.name, reasoning=intent.reasoning
            ),
        }

    async def handover_node(self, state: TurnState) -> dict:
        """Pauses so the handover status is readable, then marks the agent busy."""
        start_node_timing("handover")
        if self.handover_delay > 0:
            await asyncio.sleep(self.handover_delay)

        agent = get_agent(state["intent"].agent)
        end_node_timing("handover")
        return {
            "status_message": PROMPTS["status"]["agent_processing_template"].format(
                agent_name=agent.name
            )
        }

    def agent_node(self, agent: AgentType):
        """
        Builds the node executing the refined prompt with one agent.

        Args:
            agent: Agent the node is bound to
        """

        async def run_agent(state: TurnState) -> dict:
            node_name = agent.value.lower()
            logger.info("node_started", node=node_name)
            start_node_timing(node_name)
            result = await self.agent_service.execute(
                agent, state["intent"].refined_prompt
            )
            end_node_timing(node_name)
            return {"result": result}

        return run_agent
