"""
Graph builder for the turn pipeline.
Assembles the gateway, services, nodes and edges into an executable graph:

    coordinator -> handover -> patient_info | document | visual | research -> END
"""

from langgraph.graph import StateGraph, END

from medisys import config
from medisys.models.agents import DISPATCHABLE_AGENTS
from medisys.models.domain import TurnState
from medisys.services.gateway import GeminiGateway, create_gateway
from medisys.services.coordinator_service import CoordinatorService
from medisys.services.agent_service import AgentService
from medisys.graph.nodes import GraphNodes
from medisys.graph.edges import AGENT_NODES, route_after_handover
from medisys.utils.logger import get_logger

logger = get_logger(__name__)


def build_graph(
    gateway: GeminiGateway | None = None,
    settings: config.Settings | None = None,
):
    """
    Builds and compiles the turn pipeline graph.

    Args:
        gateway: Model gateway; created from settings when omitted
        settings: Application settings; the global settings when omitted

    Returns:
        Compiled graph taking {"query": str} and producing the turn state
    """
    logger.info("graph_components_initializing")

    settings = settings or config.get_settings()
    if gateway is None:
        gateway = create_gateway(settings)

    coordinator_service = CoordinatorService(
        gateway,
        model=settings.coordinator_model,
        temperature=settings.coordinator_temperature,
    )
    agent_service = AgentService(gateway, settings)

    nodes = GraphNodes(
        coordinator_service=coordinator_service,
        agent_service=agent_service,
        handover_delay=settings.handover_delay,
    )

    logger.info("graph_workflow_building")
    workflow = StateGraph(TurnState)

    workflow.add_node("coordinator", nodes.coordinator_node)
    workflow.add_node("handover", nodes.handover_node)
    for agent in DISPATCHABLE_AGENTS:
        workflow.add_node(AGENT_NODES[agent], nodes.agent_node(agent))
        workflow.add_edge(AGENT_NODES[agent], END)

    workflow.set_entry_point("coordinator")
    workflow.add_edge("coordinator", "handover")
    workflow.add_conditional_edges(
        "handover",
        route_after_handover,
        {node: node for node in AGENT_NODES.values()},
    )

    logger.info("graph_compiling", agent_nodes=len(AGENT_NODES))
    return workflow.compile()
