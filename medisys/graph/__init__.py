"""
Graph package for the LangGraph turn pipeline.
"""

from medisys.graph.builder import build_graph
from medisys.graph.nodes import GraphNodes
from medisys.graph.edges import AGENT_NODES, route_after_handover

__all__ = [
    "build_graph",
    "GraphNodes",
    "AGENT_NODES",
    "route_after_handover",
]
