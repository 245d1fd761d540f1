"""
Services package exports for the gateway, routing and conversation layers.
"""

from medisys.services.gateway import (
    GeminiGateway,
    create_gateway,
    GatewayError,
    GatewayTimeoutError,
)
from medisys.services.coordinator_service import CoordinatorService
from medisys.services.agent_service import AgentService
from medisys.services.conversation_service import ConversationSession, create_session

__all__ = [
    "GeminiGateway",
    "create_gateway",
    "GatewayError",
    "GatewayTimeoutError",
    "CoordinatorService",
    "AgentService",
    "ConversationSession",
    "create_session",
]
