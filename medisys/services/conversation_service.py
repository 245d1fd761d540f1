"""
Conversation service owning the message log and the transient display state.
Drives the turn pipeline graph once per user submission.
"""

import asyncio
import uuid
from typing import Any, Callable

from medisys.config import ConfigurationError, Settings, check_api_key, get_settings
from medisys.models.agents import AgentType
from medisys.models.domain import Message
from medisys.services.gateway import GeminiGateway
from medisys.utils.prompts import load_prompts
from medisys.utils.logger import get_logger, set_active_agent, set_correlation_id
from medisys.utils.metrics import MetricsTracker

logger = get_logger(__name__)
PROMPTS = load_prompts()

StatusListener = Callable[[AgentType, str], None]


class ConversationSession:
    """
    State machine for one conversation.

    Idle until a turn is submitted; processing while the graph runs. Only one
    turn can be in flight, and every turn ends back in idle with exactly one
    new model message in the log.
    """

    def __init__(
        self,
        graph: Any,
        settings: Settings,
        status_listener: StatusListener | None = None,
    ):
        """
        Initialize the session.

        Args:
            graph: Compiled turn pipeline graph
            settings: Application settings
            status_listener: Called with (active_agent, status_message) on change
        """
        self.graph = graph
        self.settings = settings
        self.status_listener = status_listener

        self.messages: list[Message] = [
            Message(
                role="model",
                content=PROMPTS["conversation"]["welcome"],
                agent=AgentType.COORDINATOR,
            )
        ]
        self.active_agent = AgentType.COORDINATOR
        self.is_processing = False
        self.status_message = ""
        self._reset_handle: asyncio.TimerHandle | None = None

    async def submit(self, text: str) -> Message | None:
        """
        Runs one turn for the submitted text.

        Args:
            text: User input

        Returns:
            The model message appended to the log, or None if the submission
            was ignored (empty input or a turn already in flight)

        Raises:
            ConfigurationError: If no API key is configured; nothing changes
        """
        if self.is_processing:
            logger.info("turn_ignored", reason="already_processing")
            return None
        if not text or not text.strip():
            logger.info("turn_ignored", reason="empty_input")
            return None
        if not check_api_key(self.settings):
            logger.error("turn_rejected", reason="missing_api_key")
            raise ConfigurationError(PROMPTS["conversation"]["missing_api_key"])

        self._cancel_idle_reset()
        set_correlation_id(uuid.uuid4().hex)
        tracker = MetricsTracker()

        self.messages.append(Message(role="user", content=text))
        self.is_processing = True
        logger.info("turn_started", log_size=len(self.messages))

        try:
            try:
                self._set_status(
                    AgentType.COORDINATOR, PROMPTS["status"]["coordinator_analyzing"]
                )
                response = await self._run_pipeline(text)
            except Exception as e:
                logger.error("turn_failed", exc_info=True, error=str(e))
                response = Message(
                    role="model",
                    content=PROMPTS["conversation"]["system_error"],
                    agent=AgentType.COORDINATOR,
                )
            self.messages.append(response)
            logger.info(
                "turn_completed",
                agent=response.agent.value if response.agent else None,
                image=response.image_url is not None,
                sources=len(response.grounding_sources or []),
            )
            return response
        finally:
            self.is_processing = False
            self._set_status(self.active_agent, "")
            self._schedule_idle_reset()
            tracker.finalize()
            set_correlation_id(None)

    async def _run_pipeline(self, query: str) -> Message:
        """Streams the graph, mirroring status updates, and builds the reply."""
        final_state: dict = {}

        async for update in self.graph.astream({"query": query}, stream_mode="updates"):
            for node_update in update.values():
                if not isinstance(node_update, dict):
                    continue
                final_state.update(node_update)
                if "active_agent" in node_update or "status_message" in node_update:
                    self._set_status(
                        node_update.get("active_agent", self.active_agent),
                        node_update.get("status_message", self.status_message),
                    )

        intent = final_state.get("intent")
        result = final_state.get("result")
        if intent is None or result is None:
            raise RuntimeError("Turn pipeline finished without an agent result")
        return Message.from_execution(intent.agent, result)

    def _set_status(self, agent: AgentType, status_message: str) -> None:
        if agent != self.active_agent:
            set_active_agent(agent.value)
        self.active_agent = agent
        self.status_message = status_message
        self._notify_listener()

    def _notify_listener(self) -> None:
        """Reports the display state; a failing listener never breaks a turn."""
        if self.status_listener is None:
            return
        try:
            self.status_listener(self.active_agent, self.status_message)
        except Exception as e:
            logger.warning(
                "status_listener_failed",
                exc_info=True,
                agent=self.active_agent.value,
                error=str(e),
            )

    def _schedule_idle_reset(self) -> None:
        delay = self.settings.idle_reset_delay
        if delay <= 0:
            self._reset_active_agent()
            return
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(delay, self._reset_active_agent)

    def _cancel_idle_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None

    def _reset_active_agent(self) -> None:
        self._reset_handle = None
        set_active_agent(None)
        self.active_agent = AgentType.COORDINATOR
        self._notify_listener()


def create_session(
    settings: Settings | None = None,
    gateway: GeminiGateway | None = None,
    status_listener: StatusListener | None = None,
) -> ConversationSession:
    """
    Builds a session with its own turn pipeline graph.

    Args:
        settings: Application settings; the global settings when omitted
        gateway: Model gateway; created from settings when omitted
        status_listener: Optional status change callback
    """
    from medisys.graph.builder import build_graph

    settings = settings or get_settings()
    graph = build_graph(gateway=gateway, settings=settings)
    return ConversationSession(graph, settings, status_listener=status_listener)
