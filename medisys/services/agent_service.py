"""
Agent service executing a routed prompt with the chosen specialised agent.
Text agents (AIP, APK, PDM) share one path configured per agent; PAVM
generates an image.
"""

from typing import Awaitable, Callable

from medisys.config import Settings
from medisys.models.agents import AgentType, DISPATCHABLE_AGENTS
from medisys.models.schemas import ExecutionResult, InlineImagePart, TextPart
from medisys.services.gateway import GeminiGateway
from medisys.utils.prompts import load_prompts
from medisys.utils.logger import get_logger

logger = get_logger(__name__)
PROMPTS = load_prompts()

AgentHandler = Callable[[AgentType, str], Awaitable[ExecutionResult]]


class AgentService:
    """
    Runs the second model call of a turn.
    Model failures are turned into apology text and never raised.
    """

    def __init__(self, gateway: GeminiGateway, settings: Settings):
        """
        Initialize agent service.

        Args:
            gateway: Model gateway
            settings: Model names and image options

        Raises:
            ValueError: If a dispatchable agent has no handler
        """
        self.gateway = gateway
        self.text_model = settings.agent_model
        self.image_model = settings.image_model
        self.image_aspect_ratio = settings.image_aspect_ratio

        self.handlers: dict[AgentType, AgentHandler] = {
            AgentType.AIP: self._run_text_agent,
            AgentType.APK: self._run_text_agent,
            AgentType.PDM: self._run_text_agent,
            AgentType.PAVM: self._run_visual_agent,
        }
        missing = [a.value for a in DISPATCHABLE_AGENTS if a not in self.handlers]
        if missing:
            raise ValueError(f"No handler registered for agents: {missing}")

    async def execute(self, agent: AgentType, prompt: str) -> ExecutionResult:
        """
        Executes the prompt with the given agent.

        Args:
            agent: Dispatchable agent chosen by the coordinator
            prompt: Refined prompt

        Returns:
            ExecutionResult; apology text if the model call failed

        Raises:
            ValueError: If agent is not dispatchable (e.g. COORDINATOR)
        """
        handler = self.handlers.get(agent)
        if handler is None:
            raise ValueError(f"Agent {agent.value} cannot execute requests")

        logger.info("agent_execution_started", agent=agent.value)
        return await handler(agent, prompt)

    async def _run_visual_agent(self, agent: AgentType, prompt: str) -> ExecutionResult:
        visual = PROMPTS["agents"][agent.value]
        try:
            response = await self.gateway.generate(
                prompt,
                model=self.image_model,
                image_aspect_ratio=self.image_aspect_ratio,
            )
        except Exception as e:
            logger.error("visual_generation_failed", exc_info=True, error=str(e))
            return ExecutionResult(text=visual["failure_message"])

        image_url = None
        text = visual["default_caption"]
        for part in response.parts:
            if isinstance(part, InlineImagePart):
                image_url = part.to_data_uri()
            elif isinstance(part, TextPart):
                text = part.text

        if image_url is None:
            logger.warning("visual_generation_no_image", parts=len(response.parts))
            return ExecutionResult(text=visual["failure_message"])

        logger.info("agent_execution_completed", agent=agent.value, image=True)
        return ExecutionResult(text=text, image_url=image_url)

    async def _run_text_agent(self, agent: AgentType, prompt: str) -> ExecutionResult:
        profile = PROMPTS["agents"][agent.value]
        try:
            response = await self.gateway.generate(
                prompt,
                model=self.text_model,
                system_instruction=profile["system_instruction"],
                use_search=profile["use_search"],
            )
        except Exception as e:
            logger.error(
                "agent_execution_failed", exc_info=True, agent=agent.value, error=str(e)
            )
            return ExecutionResult(text=PROMPTS["agent_responses"]["execution_failure"])

        sources = list(response.grounding_sources) if profile["use_search"] else []
        logger.info(
            "agent_execution_completed",
            agent=agent.value,
            grounding_sources=len(sources),
        )
        return ExecutionResult(
            text=response.text or PROMPTS["agent_responses"]["empty_response"],
            grounding_sources=sources or None,
        )
