"""
Coordinator service: classifies a user query into one of the specialised
agents and rewrites the prompt for it.
"""

from pydantic import ValidationError

from medisys.models.agents import AgentType
from medisys.models.schemas import IntentResult, intent_response_schema
from medisys.services.gateway import GeminiGateway
from medisys.utils.prompts import load_prompts
from medisys.utils.logger import get_logger

logger = get_logger(__name__)
PROMPTS = load_prompts()


class CoordinatorService:
    """
    Routes each query with a single structured-output model call.
    Any failure resolves to a fixed fallback routing to AIP.
    """

    def __init__(self, gateway: GeminiGateway, model: str, temperature: float = 0.1):
        """
        Initialize coordinator service.

        Args:
            gateway: Model gateway
            model: Model used for classification
            temperature: Sampling temperature (low for stable routing)
        """
        self.gateway = gateway
        self.model = model
        self.temperature = temperature
        self.system_instruction = PROMPTS["coordinator"]["system_instruction"]
        self.response_schema = intent_response_schema(
            PROMPTS["coordinator"]["field_descriptions"]
        )

    async def classify(self, user_query: str) -> IntentResult:
        """
        Classifies a query and returns the routing decision.

        Args:
            user_query: Raw text submitted by the user

        Returns:
            IntentResult for a dispatchable agent; the fallback result if the
            model call fails or returns something unusable
        """
        logger.info("intent_classification_started", query_length=len(user_query))

        try:
            response = await self.gateway.generate(
                user_query,
                model=self.model,
                system_instruction=self.system_instruction,
                response_schema=self.response_schema,
                temperature=self.temperature,
            )
        except Exception as e:
            logger.error("intent_classification_failed", exc_info=True, error=str(e))
            return self.fallback(user_query)

        if not response.text:
            logger.warning("intent_classification_empty", fallback=AgentType.AIP.value)
            return self.fallback(user_query)

        try:
            intent = IntentResult.model_validate_json(response.text)
        except ValidationError as e:
            logger.warning(
                "intent_classification_unparsable",
                error=str(e),
                fallback=AgentType.AIP.value,
            )
            return self.fallback(user_query)

        logger.info(
            "intent_classification_completed",
            agent=intent.agent.value,
            reasoning=intent.reasoning,
        )
        return intent

    @staticmethod
    def fallback(user_query: str) -> IntentResult:
        """Fixed routing used when classification fails."""
        return IntentResult(
            agent=AgentType.AIP,
            reasoning=PROMPTS["coordinator"]["fallback_reasoning"],
            refined_prompt=user_query,
        )
