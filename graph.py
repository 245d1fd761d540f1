"""
Main entry point for the MediSys turn pipeline.
Compatible with LangGraph Studio and console execution.
"""

from medisys import config
from medisys.console import main
from medisys.graph.builder import build_graph
from medisys.utils.logger import configure_logging, get_logger

settings = config.get_settings()
configure_logging(level=settings.log_level, use_structured=settings.structured_logs)

logger = get_logger(__name__)

logger.info("graph_build_started", mode="studio")
app = build_graph(settings=settings)
logger.info("graph_build_completed", mode="studio")


if __name__ == "__main__":
    main()
