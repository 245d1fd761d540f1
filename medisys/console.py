"""
Console front-end: one input prompt, the agent roster, the rendered message
log and a transient status line while a turn is processing.
"""

import asyncio
import sys

from medisys import config
from medisys.config import ConfigurationError
from medisys.models.agents import AgentType
from medisys.models.domain import Message
from medisys.services.conversation_service import ConversationSession, create_session
from medisys.utils.formatting import render_message, render_roster, render_status, save_image
from medisys.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def use_color() -> bool:
    return sys.stdout.isatty()


def print_status(agent: AgentType, status_message: str) -> None:
    if status_message:
        print(render_status(agent, status_message, use_color()))


def store_image(reply: Message, directory: str) -> None:
    """Saves a generated image; a failed write is reported and the chat goes on."""
    try:
        path = save_image(reply, directory)
    except (OSError, ValueError) as e:
        logger.error(
            "image_save_failed",
            exc_info=True,
            message_id=reply.id,
            directory=directory,
            error=str(e),
        )
        print(f"Gambar tidak dapat disimpan: {e}")
        return
    print(f"Gambar disimpan di {path}")


async def run_console_chat(session: ConversationSession | None = None) -> None:
    """Async main loop for console chat interaction."""
    settings = config.get_settings()
    session = session or create_session(settings, status_listener=print_status)
    logger.info("console_mode_started", api_key_configured=settings.has_api_key)

    print("\n" + "=" * 60)
    print("MediSys AI - Sistem Rumah Sakit Terpadu")
    print("('agen' menampilkan daftar agen, 'exit' atau 'quit' untuk keluar)")
    print("=" * 60 + "\n")
    print(render_roster(session.active_agent, use_color()))
    print()
    print(render_message(session.messages[0], settings.max_display_sources))

    while True:
        try:
            question = await asyncio.to_thread(input, "\nPermintaan Anda: ")
        except (KeyboardInterrupt, EOFError):
            logger.info("conversation_interrupted_by_user")
            break

        command = question.strip().lower()
        if command in ["exit", "quit"]:
            break
        if command == "agen":
            print(render_roster(session.active_agent, use_color()))
            continue

        try:
            reply = await session.submit(question)
        except ConfigurationError as e:
            print(f"\n{e}")
            continue

        if reply is None:
            continue

        print()
        print(render_message(reply, settings.max_display_sources))
        if reply.image_url and settings.image_output_dir:
            store_image(reply, settings.image_output_dir)

    logger.info("conversation_ended", messages=len(session.messages))
    print("\nSampai jumpa. Semoga sehat selalu!")


def main() -> None:
    settings = config.get_settings()
    configure_logging(level=settings.log_level, use_structured=settings.structured_logs)
    asyncio.run(run_console_chat())


if __name__ == "__main__":
    main()
