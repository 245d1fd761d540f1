"""
Plain-text rendering of conversation messages and the agent roster for the
console front-end.
"""

import base64
import binascii
import mimetypes
import re
from pathlib import Path

from medisys.models.agents import AGENTS, AgentDefinition, AgentType, get_agent
from medisys.models.domain import Message
from medisys.models.schemas import GroundingSource
from medisys.utils.prompts import load_prompts

PROMPTS = load_prompts()

DATA_URI_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>.+)$", re.DOTALL)

# Console colours for the registry colour tags, keyed by colour family
ANSI_COLORS = {
    "blue": "34",
    "emerald": "32",
    "amber": "33",
    "purple": "35",
    "rose": "31",
}


def parse_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Splits a base64 data URI into MIME type and decoded bytes.

    Raises:
        ValueError: If the URI is not a valid base64 data URI
    """
    match = DATA_URI_PATTERN.match(uri)
    if not match:
        raise ValueError("Not a base64 data URI")
    try:
        payload = base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e
    return match.group("mime"), payload


def display_sources(message: Message, limit: int = 3) -> list[GroundingSource]:
    """Sources shown under a message; the message keeps the full list."""
    return list(message.grounding_sources or [])[:limit]


def save_image(message: Message, directory: str | Path) -> Path | None:
    """
    Writes the message's generated image to directory.

    Returns:
        Path of the written file, or None if the message has no image
    """
    if not message.image_url:
        return None
    mime_type, data = parse_data_uri(message.image_url)
    extension = mimetypes.guess_extension(mime_type) or ".bin"
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{message.id}{extension}"
    path.write_bytes(data)
    return path


def render_message(message: Message, max_sources: int = 3) -> str:
    """Renders a message as console text."""
    if message.role == "user":
        header = "Anda"
    elif message.agent is not None:
        header = get_agent(message.agent).full_name
    else:
        header = "AI"

    lines = [f"[{header}]", message.content]

    if message.image_url:
        mime_type, data = parse_data_uri(message.image_url)
        lines.append(f"(gambar {mime_type}, {len(data)} bytes)")

    sources = display_sources(message, max_sources)
    if message.role == "model" and sources:
        lines.append("")
        lines.append(PROMPTS["conversation"]["sources_heading"])
        lines.extend(f"  - {source.title or source.uri} <{source.uri}>" for source in sources)

    return "\n".join(lines)


def colorize(text: str, color_tag: str, enabled: bool = True) -> str:
    """Wraps text in the ANSI colour matching a tag such as "bg-emerald-500"."""
    if not enabled:
        return text
    parts = color_tag.split("-")
    family = parts[1] if len(parts) > 1 and parts[0] == "bg" else color_tag
    code = ANSI_COLORS.get(family)
    if code is None:
        return text
    return f"\033[{code}m{text}\033[0m"


def render_agent(agent: AgentDefinition, active: bool = False, use_color: bool = False) -> str:
    """One roster line; the active agent is marked and labelled."""
    marker = ">" if active else " "
    name = colorize(f"{agent.name:<11}", agent.color, use_color)
    line = f" {marker} [{agent.icon}] {name} {agent.full_name}"
    if active:
        line += " (aktif)"
    return line


def render_roster(active_agent: AgentType | None = None, use_color: bool = False) -> str:
    """
    Renders every agent with its description, marking the active one.
    """
    lines = [PROMPTS["conversation"]["roster_heading"]]
    for agent in AGENTS.values():
        lines.append(render_agent(agent, agent.id == active_agent, use_color))
        lines.append(f"      {agent.description}")
    return "\n".join(lines)


def render_status(agent: AgentType, status_message: str, use_color: bool = False) -> str:
    """Transient status line naming the active agent."""
    definition = get_agent(agent)
    name = colorize(definition.name, definition.color, use_color)
    return f"  ... > [{definition.icon}] {name}: {status_message}"
