"""
Prompt loading utilities for the generic conversation path.

System instructions live next to this module as Markdown files, one per
query type (default, accommodation, gastronomy, activities, transport).
They are wrapped by `system_template.md`, a Jinja2 template that appends the
user's accumulated preferences and the common answering guidelines.
`structured_output.md` wraps the user's message with the request for a
fenced JSON block.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Template

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent

QUERY_TYPES: tuple[str, ...] = (
    "default",
    "accommodation",
    "gastronomy",
    "activities",
    "transport",
)

FALLBACK_INSTRUCTIONS = (
    "Eres un asistente de viajes especializado en Samaná, República Dominicana, "
    "trabajando para SamanaInn.com."
)


@lru_cache(maxsize=16)
def load_prompt_file(name: str) -> str:
    """
    Load a prompt file from disk (cached per process).

    Args:
        name: File stem inside agent/prompts/

    Returns:
        File contents, or an empty string when the file is missing
    """
    prompt_path = PROMPTS_DIR / f"{name}.md"
    try:
        with open(prompt_path, "r", encoding="utf-8") as f:
            content = f.read()
        logger.debug(f"Prompt loaded | name={name} | chars={len(content)}")
        return content
    except FileNotFoundError:
        logger.error(f"Prompt file not found at {prompt_path}")
        return ""


def render_system_instructions(
    query_type: str,
    preferences: dict[str, Any] | None = None,
    last_search_count: int | None = None,
) -> str:
    """
    Build the system instructions for a query type.

    Unknown query types use the default instructions.

    Example:
        >>> text = render_system_instructions("accommodation", {"budget": "bajo"})
        >>> "- Presupuesto: bajo" in text
        True
    """
    if query_type not in QUERY_TYPES:
        query_type = "default"

    base_instructions = load_prompt_file(query_type).strip() or FALLBACK_INSTRUCTIONS
    template = Template(load_prompt_file("system_template"))
    return template.render(
        base_instructions=base_instructions,
        preferences=preferences or {},
        last_search_count=last_search_count,
    ).strip()


def render_user_prompt(user_text: str, context_snippet: str | None = None) -> str:
    """Wrap the user's message with the structured-output request."""
    template = Template(load_prompt_file("structured_output"))
    return template.render(user_text=user_text, context_snippet=context_snippet).strip()
