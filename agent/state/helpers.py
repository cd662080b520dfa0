"""
Context management helper functions for ConversationContext.

This module owns the single merge function used to fold the context patch
returned by a pipeline stage into the persisted conversation context, plus
small helpers for history windowing.
"""

import logging
from typing import Any

from agent.models import ProcessingStage
from agent.state.schemas import ConversationContext, HistoryTurn

logger = logging.getLogger(__name__)

# Default number of previous turns kept when prompting the completion provider
MAX_HISTORY_TURNS = 20


def new_context() -> ConversationContext:
    """Return the context of a conversation that has not been routed yet."""
    return {"processing_stage": ProcessingStage.INITIAL.value}


def merge_context(
    current: ConversationContext | None,
    patch: dict[str, Any] | None,
) -> ConversationContext:
    """
    Merge a partial context over the current one.

    Rules:
    1. Keys present in `patch` replace those in `current`
    2. `user_preferences` is merged key by key; `interests` keeps the
       existing order and appends new entries
    3. `active_agents` is append-only: new names are appended, names
       already present are not repeated

    Neither argument is mutated. Merging with an empty patch returns a
    context equal to `current`.

    Args:
        current: Persisted context (None is treated as empty)
        patch: Partial context returned by a stage

    Returns:
        New ConversationContext

    Example:
        >>> ctx = {"processing_stage": "initial", "active_agents": ["coordinator"]}
        >>> merge_context(ctx, {"processing_stage": "query", "active_agents": ["query"]})
        {'processing_stage': 'query', 'active_agents': ['coordinator', 'query']}
    """
    merged: dict[str, Any] = dict(current or {})

    for key, value in (patch or {}).items():
        if key == "user_preferences":
            merged[key] = _merge_preferences(merged.get(key), value)
        elif key == "active_agents":
            merged[key] = _append_agents(merged.get(key), value)
        else:
            merged[key] = value

    return merged  # type: ignore[return-value]


def _merge_preferences(
    current: dict[str, Any] | None,
    update: dict[str, Any] | None,
) -> dict[str, Any]:
    merged = dict(current or {})
    for key, value in (update or {}).items():
        if key == "interests":
            interests = list(merged.get("interests") or [])
            interests.extend(item for item in (value or []) if item not in interests)
            merged["interests"] = interests
        else:
            merged[key] = value
    return merged


def _append_agents(current: list[str] | None, new: list[str] | None) -> list[str]:
    agents = list(current or [])
    agents.extend(name for name in (new or []) if name not in agents)
    return agents


def limit_history(
    history: list[HistoryTurn] | None,
    max_turns: int = MAX_HISTORY_TURNS,
) -> list[HistoryTurn]:
    """
    Keep only the most recent `max_turns` turns (FIFO windowing).

    Args:
        history: Chronologically ordered turns (oldest first)
        max_turns: Window size

    Returns:
        New list with at most `max_turns` entries
    """
    if not history:
        return []
    if len(history) <= max_turns:
        return list(history)

    logger.debug(
        f"History windowed | total={len(history)} | kept={max_turns}"
    )
    return list(history[-max_turns:])
