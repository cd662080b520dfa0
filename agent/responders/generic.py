"""
Generic Responder - Completion-provider-backed answers.

Used for turns with no bound processing stage (after a "general" first turn
or when the stage is unknown). Text generation and structured-field
extraction are delegated to the CompletionProvider; this module only picks
the query type, renders the instructions and turns the CompletionResult
into a Response with a context patch.
"""

import logging
from typing import Any

from agent.models import (
    TOPIC_INTENTS,
    TOPIC_SEARCH_TYPES,
    IntentType,
    ProcessingStage,
    ResponderName,
    Response,
)
from agent.prompts import render_system_instructions
from agent.services.completion_provider import (
    CompletionProvider,
    CompletionProviderError,
    CompletionRequest,
    CompletionResult,
)
from agent.state.helpers import MAX_HISTORY_TURNS, limit_history
from agent.state.schemas import HistoryTurn

logger = logging.getLogger(__name__)

ERROR_MESSAGE = (
    "Lo siento, he tenido un problema al generar una respuesta. "
    "¿Podrías intentarlo de nuevo o formular tu consulta de otra manera?"
)

DEFAULT_QUERY_TYPE = "default"

# Checked in order when the context carries no intent
QUERY_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("accommodation", ("hotel", "alojamiento", "habitación", "hospedaje", "apartamento", "villa")),
    ("gastronomy", ("restaurante", "comer", "comida", "gastronomía")),
    ("activities", ("actividad", "excursión", "tour", "visitar")),
    ("transport", ("transporte", "coche", "carro", "llegar")),
)

SEARCH_ACTION = "search"


def infer_query_type(text: str, context: dict[str, Any] | None = None) -> str:
    """
    Query type for the prompt: the context intent when present, otherwise
    a keyword guess, otherwise "default".
    """
    intent = (context or {}).get("intent") or {}
    if intent.get("type"):
        return intent["type"]

    lower = (text or "").lower()
    for query_type, keywords in QUERY_TYPE_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return query_type
    return DEFAULT_QUERY_TYPE


def build_context_snippet(context: dict[str, Any]) -> str | None:
    """Short summary of the carried context appended to the user prompt."""
    parts: list[str] = []
    last_search = context.get("last_search") or {}
    if last_search.get("type"):
        parts.append(
            f"última búsqueda de tipo {last_search['type']} "
            f"con {last_search.get('result_count', 0)} resultados"
        )
    if context.get("current_query_type"):
        parts.append(f"tema actual {context['current_query_type']}")
    return ", ".join(parts) or None


class GenericResponder:
    """Wraps a CompletionProvider behind the responder interface."""

    name = ResponderName.GENERIC

    def __init__(self, provider: CompletionProvider, max_history: int = MAX_HISTORY_TURNS):
        self.provider = provider
        self.max_history = max_history

    async def respond(
        self,
        params: dict[str, Any] | None,
        text: str,
        history: list[HistoryTurn] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Response:
        """
        Answer a free-form turn through the completion provider.

        Args:
            params: Unused, kept for a uniform responder signature
            text: User message
            history: Previous turns (windowed before prompting)
            context: Conversation context (read-only)

        Returns:
            Response with suggested questions and a context patch; an
            apology with error=True when the provider fails
        """
        context = context or {}
        query_type = infer_query_type(text, context)

        try:
            last_search = context.get("last_search") or {}
            request = CompletionRequest(
                system_instructions=render_system_instructions(
                    query_type,
                    preferences=context.get("user_preferences"),
                    last_search_count=last_search.get("result_count"),
                ),
                history=limit_history(history, self.max_history),
                user_text=text,
                context_snippet=build_context_snippet(context),
                query_type=query_type,
            )
            result = await self.provider.complete(request)

        except CompletionProviderError as e:
            logger.warning(f"Generic responder provider failure | query_type={query_type} | error={e}")
            return Response(message=ERROR_MESSAGE, error=True)
        except Exception as e:
            logger.error(f"Generic responder failed | query_type={query_type} | error={e}", exc_info=True)
            return Response(message=ERROR_MESSAGE, error=True)

        logger.info(
            f"Generic response | query_type={query_type} | "
            f"intent={result.intent.get('type')} | "
            f"action={(result.suggested_action or {}).get('type')}"
        )
        return Response(
            message=result.text,
            ui={"suggested_questions": list(result.suggested_questions)},
            context=self._context_patch(result, query_type),
        )

    def _context_patch(self, result: CompletionResult, query_type: str) -> dict[str, Any]:
        patch: dict[str, Any] = {
            "intent": dict(result.intent),
            "current_query_type": query_type,
            "active_agents": [self.name.value],
        }
        if result.user_preferences:
            patch["user_preferences"] = dict(result.user_preferences)
        if result.suggested_action:
            patch["last_action"] = dict(result.suggested_action)

        topic = self._search_topic(result)
        if topic is not None:
            action_params = result.suggested_action.get("parameters") or {}
            patch["processing_stage"] = ProcessingStage.QUERY.value
            patch["query_params"] = {
                **(action_params if isinstance(action_params, dict) else {}),
                "search_type": TOPIC_SEARCH_TYPES[topic].value,
                "topic": topic.value,
            }
        return patch

    @staticmethod
    def _search_topic(result: CompletionResult) -> IntentType | None:
        """Topic to bind when the model asks for a catalog search."""
        if not result.suggested_action or result.suggested_action.get("type") != SEARCH_ACTION:
            return None
        try:
            topic = IntentType(result.intent.get("type"))
        except ValueError:
            return None
        return topic if topic in TOPIC_INTENTS else None
