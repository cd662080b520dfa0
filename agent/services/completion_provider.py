"""
Completion Provider - LLM access for the generic conversation path.

The provider receives system instructions, the windowed history and the
user's message, and returns a CompletionResult. The model is asked to emit a
fenced ```json block (intent, action, user_preferences, suggested_questions)
followed by the text for the user. Parsing is best-effort: missing or broken
structured data falls back to defaults, it never fails the turn.

Every call is bounded by LLM_TIMEOUT_SECONDS. Timeouts and provider errors
surface as CompletionProviderError.
"""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from agent.prompts import render_user_prompt
from agent.state.schemas import HistoryTurn
from shared.config import get_settings

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

DEFAULT_CONFIDENCE = 0.7

DEFAULT_SUGGESTED_QUESTIONS: tuple[str, ...] = (
    "¿Qué puedo hacer en Samaná?",
    "¿Dónde puedo alojarme en Samaná?",
    "¿Cuáles son los mejores restaurantes?",
)

UNPARSEABLE_MESSAGE = (
    "Lo siento, no pude procesar tu consulta correctamente. ¿Podrías reformularla?"
)

_JSON_BLOCK_RE = re.compile(r"```json\s*(.*?)```", re.DOTALL)
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class CompletionProviderError(Exception):
    """Raised when the provider times out or fails."""


@dataclass
class CompletionRequest:
    """Input of a single completion call."""

    system_instructions: str
    history: list[HistoryTurn] = field(default_factory=list)
    user_text: str = ""
    context_snippet: str | None = None
    query_type: str = "default"


@dataclass
class CompletionResult:
    """Parsed completion: user-facing text plus structured hints."""

    text: str
    intent: dict[str, Any] = field(default_factory=dict)
    suggested_action: dict[str, Any] | None = None
    user_preferences: dict[str, Any] = field(default_factory=dict)
    suggested_questions: list[str] = field(default_factory=list)


class CompletionProvider(ABC):
    """Abstract LLM backend."""

    @abstractmethod
    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """Run one completion; raises CompletionProviderError on failure."""


# ============================================================================
# Parsing
# ============================================================================


def _load_json(raw: str) -> dict[str, Any] | None:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        match = _JSON_OBJECT_RE.search(raw)
        if not match:
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None


def parse_structured_completion(content: str, query_type: str = "default") -> CompletionResult:
    """
    Split a raw completion into structured data and user-facing text.

    Args:
        content: Raw model output
        query_type: Query type used for the default intent

    Returns:
        CompletionResult with defaults for every missing structured field

    Example:
        >>> raw = '```json\\n{"intent": {"type": "gastronomy", "confidence": 0.9}}\\n```\\nHola'
        >>> parse_structured_completion(raw).text
        'Hola'
    """
    content = content or ""
    structured: dict[str, Any] | None = None
    text = content

    match = _JSON_BLOCK_RE.search(content)
    if match:
        structured = _load_json(match.group(1))
        text = (content[: match.start()] + content[match.end():]).strip()
        if structured is None:
            logger.warning(f"Structured block could not be parsed | query_type={query_type}")

    structured = structured or {}
    text = text.strip() or UNPARSEABLE_MESSAGE

    default_type = "general" if query_type == "default" else query_type
    intent = structured.get("intent")
    if not isinstance(intent, dict) or not intent.get("type"):
        intent = {"type": default_type, "confidence": DEFAULT_CONFIDENCE}

    action = structured.get("action")
    if not isinstance(action, dict) or not action.get("type"):
        action = None

    preferences = structured.get("user_preferences")
    if not isinstance(preferences, dict):
        preferences = {}
    preferences = {key: value for key, value in preferences.items() if value}

    questions = structured.get("suggested_questions")
    if not isinstance(questions, list) or not questions:
        questions = list(DEFAULT_SUGGESTED_QUESTIONS)
    questions = [str(question) for question in questions][:3]

    return CompletionResult(
        text=text,
        intent=intent,
        suggested_action=action,
        user_preferences=preferences,
        suggested_questions=questions,
    )


# ============================================================================
# OpenRouter implementation
# ============================================================================


class OpenRouterCompletionProvider(CompletionProvider):
    """CompletionProvider backed by ChatOpenAI pointed at OpenRouter."""

    def __init__(self, llm: ChatOpenAI | None = None, timeout_seconds: float | None = None):
        settings = get_settings()
        self.llm = llm or ChatOpenAI(
            model=settings.LLM_MODEL,
            base_url=OPENROUTER_BASE_URL,
            api_key=settings.OPENROUTER_API_KEY,
            temperature=settings.LLM_TEMPERATURE,
            max_tokens=settings.LLM_MAX_TOKENS,
            request_timeout=settings.LLM_TIMEOUT_SECONDS,
            max_retries=2,
            default_headers={
                "HTTP-Referer": settings.SITE_URL,
                "X-Title": settings.SITE_NAME,
            },
        )
        self.timeout_seconds = timeout_seconds or settings.LLM_TIMEOUT_SECONDS

    @staticmethod
    def build_messages(request: CompletionRequest) -> list[BaseMessage]:
        messages: list[BaseMessage] = [SystemMessage(content=request.system_instructions)]
        for turn in request.history:
            content = turn.get("content") or ""
            if turn.get("role") == "user":
                messages.append(HumanMessage(content=content))
            else:
                messages.append(AIMessage(content=content))
        messages.append(
            HumanMessage(content=render_user_prompt(request.user_text, request.context_snippet))
        )
        return messages

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        messages = self.build_messages(request)

        try:
            response = await asyncio.wait_for(
                self.llm.ainvoke(messages), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Completion timed out | query_type={request.query_type} | "
                f"timeout={self.timeout_seconds}s"
            )
            raise CompletionProviderError("Completion timed out") from e
        except Exception as e:
            logger.error(
                f"Completion failed | query_type={request.query_type} | error={e}",
                exc_info=True,
            )
            raise CompletionProviderError(str(e)) from e

        content = response.content
        if isinstance(content, list):
            content = "".join(
                part.get("text", "") if isinstance(part, dict) else str(part)
                for part in content
            )

        logger.info(
            f"Completion received | query_type={request.query_type} | chars={len(content)}"
        )
        return parse_structured_completion(content, request.query_type)
