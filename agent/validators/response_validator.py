"""
Response Validator - Terminal stage of every turn.

Checks applied in order:
1. Error responses pass through unchanged
2. Empty message → fixed fallback apology
3. Message capped at 2000 characters
4. Disallowed content → whole message replaced by a fixed refusal
5. Relevance: a topic lead-in is prepended when the message mentions none
   of the intent's keywords
6. UI normalization (banner defaults, button/URL pairing, at most three
   suggested questions)
7. Results normalization (at most ten, title placeholder, truncated texts)
8. validated_by stamp

Validating an already validated response changes nothing.
"""

import logging
import re
import time
from dataclasses import replace
from typing import Any

from agent.models import IntentType, Response

logger = logging.getLogger(__name__)

VALIDATOR_NAME = "ResponseValidator"

MAX_MESSAGE_LENGTH = 2000
MAX_RESULTS = 10
MAX_SUGGESTED_QUESTIONS = 3
CONTENT_LIMIT = 300
SHORT_DESC_LIMIT = 150
ELLIPSIS = "..."

FALLBACK_MESSAGE = (
    "Lo siento, no puedo proporcionar una respuesta en este momento. "
    "¿Hay algo más en lo que pueda ayudarte?"
)
REFUSAL_MESSAGE = (
    "Lo siento, no puedo proporcionar ese tipo de información. "
    "¿Puedo ayudarte con otra consulta relacionada con Samaná?"
)
VALIDATION_ERROR_MESSAGE = "Ocurrió un error durante la validación de la respuesta"
UNTITLED_RESULT = "Elemento sin título"

# Matched as substrings
FORBIDDEN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"contraseña|password|credencial", re.IGNORECASE),
    re.compile(r"datos personales|información privada", re.IGNORECASE),
    re.compile(r"whatsapp|telegram|número personal", re.IGNORECASE),
)

RELEVANCE_KEYWORDS: dict[str, tuple[str, ...]] = {
    IntentType.ACCOMMODATION.value: ("alojamiento", "hotel", "apartamento", "casa", "habitación", "villa"),
    IntentType.GASTRONOMY.value: ("restaurante", "comida", "gastronomía", "cocina", "comer"),
    IntentType.ACTIVITIES.value: ("excursión", "tour", "actividad", "visita", "aventura"),
    IntentType.TRANSPORT.value: ("vehículo", "coche", "carro", "transporte", "traslado"),
    IntentType.INFORMATION.value: ("samaná", "república dominicana", "información", "lugar", "destino"),
}

RELEVANCE_PREFIXES: dict[str, str] = {
    IntentType.ACCOMMODATION.value: "Respecto a tu consulta sobre alojamiento en Samaná: ",
    IntentType.GASTRONOMY.value: "En cuanto a los restaurantes y opciones gastronómicas en Samaná: ",
    IntentType.ACTIVITIES.value: "Sobre las actividades y excursiones disponibles en Samaná: ",
    IntentType.TRANSPORT.value: "En relación con las opciones de transporte en Samaná: ",
    IntentType.INFORMATION.value: "Acerca de tu consulta sobre Samaná: ",
}

# Fixed texts produced here are never re-prefixed
_VALIDATOR_TEXTS = frozenset({FALLBACK_MESSAGE, REFUSAL_MESSAGE})

DEFAULT_BANNER_TYPE = "general"
BANNER_TITLES: dict[str, str] = {
    "general": "Bienvenido a SamanaInn",
    IntentType.ACCOMMODATION.value: "Alojamientos en Samaná",
    IntentType.GASTRONOMY.value: "Gastronomía de Samaná",
    IntentType.ACTIVITIES.value: "Actividades y Excursiones en Samaná",
    IntentType.TRANSPORT.value: "Transporte en Samaná",
    IntentType.INFORMATION.value: "Descubre Samaná",
}

# Buttons that may only be shown together with a URL
PAIRED_BUTTONS: tuple[str, ...] = ("booking", "detail", "pricing")

DEFAULT_SUGGESTED_QUESTIONS: tuple[str, ...] = (
    "¿Qué puedo hacer en Samaná?",
    "¿Dónde puedo alojarme en Samaná?",
    "¿Cuál es la mejor época para visitar Samaná?",
)
ERROR_SUGGESTED_QUESTIONS: tuple[str, ...] = (
    "¿Qué puedo hacer en Samaná?",
    "¿Dónde puedo alojarme en Samaná?",
    "¿Cuáles son los mejores restaurantes en Samaná?",
)


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


class ResponseValidator:
    """Stateless post-processor applied to every outgoing Response."""

    def validate(
        self,
        response: Response,
        raw_text: str = "",
        context: dict[str, Any] | None = None,
    ) -> Response:
        """
        Validate and normalize a response.

        Args:
            response: Response produced by a responder or the Coordinator
            raw_text: The user's message
            context: Conversation context (intent used for relevance)

        Returns:
            New Response; the input is not modified
        """
        if response.error:
            return response

        started = time.perf_counter()
        try:
            message = self.validate_message(response.message, context or {})
            validated = replace(
                response,
                message=message,
                ui=self.validate_ui(response.ui),
                results=self.validate_results(response.results),
                validated_by=VALIDATOR_NAME,
            )
        except Exception as e:
            logger.error(f"Response validation failed | error={e}", exc_info=True)
            return Response(
                message=VALIDATION_ERROR_MESSAGE,
                error=True,
                ui={"suggested_questions": list(ERROR_SUGGESTED_QUESTIONS)},
            )

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"Response validated | chars={len(validated.message)} | "
            f"results={len(validated.results or [])} | "
            f"rewritten={validated.message != response.message} | "
            f"elapsed_ms={elapsed_ms:.2f}"
        )
        return validated

    # ========================================================================
    # Message
    # ========================================================================

    def validate_message(self, message: str | None, context: dict[str, Any]) -> str:
        if not message:
            message = FALLBACK_MESSAGE

        message = _truncate(message, MAX_MESSAGE_LENGTH)

        if any(pattern.search(message) for pattern in FORBIDDEN_PATTERNS):
            logger.warning("Disallowed content replaced in outgoing message")
            return REFUSAL_MESSAGE

        if message in _VALIDATOR_TEXTS:
            return message

        intent_type = ((context.get("intent") or {}).get("type")) or ""
        keywords = RELEVANCE_KEYWORDS.get(intent_type, ())
        if keywords:
            lower = message.lower()
            if not any(keyword in lower for keyword in keywords):
                message = _truncate(RELEVANCE_PREFIXES[intent_type] + message, MAX_MESSAGE_LENGTH)

        return message

    # ========================================================================
    # UI
    # ========================================================================

    @staticmethod
    def validate_ui(ui: dict[str, Any] | None) -> dict[str, Any]:
        validated = dict(ui or {})

        if validated.get("update_banner"):
            if validated.get("banner_type") not in BANNER_TITLES:
                validated["banner_type"] = DEFAULT_BANNER_TYPE
            if not validated.get("banner_title"):
                validated["banner_title"] = BANNER_TITLES[validated["banner_type"]]

        for button in PAIRED_BUTTONS:
            if validated.get(f"show_{button}_button") and not validated.get(f"{button}_button_url"):
                validated[f"show_{button}_button"] = False

        questions = validated.get("suggested_questions")
        if isinstance(questions, list):
            validated["suggested_questions"] = questions[:MAX_SUGGESTED_QUESTIONS]
        else:
            validated["suggested_questions"] = list(DEFAULT_SUGGESTED_QUESTIONS)

        return validated

    # ========================================================================
    # Results
    # ========================================================================

    @staticmethod
    def validate_results(results: Any) -> list[dict[str, Any]] | None:
        if results is None:
            return None
        if not isinstance(results, list):
            return []

        validated: list[dict[str, Any]] = []
        for result in results[:MAX_RESULTS]:
            if not isinstance(result, dict):
                logger.warning(f"Result entry dropped | type={type(result).__name__}")
                continue
            record = dict(result)
            if not record.get("title"):
                record["title"] = UNTITLED_RESULT
            if isinstance(record.get("content"), str):
                record["content"] = _truncate(record["content"], CONTENT_LIMIT)
            if isinstance(record.get("short_desc"), str):
                record["short_desc"] = _truncate(record["short_desc"], SHORT_DESC_LIMIT)
            validated.append(record)
        return validated
