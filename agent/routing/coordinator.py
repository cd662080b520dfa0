"""
Coordinator - First-turn routing.

Classifies the message, records which responders the conversation involves,
answers with a fixed per-intent clarifying message and banner, and emits the
NextAction the TurnDispatcher executes in the same turn:

    accommodation / gastronomy / activities / transport
        → query {search_type, topic, hints}
        → booking {type, check_in, adults} when the message asks to book
    information
        → query {search_type: information, topic: information, name}
    general
        → no action; the stage moves to "generic"
"""

import logging
from typing import Any

from agent.classification.keyword_classifier import KeywordClassifier
from agent.classification.preference_extractor import GENERAL_EXTRACTOR
from agent.models import (
    TOPIC_INTENTS,
    ActionType,
    Intent,
    IntentType,
    NextAction,
    ProcessingStage,
    ResponderName,
    Response,
)
from agent.state.schemas import HistoryTurn

logger = logging.getLogger(__name__)

ERROR_MESSAGE = (
    "Lo siento, he tenido un problema al procesar tu consulta. "
    "¿Podrías intentarlo de nuevo o formularla de otra manera?"
)

# Responders involved per intent; the validator is always last
ACTIVE_AGENTS: dict[IntentType, tuple[ResponderName, ...]] = {
    IntentType.ACCOMMODATION: (
        ResponderName.QUERY, ResponderName.BOOKING, ResponderName.LODGING, ResponderName.VALIDATOR,
    ),
    IntentType.GASTRONOMY: (ResponderName.QUERY, ResponderName.FOOD, ResponderName.VALIDATOR),
    IntentType.ACTIVITIES: (ResponderName.QUERY, ResponderName.ACTIVITIES, ResponderName.VALIDATOR),
    IntentType.TRANSPORT: (ResponderName.QUERY, ResponderName.TRANSPORT, ResponderName.VALIDATOR),
    IntentType.INFORMATION: (ResponderName.QUERY, ResponderName.VALIDATOR),
    IntentType.GENERAL: (ResponderName.QUERY, ResponderName.VALIDATOR),
}

INITIAL_MESSAGES: dict[IntentType, str] = {
    IntentType.ACCOMMODATION: (
        "Entiendo que estás buscando alojamiento en Samaná. Tenemos varias opciones que podrían "
        "interesarte. ¿Podrías decirme para qué fechas estás buscando, cuántas personas son y si "
        "tienes alguna preferencia de ubicación o tipo de alojamiento?"
    ),
    IntentType.GASTRONOMY: (
        "Samaná tiene una excelente oferta gastronómica. Puedo ayudarte a encontrar restaurantes "
        "según tus preferencias. ¿Buscas algún tipo de cocina en particular, como comida "
        "dominicana, mariscos o internacional? ¿Tienes alguna preferencia de ubicación o "
        "presupuesto?"
    ),
    IntentType.ACTIVITIES: (
        "Samaná ofrece muchas actividades y excursiones interesantes. Desde avistamiento de "
        "ballenas (en temporada) hasta visitas al Parque Nacional Los Haitises o la cascada Salto "
        "El Limón. ¿Hay algún tipo de actividad que te interese especialmente?"
    ),
    IntentType.TRANSPORT: (
        "Puedo ayudarte con opciones de transporte en Samaná. ¿Estás interesado en alquilar un "
        "vehículo, conocer sobre el transporte público o quizás necesitas un servicio de traslado "
        "desde el aeropuerto?"
    ),
    IntentType.INFORMATION: (
        "Samaná es una hermosa península en el noreste de República Dominicana conocida por sus "
        "playas paradisíacas, naturaleza exuberante y experiencias únicas. ¿Hay algo específico "
        "sobre Samaná que te gustaría conocer?"
    ),
    IntentType.GENERAL: (
        "¡Bienvenido a SamanaInn! Puedo ayudarte a encontrar alojamiento, restaurantes, "
        "actividades o información sobre Samaná. ¿En qué puedo asistirte hoy?"
    ),
}

SUGGESTED_QUESTIONS: dict[IntentType, tuple[str, ...]] = {
    IntentType.ACCOMMODATION: (
        "¿Qué hoteles hay cerca de la playa?",
        "¿Dónde puedo encontrar alojamiento para familias?",
        "¿Cuáles son los alojamientos con mejor relación calidad-precio?",
    ),
    IntentType.GASTRONOMY: (
        "¿Dónde puedo comer comida típica dominicana?",
        "¿Cuáles son los mejores restaurantes de mariscos?",
        "¿Hay restaurantes con vistas al mar?",
    ),
    IntentType.ACTIVITIES: (
        "¿Qué excursiones hay para ver ballenas?",
        "¿Cómo puedo visitar El Limón?",
        "¿Qué actividades se recomiendan para familias?",
    ),
    IntentType.TRANSPORT: (
        "¿Dónde puedo alquilar un coche?",
        "¿Hay servicio de traslado desde el aeropuerto?",
        "¿Cuál es la mejor manera de moverse por Samaná?",
    ),
}
DEFAULT_QUESTIONS: tuple[str, ...] = (
    "¿Qué puedo hacer en Samaná?",
    "¿Cuál es la mejor época para visitar Samaná?",
    "¿Dónde están las mejores playas?",
)


class Coordinator:
    """Stateless first-turn router."""

    name = ResponderName.COORDINATOR

    def __init__(self, classifier: KeywordClassifier | None = None):
        self.classifier = classifier or KeywordClassifier()

    def route(
        self,
        message: str,
        history: list[HistoryTurn] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Response:
        """
        Route the first turn of a conversation.

        Args:
            message: User message
            history: Previous turns (unused, classification is per message)
            context: Conversation context (read-only)

        Returns:
            Response with the clarifying message, banner directives, a
            context patch {intent, active_agents, processing_stage} and an
            optional next_action
        """
        try:
            intent = self.classifier.classify(message)
            hints = GENERAL_EXTRACTOR.extract(message)
            next_action = self.determine_next_action(intent, hints, message)

            patch: dict[str, Any] = {
                "intent": intent.to_dict(),
                "active_agents": [name.value for name in ACTIVE_AGENTS[intent.type]],
                "processing_stage": ProcessingStage.INITIAL.value,
            }
            if intent.type is IntentType.GENERAL:
                patch["processing_stage"] = ProcessingStage.GENERIC.value

            logger.info(
                f"Coordinator routed | intent={intent.type.value} | "
                f"confidence={intent.confidence} | "
                f"next_action={next_action.to_dict()['type'] if next_action else None}"
            )
            return Response(
                message=INITIAL_MESSAGES[intent.type],
                ui={
                    "update_banner": True,
                    "banner_type": intent.type.value,
                    "show_results": False,
                    "suggested_questions": list(
                        SUGGESTED_QUESTIONS.get(intent.type, DEFAULT_QUESTIONS)
                    ),
                },
                context=patch,
                next_action=next_action,
            )

        except Exception as e:
            logger.error(f"Coordinator failed | error={e}", exc_info=True)
            return Response(message=ERROR_MESSAGE, error=True)

    def determine_next_action(
        self, intent: Intent, hints: dict[str, Any], message: str
    ) -> NextAction | None:
        search_type = intent.details.get("search_type")

        if intent.type in TOPIC_INTENTS:
            if self.classifier.is_booking_request(message):
                params: dict[str, Any] = {"type": search_type}
                if hints.get("start_date"):
                    params["check_in"] = hints["start_date"]
                if hints.get("people"):
                    params["adults"] = hints["people"]
                return NextAction(type=ActionType.BOOKING, params=params)

            return NextAction(
                type=ActionType.QUERY,
                params={"search_type": search_type, "topic": intent.type.value, **hints},
            )

        if intent.type is IntentType.INFORMATION:
            return NextAction(
                type=ActionType.QUERY,
                params={
                    "search_type": search_type,
                    "topic": intent.type.value,
                    "name": intent.details.get("location"),
                    **hints,
                },
            )

        return None
