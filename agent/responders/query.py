"""
Query Responder - Answers turns bound to the "query" processing stage.

Follow-up turns ("y más baratos?") reuse the filter baseline carried in
context.query_params. The responder enriches it with the general hints of
the new message, works out which topic the turn belongs to, and either
delegates to that topic's responder or answers the information/default
branches itself.

A follow-up that only narrows the carried search ("¿Y opciones más baratas
cerca de la playa?") names no sub-intent, so the topic responder would
answer with fixed text. Such turns re-run the topic listing over the
carried location and the budget band (bajo < 100, medio 100-300, alto > 300).
"""

import logging
from typing import Any

from agent.classification.keyword_classifier import KeywordClassifier
from agent.classification.preference_extractor import GENERAL_EXTRACTOR
from agent.models import (
    SEARCH_TYPE_TOPICS,
    TOPIC_INTENTS,
    TOPIC_SEARCH_TYPES,
    Intent,
    IntentType,
    ResponderName,
    Response,
    SearchType,
)
from agent.responders.base import TopicResponder
from agent.services.catalog_gateway import CatalogGateway
from agent.state.schemas import HistoryTurn

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Samana"
LOCATION_CONTENT_LIMIT = 500
MAX_LISTED_ARTICLES = 3

# A follow-up carrying one of these general hints refines the carried listing
REFINEMENT_HINTS = ("location", "budget")
REFINEMENT_LIMIT = 10

# budget → (min_price, max_price)
BUDGET_BANDS: dict[str, tuple[int | None, int | None]] = {
    "bajo": (None, 100),
    "medio": (100, 300),
    "alto": (300, None),
}

ERROR_MESSAGE = (
    "Lo siento, he tenido un problema al buscar la información solicitada. "
    "¿Podrías intentarlo de nuevo?"
)
UNDETERMINED_MESSAGE = (
    "No he podido determinar exactamente qué estás buscando. ¿Podrías ser más específico? "
    "Puedo ayudarte con alojamientos, restaurantes, excursiones o información general sobre Samaná."
)
ARTICLES_LEAD = "He encontrado algunos artículos en nuestro blog sobre {name}:"
ARTICLES_CLOSING = (
    "\n\n¿Te gustaría leer alguno de estos artículos o prefieres información sobre algo específico?"
)
SAMANA_OVERVIEW = (
    "Samaná es una hermosa península en el noreste de República Dominicana, conocida por sus "
    "playas paradisíacas, naturaleza exuberante y experiencias únicas como el avistamiento de "
    "ballenas jorobadas. ¿Hay algo específico sobre Samaná que te gustaría conocer?"
)
INFORMATION_QUESTIONS = (
    "¿Qué lugares debo visitar en Samaná?",
    "¿Cuál es la mejor época para visitar Samaná?",
    "¿Cómo llego a Samaná desde Santo Domingo?",
)


class QueryResponder:
    """
    Generic responder for turns in the "query" stage.

    Args:
        catalog: Catalog gateway used by the information branch
        topic_responders: Responder per topic intent
        classifier: Used to re-bind the turn when the user switches topic
    """

    name = ResponderName.QUERY

    def __init__(
        self,
        catalog: CatalogGateway,
        topic_responders: dict[IntentType, TopicResponder],
        classifier: KeywordClassifier | None = None,
    ):
        self.catalog = catalog
        self.topic_responders = topic_responders
        self.classifier = classifier or KeywordClassifier()

    async def respond(
        self,
        params: dict[str, Any] | None,
        text: str,
        history: list[HistoryTurn] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Response:
        """
        Answer a follow-up turn against the carried filter baseline.

        Args:
            params: context.query_params (search_type, topic, hints)
            text: User message
            history: Previous turns, forwarded to topic responders
            context: Conversation context (read-only)

        Returns:
            Response whose context patch holds the updated query_params and
            last_search
        """
        try:
            hints = GENERAL_EXTRACTOR.extract(text)
            query_params = {**(params or {}), **hints}
            detected = self.classifier.classify(text)
            carried = self._carried_topic(query_params)
            topic = self.resolve_topic(carried, detected)
            query_params["topic"] = topic.value
            query_params["search_type"] = TOPIC_SEARCH_TYPES[topic].value

            logger.info(
                f"Query responder | topic={topic.value} | "
                f"hints={sorted(k for k in query_params if k not in ('topic', 'search_type'))}"
            )

            responder = self.topic_responders.get(topic)
            if responder is not None:
                if self._refines_listing(topic, carried, hints, responder, text):
                    response = await responder.list_refined(
                        self.refinement_filters(query_params), query_params["search_type"]
                    )
                else:
                    response = await responder.respond(query_params, text, history, context)
            elif topic is IntentType.INFORMATION:
                response = await self._information(query_params)
            else:
                response = self._undetermined(query_params)

            if response.error:
                return response

            patch: dict[str, Any] = {
                **response.context,
                "query_params": query_params,
                "active_agents": [self.name.value, *self._delegate_names(responder)],
            }
            if topic is not carried:
                patch["intent"] = detected.to_dict()
            response.context = patch
            return response

        except Exception as e:
            logger.error(f"Query responder failed | error={e}", exc_info=True)
            return Response(message=ERROR_MESSAGE, error=True)

    @staticmethod
    def resolve_topic(carried: IntentType, detected: Intent) -> IntentType:
        """
        Topic bound to this turn.

        The carried topic is kept unless the new message clearly names a
        different specific topic.
        """
        if detected.type in TOPIC_INTENTS and detected.type is not carried:
            logger.info(
                f"Query topic re-bound | from={carried.value} | to={detected.type.value}"
            )
            return detected.type
        return carried

    @staticmethod
    def refinement_filters(params: dict[str, Any]) -> dict[str, Any]:
        """
        Catalog filters for a refinement follow-up.

        Example:
            >>> QueryResponder.refinement_filters({"location": "playa", "budget": "medio"})
            {'limit': 10, 'location': 'playa', 'min_price': 100, 'max_price': 300}
        """
        filters: dict[str, Any] = {"limit": REFINEMENT_LIMIT}
        if params.get("location"):
            filters["location"] = params["location"]

        min_price, max_price = BUDGET_BANDS.get(params.get("budget") or "", (None, None))
        if min_price is not None:
            filters["min_price"] = min_price
        if max_price is not None:
            filters["max_price"] = max_price
        return filters

    @staticmethod
    def _refines_listing(
        topic: IntentType,
        carried: IntentType,
        hints: dict[str, Any],
        responder: TopicResponder,
        text: str,
    ) -> bool:
        return (
            topic is carried
            and any(hints.get(hint) for hint in REFINEMENT_HINTS)
            and responder.names_no_sub_intent(text)
        )

    @staticmethod
    def _carried_topic(params: dict[str, Any]) -> IntentType:
        try:
            return IntentType(params.get("topic"))
        except ValueError:
            pass
        try:
            return SEARCH_TYPE_TOPICS[SearchType(params.get("search_type"))]
        except ValueError:
            return IntentType.GENERAL

    @staticmethod
    def _delegate_names(responder: TopicResponder | None) -> list[str]:
        return [responder.name.value] if responder is not None else []

    async def _information(self, params: dict[str, Any]) -> Response:
        name = params.get("name") or DEFAULT_LOCATION
        results: list[dict[str, Any]] = []

        locations = await self.catalog.query_location_info(name)
        content = locations[0].get("content") if locations else None

        if content:
            message = content
            if len(message) > LOCATION_CONTENT_LIMIT:
                message = message[:LOCATION_CONTENT_LIMIT] + "..."
        else:
            articles = await self.catalog.search_articles(name)
            if articles:
                results = articles[:MAX_LISTED_ARTICLES]
                message = ARTICLES_LEAD.format(name=name)
                message += "".join(f"\n- {article.get('title', '')}" for article in results)
                message += ARTICLES_CLOSING
            else:
                message = SAMANA_OVERVIEW

        display_name = locations[0].get("name") if locations else None
        return Response(
            message=message,
            results=results,
            ui={
                "show_results": bool(results),
                "result_type": SearchType.INFORMATION.value,
                "update_banner": True,
                "banner_type": IntentType.INFORMATION.value,
                "banner_title": f"Información sobre {display_name or 'Samaná'}",
                "suggested_questions": list(INFORMATION_QUESTIONS),
            },
            context={
                "last_search": {
                    "type": SearchType.INFORMATION.value,
                    "params": dict(params),
                    "result_count": len(results),
                }
            },
        )

    @staticmethod
    def _undetermined(params: dict[str, Any]) -> Response:
        return Response(
            message=UNDETERMINED_MESSAGE,
            results=[],
            ui={
                "show_results": False,
                "update_banner": True,
                "banner_type": IntentType.GENERAL.value,
            },
            context={
                "last_search": {
                    "type": params.get("search_type", SearchType.GENERAL.value),
                    "params": dict(params),
                    "result_count": 0,
                }
            },
        )
