"""
Booking Responder - Hands booking questions over to the website.

The chatbot never books anything itself. Each branch explains where to go
and attaches a deep link built by agent.utils.url_builder:

    availability     "Ver disponibilidad" button
    details          "Ver detalles completos" button
    recommendations  Fixed per-type list of similar options
    pricing          "Ver precios actualizados" button
    general          Per-type booking advice
"""

import logging
from enum import Enum
from typing import Any

from agent.models import SEARCH_TYPE_TOPICS, ResponderName, Response, SearchType
from agent.state.schemas import HistoryTurn
from agent.utils.url_builder import build_booking_url
from shared.config import get_settings

logger = logging.getLogger(__name__)


class BookingSubIntent(str, Enum):
    AVAILABILITY = "availability"
    DETAILS = "details"
    RECOMMENDATIONS = "recommendations"
    PRICING = "pricing"
    GENERAL = "general"


SUB_INTENT_KEYWORDS: tuple[tuple[BookingSubIntent, tuple[str, ...]], ...] = (
    (BookingSubIntent.AVAILABILITY, ("disponible", "disponibilidad", "fechas")),
    (BookingSubIntent.DETAILS, ("detalle", "información", "descrip")),
    (BookingSubIntent.RECOMMENDATIONS, ("recomienda", "similar", "alternativa")),
    (BookingSubIntent.PRICING, ("precio", "tarifa", "costo", "cuánto")),
)

ERROR_MESSAGE = (
    "Lo siento, he tenido un problema al procesar la información de reserva. "
    "¿Podrías intentarlo de nuevo?"
)

AVAILABILITY_MESSAGE = (
    "Para verificar la disponibilidad exacta y precios actualizados, te recomiendo visitar "
    "directamente la página de reservas. Ahí podrás ver todas las opciones disponibles para las "
    "fechas que te interesan y completar tu reserva en caso de que encuentres algo que se ajuste "
    "a tus necesidades."
)
DETAILS_MESSAGE = (
    "Para ver todos los detalles completos, fotos, servicios incluidos y opiniones de otros "
    "viajeros, te recomiendo visitar la página completa del alojamiento. Ahí encontrarás toda la "
    "información que necesitas para tomar una decisión."
)
DETAILS_UNKNOWN_MESSAGE = (
    "Lo siento, no tengo información detallada sobre esa opción específica. Te recomiendo "
    "especificar qué opción te interesa para poder darte información más precisa."
)
PRICING_MESSAGE = (
    "Los precios pueden variar según la temporada, disponibilidad y promociones actuales. Para "
    "ver los precios exactos y actualizados para las fechas que te interesan, te recomiendo "
    "visitar la página de reservas donde encontrarás toda la información detallada."
)
NO_RECOMMENDATIONS_MESSAGE = (
    "Lo siento, no tengo recomendaciones similares disponibles en este momento."
)
RECOMMENDATIONS_MESSAGE = (
    "Basándome en tu interés, te puedo recomendar estas opciones similares: {titles}. "
    "¿Te gustaría más información sobre alguna de ellas?"
)

SIMILAR_OPTIONS: dict[str, tuple[dict[str, str], ...]] = {
    SearchType.ACCOMMODATION.value: (
        {"title": "Hotel Las Ballenas", "description": "Hotel boutique con vistas al mar", "slug": "hotel-las-ballenas"},
        {"title": "Villa Las Palmeras", "description": "Villa privada con piscina", "slug": "villa-las-palmeras"},
    ),
    SearchType.RESTAURANT.value: (
        {"title": "El Pescador", "description": "Especialidad en mariscos frescos", "slug": "el-pescador"},
        {"title": "Cafe del Mar", "description": "Cocina internacional con vistas", "slug": "cafe-del-mar"},
    ),
    SearchType.TOUR.value: (
        {"title": "Excursión a Los Haitises", "description": "Aventura en parque nacional", "slug": "excursion-los-haitises"},
        {"title": "Tour de ballenas jorobadas", "description": "Avistamiento de ballenas en temporada", "slug": "tour-ballenas-jorobadas"},
    ),
}

GENERAL_MESSAGE = (
    "Para realizar una reserva en SamanaInn, necesitas seleccionar el tipo de servicio "
    "(alojamiento, restaurante, excursión, etc.), las fechas deseadas y el número de personas. "
    "Una vez en la página de reserva, podrás ver la disponibilidad, precios y completar tu "
    "reserva de forma segura con diferentes métodos de pago."
)
GENERAL_MESSAGES_BY_TYPE: dict[str, str] = {
    SearchType.ACCOMMODATION.value: (
        "Para reservar alojamiento en Samaná, te recomendamos hacerlo con antelación, "
        "especialmente en temporada alta (diciembre a abril). Puedes encontrar desde hoteles de "
        "lujo hasta apartamentos y villas privadas. ¿Te gustaría ver opciones específicas?"
    ),
    SearchType.RESTAURANT.value: (
        "Para reservar en restaurantes de Samaná, especialmente los más populares, te "
        "recomendamos hacerlo con 1-2 días de antelación. Muchos restaurantes ofrecen menús "
        "especiales y vistas al mar. ¿Buscas algún tipo de cocina en particular?"
    ),
    SearchType.TOUR.value: (
        "Las excursiones en Samaná suelen requerir reserva previa, especialmente en temporada "
        "alta. Ofrecemos tours a Los Haitises, Salto El Limón, avistamiento de ballenas (en "
        "temporada) y muchas más actividades. ¿Hay alguna que te interese especialmente?"
    ),
}
GENERAL_QUESTIONS = (
    "¿Cuál es la mejor época para visitar Samaná?",
    "¿Qué necesito para hacer una reserva?",
    "¿Tienen ofertas especiales disponibles?",
)


class BookingResponder:
    """Stateless booking hand-off responder."""

    name = ResponderName.BOOKING

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url or get_settings().BOOKING_BASE_URL

    @staticmethod
    def classify_sub_intent(text: str) -> BookingSubIntent:
        lower = (text or "").lower()
        for sub_intent, keywords in SUB_INTENT_KEYWORDS:
            if any(keyword in lower for keyword in keywords):
                return sub_intent
        return BookingSubIntent.GENERAL

    async def respond(
        self,
        params: dict[str, Any] | None,
        text: str,
        history: list[HistoryTurn] | None = None,
        context: dict[str, Any] | None = None,
    ) -> Response:
        """
        Answer a booking question.

        Args:
            params: Booking parameters (type, slug, id, check_in, check_out,
                adults, children)
            text: User message

        Returns:
            Response with a context patch carrying the booking params
        """
        try:
            params = dict(params or {})
            sub_intent = self.classify_sub_intent(text)
            logger.info(
                f"Booking responder | sub_intent={sub_intent.value} | type={params.get('type')}"
            )

            response = self._dispatch(sub_intent, params)
            response.context = {**response.context, "booking_params": params}

            banner_type = self._banner_type(params.get("type"))
            if banner_type:
                response.ui.setdefault("update_banner", True)
                response.ui.setdefault("banner_type", banner_type)
            return response

        except Exception as e:
            logger.error(f"Booking responder failed | error={e}", exc_info=True)
            return Response(message=ERROR_MESSAGE, error=True)

    def _dispatch(self, sub_intent: BookingSubIntent, params: dict[str, Any]) -> Response:
        if sub_intent is BookingSubIntent.AVAILABILITY:
            return self._button_response(AVAILABILITY_MESSAGE, "booking", "Ver disponibilidad", params)
        if sub_intent is BookingSubIntent.DETAILS:
            message = DETAILS_MESSAGE if (params.get("id") or params.get("slug")) else DETAILS_UNKNOWN_MESSAGE
            return self._button_response(message, "detail", "Ver detalles completos", params)
        if sub_intent is BookingSubIntent.RECOMMENDATIONS:
            return self._recommendations(params)
        if sub_intent is BookingSubIntent.PRICING:
            return self._button_response(PRICING_MESSAGE, "pricing", "Ver precios actualizados", params)
        return self._general(params)

    def _button_response(
        self, message: str, button: str, button_text: str, params: dict[str, Any]
    ) -> Response:
        url = build_booking_url(params, self.base_url)
        return Response(
            message=message,
            ui={
                f"show_{button}_button": True,
                f"{button}_button_text": button_text,
                f"{button}_button_url": url,
            },
        )

    @staticmethod
    def _recommendations(params: dict[str, Any]) -> Response:
        booking_type = params.get("type") or "general"
        options = [dict(option) for option in SIMILAR_OPTIONS.get(booking_type, ())]

        if not options:
            return Response(
                message=NO_RECOMMENDATIONS_MESSAGE,
                results=[],
                ui={"show_results": False, "result_type": booking_type},
            )

        titles = ", ".join(option["title"] for option in options)
        return Response(
            message=RECOMMENDATIONS_MESSAGE.format(titles=titles),
            results=options,
            ui={"show_results": True, "result_type": booking_type},
        )

    @staticmethod
    def _general(params: dict[str, Any]) -> Response:
        message = GENERAL_MESSAGES_BY_TYPE.get(params.get("type") or "", GENERAL_MESSAGE)
        return Response(message=message, ui={"suggested_questions": list(GENERAL_QUESTIONS)})

    @staticmethod
    def _banner_type(booking_type: str | None) -> str | None:
        try:
            return SEARCH_TYPE_TOPICS[SearchType(booking_type)].value
        except ValueError:
            return None
