"""
Lodging Responder - Hotels, apartments and villas.

Sub-intents (checked in order):
    hotel / apartment / villa recommendation  type keyword plus "recomend" or
        "mejor", or type keyword plus an extracted location, price or amenity
    family_accommodation     familia / niños
    romantic_accommodation   pareja / romántico
    accommodation_details    detalle / informacion / caracteristicas
    general                  canned overview
"""

import logging
from enum import Enum
from typing import Any

from agent.classification.preference_extractor import LODGING_EXTRACTOR
from agent.models import ResponderName, Response, SearchType
from agent.responders.base import ListingTemplate, TopicResponder, canned_response

logger = logging.getLogger(__name__)

BANNER_TYPE = "accommodation"
RESULT_TYPE = "accommodation"


class LodgingSubIntent(str, Enum):
    HOTEL_RECOMMENDATION = "hotel_recommendation"
    APARTMENT_RECOMMENDATION = "apartment_recommendation"
    VILLA_RECOMMENDATION = "villa_recommendation"
    FAMILY_ACCOMMODATION = "family_accommodation"
    ROMANTIC_ACCOMMODATION = "romantic_accommodation"
    ACCOMMODATION_DETAILS = "accommodation_details"
    GENERAL = "general"


# Type keywords → recommendation sub-intent (checked in order)
TYPE_KEYWORDS: tuple[tuple[tuple[str, ...], LodgingSubIntent], ...] = (
    (("hotel",), LodgingSubIntent.HOTEL_RECOMMENDATION),
    (("apartamento", "apartment"), LodgingSubIntent.APARTMENT_RECOMMENDATION),
    (("villa", "casa"), LodgingSubIntent.VILLA_RECOMMENDATION),
)
RECOMMENDATION_KEYWORDS = ("recomend", "mejor")
REFINEMENT_DIMENSIONS = ("location", "price_range", "amenities")
FAMILY_KEYWORDS = ("familia", "niños")
ROMANTIC_KEYWORDS = ("pareja", "romántico")
DETAIL_KEYWORDS = ("detalle", "informacion", "caracteristicas")

# accommodation_type → (max price for "low", min price for "high")
PRICE_TIERS: dict[str, tuple[int, int]] = {
    "hotel": (100, 300),
    "apartment": (100, 200),
    "villa": (300, 500),
}

HOTEL_TEMPLATE = ListingTemplate(
    result_type=RESULT_TYPE,
    banner_type=BANNER_TYPE,
    banner_title="Hoteles en Samaná",
    singular="el hotel {title}. ",
    plural="estos hoteles: ",
    closing="¿Te gustaría obtener más información sobre alguno de estos hoteles o prefieres ver más opciones?",
    fallback_lead="Lo siento, no he encontrado hoteles que coincidan exactamente con tus preferencias. Te sugiero estas opciones populares en Samaná:",
    no_results_message="Lo siento, no he podido encontrar hoteles disponibles que coincidan con tus criterios. ¿Podrías reformular tu búsqueda con otros criterios?",
    no_results_questions=(
        "¿Qué hoteles hay cerca de la playa?",
        "¿Cuáles son los hoteles más económicos?",
        "¿Hay alojamientos tipo apartamento disponibles?",
    ),
    first_question="¿Qué servicios ofrece {title}?",
    question_pool=("¿Hay hoteles con piscina?", "¿Cuál es el mejor hotel para familias?"),
)

APARTMENT_TEMPLATE = ListingTemplate(
    result_type=RESULT_TYPE,
    banner_type=BANNER_TYPE,
    banner_title="Apartamentos en Samaná",
    singular="el apartamento {title}. ",
    plural="estos apartamentos: ",
    closing="¿Te gustaría obtener más información sobre alguno de estos apartamentos o prefieres ver más opciones?",
    fallback_lead="Lo siento, no he encontrado apartamentos que coincidan exactamente con tus preferencias. Te sugiero estas opciones populares en Samaná:",
    no_results_message="Lo siento, no he podido encontrar apartamentos disponibles que coincidan con tus criterios. ¿Podrías reformular tu búsqueda o considerar otros tipos de alojamiento?",
    no_results_questions=(
        "¿Qué hoteles hay disponibles?",
        "¿Hay villas o casas para alquilar?",
        "¿Cuáles son las opciones más económicas?",
    ),
    first_question="¿Cuántas habitaciones tiene {title}?",
    question_pool=("¿Hay apartamentos con vista al mar?", "¿Cuál es el mejor apartamento para grupos?"),
)

VILLA_TEMPLATE = ListingTemplate(
    result_type=RESULT_TYPE,
    banner_type=BANNER_TYPE,
    banner_title="Villas en Samaná",
    singular="la villa {title}. ",
    plural="estas villas: ",
    closing="¿Te gustaría obtener más información sobre alguna de estas villas o prefieres ver más opciones?",
    fallback_lead="Lo siento, no he encontrado villas que coincidan exactamente con tus preferencias. Te sugiero estas opciones populares en Samaná:",
    no_results_message="Lo siento, no he podido encontrar villas disponibles que coincidan con tus criterios. ¿Podrías reformular tu búsqueda o considerar otros tipos de alojamiento?",
    no_results_questions=(
        "¿Qué apartamentos hay disponibles?",
        "¿Cuáles son las opciones más lujosas?",
        "¿Hay villas con piscina privada?",
    ),
    first_question="¿{title} tiene piscina privada?",
    question_pool=("¿Hay villas cerca de la playa?", "¿Cuál es la capacidad máxima de estas villas?"),
)

FAMILY_TEMPLATE = ListingTemplate(
    result_type=RESULT_TYPE,
    banner_type=BANNER_TYPE,
    banner_title="Alojamientos para Familias en Samaná",
    lead="Para familias con niños, recomiendo especialmente ",
    singular="el alojamiento {title}. ",
    singular_note="Este lugar es ideal para familias porque ofrece amplias habitaciones, actividades para niños y una ubicación segura.",
    plural="estos alojamientos: ",
    plural_note=". Estos lugares son ideales para familias porque suelen ofrecer habitaciones espaciosas, actividades para niños, y ubicaciones seguras. ",
    description="En particular, {title} ofrece {description}. ",
    closing="¿Te gustaría obtener más información sobre alguno de estos alojamientos para familias?",
    fallback_lead="Lo siento, no he encontrado alojamientos específicos para familias según tus criterios. Te sugiero estas opciones que suelen ser adecuadas para familias:",
    no_results_message="Lo siento, no he podido encontrar alojamientos específicos para familias. ¿Podrías indicarme qué características son importantes para ti (como ubicación, presupuesto, etc.)?",
    no_results_questions=(
        "¿Hay hoteles con actividades para niños?",
        "¿Cuáles son los alojamientos más seguros?",
        "¿Qué zonas son mejores para familias?",
    ),
    first_question="¿{title} tiene servicios para niños?",
    question_pool=("¿Hay actividades para niños incluidas?", "¿Cuál es el mejor para bebés pequeños?"),
)

ROMANTIC_TEMPLATE = ListingTemplate(
    result_type=RESULT_TYPE,
    banner_type=BANNER_TYPE,
    banner_title="Alojamientos Románticos en Samaná",
    lead="Para parejas que buscan un ambiente romántico, recomiendo especialmente ",
    singular="el alojamiento {title}. ",
    singular_note="Este lugar es ideal para parejas porque ofrece un ambiente íntimo, hermosas vistas y servicios especiales para disfrutar en pareja.",
    plural="estos alojamientos: ",
    plural_note=". Estos lugares son ideales para parejas porque suelen ofrecer ambientes íntimos, hermosas vistas y servicios especiales para disfrutar en pareja. ",
    description="En particular, {title} ofrece {description}. ",
    closing="¿Te gustaría obtener más información sobre alguno de estos alojamientos románticos?",
    fallback_lead="Lo siento, no he encontrado alojamientos específicos para parejas según tus criterios. Te sugiero estas opciones que suelen ser adecuadas para una escapada romántica:",
    no_results_message="Lo siento, no he podido encontrar alojamientos específicos para parejas. ¿Podrías indicarme qué características son importantes para ti (como ubicación, presupuesto, etc.)?",
    no_results_questions=(
        "¿Hay alojamientos con vistas al mar para parejas?",
        "¿Cuáles son los alojamientos más románticos?",
        "¿Hay alojamientos solo para adultos?",
    ),
    first_question="¿{title} ofrece paquetes románticos?",
    question_pool=("¿Hay alojamientos con spa para parejas?", "¿Cuál es el más exclusivo para una luna de miel?"),
)

ACCOMMODATION_TEMPLATE = ListingTemplate(
    result_type=RESULT_TYPE,
    banner_type=BANNER_TYPE,
    banner_title="Alojamientos en Samaná",
    singular="el alojamiento {title}. ",
    plural="estos alojamientos: ",
    closing="¿Te gustaría obtener más información sobre alguno de estos alojamientos o prefieres ajustar la búsqueda?",
    fallback_lead="Lo siento, no he encontrado alojamientos que coincidan exactamente con tus preferencias. Te sugiero estas opciones populares en Samaná:",
    no_results_message="Lo siento, no he podido encontrar alojamientos que coincidan con tus criterios. ¿Podrías reformular tu búsqueda con otros criterios?",
    no_results_questions=(
        "¿Qué hoteles hay cerca de la playa?",
        "¿Cuáles son los alojamientos más económicos?",
        "¿Hay villas con piscina privada?",
    ),
    first_question="¿Qué servicios ofrece {title}?",
    question_pool=("¿Hay alojamientos con piscina?", "¿Cuál es el mejor alojamiento para familias?"),
)

TYPE_TEMPLATES: dict[LodgingSubIntent, tuple[str, ListingTemplate]] = {
    LodgingSubIntent.HOTEL_RECOMMENDATION: ("hotel", HOTEL_TEMPLATE),
    LodgingSubIntent.APARTMENT_RECOMMENDATION: ("apartment", APARTMENT_TEMPLATE),
    LodgingSubIntent.VILLA_RECOMMENDATION: ("villa", VILLA_TEMPLATE),
}

DETAILS_WITHOUT_ID = (
    "Para darte información detallada sobre un alojamiento específico, necesito saber cuál te "
    "interesa. ¿Podrías decirme qué alojamiento te gustaría conocer mejor? Puedo recomendarte "
    "opciones populares si lo prefieres."
)
DETAILS_WITHOUT_ID_QUESTIONS = (
    "¿Cuáles son los mejores hoteles en Samaná?",
    "Muéstrame apartamentos cerca de la playa",
    "¿Hay villas con piscina privada?",
)
DETAILS_WITH_ID = (
    "El alojamiento que buscas cuenta con excelentes instalaciones, incluyendo habitaciones "
    "espaciosas, Wi-Fi gratuito, y una ubicación privilegiada en Samaná. Lamentablemente, no "
    "puedo darte información más específica sin conocer exactamente qué alojamiento te interesa. "
    "Si me indicas el nombre del hotel, apartamento o villa, podré proporcionarte detalles más "
    "precisos sobre sus características, servicios y ubicación."
)
DETAILS_WITH_ID_QUESTIONS = (
    "¿Qué hoteles recomiendas en Samaná?",
    "Busco un alojamiento cerca de la playa",
    "¿Cuáles son las opciones más económicas?",
)
GENERAL_MESSAGE = (
    "Samaná ofrece una amplia variedad de opciones de alojamiento para todos los gustos y "
    "presupuestos. Puedes encontrar desde hoteles de lujo frente al mar hasta acogedoras villas "
    "en las montañas. La zona de Las Terrenas es popular por sus resorts todo incluido y "
    "apartamentos cerca de la playa, mientras que Santa Bárbara de Samaná ofrece hoteles con "
    "vistas a la bahía. También hay opciones más rurales cerca de El Limón, ideales para quienes "
    "buscan tranquilidad en medio de la naturaleza. Los precios varían según la temporada, siendo "
    "más altos durante el invierno (diciembre a abril) que es considerada temporada alta. ¿Qué "
    "tipo de alojamiento estás buscando o tienes alguna preferencia específica?"
)
GENERAL_QUESTIONS = (
    "¿Cuáles son los mejores hoteles en Las Terrenas?",
    "¿Hay opciones económicas cerca de la playa?",
    "¿Qué alojamientos recomiendas para familias?",
)


class LodgingResponder(TopicResponder):
    """Lodging recommendations over CatalogGateway.query_lodging."""

    name = ResponderName.LODGING
    extractor = LODGING_EXTRACTOR
    refinement_lookup = "query_lodging"
    refinement_template = ACCOMMODATION_TEMPLATE
    error_message = (
        "Lo siento, he tenido un problema al procesar tu consulta sobre alojamiento. "
        "¿Puedo ayudarte con algo más?"
    )

    def classify_sub_intent(self, text: str, extracted: dict[str, Any]) -> LodgingSubIntent:
        lower = (text or "").lower()
        wants_recommendation = any(keyword in lower for keyword in RECOMMENDATION_KEYWORDS)
        refines = any(extracted.get(dimension) for dimension in REFINEMENT_DIMENSIONS)

        for keywords, sub_intent in TYPE_KEYWORDS:
            if any(keyword in lower for keyword in keywords) and (wants_recommendation or refines):
                return sub_intent

        if any(keyword in lower for keyword in FAMILY_KEYWORDS):
            return LodgingSubIntent.FAMILY_ACCOMMODATION
        if any(keyword in lower for keyword in ROMANTIC_KEYWORDS):
            return LodgingSubIntent.ROMANTIC_ACCOMMODATION
        if any(keyword in lower for keyword in DETAIL_KEYWORDS):
            return LodgingSubIntent.ACCOMMODATION_DETAILS
        return LodgingSubIntent.GENERAL

    async def handle(self, sub_intent: LodgingSubIntent, preferences: dict[str, Any], text: str) -> Response:
        if sub_intent in TYPE_TEMPLATES:
            return await self._type_recommendations(sub_intent, preferences)
        if sub_intent is LodgingSubIntent.FAMILY_ACCOMMODATION:
            return await self._group_recommendations("family", FAMILY_TEMPLATE, preferences)
        if sub_intent is LodgingSubIntent.ROMANTIC_ACCOMMODATION:
            return await self._group_recommendations("couple", ROMANTIC_TEMPLATE, preferences)
        if sub_intent is LodgingSubIntent.ACCOMMODATION_DETAILS:
            return self._details(preferences)
        return canned_response(GENERAL_MESSAGE, GENERAL_QUESTIONS, BANNER_TYPE)

    async def _type_recommendations(
        self, sub_intent: LodgingSubIntent, preferences: dict[str, Any]
    ) -> Response:
        accommodation_type, template = TYPE_TEMPLATES[sub_intent]
        filters: dict[str, Any] = {"limit": 5, "accommodation_type": accommodation_type}

        if preferences.get("location"):
            filters["location"] = preferences["location"]

        low_max, high_min = PRICE_TIERS[accommodation_type]
        if preferences.get("price_range") == "low":
            filters["max_price"] = low_max
        elif preferences.get("price_range") == "high":
            filters["min_price"] = high_min

        if "pool" in (preferences.get("amenities") or []):
            filters["has_pool"] = True

        return await self.respond_with_listing(
            self.catalog.query_lodging, filters, template, SearchType.ACCOMMODATION.value
        )

    async def _group_recommendations(
        self, group_type: str, template: ListingTemplate, preferences: dict[str, Any]
    ) -> Response:
        filters: dict[str, Any] = {"limit": 5, "group_type": group_type}
        if preferences.get("accommodation_type"):
            filters["accommodation_type"] = preferences["accommodation_type"]
        if preferences.get("location"):
            filters["location"] = preferences["location"]
        if "pool" in (preferences.get("amenities") or []):
            filters["has_pool"] = True

        return await self.respond_with_listing(
            self.catalog.query_lodging, filters, template, SearchType.ACCOMMODATION.value
        )

    @staticmethod
    def _details(preferences: dict[str, Any]) -> Response:
        if preferences.get("accommodation_id"):
            return canned_response(DETAILS_WITH_ID, DETAILS_WITH_ID_QUESTIONS, BANNER_TYPE)
        return canned_response(DETAILS_WITHOUT_ID, DETAILS_WITHOUT_ID_QUESTIONS, BANNER_TYPE)
