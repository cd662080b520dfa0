"""
Activities Responder - Excursions, beaches and natural attractions.

Whale watching, El Limón and Los Haitises answer with fixed text and attach
up to three tours of the matching catalog category. Whale season runs from
January to March of the current year; the clock is injectable.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import Any

from agent.classification.preference_extractor import ACTIVITIES_EXTRACTOR
from agent.models import ResponderName, Response, SearchType
from agent.responders.base import ListingTemplate, TopicResponder, canned_response
from agent.services.catalog_gateway import CatalogGateway
from agent.utils.date_parser import get_local_now

logger = logging.getLogger(__name__)

BANNER_TYPE = "activities"
WHALE_SEASON_MONTHS = range(1, 4)
ATTACHED_TOURS_LIMIT = 3


class ActivitiesSubIntent(str, Enum):
    WHALE_WATCHING = "whale_watching"
    BEACHES = "beaches"
    HIKING = "hiking"
    EL_LIMON = "el_limon"
    LOS_HAITISES = "los_haitises"
    TOUR_RECOMMENDATION = "tour_recommendation"
    GENERAL = "general"


SUB_INTENT_KEYWORDS: tuple[tuple[ActivitiesSubIntent, tuple[str, ...]], ...] = (
    (ActivitiesSubIntent.WHALE_WATCHING, ("ballena", "whale")),
    (ActivitiesSubIntent.BEACHES, ("playa", "beach")),
    (ActivitiesSubIntent.HIKING, ("senderismo", "hiking", "caminata")),
    (ActivitiesSubIntent.EL_LIMON, ("limon", "limón")),
    (ActivitiesSubIntent.LOS_HAITISES, ("haitises",)),
    (ActivitiesSubIntent.TOUR_RECOMMENDATION, ("tour", "excursion", "excursión", "actividad", "recomend")),
)

HALF_DAY_MAX_HOURS = 4
FULL_DAY_MIN_HOURS = 5

TOUR_TEMPLATE = ListingTemplate(
    result_type="tour",
    banner_type=BANNER_TYPE,
    banner_title="Tours y Excursiones en Samaná",
    singular='el tour "{title}". ',
    plural="estos tours: ",
    title_format='"{title}"',
    description="{title} {description}. ",
    closing="¿Te gustaría obtener más información sobre alguno de estos tours o prefieres ver más opciones?",
    fallback_lead="Lo siento, no he encontrado tours que coincidan exactamente con tus preferencias. Te sugiero estas opciones populares en Samaná:",
    no_results_message="Lo siento, no he podido encontrar tours disponibles que coincidan con tus criterios. ¿Podrías reformular tu búsqueda con otros criterios?",
    no_results_questions=(
        "¿Qué actividades hay en Samaná?",
        "¿Hay excursiones para ver ballenas?",
        "¿Cómo puedo visitar Los Haitises?",
    ),
    first_question='¿Qué incluye el tour "{title}"?',
    question_pool=("¿Hay tours de medio día disponibles?", "¿Cuál es la mejor excursión para familias con niños?"),
)

WHALE_MESSAGE = (
    "El avistamiento de ballenas jorobadas es una de las actividades más populares en Samaná. "
    "Cada año, entre enero y marzo, miles de ballenas jorobadas migran a la Bahía de Samaná para "
    "aparearse y dar a luz. Los tours salen generalmente del puerto de Samaná y duran "
    "aproximadamente 3-4 horas. Es recomendable llevar protector solar, ropa ligera y cámara "
    "fotográfica. "
)
WHALE_IN_SEASON = "¡Estamos en plena temporada de ballenas! Es un momento perfecto para hacer esta excursión."
WHALE_OFF_SEASON = (
    "Actualmente no estamos en temporada de ballenas. La próxima temporada será de enero a "
    "marzo {year}."
)
WHALE_QUESTIONS = (
    "¿Cuánto cuesta un tour de avistamiento de ballenas?",
    "¿Es seguro para niños?",
    "¿Qué otras actividades puedo hacer en Samaná?",
)

BEACHES_MESSAGE = (
    "Samaná está rodeada de algunas de las playas más hermosas del Caribe. Playa Rincón es "
    "considerada una de las más bellas del mundo, con arena blanca y aguas cristalinas, ideal "
    "para relajarse y nadar. Playa Las Galeras es perfecta para quienes buscan un ambiente más "
    "tranquilo y auténtico. Playa Bonita ofrece buenas condiciones para deportes acuáticos. Playa "
    "Cosón es extensa y menos concurrida, ideal para largas caminatas. La mayoría de estas playas "
    "cuentan con pequeños restaurantes donde puedes disfrutar de pescado fresco y bebidas. ¿Te "
    "gustaría conocer más sobre alguna playa específica o cómo llegar a ellas?"
)
BEACHES_QUESTIONS = (
    "¿Cómo llego a Playa Rincón?",
    "¿Cuál es la mejor playa para niños?",
    "¿Hay tours que incluyan visitas a las playas?",
)

HIKING_MESSAGE = (
    "Samaná ofrece varias opciones para los amantes del senderismo. Las rutas más populares "
    "incluyen el sendero hacia la Cascada El Limón, que atraviesa exuberante vegetación "
    "tropical, el Sendero del Café en la zona montañosa donde puedes ver cómo se cultiva el café, "
    "y las rutas dentro del Parque Nacional Los Haitises, donde puedes explorar cuevas con "
    "petroglifos taínos. La mayoría de estas rutas requieren un guía local, que puede ser "
    "contratado a través de operadores turísticos o directamente en las comunidades cercanas. La "
    "mejor época para hacer senderismo es de noviembre a mayo, cuando hay menos lluvias. ¿Estás "
    "interesado en alguna ruta en particular?"
)
HIKING_QUESTIONS = (
    "¿Cuál es la dificultad de estas rutas?",
    "¿Qué debo llevar para hacer senderismo?",
    "¿Hay tours guiados disponibles?",
)

EL_LIMON_MESSAGE = (
    "La Cascada El Limón es una de las atracciones naturales más impresionantes de Samaná. Con "
    "una caída de agua de aproximadamente 40 metros de altura, se encuentra en medio de un "
    "exuberante bosque tropical. Para llegar a la cascada, puedes realizar una excursión a "
    "caballo o a pie desde el pueblo de El Limón. El sendero toma aproximadamente 30-45 minutos "
    "y atraviesa hermosos paisajes rurales. Una vez en la cascada, podrás nadar en las "
    "refrescantes aguas de la piscina natural que se forma en su base. Se recomienda llevar "
    "calzado cómodo para caminar, traje de baño, toalla y repelente de insectos. La mejor hora "
    "para visitar es por la mañana, cuando hay menos visitantes."
)
EL_LIMON_QUESTIONS = (
    "¿Cuánto cuesta la excursión a El Limón?",
    "¿Es mejor ir a caballo o caminando?",
    "¿Es adecuado para niños?",
)

LOS_HAITISES_MESSAGE = (
    "El Parque Nacional Los Haitises es uno de los tesoros naturales de República Dominicana. "
    "Este parque protegido abarca más de 1,600 km² de manglares, bahías, cavernas con arte "
    "rupestre indígena y formaciones kársticas que emergen del agua creando un paisaje único. La "
    "mejor manera de explorarlo es mediante un tour en bote que sale desde Samaná o Sabana de la "
    "Mar. Durante el recorrido, podrás observar aves como el pelícano pardo y el águila "
    "pescadora, explorar cuevas con petroglifos taínos, y admirar la exuberante vegetación. Los "
    "tours generalmente incluyen guía, transporte en bote y refrigerios. Se recomienda llevar "
    "protector solar, repelente de insectos, cámara fotográfica y ropa ligera."
)
LOS_HAITISES_QUESTIONS = (
    "¿Cuánto tiempo dura el tour a Los Haitises?",
    "¿Qué tipo de vida silvestre puedo ver?",
    "¿Es adecuado para toda la familia?",
)

GENERAL_MESSAGE = (
    "Samaná ofrece una amplia variedad de actividades para todos los gustos. Entre las más "
    "populares están el avistamiento de ballenas jorobadas (de enero a marzo), visitar la "
    "impresionante Cascada El Limón, explorar el Parque Nacional Los Haitises con sus cuevas y "
    "manglares, relajarse en playas paradisíacas como Playa Rincón, y disfrutar de deportes "
    "acuáticos como snorkel, buceo y paddle boarding. También puedes hacer excursiones a caballo, "
    "recorridos en quad o buggies, y tours culturales para conocer la vida local. ¿Hay alguna "
    "actividad específica que te interese o prefieres recomendaciones según tu tipo de viaje?"
)
GENERAL_QUESTIONS = (
    "¿Qué actividades recomiendas para familias?",
    "¿Cuáles son las mejores playas?",
    "¿Puedo hacer avistamiento de ballenas ahora?",
)


def is_whale_season(now: datetime) -> bool:
    return now.month in WHALE_SEASON_MONTHS


class ActivitiesResponder(TopicResponder):
    """Activities and tours over CatalogGateway.query_tours."""

    name = ResponderName.ACTIVITIES
    extractor = ACTIVITIES_EXTRACTOR
    refinement_lookup = "query_tours"
    refinement_template = TOUR_TEMPLATE
    error_message = (
        "Lo siento, he tenido un problema al procesar tu consulta sobre actividades. "
        "¿Puedo ayudarte con algo más?"
    )

    def __init__(self, catalog: CatalogGateway, clock: Callable[[], datetime] = get_local_now):
        super().__init__(catalog)
        self.clock = clock

    def classify_sub_intent(self, text: str, extracted: dict[str, Any]) -> ActivitiesSubIntent:
        lower = (text or "").lower()
        for sub_intent, keywords in SUB_INTENT_KEYWORDS:
            if any(keyword in lower for keyword in keywords):
                return sub_intent
        return ActivitiesSubIntent.GENERAL

    async def handle(
        self, sub_intent: ActivitiesSubIntent, preferences: dict[str, Any], text: str
    ) -> Response:
        if sub_intent is ActivitiesSubIntent.WHALE_WATCHING:
            return await self._whale_watching()
        if sub_intent is ActivitiesSubIntent.BEACHES:
            return canned_response(BEACHES_MESSAGE, BEACHES_QUESTIONS, BANNER_TYPE, "Playas de Samaná")
        if sub_intent is ActivitiesSubIntent.HIKING:
            return canned_response(HIKING_MESSAGE, HIKING_QUESTIONS, BANNER_TYPE, "Senderismo en Samaná")
        if sub_intent is ActivitiesSubIntent.EL_LIMON:
            return await self.attach_results(
                EL_LIMON_MESSAGE,
                self.catalog.query_tours,
                {"category": "el_limon", "limit": ATTACHED_TOURS_LIMIT},
                BANNER_TYPE,
                "Cascada El Limón",
                EL_LIMON_QUESTIONS,
            )
        if sub_intent is ActivitiesSubIntent.LOS_HAITISES:
            return await self.attach_results(
                LOS_HAITISES_MESSAGE,
                self.catalog.query_tours,
                {"category": "los_haitises", "limit": ATTACHED_TOURS_LIMIT},
                BANNER_TYPE,
                "Parque Nacional Los Haitises",
                LOS_HAITISES_QUESTIONS,
            )
        if sub_intent is ActivitiesSubIntent.TOUR_RECOMMENDATION:
            return await self._tour_recommendations(preferences)
        return canned_response(GENERAL_MESSAGE, GENERAL_QUESTIONS, BANNER_TYPE)

    async def _whale_watching(self) -> Response:
        now = self.clock()
        if is_whale_season(now):
            message = WHALE_MESSAGE + WHALE_IN_SEASON
        else:
            message = WHALE_MESSAGE + WHALE_OFF_SEASON.format(year=now.year + 1)

        return await self.attach_results(
            message,
            self.catalog.query_tours,
            {"category": "whale", "limit": ATTACHED_TOURS_LIMIT},
            BANNER_TYPE,
            "Avistamiento de Ballenas en Samaná",
            WHALE_QUESTIONS,
        )

    async def _tour_recommendations(self, preferences: dict[str, Any]) -> Response:
        filters: dict[str, Any] = {"limit": 5}
        if preferences.get("activity_type"):
            filters["category"] = preferences["activity_type"]
        if preferences.get("duration") == "half_day":
            filters["max_duration"] = HALF_DAY_MAX_HOURS
        elif preferences.get("duration") == "full_day":
            filters["min_duration"] = FULL_DAY_MIN_HOURS

        return await self.respond_with_listing(
            self.catalog.query_tours, filters, TOUR_TEMPLATE, SearchType.TOUR.value
        )
