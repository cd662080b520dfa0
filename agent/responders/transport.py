"""
Transport Responder - Vehicle rental, airport transfers and local transport.

Car rental lists vehicles from the catalog; when the catalog has nothing to
offer the fixed rental overview is returned instead. Airport transfers
attach tours of category "transfer". Public transport, taxis and the
general overview are fixed texts.
"""

import logging
from enum import Enum
from typing import Any

from agent.classification.preference_extractor import TRANSPORT_EXTRACTOR
from agent.models import ResponderName, Response, SearchType
from agent.responders.base import ListingTemplate, TopicResponder, canned_response

logger = logging.getLogger(__name__)

BANNER_TYPE = "transport"

# Per-day price tiers for vehicles
LOW_PRICE_MAX = 50
HIGH_PRICE_MIN = 100


class TransportSubIntent(str, Enum):
    CAR_RENTAL = "car_rental"
    AIRPORT_TRANSFER = "airport_transfer"
    PUBLIC_TRANSPORT = "public_transport"
    TAXI_INFO = "taxi_info"
    GENERAL = "general"


RENTAL_KEYWORDS = ("alquiler", "rent", "alquilar")
RENTAL_VERBS = ("conseguir", "obtener")
SUB_INTENT_KEYWORDS: tuple[tuple[TransportSubIntent, tuple[str, ...]], ...] = (
    (TransportSubIntent.AIRPORT_TRANSFER, ("aeropuerto", "airport", "transfer", "traslado")),
    (TransportSubIntent.PUBLIC_TRANSPORT, ("público", "public", "bus", "guagua")),
    (TransportSubIntent.TAXI_INFO, ("taxi", "uber", "transporte privado")),
)

CAR_RENTAL_MESSAGE = (
    "El alquiler de vehículos es una excelente opción para explorar Samaná con libertad. Puedes "
    "alquilar coches, motos, quads o buggies según tus preferencias. Los precios para coches "
    "suelen oscilar entre 40-80 USD por día dependiendo del modelo, mientras que las motos y "
    "quads son más económicos (25-50 USD/día). Se recomienda reservar con antelación, "
    "especialmente en temporada alta. La mayoría de compañías requieren una licencia de conducir "
    "válida y un depósito. Las carreteras en Samaná son generalmente buenas en las vías "
    "principales, pero pueden ser más accidentadas en zonas rurales. Un coche es ideal para "
    "visitar múltiples playas y atracciones, mientras que los quads son populares para rutas de "
    "aventura. ¿Te interesa algún tipo de vehículo en particular?"
)
CAR_RENTAL_QUESTIONS = (
    "¿Dónde puedo alquilar un coche en Samaná?",
    "¿Cuánto cuesta alquilar un quad por día?",
    "¿Necesito un permiso especial para conducir en República Dominicana?",
)

VEHICLE_TEMPLATE = ListingTemplate(
    result_type="car",
    banner_type=BANNER_TYPE,
    banner_title="Alquiler de Vehículos en Samaná",
    singular="el vehículo {title}. ",
    plural="estos vehículos: ",
    closing="¿Te gustaría obtener más información sobre alguno de estos vehículos o prefieres ver más opciones?",
    fallback_lead="Lo siento, no he encontrado vehículos que coincidan exactamente con tus preferencias. Te sugiero estas opciones populares en Samaná:",
    no_results_message=CAR_RENTAL_MESSAGE,
    no_results_questions=CAR_RENTAL_QUESTIONS,
    first_question="¿Cuánto cuesta alquilar {title} por día?",
    question_pool=(
        "¿Necesito un permiso especial para conducir en República Dominicana?",
        "¿Cuánto cuesta alquilar un quad por día?",
    ),
)

AIRPORT_TRANSFER_MESSAGE = (
    "Para llegar a Samaná desde los aeropuertos cercanos, tienes varias opciones. El aeropuerto "
    "más cercano es El Catey (AZS), a unos 30-45 minutos en coche de Las Terrenas. Sin embargo, "
    "muchos visitantes llegan a través del Aeropuerto Internacional de Santo Domingo (SDQ) o de "
    "Puerto Plata (POP), que están a unas 2-3 horas por carretera. Puedes contratar un servicio "
    "de traslado privado, que cuesta aproximadamente 80-150 USD dependiendo del aeropuerto de "
    "origen y tu destino final en Samaná. También hay taxis disponibles pero suelen ser más "
    "caros. Otra opción es el autobús público (guagua) desde Santo Domingo, que es más económico "
    "pero toma más tiempo y solo llega a puntos principales. La opción más cómoda es reservar un "
    "traslado con anticipación para que te estén esperando a tu llegada."
)
AIRPORT_TRANSFER_QUESTIONS = (
    "¿Cuánto cuesta un traslado desde Santo Domingo?",
    "¿Hay transportes compartidos disponibles?",
    "¿Cuál es la mejor manera de llegar desde Puerto Plata?",
)

PUBLIC_TRANSPORT_MESSAGE = (
    "El transporte público en Samaná consiste principalmente en 'guaguas' (minibuses locales) y "
    "'motoconchos' (mototaxis). Las guaguas conectan los principales pueblos como Santa Bárbara "
    "de Samaná, Las Terrenas, Las Galeras y El Limón. Son económicas (1-3 USD por trayecto) pero "
    "no siguen horarios estrictos; salen cuando están llenas. Los motoconchos son abundantes y "
    "convenientes para distancias cortas dentro de los pueblos, con precios negociables "
    "(generalmente 1-2 USD por trayecto dentro del mismo pueblo). También hay 'carros públicos' "
    "(taxis compartidos) que siguen rutas fijas entre pueblos. El transporte público es económico "
    "pero puede ser incómodo y lento. Si planeas visitar múltiples lugares o tienes un itinerario "
    "ajustado, considera alquilar un vehículo o contratar un taxista para el día."
)
PUBLIC_TRANSPORT_QUESTIONS = (
    "¿Dónde puedo tomar las guaguas en Las Terrenas?",
    "¿Es seguro usar los motoconchos?",
    "¿Hay alguna aplicación para pedir taxis en Samaná?",
)

TAXI_MESSAGE = (
    "Los taxis en Samaná no suelen usar taxímetro, por lo que es recomendable acordar el precio "
    "antes de iniciar el viaje. Dentro de los pueblos, un trayecto corto puede costar 5-10 USD, "
    "mientras que los viajes entre diferentes localidades (como de Las Terrenas a Playa Rincón) "
    "pueden costar 30-50 USD. Algunas alternativas son los 'motoconchos' (mototaxis) para "
    "distancias cortas, o contratar un taxista para todo el día (aproximadamente 80-120 USD), lo "
    "que puede ser conveniente si planeas visitar varios lugares. Aplicaciones como Uber no están "
    "disponibles en Samaná, pero muchos hoteles y restaurantes tienen taxistas de confianza a "
    "quienes pueden llamar. También puedes guardar el número de un taxista que te guste para "
    "futuros traslados. En general, los taxis son seguros pero asegúrate de usar servicios "
    "recomendados por tu alojamiento."
)
TAXI_QUESTIONS = (
    "¿Cuánto cuesta un taxi de Las Terrenas a El Limón?",
    "¿Cómo puedo encontrar un taxi confiable?",
    "¿Es mejor contratar un taxista para todo el día?",
)

GENERAL_MESSAGE = (
    "Para moverte por Samaná tienes varias opciones según tu presupuesto y preferencias. El "
    "alquiler de vehículos (coches, motos o quads) ofrece mayor libertad para explorar la "
    "península a tu ritmo. El transporte público incluye 'guaguas' (minibuses) que conectan los "
    "principales pueblos y son económicas pero con horarios variables. Los 'motoconchos' "
    "(mototaxis) son perfectos para trayectos cortos dentro de los pueblos. Los taxis son "
    "convenientes pero más caros y se recomienda acordar el precio antes. Para llegar a Samaná "
    "desde los aeropuertos, puedes contratar servicios de traslado privados o utilizar autobuses "
    "públicos desde Santo Domingo. La península tiene carreteras bien mantenidas en las rutas "
    "principales, pero pueden ser más rústicas en zonas remotas. ¿Hay alguna opción de "
    "transporte específica sobre la que te gustaría más información?"
)
GENERAL_QUESTIONS = (
    "¿Dónde puedo alquilar un coche?",
    "¿Cómo llego desde el aeropuerto de Santo Domingo?",
    "¿Es fácil moverse entre las diferentes playas?",
)


class TransportResponder(TopicResponder):
    """Transport answers; vehicle listings over CatalogGateway.query_vehicles."""

    name = ResponderName.TRANSPORT
    extractor = TRANSPORT_EXTRACTOR
    refinement_lookup = "query_vehicles"
    refinement_template = VEHICLE_TEMPLATE
    error_message = (
        "Lo siento, he tenido un problema al procesar tu consulta sobre transporte. "
        "¿Puedo ayudarte con algo más?"
    )

    def classify_sub_intent(self, text: str, extracted: dict[str, Any]) -> TransportSubIntent:
        lower = (text or "").lower()
        if any(keyword in lower for keyword in RENTAL_KEYWORDS) or (
            "coche" in lower and any(verb in lower for verb in RENTAL_VERBS)
        ):
            return TransportSubIntent.CAR_RENTAL

        for sub_intent, keywords in SUB_INTENT_KEYWORDS:
            if any(keyword in lower for keyword in keywords):
                return sub_intent
        return TransportSubIntent.GENERAL

    async def handle(
        self, sub_intent: TransportSubIntent, preferences: dict[str, Any], text: str
    ) -> Response:
        if sub_intent is TransportSubIntent.CAR_RENTAL:
            return await self._car_rental(preferences)
        if sub_intent is TransportSubIntent.AIRPORT_TRANSFER:
            return await self.attach_results(
                AIRPORT_TRANSFER_MESSAGE,
                self.catalog.query_tours,
                {"category": "transfer", "limit": 3},
                BANNER_TYPE,
                "Traslados a Samaná",
                AIRPORT_TRANSFER_QUESTIONS,
            )
        if sub_intent is TransportSubIntent.PUBLIC_TRANSPORT:
            return canned_response(
                PUBLIC_TRANSPORT_MESSAGE,
                PUBLIC_TRANSPORT_QUESTIONS,
                BANNER_TYPE,
                "Transporte Público en Samaná",
            )
        if sub_intent is TransportSubIntent.TAXI_INFO:
            return canned_response(TAXI_MESSAGE, TAXI_QUESTIONS, BANNER_TYPE, "Taxis en Samaná")
        return canned_response(GENERAL_MESSAGE, GENERAL_QUESTIONS, BANNER_TYPE)

    async def _car_rental(self, preferences: dict[str, Any]) -> Response:
        filters: dict[str, Any] = {"limit": 5}
        if preferences.get("vehicle_type"):
            filters["category"] = preferences["vehicle_type"]
        if preferences.get("price_range") == "low":
            filters["max_price"] = LOW_PRICE_MAX
        elif preferences.get("price_range") == "high":
            filters["min_price"] = HIGH_PRICE_MIN

        response = await self.respond_with_listing(
            self.catalog.query_vehicles, filters, VEHICLE_TEMPLATE, SearchType.CAR.value
        )
        if not response.results:
            response.ui.update(
                {
                    "update_banner": True,
                    "banner_type": BANNER_TYPE,
                    "banner_title": VEHICLE_TEMPLATE.banner_title,
                }
            )
        return response
