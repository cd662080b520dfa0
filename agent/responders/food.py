"""
Food Responder - Restaurants and local cuisine.

Dish information comes from a fixed table and never touches the catalog.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from agent.classification.preference_extractor import FOOD_EXTRACTOR
from agent.models import ResponderName, Response, SearchType
from agent.responders.base import ListingTemplate, TopicResponder, canned_response

logger = logging.getLogger(__name__)

BANNER_TYPE = "gastronomy"


class FoodSubIntent(str, Enum):
    RESTAURANT_RECOMMENDATION = "restaurant_recommendation"
    LOCAL_CUISINE = "local_cuisine"
    DISH_INFO = "dish_info"
    GENERAL = "general"


SUB_INTENT_KEYWORDS: tuple[tuple[FoodSubIntent, tuple[str, ...]], ...] = (
    (FoodSubIntent.RESTAURANT_RECOMMENDATION, ("restaurante", "donde comer", "recomienda")),
    (FoodSubIntent.LOCAL_CUISINE, ("comida típica", "platos dominicanos", "gastronomía local")),
    (FoodSubIntent.DISH_INFO, ("qué es", "cómo se prepara", "ingredientes")),
)

LOW_PRICE_MAX = 30
HIGH_PRICE_MIN = 50

RESTAURANT_TEMPLATE = ListingTemplate(
    result_type="restaurant",
    banner_type=BANNER_TYPE,
    banner_title="Restaurantes en Samaná",
    singular="el restaurante {title}. ",
    plural="estos restaurantes: ",
    closing="¿Te gustaría obtener más información sobre alguno de estos restaurantes o prefieres ver más opciones?",
    fallback_lead="Lo siento, no he encontrado restaurantes que coincidan exactamente con tus preferencias. Te sugiero ampliar tu búsqueda o probar estas opciones populares en Samaná:",
    no_results_message="Lo siento, no he podido encontrar restaurantes que coincidan con tus criterios. ¿Podrías reformular tu búsqueda con otros criterios?",
    no_results_questions=(
        "¿Qué restaurantes hay cerca de la playa?",
        "¿Dónde puedo comer comida dominicana auténtica?",
        "¿Cuáles son los restaurantes más populares en Samaná?",
    ),
    first_question="¿Qué tipo de comida sirven en {title}?",
    question_pool=("¿Hay restaurantes con terraza o vistas al mar?", "¿Dónde puedo probar pescado fresco?"),
)


@dataclass(frozen=True)
class Dish:
    description: str
    restaurants: tuple[str, ...]


# Checked in insertion order
DISHES: dict[str, Dish] = {
    "pescado con coco": Dish(
        "El pescado con coco es un plato emblemático de Samaná. Consiste en pescado fresco "
        "(generalmente mero o dorado) cocinado en una rica salsa de leche de coco con especias "
        "locales, cebolla, pimiento y ajo. Se sirve tradicionalmente con arroz blanco y tostones "
        "(plátano verde frito). Este plato refleja perfectamente la fusión de ingredientes locales "
        "y la influencia caribeña en la cocina de Samaná.",
        ("El Pescador", "La Terrasse", "Pueblo de los Pescadores"),
    ),
    "mofongo": Dish(
        "El mofongo es un plato tradicional dominicano hecho de plátano verde frito que se machaca "
        "con ajo, chicharrón (piel de cerdo frita) y aceite de oliva hasta formar una masa. Se "
        "sirve generalmente en forma de cuenco y puede rellenarse con carne, pollo, mariscos o "
        "vegetales en salsa. Es un plato contundente y lleno de sabor que representa la esencia "
        "de la cocina dominicana.",
        ("El Mofongo Loco", "Restaurante Luis", "La Casa de Doña Chichi"),
    ),
    "sancocho": Dish(
        "El sancocho dominicano es un guiso espeso y sustancioso que combina diferentes carnes "
        "(pollo, res, cerdo), tubérculos como yuca, ñame, plátano y batata, y verduras como maíz, "
        "auyama (calabaza) y cebolla. Se cocina a fuego lento durante horas para que todos los "
        "sabores se mezclen. Es considerado el plato nacional de República Dominicana y se sirve "
        "tradicionalmente en ocasiones especiales.",
        ("La Cocina Dominicana", "Comedor Típico", "El Criollo"),
    ),
    "dulce de coco": Dish(
        "Los dulces de coco son una especialidad de Samaná, gracias a la abundancia de cocoteros "
        "en la península. Se preparan con coco rallado fresco, azúcar moreno, canela y vainilla, "
        "cocinados hasta obtener una textura espesa y caramelizada. Existen muchas variantes, "
        "algunas con leche, otras con piña o batata. Estos dulces se pueden encontrar tanto en "
        "restaurantes como vendidos por lugareños en las playas y calles de Samaná.",
        ("Dulcería Samaná", "Café del Mar", "Las Delicias"),
    ),
}

DISH_CLOSING = (
    " ¿Te gustaría conocer otros platos típicos o saber dónde encontrar los mejores "
    "restaurantes para probar esta especialidad?"
)
UNKNOWN_DISH_MESSAGE = (
    "Lo siento, no tengo información específica sobre ese plato. Algunos platos típicos de "
    "Samaná incluyen el pescado con coco, mofongo, sancocho y los dulces de coco. ¿Te gustaría "
    "saber más sobre alguno de estos platos?"
)
UNKNOWN_DISH_QUESTIONS = (
    "¿Qué es el pescado con coco?",
    "¿Cómo se prepara el mofongo?",
    "¿Dónde puedo probar la gastronomía local?",
)

LOCAL_CUISINE_MESSAGE = (
    "La gastronomía de Samaná está marcada por su ubicación costera, con una fuerte influencia "
    "de la cocina dominicana tradicional y toques especiales de la península. Los mariscos "
    "frescos y el pescado son protagonistas en muchos restaurantes locales. Platos emblemáticos "
    "incluyen el pescado con coco, mofongo (puré de plátano verde con chicharrones), sancocho "
    "(guiso tradicional dominicano) y, por supuesto, los dulces de coco característicos de la "
    "región. Los restaurantes locales suelen ofrecer estas delicias con un toque auténtico que "
    "refleja la cultura y tradiciones de Samaná. ¿Te gustaría conocer más sobre algún plato "
    "específico o prefieres recomendaciones de restaurantes donde probar estas especialidades?"
)
LOCAL_CUISINE_QUESTIONS = (
    "¿Qué es el pescado con coco?",
    "¿Dónde puedo probar mofongo auténtico?",
    "¿Cuáles son los dulces típicos de Samaná?",
)

GENERAL_MESSAGE = (
    "Samaná ofrece una excelente variedad gastronómica, desde restaurantes de cocina dominicana "
    "tradicional hasta opciones internacionales. La cocina local destaca por sus mariscos "
    "frescos, el famoso pescado con coco, mofongo y los dulces típicos elaborados con coco. Los "
    "restaurantes se encuentran tanto en Las Terrenas como en Santa Bárbara de Samaná, muchos "
    "con vistas al mar y ambientes relajados. ¿Te interesa algún tipo de cocina en particular o "
    "prefieres una recomendación general?"
)
GENERAL_QUESTIONS = (
    "¿Dónde puedo comer mariscos frescos?",
    "¿Cuáles son los mejores restaurantes para comida dominicana?",
    "¿Hay restaurantes con vistas al mar?",
)


def find_dish(text: str) -> str | None:
    """First known dish mentioned in the text."""
    lower = (text or "").lower()
    return next((name for name in DISHES if name in lower), None)


class FoodResponder(TopicResponder):
    """Restaurant listings, local cuisine overview and dish descriptions."""

    name = ResponderName.FOOD
    extractor = FOOD_EXTRACTOR
    refinement_lookup = "query_restaurants"
    refinement_template = RESTAURANT_TEMPLATE
    error_message = (
        "Lo siento, he tenido un problema al procesar tu consulta sobre gastronomía. "
        "¿Puedo ayudarte con algo más?"
    )

    def classify_sub_intent(self, text: str, extracted: dict[str, Any]) -> FoodSubIntent:
        lower = (text or "").lower()
        for sub_intent, keywords in SUB_INTENT_KEYWORDS:
            if any(keyword in lower for keyword in keywords):
                return sub_intent
        return FoodSubIntent.GENERAL

    async def handle(self, sub_intent: FoodSubIntent, preferences: dict[str, Any], text: str) -> Response:
        if sub_intent is FoodSubIntent.RESTAURANT_RECOMMENDATION:
            return await self._restaurant_recommendations(preferences)
        if sub_intent is FoodSubIntent.LOCAL_CUISINE:
            return canned_response(LOCAL_CUISINE_MESSAGE, LOCAL_CUISINE_QUESTIONS, BANNER_TYPE)
        if sub_intent is FoodSubIntent.DISH_INFO:
            return self._dish_info(text)
        return canned_response(GENERAL_MESSAGE, GENERAL_QUESTIONS, BANNER_TYPE)

    async def _restaurant_recommendations(self, preferences: dict[str, Any]) -> Response:
        filters: dict[str, Any] = {"limit": 5}
        if preferences.get("cuisine_type"):
            filters["category"] = preferences["cuisine_type"]
        if preferences.get("price_range") == "low":
            filters["max_price"] = LOW_PRICE_MAX
        elif preferences.get("price_range") == "high":
            filters["min_price"] = HIGH_PRICE_MIN

        return await self.respond_with_listing(
            self.catalog.query_restaurants, filters, RESTAURANT_TEMPLATE, SearchType.RESTAURANT.value
        )

    @staticmethod
    def _dish_info(text: str) -> Response:
        dish_name = find_dish(text)
        if dish_name is None:
            return canned_response(UNKNOWN_DISH_MESSAGE, UNKNOWN_DISH_QUESTIONS)

        dish = DISHES[dish_name]
        message = (
            f"{dish.description} Puedes probar excelente {dish_name} en restaurantes como "
            f"{', '.join(dish.restaurants)}.{DISH_CLOSING}"
        )
        questions = (
            f"¿Dónde está ubicado {dish.restaurants[0]}?",
            "¿Qué otros platos típicos hay en Samaná?",
            "¿Cuál es el mejor restaurante para comida local?",
        )
        return canned_response(message, questions, BANNER_TYPE)
