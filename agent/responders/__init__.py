"""
Responders - Turn a classified message into a Response.

Topic responders (rule-based, catalog-backed):
- LodgingResponder, FoodResponder, ActivitiesResponder, TransportResponder

Stage responders:
- QueryResponder: "query" stage, delegates to the topic responders
- BookingResponder: "booking" stage, deep links only
- GenericResponder: completion-provider-backed fallback

All responders are stateless and built once (see build_topic_responders).
"""

from agent.models import IntentType
from agent.responders.activities import ActivitiesResponder
from agent.responders.base import TopicResponder
from agent.responders.booking import BookingResponder
from agent.responders.food import FoodResponder
from agent.responders.generic import GenericResponder
from agent.responders.lodging import LodgingResponder
from agent.responders.query import QueryResponder
from agent.responders.transport import TransportResponder
from agent.services.catalog_gateway import CatalogGateway


def build_topic_responders(catalog: CatalogGateway) -> dict[IntentType, TopicResponder]:
    """Topic → responder table used by the QueryResponder."""
    return {
        IntentType.ACCOMMODATION: LodgingResponder(catalog),
        IntentType.GASTRONOMY: FoodResponder(catalog),
        IntentType.ACTIVITIES: ActivitiesResponder(catalog),
        IntentType.TRANSPORT: TransportResponder(catalog),
    }


__all__ = [
    "ActivitiesResponder",
    "BookingResponder",
    "FoodResponder",
    "GenericResponder",
    "LodgingResponder",
    "QueryResponder",
    "TopicResponder",
    "TransportResponder",
    "build_topic_responders",
]
