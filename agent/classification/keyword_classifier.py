"""
Keyword Classifier - Maps free text to a travel topic.

Case-insensitive substring matching against fixed keyword sets. Sets are
checked in a fixed priority order and the first matching set wins, so ties
are impossible. Confidence is a constant per branch, not a match score.

Priority:
    accommodation → gastronomy → activities → transport → information → general
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from agent.models import Intent, IntentType, SearchType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeywordRule:
    """One priority slot of the classifier."""

    intent_type: IntentType
    keywords: tuple[str, ...]
    confidence: float
    details: dict[str, Any] = field(default_factory=dict)


CLASSIFICATION_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(
        IntentType.ACCOMMODATION,
        ("alojamiento", "hotel", "apartamento", "casa", "donde dormir", "hospedaje"),
        0.9,
        {"search_type": SearchType.ACCOMMODATION.value},
    ),
    KeywordRule(
        IntentType.GASTRONOMY,
        ("restaurante", "comer", "comida", "gastronomía", "plato"),
        0.9,
        {"search_type": SearchType.RESTAURANT.value},
    ),
    KeywordRule(
        IntentType.ACTIVITIES,
        ("excursión", "tour", "actividad", "visitar", "qué hacer"),
        0.9,
        {"search_type": SearchType.TOUR.value},
    ),
    KeywordRule(
        IntentType.TRANSPORT,
        ("vehículo", "coche", "auto", "carro", "alquiler"),
        0.9,
        {"search_type": SearchType.CAR.value},
    ),
    KeywordRule(
        IntentType.INFORMATION,
        ("samana", "república dominicana", "información"),
        0.8,
        {"search_type": SearchType.INFORMATION.value, "location": "Samana"},
    ),
)

GENERAL_CONFIDENCE = 0.6

# Substrings that turn a topic request into a booking request
BOOKING_KEYWORDS: tuple[str, ...] = ("reserva", "reservar", "booking")


class KeywordClassifier:
    """
    Stateless topic classifier.

    Example:
        >>> KeywordClassifier().classify("Busco un hotel barato").type
        <IntentType.ACCOMMODATION: 'accommodation'>
    """

    def __init__(self, rules: tuple[KeywordRule, ...] = CLASSIFICATION_RULES):
        self.rules = rules

    def classify(self, text: str) -> Intent:
        """
        Classify a message into a topic.

        Args:
            text: Raw user message

        Returns:
            Intent with the first matching rule's type, confidence and a copy
            of its details; GENERAL (0.6) when nothing matches
        """
        lower = (text or "").lower()

        for rule in self.rules:
            if any(keyword in lower for keyword in rule.keywords):
                logger.debug(
                    f"Message classified | type={rule.intent_type.value} | "
                    f"confidence={rule.confidence}"
                )
                return Intent(
                    type=rule.intent_type,
                    confidence=rule.confidence,
                    details=dict(rule.details),
                )

        return Intent(
            type=IntentType.GENERAL,
            confidence=GENERAL_CONFIDENCE,
            details={"search_type": SearchType.GENERAL.value},
        )

    @staticmethod
    def is_booking_request(text: str) -> bool:
        """True when the message asks to book something."""
        lower = (text or "").lower()
        return any(keyword in lower for keyword in BOOKING_KEYWORDS)
