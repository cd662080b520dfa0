"""
Preference Extractor - Pulls structured filter hints out of free text.

Each topic owns an extractor built from an ordered rule table:

- DimensionRule: sets at most one value per dimension; options are checked
  in order and the first option with a matching keyword wins
- AmenityRule: accumulates values into a list dimension (e.g. amenities)
- NumericRule: captures a leading integer immediately followed by a unit
  word ("3 días", "4 personas"); no match leaves the field unset
- DateHintRule: resolves relative date hints ("mañana", "próxima semana")

Matching is substring-based on the lowercased message.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from agent.models import IntentType
from agent.utils.date_parser import resolve_date_hint

logger = logging.getLogger(__name__)


# ============================================================================
# RULE TYPES
# ============================================================================


@dataclass(frozen=True)
class DimensionRule:
    """Single-valued dimension: first option with a matching keyword wins."""

    dimension: str
    options: tuple[tuple[tuple[str, ...], str], ...]

    def apply(self, text: str, lower: str, preferences: dict[str, Any]) -> None:
        for keywords, value in self.options:
            if any(keyword in lower for keyword in keywords):
                preferences[self.dimension] = value
                return


@dataclass(frozen=True)
class AmenityRule:
    """List-valued dimension: every matching rule appends its value."""

    dimension: str
    value: str
    keywords: tuple[str, ...]

    def apply(self, text: str, lower: str, preferences: dict[str, Any]) -> None:
        if any(keyword in lower for keyword in self.keywords):
            preferences.setdefault(self.dimension, []).append(self.value)


@dataclass(frozen=True)
class NumericRule:
    """Integer captured by the first group of `pattern`."""

    dimension: str
    pattern: re.Pattern[str]

    def apply(self, text: str, lower: str, preferences: dict[str, Any]) -> None:
        match = self.pattern.search(text)
        if match:
            preferences[self.dimension] = int(match.group(1))


@dataclass(frozen=True)
class DateHintRule:
    """ISO date resolved from a relative hint."""

    dimension: str

    def apply(self, text: str, lower: str, preferences: dict[str, Any]) -> None:
        resolved = resolve_date_hint(text)
        if resolved:
            preferences[self.dimension] = resolved


Rule = DimensionRule | AmenityRule | NumericRule | DateHintRule


# ============================================================================
# EXTRACTOR
# ============================================================================


class PreferenceExtractor:
    """
    Rule-table driven extractor.

    Example:
        >>> LODGING_EXTRACTOR.extract("Busco un hotel barato cerca de la playa")
        {'accommodation_type': 'hotel', 'location': 'beach', 'price_range': 'low'}
    """

    def __init__(self, name: str, rules: tuple[Rule, ...]):
        self.name = name
        self.rules = rules

    def extract(self, text: str) -> dict[str, Any]:
        """
        Extract preferences from a message.

        Args:
            text: Raw user message

        Returns:
            New dict containing only the dimensions that matched
        """
        text = text or ""
        lower = text.lower()
        preferences: dict[str, Any] = {}

        for rule in self.rules:
            rule.apply(text, lower, preferences)

        if preferences:
            logger.debug(
                f"Preferences extracted | extractor={self.name} | "
                f"dimensions={sorted(preferences)}"
            )
        return preferences


# ============================================================================
# TOPIC RULE TABLES
# ============================================================================

_PRICE_RANGE_EN_ES = DimensionRule("price_range", (
    (("barat", "económic", "cheap"), "low"),
    (("lujo", "luxury", "premium"), "high"),
))

LODGING_EXTRACTOR = PreferenceExtractor("lodging", (
    DimensionRule("accommodation_type", (
        (("hotel",), "hotel"),
        (("apartamento", "apartment"), "apartment"),
        (("villa", "casa"), "villa"),
    )),
    DimensionRule("location", (
        (("playa", "beach", "costa"), "beach"),
        (("centro", "downtown"), "downtown"),
        (("montaña", "mountain"), "mountain"),
    )),
    _PRICE_RANGE_EN_ES,
    DimensionRule("group_type", (
        (("familia", "niños", "family"), "family"),
        (("pareja", "romántico", "couple"), "couple"),
        (("grupo", "amigos", "group"), "group"),
    )),
    AmenityRule("amenities", "pool", ("piscina", "pool")),
    AmenityRule("amenities", "wifi", ("wifi", "internet")),
    AmenityRule("amenities", "breakfast", ("desayuno", "breakfast")),
))

FOOD_EXTRACTOR = PreferenceExtractor("food", (
    DimensionRule("cuisine_type", (
        (("dominicana", "local", "típica"), "local"),
        (("italiana", "pizza", "pasta"), "italian"),
        (("mariscos", "pescado", "seafood"), "seafood"),
        (("internacional",), "international"),
    )),
    DimensionRule("price_range", (
        (("barat", "económic"), "low"),
        (("caro", "lujo", "exclusivo"), "high"),
    )),
    DimensionRule("ambience", (
        (("romántico", "pareja"), "romantic"),
        (("familia", "niños"), "family"),
        (("vista", "panorámica", "mar"), "view"),
    )),
))

ACTIVITIES_EXTRACTOR = PreferenceExtractor("activities", (
    DimensionRule("activity_type", (
        (("ballena", "whale"), "whale_watching"),
        (("playa", "beach"), "beach"),
        (("senderismo", "hiking", "caminata"), "hiking"),
        (("limon", "cascada", "waterfall"), "el_limon"),
        (("haitises", "parque nacional"), "los_haitises"),
    )),
    DimensionRule("duration", (
        (("dia completo", "full day"), "full_day"),
        (("medio dia", "half day"), "half_day"),
    )),
    DimensionRule("group_type", (
        (("familia", "niños", "family"), "family"),
        (("pareja", "romantico", "couple"), "couple"),
        (("aventura", "adventure"), "adventure"),
    )),
))

TRANSPORT_EXTRACTOR = PreferenceExtractor("transport", (
    DimensionRule("vehicle_type", (
        (("coche", "auto", "car"), "car"),
        (("moto", "scooter"), "motorcycle"),
        (("quad", "atv", "buggy"), "atv"),
    )),
    NumericRule(
        "rental_days",
        re.compile(r"(\d+)\s*(?:días|dias|día|dia|days|day)", re.IGNORECASE),
    ),
    _PRICE_RANGE_EN_ES,
))

GENERAL_EXTRACTOR = PreferenceExtractor("general", (
    DimensionRule("location", (
        (("playa", "costa", "mar"), "playa"),
        (("centro",), "centro"),
    )),
    DimensionRule("budget", (
        (("económic", "barat"), "bajo"),
        (("lujo", "premium"), "alto"),
    )),
    NumericRule(
        "people",
        re.compile(r"(\d+)\s*(?:personas|persona|huéspedes|adultos|visitantes)", re.IGNORECASE),
    ),
    DateHintRule("start_date"),
))

TOPIC_EXTRACTORS: dict[IntentType, PreferenceExtractor] = {
    IntentType.ACCOMMODATION: LODGING_EXTRACTOR,
    IntentType.GASTRONOMY: FOOD_EXTRACTOR,
    IntentType.ACTIVITIES: ACTIVITIES_EXTRACTOR,
    IntentType.TRANSPORT: TRANSPORT_EXTRACTOR,
}
