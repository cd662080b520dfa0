"""
Core data models for the SamanaInn conversational pipeline.

This module defines the closed vocabularies (intent types, processing stages,
action types, responder names) and the value objects exchanged between
pipeline stages:

- Intent: Output of keyword classification (type + fixed confidence)
- NextAction: Directive emitted by the Coordinator for the TurnDispatcher
- Response: The value every responder returns and the validator emits

Responses carry a *context patch* (partial ConversationContext) instead of
mutating the conversation context in place. Patches are combined by
agent.state.helpers.merge_context at the TurnDispatcher boundary.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ============================================================================
# Enums
# ============================================================================


class IntentType(str, Enum):
    """Topic labels produced by the KeywordClassifier."""

    ACCOMMODATION = "accommodation"
    GASTRONOMY = "gastronomy"
    ACTIVITIES = "activities"
    TRANSPORT = "transport"
    INFORMATION = "information"
    GENERAL = "general"


# Topics that own a dedicated TopicResponder
TOPIC_INTENTS = frozenset({
    IntentType.ACCOMMODATION,
    IntentType.GASTRONOMY,
    IntentType.ACTIVITIES,
    IntentType.TRANSPORT,
})


class ProcessingStage(str, Enum):
    """Pipeline stage persisted in the conversation context."""

    INITIAL = "initial"
    """No stage bound yet: the Coordinator classifies the turn."""

    QUERY = "query"
    """Turns are answered by the QueryResponder with context.query_params."""

    BOOKING = "booking"
    """Turns are answered by the BookingResponder with context.booking_params."""

    GENERIC = "generic"
    """Turns are answered by the completion-provider-backed responder."""


class ActionType(str, Enum):
    """Types of next action the Coordinator may request."""

    QUERY = "query"
    BOOKING = "booking"
    RESPOND = "respond"


class ResponderName(str, Enum):
    """Identity of each pipeline stage (recorded in context.active_agents)."""

    COORDINATOR = "coordinator"
    QUERY = "query"
    BOOKING = "booking"
    LODGING = "lodging"
    FOOD = "food"
    ACTIVITIES = "activities"
    TRANSPORT = "transport"
    GENERIC = "generic"
    VALIDATOR = "validator"


class SearchType(str, Enum):
    """Catalog collection a query targets."""

    ACCOMMODATION = "accommodation"
    RESTAURANT = "restaurant"
    TOUR = "tour"
    CAR = "car"
    INFORMATION = "information"
    GENERAL = "general"


# Catalog search type ↔ topic
SEARCH_TYPE_TOPICS: dict[SearchType, IntentType] = {
    SearchType.ACCOMMODATION: IntentType.ACCOMMODATION,
    SearchType.RESTAURANT: IntentType.GASTRONOMY,
    SearchType.TOUR: IntentType.ACTIVITIES,
    SearchType.CAR: IntentType.TRANSPORT,
    SearchType.INFORMATION: IntentType.INFORMATION,
    SearchType.GENERAL: IntentType.GENERAL,
}

TOPIC_SEARCH_TYPES: dict[IntentType, SearchType] = {
    topic: search_type for search_type, topic in SEARCH_TYPE_TOPICS.items()
}


# ============================================================================
# Value objects
# ============================================================================


@dataclass
class Intent:
    """
    Classified intent of a user message.

    Attributes:
        type: Topic label
        confidence: Fixed per-branch constant in [0, 1]
        details: Arbitrary hints for downstream stages (e.g. search_type)
    """

    type: IntentType
    confidence: float
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "details": dict(self.details),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Intent":
        """
        Deserialize an Intent stored in the conversation context.

        Unknown type labels degrade to GENERAL.
        """
        try:
            intent_type = IntentType(data.get("type"))
        except ValueError:
            intent_type = IntentType.GENERAL
        return cls(
            type=intent_type,
            confidence=float(data.get("confidence", 0.0)),
            details=dict(data.get("details") or {}),
        )


@dataclass
class NextAction:
    """
    Directive telling the TurnDispatcher which responder runs next.

    `type` is normally an ActionType; raw strings are kept as-is so that an
    unrecognized directive reaches the dispatcher's static fallback instead
    of failing at construction time.
    """

    type: ActionType | str
    params: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        action_type = self.type.value if isinstance(self.type, ActionType) else self.type
        return {"type": action_type, "params": dict(self.params)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NextAction":
        raw_type = data.get("type", "")
        try:
            action_type: ActionType | str = ActionType(raw_type)
        except ValueError:
            action_type = raw_type
        return cls(type=action_type, params=dict(data.get("params") or {}))


@dataclass
class Response:
    """
    Structured chat response.

    Attributes:
        message: Text shown to the user (required unless error is True)
        error: Marks apology responses produced by a failure; the validator
            passes them through untouched
        results: Ordered catalog records, if the turn produced any
        ui: Directive bag for the frontend (banner, buttons, suggestions)
        context: Partial ConversationContext to merge forward
        next_action: Only set by the Coordinator
        validated_by: Stamped by the ResponseValidator
    """

    message: str = ""
    error: bool = False
    results: list[dict[str, Any]] | None = None
    ui: dict[str, Any] = field(default_factory=dict)
    context: dict[str, Any] = field(default_factory=dict)
    next_action: NextAction | None = None
    validated_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the outbound shape consumed by the HTTP layer.

        Optional members are omitted when empty.
        """
        payload: dict[str, Any] = {"message": self.message}
        if self.results is not None:
            payload["results"] = list(self.results)
        if self.ui:
            payload["ui"] = dict(self.ui)
        if self.context:
            payload["context"] = dict(self.context)
        if self.error:
            payload["error"] = True
        if self.validated_by:
            payload["validated_by"] = self.validated_by
        return payload
