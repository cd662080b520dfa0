"""
ConversationContext schema - per-conversation state threaded across turns.

The context is a JSON-serializable bag persisted by the ConversationStore
between turns. It is conversation-scoped, created at conversation start and
never deleted while the conversation lives.

Stages never mutate a context in place: each returns a partial context
(a "patch") on its Response, and the TurnDispatcher folds patches in with
agent.state.helpers.merge_context.
"""

from typing import Any, Literal, TypedDict


class IntentSnapshot(TypedDict, total=False):
    """Serialized agent.models.Intent."""

    type: str
    confidence: float
    details: dict[str, Any]


class LastSearch(TypedDict, total=False):
    """Outcome of the most recent catalog query."""

    type: str
    params: dict[str, Any]
    result_count: int


class UserPreferences(TypedDict, total=False):
    """Preferences accumulated turn over turn (merged, never replaced)."""

    budget: str
    group_type: str
    location: str
    interests: list[str]


class HistoryTurn(TypedDict, total=False):
    """One stored message as returned by ConversationStore.get_history()."""

    role: Literal["user", "assistant"]
    content: str
    metadata: dict[str, Any]
    timestamp: str


class ConversationContext(TypedDict, total=False):
    """
    Conversation-scoped context.

    All fields are optional (total=False) so that partial patches share the
    same type.

    Fields:
        # ====================================================================
        # Routing
        # ====================================================================
        processing_stage: ProcessingStage value deciding which responder
            runs next ("initial" | "query" | "booking" | "generic")
        intent: Last classified intent (type, confidence, details)
        active_agents: Responder names invoked so far (append-only,
            analytics only)

        # ====================================================================
        # Carried-forward parameters
        # ====================================================================
        query_params: Filter baseline handed to the QueryResponder
        booking_params: Parameters handed to the BookingResponder
            (type, slug, id, check_in, check_out, adults, children)
        last_search: Most recent catalog query outcome

        # ====================================================================
        # Preferences and bookkeeping
        # ====================================================================
        user_preferences: Accumulated preferences
        last_action: Last action suggested by the completion provider
        current_query_type: Query type used by the generic path
    """

    # Routing
    processing_stage: str
    intent: IntentSnapshot
    active_agents: list[str]

    # Carried-forward parameters
    query_params: dict[str, Any]
    booking_params: dict[str, Any]
    last_search: LastSearch

    # Preferences and bookkeeping
    user_preferences: UserPreferences
    last_action: dict[str, Any]
    current_query_type: str
