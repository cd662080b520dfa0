"""
Process-wide object graph for the API.

Responders, the dispatcher and the stores are stateless (or hold only
process-level resources), so they are built once and shared by every
request.
"""

import logging
from functools import lru_cache

from agent.classification.keyword_classifier import KeywordClassifier
from agent.responders import (
    BookingResponder,
    GenericResponder,
    QueryResponder,
    build_topic_responders,
)
from agent.routing.coordinator import Coordinator
from agent.routing.turn_dispatcher import TurnDispatcher
from agent.services.catalog_gateway import CatalogGateway, SQLCatalogGateway
from agent.services.chat_service import ChatService
from agent.services.completion_provider import CompletionProvider, OpenRouterCompletionProvider
from agent.services.conversation_store import (
    ConversationStore,
    InMemoryConversationStore,
    SQLConversationStore,
)
from agent.validators.response_validator import ResponseValidator
from shared.config import get_settings

logger = logging.getLogger(__name__)


def build_dispatcher(catalog: CatalogGateway, provider: CompletionProvider) -> TurnDispatcher:
    """Wire every pipeline stage around the given collaborators."""
    settings = get_settings()
    classifier = KeywordClassifier()
    return TurnDispatcher(
        coordinator=Coordinator(classifier),
        query_responder=QueryResponder(catalog, build_topic_responders(catalog), classifier),
        booking_responder=BookingResponder(settings.BOOKING_BASE_URL),
        generic_responder=GenericResponder(provider, settings.MAX_CONVERSATION_HISTORY),
        validator=ResponseValidator(),
    )


def build_conversation_store() -> ConversationStore:
    settings = get_settings()
    if settings.CONVERSATION_STORE == "memory":
        logger.warning("Using in-memory conversation store (conversations are lost on restart)")
        return InMemoryConversationStore()
    return SQLConversationStore()


@lru_cache
def get_chat_service() -> ChatService:
    """Cached ChatService used by the chat routes."""
    dispatcher = build_dispatcher(SQLCatalogGateway(), OpenRouterCompletionProvider())
    return ChatService(dispatcher, build_conversation_store())
