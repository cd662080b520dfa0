"""
Agent services module.

External collaborators of the chat pipeline. The ChatService lives in
agent.services.chat_service and is imported from there (it depends on the
routing layer, which depends on these collaborators).

Services:
- catalog_gateway: filtered lookups over the tourism catalog
- completion_provider: LLM completions through OpenRouter
- conversation_store: conversations, turns and context persistence
"""

from agent.services.catalog_gateway import (
    CatalogGateway,
    CatalogLookupError,
    SQLCatalogGateway,
)
from agent.services.completion_provider import (
    CompletionProvider,
    CompletionProviderError,
    CompletionRequest,
    CompletionResult,
    OpenRouterCompletionProvider,
)
from agent.services.conversation_store import (
    ConversationStore,
    ConversationStoreError,
    InMemoryConversationStore,
    SQLConversationStore,
    StoredConversation,
)

__all__ = [
    # Catalog
    "CatalogGateway",
    "CatalogLookupError",
    "SQLCatalogGateway",
    # Completion
    "CompletionProvider",
    "CompletionProviderError",
    "CompletionRequest",
    "CompletionResult",
    "OpenRouterCompletionProvider",
    # Conversations
    "ConversationStore",
    "ConversationStoreError",
    "InMemoryConversationStore",
    "SQLConversationStore",
    "StoredConversation",
]
