"""
Chat Service - Controller flow for one inbound chat message.

Flow:
1. Get or create the conversation
2. Under the conversation's lock: read the stored context and history,
   merge the request context over the stored one, save the user turn
3. Run the TurnDispatcher
4. Save the assistant turn (ui/results as metadata) and persist
   merge_context(combined, response.context)

Turns of one conversation are serialized with a per-conversation
asyncio.Lock; turns of different conversations run concurrently.
"""

import asyncio
import logging
import weakref
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from agent.routing.turn_dispatcher import TurnDispatcher
from agent.services.conversation_store import (
    DEFAULT_HISTORY_LIMIT,
    ConversationStore,
    StoredConversation,
)
from agent.state.helpers import merge_context
from agent.state.schemas import HistoryTurn

logger = logging.getLogger(__name__)


class ConversationLocks:
    """
    One asyncio.Lock per conversation id.

    Locks are held weakly and disappear once no turn is using them.
    """

    def __init__(self):
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()

    def get(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[conversation_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatService:
    """
    Glue between the HTTP layer, the conversation store and the dispatcher.

    Args:
        dispatcher: TurnDispatcher built once per process
        store: Conversation persistence
        history_limit: Turns read before each dispatch
    """

    def __init__(
        self,
        dispatcher: TurnDispatcher,
        store: ConversationStore,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        locks: ConversationLocks | None = None,
    ):
        self.dispatcher = dispatcher
        self.store = store
        self.history_limit = history_limit
        self.locks = locks or ConversationLocks()

    async def handle_message(
        self,
        message: str,
        conversation_id: str | None = None,
        session_id: str | None = None,
        user_id: str | None = None,
        request_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Process one inbound message.

        Args:
            message: User message
            conversation_id: Existing conversation; unknown ids start a new one
            session_id: Anonymous session identifier
            user_id: Authenticated user identifier
            request_context: Context sent by the client, merged over the
                stored context

        Returns:
            {"conversation_id": str, "response": Response}; the Response
            carries the full persisted context
        """
        conversation = await self._get_or_create(conversation_id, session_id, user_id)

        async with self.locks.get(conversation.id):
            # Re-read inside the lock so a queued turn sees the previous turn's context
            current = await self.store.get_by_id(conversation.id) or conversation
            history = await self.store.get_history(conversation.id, self.history_limit)
            combined = merge_context(current.context, request_context or {})

            await self.store.save_message(
                conversation.id,
                {"role": "user", "content": message, "metadata": {}, "timestamp": _now_iso()},
            )

            response = await self.dispatcher.process(message, history, combined)

            await self.store.save_message(
                conversation.id,
                {
                    "role": "assistant",
                    "content": response.message,
                    "metadata": {"ui": response.ui, "results": response.results},
                    "timestamp": _now_iso(),
                },
            )

            updated_context = merge_context(combined, response.context)
            await self.store.update_context(conversation.id, updated_context)

        logger.info(
            f"Chat turn completed | conversation_id={conversation.id} | "
            f"stage={updated_context.get('processing_stage')} | error={response.error}"
        )
        return {
            "conversation_id": conversation.id,
            "response": replace(response, context=dict(updated_context)),
        }

    async def get_history(
        self, conversation_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[HistoryTurn] | None:
        """Stored turns oldest first; None when the conversation does not exist."""
        conversation = await self.store.get_by_id(conversation_id)
        if conversation is None:
            return None
        return await self.store.get_history(conversation_id, limit)

    async def _get_or_create(
        self,
        conversation_id: str | None,
        session_id: str | None,
        user_id: str | None,
    ) -> StoredConversation:
        if conversation_id:
            conversation = await self.store.get_by_id(conversation_id)
            if conversation is not None:
                return conversation
            logger.warning(f"Conversation not found, creating new | conversation_id={conversation_id}")

        return await self.store.create(
            seed=None,
            session_id=session_id or f"session_{int(datetime.now(timezone.utc).timestamp() * 1000)}",
            user_id=user_id,
        )
