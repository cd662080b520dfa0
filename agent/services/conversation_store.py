"""
Conversation Store - Persistence of conversations, turns and context.

SQLConversationStore (PostgreSQL, via database.models) is the canonical
implementation. InMemoryConversationStore implements the same contract for
local runs and tests.

History is always returned oldest first.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from agent.state.helpers import new_context
from agent.state.schemas import ConversationContext, HistoryTurn
from database.connection import get_async_session
from database.models import Conversation, ConversationMessage, MessageRole

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 20


class ConversationStoreError(Exception):
    """Raised when the store cannot read or write a conversation."""


@dataclass
class StoredConversation:
    """Conversation identity plus its persisted context."""

    id: str
    context: ConversationContext = field(default_factory=new_context)
    session_id: str | None = None
    user_id: str | None = None


class ConversationStore(ABC):
    """Conversation persistence used by the ChatService."""

    @abstractmethod
    async def create(
        self,
        seed: dict[str, Any] | None = None,
        session_id: str | None = None,
        user_id: str | None = None,
    ) -> StoredConversation:
        """Create a conversation whose context starts as new_context() + seed."""

    @abstractmethod
    async def get_by_id(self, conversation_id: str) -> StoredConversation | None:
        ...

    @abstractmethod
    async def get_history(
        self, conversation_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[HistoryTurn]:
        """Most recent `limit` turns, oldest first."""

    @abstractmethod
    async def save_message(self, conversation_id: str, turn: HistoryTurn) -> None:
        ...

    @abstractmethod
    async def update_context(
        self, conversation_id: str, context: ConversationContext
    ) -> None:
        ...


def _seeded_context(seed: dict[str, Any] | None) -> ConversationContext:
    context: dict[str, Any] = dict(new_context())
    context.update(seed or {})
    return context  # type: ignore[return-value]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# In-memory implementation
# ============================================================================


class InMemoryConversationStore(ConversationStore):
    """Process-local store. Contexts are deep-copied on the way in and out."""

    def __init__(self):
        self._conversations: dict[str, StoredConversation] = {}
        self._messages: dict[str, list[HistoryTurn]] = {}

    async def create(self, seed=None, session_id=None, user_id=None) -> StoredConversation:
        conversation = StoredConversation(
            id=str(uuid4()),
            context=_seeded_context(deepcopy(seed)),
            session_id=session_id,
            user_id=user_id,
        )
        self._conversations[conversation.id] = conversation
        self._messages[conversation.id] = []
        logger.info(f"Conversation created | conversation_id={conversation.id} | store=memory")
        return deepcopy(conversation)

    async def get_by_id(self, conversation_id: str) -> StoredConversation | None:
        conversation = self._conversations.get(conversation_id)
        return deepcopy(conversation) if conversation else None

    async def get_history(self, conversation_id, limit=DEFAULT_HISTORY_LIMIT) -> list[HistoryTurn]:
        turns = self._messages.get(conversation_id, [])
        return deepcopy(turns[-limit:]) if limit else []

    async def save_message(self, conversation_id: str, turn: HistoryTurn) -> None:
        if conversation_id not in self._conversations:
            raise ConversationStoreError(f"Unknown conversation {conversation_id}")
        stored: HistoryTurn = {
            "role": turn.get("role", "user"),
            "content": turn.get("content", ""),
            "metadata": deepcopy(turn.get("metadata") or {}),
            "timestamp": turn.get("timestamp") or _now_iso(),
        }
        self._messages[conversation_id].append(stored)

    async def update_context(self, conversation_id, context) -> None:
        conversation = self._conversations.get(conversation_id)
        if conversation is None:
            raise ConversationStoreError(f"Unknown conversation {conversation_id}")
        conversation.context = deepcopy(context)


# ============================================================================
# SQL implementation
# ============================================================================


def _parse_uuid(conversation_id: str) -> UUID | None:
    try:
        return UUID(str(conversation_id))
    except ValueError:
        return None


class SQLConversationStore(ConversationStore):
    """Store over the conversations / conversation_messages tables."""

    def __init__(self, session_factory: Callable = get_async_session):
        self._session_factory = session_factory

    async def create(self, seed=None, session_id=None, user_id=None) -> StoredConversation:
        conversation = Conversation(
            id=uuid4(),
            session_id=session_id,
            user_id=user_id,
            context=dict(_seeded_context(seed)),
        )
        try:
            async with self._session_factory() as session:
                session.add(conversation)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Conversation create failed | error={e}", exc_info=True)
            raise ConversationStoreError("Could not create conversation") from e

        logger.info(f"Conversation created | conversation_id={conversation.id} | store=sql")
        return StoredConversation(
            id=str(conversation.id),
            context=dict(conversation.context),  # type: ignore[arg-type]
            session_id=session_id,
            user_id=user_id,
        )

    async def get_by_id(self, conversation_id: str) -> StoredConversation | None:
        conversation_uuid = _parse_uuid(conversation_id)
        if conversation_uuid is None:
            return None

        try:
            async with self._session_factory() as session:
                conversation = await session.get(Conversation, conversation_uuid)
        except SQLAlchemyError as e:
            logger.error(
                f"Conversation lookup failed | conversation_id={conversation_id} | error={e}",
                exc_info=True,
            )
            raise ConversationStoreError("Could not load conversation") from e

        if conversation is None:
            return None
        return StoredConversation(
            id=str(conversation.id),
            context=dict(conversation.context or {}),  # type: ignore[arg-type]
            session_id=conversation.session_id,
            user_id=conversation.user_id,
        )

    async def get_history(self, conversation_id, limit=DEFAULT_HISTORY_LIMIT) -> list[HistoryTurn]:
        conversation_uuid = _parse_uuid(conversation_id)
        if conversation_uuid is None or not limit:
            return []

        stmt = (
            select(ConversationMessage)
            .where(ConversationMessage.conversation_id == conversation_uuid)
            .order_by(ConversationMessage.created_at.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                messages = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error(
                f"History lookup failed | conversation_id={conversation_id} | error={e}",
                exc_info=True,
            )
            raise ConversationStoreError("Could not load history") from e

        messages.reverse()
        return [
            {
                "role": message.role.value,
                "content": message.content,
                "metadata": dict(message.metadata_ or {}),
                "timestamp": message.created_at.isoformat() if message.created_at else None,
            }
            for message in messages
        ]

    async def save_message(self, conversation_id: str, turn: HistoryTurn) -> None:
        conversation_uuid = _parse_uuid(conversation_id)
        if conversation_uuid is None:
            raise ConversationStoreError(f"Invalid conversation id {conversation_id}")

        message = ConversationMessage(
            conversation_id=conversation_uuid,
            role=MessageRole(turn.get("role", "user")),
            content=turn.get("content", ""),
            metadata_=dict(turn.get("metadata") or {}),
        )
        try:
            async with self._session_factory() as session:
                session.add(message)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                f"Message save failed | conversation_id={conversation_id} | error={e}",
                exc_info=True,
            )
            raise ConversationStoreError("Could not save message") from e

    async def update_context(self, conversation_id, context) -> None:
        conversation_uuid = _parse_uuid(conversation_id)
        if conversation_uuid is None:
            raise ConversationStoreError(f"Invalid conversation id {conversation_id}")

        try:
            async with self._session_factory() as session:
                conversation = await session.get(Conversation, conversation_uuid)
                if conversation is None:
                    raise ConversationStoreError(f"Unknown conversation {conversation_id}")
                conversation.context = dict(context)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                f"Context update failed | conversation_id={conversation_id} | error={e}",
                exc_info=True,
            )
            raise ConversationStoreError("Could not update context") from e
