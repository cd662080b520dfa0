"""
API routes for the chat.

POST /chat/message processes one turn; GET /chat/conversations/{id}/history
returns the stored turns of a conversation.
"""

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query

from agent.services.chat_service import ChatService
from api.dependencies import get_chat_service
from api.models.chat import (
    ChatMessageRequest,
    ChatMessageResponse,
    ConversationHistoryResponse,
    HistoryMessage,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.post("/message", response_model=ChatMessageResponse)
async def post_message(
    request: ChatMessageRequest,
    chat_service: Annotated[ChatService, Depends(get_chat_service)],
) -> ChatMessageResponse:
    """
    Process one user message.

    **Body:**
    ```json
    {
        "message": "Busco un hotel barato cerca de la playa",
        "conversation_id": null,
        "session_id": "session_1700000000000",
        "context": {}
    }
    ```

    **Errors:**
    - **422**: Empty or missing message
    - **500**: Internal server error (no technical details)
    """
    try:
        result = await chat_service.handle_message(
            message=request.message,
            conversation_id=request.conversation_id,
            session_id=request.session_id,
            user_id=request.user_id,
            request_context=request.context,
        )
    except Exception as e:
        logger.error(
            f"Chat message failed | conversation_id={request.conversation_id} | error={e}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail="Error al procesar el mensaje")

    return ChatMessageResponse(
        conversation_id=result["conversation_id"],
        response=result["response"].to_dict(),
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/conversations/{conversation_id}/history", response_model=ConversationHistoryResponse)
async def get_conversation_history(
    conversation_id: str,
    chat_service: Annotated[ChatService, Depends(get_chat_service)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> ConversationHistoryResponse:
    """
    Stored turns of a conversation, oldest first.

    **Errors:**
    - **404**: Conversation not found
    - **500**: Internal server error
    """
    try:
        turns = await chat_service.get_history(conversation_id, limit)
    except Exception as e:
        logger.error(
            f"History retrieval failed | conversation_id={conversation_id} | error={e}",
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail="Error al obtener mensajes de conversación")

    if turns is None:
        raise HTTPException(status_code=404, detail="Conversación no encontrada")

    messages = [
        HistoryMessage(
            role=turn.get("role", "user"),
            content=turn.get("content", ""),
            metadata=turn.get("metadata") or {},
            timestamp=turn.get("timestamp"),
        )
        for turn in turns
    ]
    return ConversationHistoryResponse(
        conversation_id=conversation_id,
        messages=messages,
        count=len(messages),
    )
