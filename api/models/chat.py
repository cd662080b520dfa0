"""Pydantic models for the chat endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChatMessageRequest(BaseModel):
    """Inbound chat turn."""
    model_config = ConfigDict(extra="ignore")

    message: str = Field(min_length=1, max_length=4000)
    conversation_id: str | None = None
    session_id: str | None = None
    user_id: str | None = None
    context: dict[str, Any] | None = None


class ChatMessageResponse(BaseModel):
    """Outbound chat turn: the validated Response plus conversation identity."""

    success: bool = True
    conversation_id: str
    response: dict[str, Any]
    timestamp: str


class HistoryMessage(BaseModel):
    role: str
    content: str
    metadata: dict[str, Any] = {}
    timestamp: str | None = None


class ConversationHistoryResponse(BaseModel):
    conversation_id: str
    messages: list[HistoryMessage]
    count: int


class BannerAction(BaseModel):
    text: str
    url: str


class BannerResponse(BaseModel):
    type: str
    title: str
    subtitle: str
    image_url: str
    action: BannerAction
