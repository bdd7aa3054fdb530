"""
API routes for chat messages
"""
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from decisionlog.core.auth import get_current_actor_id
from decisionlog.core.database import get_db
from decisionlog.core.decision_classifier import Verdict
from decisionlog.core.exceptions import NotFoundError
from decisionlog.services.message_service import MessageService

router = APIRouter(tags=["messages"])


class MessageResponse(BaseModel):
    """Message response model"""
    id: UUID
    channel_id: UUID
    author_id: UUID
    content: str
    has_decision: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PostedMessageResponse(MessageResponse):
    """Stored message with the advisory decision suggestion"""
    decision_suggestion: Verdict


class CreateMessageRequest(BaseModel):
    """Request model for posting a message"""
    content: str


@router.post(
    "/api/channels/{channel_id}/messages",
    response_model=PostedMessageResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_message(
    channel_id: UUID,
    request: CreateMessageRequest,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Post a message; the response suggests, but never creates, a decision"""
    posted = MessageService(db).create_message(channel_id, actor_id, request.content)
    message = MessageResponse.model_validate(posted.message)
    return PostedMessageResponse(**message.model_dump(), decision_suggestion=posted.decision_suggestion)


@router.get("/api/messages/{message_id}", response_model=MessageResponse)
async def get_message(
    message_id: UUID,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Get message by ID"""
    message = MessageService(db).get_message(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    return MessageResponse.model_validate(message)
