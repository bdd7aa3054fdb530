"""
API routes for decisions
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from decisionlog.core.auth import get_current_actor_id
from decisionlog.core.database import get_db
from decisionlog.core.decision_classifier import Verdict
from decisionlog.core.exceptions import NotFoundError, ValidationError
from decisionlog.models.decision import Decision, DecisionStatus
from decisionlog.services.decision_history_service import \
    DecisionHistoryResolver
from decisionlog.services.decision_service import DecisionService
from decisionlog.services.message_service import MessageService

router = APIRouter(prefix="/api/decisions", tags=["decisions"])


class DecisionResponse(BaseModel):
    """Decision response model"""
    id: UUID
    title: str
    description: Optional[str] = None
    status: DecisionStatus
    owner_id: UUID
    channel_id: UUID
    message_id: Optional[UUID] = None
    supersedes_decision_id: Optional[UUID] = None
    superseded_by_id: Optional[UUID] = None
    closed_at: Optional[datetime] = None
    closure_reason: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AnalyzeRequest(BaseModel):
    """Request model for content analysis"""
    content: Optional[str] = None


class CreateFromMessageRequest(BaseModel):
    """Request model for promoting a message"""
    supersedes_decision_id: Optional[UUID] = None


class CreateManualRequest(BaseModel):
    """Request model for a manual decision"""
    title: Optional[str] = Field(default=None, description="Decision title")
    status: DecisionStatus = DecisionStatus.OPEN
    supersedes_decision_id: Optional[UUID] = None


class UpdateStatusRequest(BaseModel):
    """Request model for a status change"""
    status: DecisionStatus
    closure_reason: Optional[str] = None


def _to_response(decision: Decision) -> DecisionResponse:
    return DecisionResponse.model_validate(decision)


@router.post("/analyze", response_model=Verdict)
async def analyze_content(
    request: AnalyzeRequest,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Suggest whether content reads like a decision"""
    if not request.content:
        raise ValidationError("Content is required")
    return MessageService(db).analyze(request.content)


@router.get("/team/{team_id}", response_model=List[DecisionResponse])
async def get_team_decisions(
    team_id: UUID,
    status: Optional[DecisionStatus] = None,
    include_superseded: bool = False,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Get decisions of a team"""
    service = DecisionService(db)
    decisions = service.list_by_team(team_id, status=status, include_superseded=include_superseded)
    return [_to_response(d) for d in decisions]


@router.get("/team/{team_id}/open", response_model=List[DecisionResponse])
async def get_open_team_decisions(
    team_id: UUID,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Get OPEN decisions of a team (candidates for supersession)"""
    service = DecisionService(db)
    return [_to_response(d) for d in service.list_open_by_team(team_id)]


@router.get("/channel/{channel_id}", response_model=List[DecisionResponse])
async def get_channel_decisions(
    channel_id: UUID,
    status: Optional[DecisionStatus] = None,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Get decisions of a channel"""
    service = DecisionService(db)
    return [_to_response(d) for d in service.list_by_channel(channel_id, status=status)]


@router.get("/{decision_id}/history", response_model=List[DecisionResponse])
async def get_decision_history(
    decision_id: UUID,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Get the supersession chain of a decision, most recent first"""
    history = DecisionHistoryResolver(db).get_history(decision_id)
    if not history:
        raise NotFoundError("Decision not found")
    return [_to_response(d) for d in history]


@router.get("/{decision_id}", response_model=DecisionResponse)
async def get_decision(
    decision_id: UUID,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Get decision by ID"""
    decision = DecisionService(db).get_by_id(decision_id)
    if decision is None:
        raise NotFoundError("Decision not found")
    return _to_response(decision)


@router.post("/from-message/{message_id}", response_model=DecisionResponse, status_code=status.HTTP_201_CREATED)
async def create_from_message(
    message_id: UUID,
    request: Optional[CreateFromMessageRequest] = None,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Promote a message to a decision"""
    supersedes_decision_id = request.supersedes_decision_id if request else None
    decision = DecisionService(db).create_from_message(
        message_id,
        actor_id,
        supersedes_decision_id=supersedes_decision_id
    )
    return _to_response(decision)


@router.post("/channel/{channel_id}", response_model=DecisionResponse, status_code=status.HTTP_201_CREATED)
async def create_manual(
    channel_id: UUID,
    request: CreateManualRequest,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Create a manual decision"""
    decision = DecisionService(db).create_manual(
        channel_id,
        actor_id,
        title=request.title,
        status=request.status,
        supersedes_decision_id=request.supersedes_decision_id
    )
    return _to_response(decision)


@router.patch("/{decision_id}/status", response_model=DecisionResponse)
async def update_status(
    decision_id: UUID,
    request: UpdateStatusRequest,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Open or close a decision"""
    decision = DecisionService(db).set_status(
        decision_id,
        request.status,
        actor_id,
        closure_reason=request.closure_reason
    )
    return _to_response(decision)


@router.delete("/message/{message_id}")
async def unmark_message(
    message_id: UUID,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Unmark a message as decision"""
    DecisionService(db).unmark_message(message_id, actor_id)
    return {"status": "unmarked", "message_id": str(message_id)}


@router.delete("/{decision_id}")
async def delete_decision(
    decision_id: UUID,
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_current_actor_id)
):
    """Delete a decision"""
    DecisionService(db).delete_decision(decision_id, actor_id)
    return {"status": "deleted", "decision_id": str(decision_id)}
