import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import desc
from sqlalchemy.orm import Session

from inbox.api.deps import get_db, get_chat_service, get_current_user_id
from inbox.context import AppContext, get_context
from inbox.models.chat import Chat, CHAT_STATUSES
from inbox.schemas.chat import (
    ChatCreate, ChatUpdate, ChatAssign, ChatStatusUpdate, ChatImportantUpdate, ChatResponse
)
from inbox.services.chat_sync import (
    ChatSyncService, ChatNotFoundError, UserNotFoundError, apply_assignment, chat_payload
)
from inbox.ws.manager import CHAT_UPDATED

router = APIRouter(dependencies=[Depends(get_current_user_id)])
log = logging.getLogger("inbox.chats")


def _get_chat_or_404(db: Session, service: ChatSyncService, chat_id: str) -> Chat:
    try:
        return service.get_chat(db, chat_id)
    except ChatNotFoundError:
        log.warning(f"Chat not found: {chat_id}")
        raise HTTPException(404, "Chat not found")


def _commit_and_publish(db: Session, context: AppContext, chat: Chat) -> Chat:
    db.commit()
    db.refresh(chat)
    context.hub.broadcast_sync(CHAT_UPDATED, chat_payload(chat))
    return chat


@router.get("", response_model=List[ChatResponse])
def list_chats(
    category: Optional[str] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    """List chats, most recent activity first"""
    query = db.query(Chat)

    if category:
        query = query.filter(Chat.category == category)
        # 'mine' means assigned to the caller
        if category == "mine":
            query = query.filter(Chat.assigned_to_id == user_id)

    if status:
        query = query.filter(Chat.status == status)

    return query.order_by(desc(Chat.last_message_time)).all()


@router.get("/{chat_id}", response_model=ChatResponse)
def get_chat(
    chat_id: str,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service)
):
    """Get chat"""
    return _get_chat_or_404(db, service, chat_id)


@router.post("", response_model=ChatResponse, status_code=201)
def create_chat(
    data: ChatCreate,
    response: Response,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service)
):
    """Create chat; an existing chat for the same number is returned as-is"""
    chat, created = service.get_or_create_chat(
        db,
        number=data.contact.number,
        name=data.contact.name,
        profile_pic=data.contact.profile_pic,
        assigned_to=data.assigned_to,
        status=data.status,
        category=data.category,
    )
    if not created:
        response.status_code = 200
        return chat

    db.commit()
    db.refresh(chat)
    return chat


@router.put("/{chat_id}", response_model=ChatResponse)
def update_chat(
    chat_id: str,
    data: ChatUpdate,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service),
    context: AppContext = Depends(get_context)
):
    """Update chat"""
    chat = _get_chat_or_404(db, service, chat_id)
    fields = data.model_fields_set
    log.info(f"Updating chat {chat_id} fields={sorted(fields)}")

    if "assigned_to" in fields:
        apply_assignment(chat, data.assigned_to)

    # Explicit values win over the ones derived from the assignment
    if data.status:
        chat.status = data.status
    if data.category:
        chat.category = data.category
    if data.is_important is not None:
        chat.is_important = data.is_important

    return _commit_and_publish(db, context, chat)


@router.patch("/{chat_id}/assign", response_model=ChatResponse)
def assign_chat(
    chat_id: str,
    data: ChatAssign,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service),
    context: AppContext = Depends(get_context)
):
    """Assign chat to a user (or unassign with a null userId)"""
    if data.user_id:
        try:
            service.get_user(db, data.user_id)
        except UserNotFoundError:
            raise HTTPException(404, "User not found")

    chat = _get_chat_or_404(db, service, chat_id)
    apply_assignment(chat, data.user_id)
    log.info(f"👤 Chat {chat_id} assigned to {data.user_id or 'nobody'}")
    return _commit_and_publish(db, context, chat)


@router.patch("/{chat_id}/status", response_model=ChatResponse)
def update_chat_status(
    chat_id: str,
    data: ChatStatusUpdate,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service),
    context: AppContext = Depends(get_context)
):
    """Update chat status"""
    if data.status not in CHAT_STATUSES:
        raise HTTPException(400, "Invalid status")

    chat = _get_chat_or_404(db, service, chat_id)
    chat.status = data.status
    return _commit_and_publish(db, context, chat)


@router.patch("/{chat_id}/important", response_model=ChatResponse)
def mark_chat_important(
    chat_id: str,
    data: ChatImportantUpdate,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service),
    context: AppContext = Depends(get_context)
):
    """Flag or unflag a chat as important"""
    chat = _get_chat_or_404(db, service, chat_id)
    chat.is_important = data.is_important
    return _commit_and_publish(db, context, chat)
