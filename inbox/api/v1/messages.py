import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inbox.api.deps import get_db, get_chat_service, get_current_user_id
from inbox.context import AppContext, get_context
from inbox.models.message import Message
from inbox.models.user import User
from inbox.schemas.events import OutboundMessageEvent, default_content
from inbox.schemas.message import MessageCreate, CommentCreate, MessageResponse
from inbox.schemas.user import UserSummary
from inbox.services.chat_sync import (
    ChatSyncService, ChatNotFoundError, MessageNotFoundError, message_payload
)

router = APIRouter(dependencies=[Depends(get_current_user_id)])
log = logging.getLogger("inbox.messages")


def _with_comment_users(db: Session, message: Message) -> MessageResponse:
    """Message response with comment authors populated"""
    response = MessageResponse.model_validate(message)
    author_ids = {c.user_id for c in response.comments}
    if author_ids:
        users = {u.id: u for u in db.query(User).filter(User.id.in_(list(author_ids))).all()}
        for comment in response.comments:
            author = users.get(comment.user_id)
            comment.user = UserSummary.model_validate(author) if author else None
    return response


@router.get("/chat/{chat_id}", response_model=List[MessageResponse])
def list_chat_messages(chat_id: str, db: Session = Depends(get_db)):
    """Messages of a chat in chronological order"""
    return db.query(Message).filter(
        Message.chat_id == chat_id
    ).order_by(Message.timestamp, Message.created_at).all()


@router.post("", response_model=MessageResponse, status_code=201)
def send_message(
    data: MessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    service: ChatSyncService = Depends(get_chat_service),
    context: AppContext = Depends(get_context)
):
    """
    Send an agent reply.

    The message is stored, the chat is auto-assigned to the sender when
    unassigned, subscribers are notified, and WhatsApp delivery runs after
    the response is sent.
    """
    event = OutboundMessageEvent(
        origin="rest",
        chat_id=data.chat_id,
        user_id=user_id,
        content=default_content(data.content),
        media_url=data.media_url or "",
        media_type=data.media_type or "",
    )

    try:
        chat, message = service.send_from_agent(db, event, auto_assign=True)
    except ChatNotFoundError:
        raise HTTPException(404, "Chat not found")
    except SQLAlchemyError as e:
        log.error(f"❌ Failed to send message to chat {data.chat_id}: {e}", exc_info=True)
        raise HTTPException(500, "Failed to send message")

    try:
        context.hub.publish_message_sync(chat.id, message_payload(message))
    except Exception as e:
        # Don't fail the request if WS broadcast fails
        log.error(f"❌ WebSocket broadcast failed: {e}", exc_info=True)

    # The placeholder is a storage default only; never send it to the contact
    if data.content and data.content.strip():
        background_tasks.add_task(service.deliver, chat.contact_number, data.content)
    else:
        log.info(f"⏭️ Message {message.id} has no text, skipping WhatsApp delivery")
    return message


@router.post("/{message_id}/comment", response_model=MessageResponse)
def add_comment(
    message_id: str,
    data: CommentCreate,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    service: ChatSyncService = Depends(get_chat_service)
):
    """Attach an internal note to a message"""
    try:
        message = service.add_comment(db, message_id, user_id, data.content)
    except MessageNotFoundError:
        raise HTTPException(404, "Message not found")
    return _with_comment_users(db, message)


@router.patch("/{message_id}/read", response_model=MessageResponse)
def mark_read(
    message_id: str,
    db: Session = Depends(get_db),
    service: ChatSyncService = Depends(get_chat_service)
):
    """Mark message read and recompute the chat's unread count"""
    try:
        message, chat = service.mark_read(db, message_id)
    except MessageNotFoundError:
        raise HTTPException(404, "Message not found")
    if chat:
        log.debug(f"Chat {chat.id} unread count now {chat.unread_count}")
    return message
