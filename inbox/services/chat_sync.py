# inbox/services/chat_sync.py
"""
Chat synchronization service - turns message events into persisted state.

Every origin funnels through here:
- ingest_inbound: WhatsApp bridge -> Message(sender=contact)
- send_from_agent: REST / socket -> Message(sender=user)

Each call persists exactly one Message and one Chat update. Fan-out is left to
the caller, which knows whether it runs on the event loop or in a worker thread.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Tuple, Dict, Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inbox.models.chat import Chat
from inbox.models.message import Message
from inbox.models.user import User
from inbox.schemas.events import (
    InboundMessageEvent, OutboundMessageEvent, default_content
)
from inbox.schemas.message import MessageResponse
from inbox.schemas.chat import ChatResponse

log = logging.getLogger("inbox.chat_sync")

__all__ = [
    "ChatNotFoundError", "MessageNotFoundError", "UserNotFoundError",
    "ChatSyncService", "assignment_state", "default_content",
    "recompute_unread_count", "message_payload", "chat_payload",
]


class ChatNotFoundError(LookupError):
    pass


class MessageNotFoundError(LookupError):
    pass


class UserNotFoundError(LookupError):
    pass


# ────────────────────────────────────────────
# Pure rules
# ────────────────────────────────────────────

def assignment_state(assigned_to: Optional[str]) -> Tuple[str, str]:
    """(status, category) implied by an assignee."""
    if assigned_to:
        return "open", "mine"
    return "unassigned", "unassigned"


def apply_assignment(chat: Chat, assigned_to: Optional[str]) -> Chat:
    chat.assigned_to_id = assigned_to or None
    chat.status, chat.category = assignment_state(chat.assigned_to_id)
    return chat


def recompute_unread_count(db: Session, chat: Chat) -> int:
    """Derive unread_count from the unread contact messages of the chat."""
    db.flush()
    count = db.query(Message).filter(
        Message.chat_id == chat.id,
        Message.sender == "contact",
        Message.is_read.is_(False),
    ).count()
    chat.unread_count = count
    return count


def message_payload(message: Message) -> Dict[str, Any]:
    """JSON-ready message for realtime fan-out"""
    return MessageResponse.model_validate(message).model_dump(mode="json", by_alias=True)


def chat_payload(chat: Chat) -> Dict[str, Any]:
    return ChatResponse.model_validate(chat).model_dump(mode="json", by_alias=True)


class ChatSyncService:
    """Message ingestion and chat aggregate bookkeeping"""

    def __init__(self, bridge=None):
        """
        Args:
            bridge: WhatsAppBridge used for outbound delivery (optional)
        """
        self.bridge = bridge

    # ────────────────────────────────────────────
    # Lookups
    # ────────────────────────────────────────────

    def get_user(self, db: Session, user_id: Optional[str]) -> User:
        user = db.query(User).filter(User.id == user_id).first() if user_id else None
        if not user:
            raise UserNotFoundError(user_id)
        return user

    def get_chat(self, db: Session, chat_id: Optional[str]) -> Chat:
        chat = db.query(Chat).filter(Chat.id == chat_id).first() if chat_id else None
        if not chat:
            raise ChatNotFoundError(chat_id)
        return chat

    def find_chat_by_number(self, db: Session, number: str) -> Optional[Chat]:
        return db.query(Chat).filter(Chat.contact_number == number).first()

    def get_or_create_chat(
        self,
        db: Session,
        number: str,
        name: str,
        profile_pic: str = "",
        assigned_to: Optional[str] = None,
        status: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Tuple[Chat, bool]:
        """
        Resolve the chat for a contact number, creating it on first sight.

        A new chat is only flushed; the caller's commit persists it together
        with whatever else the unit of work writes. Chat resolution must be the
        first write of that unit of work: a concurrent insert of the same number
        loses on the unique index, the session is rolled back and the winner is
        re-read.

        Returns:
            Tuple of (chat, created)
        """
        chat = self.find_chat_by_number(db, number)
        if chat:
            return chat, False

        default_status, default_category = assignment_state(assigned_to)
        chat = Chat(
            contact_name=name,
            contact_number=number,
            contact_profile_pic=profile_pic or "",
            assigned_to_id=assigned_to or None,
            status=status or default_status,
            category=category or default_category,
            last_message_time=datetime.utcnow(),
            unread_count=0,
        )
        db.add(chat)
        try:
            db.flush()
        except IntegrityError as e:
            log.warning(f"⚠️ Chat insert for {number} lost a race, re-reading: {e.orig}")
            db.rollback()
            existing = self.find_chat_by_number(db, number)
            if existing is None:
                raise
            return existing, False

        log.info(f"➕ Chat created for {number}: {chat.id}")
        return chat, True

    # ────────────────────────────────────────────
    # Message events
    # ────────────────────────────────────────────

    def ingest_inbound(
        self,
        db: Session,
        event: InboundMessageEvent
    ) -> Optional[Tuple[Chat, Message]]:
        """
        Persist a message received from a contact.

        Returns:
            (chat, message), or None when the event is a status/group update.
        """
        if not event.accepted:
            log.debug(f"⏭️ Ignoring inbound event from {event.number or '?'} "
                      f"(status={event.is_status}, group={event.is_group})")
            return None

        try:
            chat, created = self.get_or_create_chat(db, event.number, event.contact_name)

            message = Message(
                chat_id=chat.id,
                sender="contact",
                content=default_content(event.content),
                media_url=event.media_url or "",
                media_type=event.media_type or "",
                is_read=False,
                timestamp=datetime.utcnow(),
                comments=[],
            )
            db.add(message)

            chat.last_message = message.content
            chat.last_message_time = message.timestamp
            recompute_unread_count(db, chat)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(message)
        db.refresh(chat)
        log.info(f"📥 Inbound message {message.id} stored in chat {chat.id} "
                 f"(new_chat={created}, unread={chat.unread_count})")
        return chat, message

    def send_from_agent(
        self,
        db: Session,
        event: OutboundMessageEvent,
        auto_assign: bool = False
    ) -> Tuple[Chat, Message]:
        """
        Persist a message written by an agent.

        Args:
            auto_assign: Assign an unassigned chat to the sending agent (REST path)

        Raises:
            ChatNotFoundError: chat_id does not reference a chat; nothing is stored
        """
        chat = self.get_chat(db, event.chat_id)

        try:
            message = Message(
                chat_id=chat.id,
                sender="user",
                user_id=event.user_id,
                content=default_content(event.content),
                media_url=event.media_url or "",
                media_type=event.media_type or "",
                is_read=True,
                timestamp=datetime.utcnow(),
                comments=[],
            )
            db.add(message)

            chat.last_message = message.content
            chat.last_message_time = message.timestamp
            if auto_assign and not chat.assigned_to_id and event.user_id:
                apply_assignment(chat, event.user_id)
                log.info(f"👤 Chat {chat.id} auto-assigned to {event.user_id}")
            recompute_unread_count(db, chat)

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(message)
        db.refresh(chat)
        log.info(f"📤 Agent message {message.id} stored in chat {chat.id} via {event.origin}")
        return chat, message

    # ────────────────────────────────────────────
    # Message mutations
    # ────────────────────────────────────────────

    def get_message(self, db: Session, message_id: str) -> Message:
        message = db.query(Message).filter(Message.id == message_id).first()
        if not message:
            raise MessageNotFoundError(message_id)
        return message

    def mark_read(self, db: Session, message_id: str) -> Tuple[Message, Optional[Chat]]:
        message = self.get_message(db, message_id)
        message.is_read = True

        chat = db.query(Chat).filter(Chat.id == message.chat_id).first()
        if chat:
            recompute_unread_count(db, chat)
        db.commit()
        db.refresh(message)
        if chat:
            db.refresh(chat)
        return message, chat

    def add_comment(self, db: Session, message_id: str, user_id: str, content: str) -> Message:
        message = self.get_message(db, message_id)
        comment = {
            "user_id": user_id,
            "content": content,
            "timestamp": datetime.utcnow().isoformat(),
        }
        # Reassign so the JSON column is flagged dirty
        message.comments = [*(message.comments or []), comment]
        db.commit()
        db.refresh(message)
        return message

    # ────────────────────────────────────────────
    # Outbound delivery
    # ────────────────────────────────────────────

    def deliver(self, number: str, text: str) -> bool:
        """Best-effort send through the bridge; failures are logged, never retried."""
        if not self.bridge:
            log.warning(f"WhatsApp bridge not available - message to {number} not delivered")
            return False
        try:
            self.bridge.send_text(number, text)
            return True
        except Exception as e:
            log.error(f"❌ Failed to deliver message to {number}: {e}", exc_info=True)
            return False
