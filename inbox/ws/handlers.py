# inbox/ws/handlers.py
"""
Client -> server socket events: join-chat, leave-chat, send-message.
"""
import logging
from typing import Any, Optional, Tuple

from fastapi import WebSocket
from starlette.concurrency import run_in_threadpool

from inbox.context import AppContext
from inbox.db.session import get_db_session
from inbox.schemas.events import OutboundMessageEvent, decode_socket_payload
from inbox.services.chat_sync import ChatNotFoundError, message_payload
from inbox.ws.manager import MESSAGE_ERROR

log = logging.getLogger("inbox.ws.handlers")

JOIN_CHAT = "join-chat"
LEAVE_CHAT = "leave-chat"
SEND_MESSAGE = "send-message"


def _room_name(data: Any) -> Optional[str]:
    if isinstance(data, dict):
        data = data.get("chatId") or data.get("chat_id")
    if data is None:
        return None
    data = str(data).strip()
    return data or None


def _persist(context: AppContext, event: OutboundMessageEvent) -> Tuple[str, dict]:
    service = context.chat_service()
    with get_db_session(context.session_factory) as db:
        chat, message = service.send_from_agent(db, event)
        return chat.id, message_payload(message)


async def handle_send_message(context: AppContext, websocket: WebSocket, data: Any) -> None:
    event = decode_socket_payload(data)
    if not event.chat_id:
        log.error("❌ send-message without chatId, dropping")
        return

    try:
        chat_id, payload = await run_in_threadpool(_persist, context, event)
    except ChatNotFoundError:
        log.warning(f"⚠️ send-message for unknown chat {event.chat_id}")
        await context.hub.send(websocket, MESSAGE_ERROR, {"error": f"Chat not found: {event.chat_id}"})
        return
    except Exception as e:
        log.error(f"❌ Failed to save socket message for chat {event.chat_id}: {e}", exc_info=True)
        await context.hub.send(websocket, MESSAGE_ERROR, {"error": f"Failed to save message: {e}"})
        return

    await context.hub.publish_message(chat_id, payload)


async def handle_frame(context: AppContext, websocket: WebSocket, frame: Any) -> None:
    """Dispatch one decoded JSON frame {"event": ..., "data": ...}."""
    if not isinstance(frame, dict):
        log.debug(f"Ignoring non-object frame: {frame!r}")
        return

    event = frame.get("event")
    data = frame.get("data")

    if event == JOIN_CHAT:
        room = _room_name(data)
        if room:
            context.hub.join(websocket, room)
            log.info(f"👥 {id(websocket)} joined chat {room}")
    elif event == LEAVE_CHAT:
        room = _room_name(data)
        if room:
            context.hub.leave(websocket, room)
    elif event == SEND_MESSAGE:
        await handle_send_message(context, websocket, data)
    else:
        log.debug(f"Unknown socket event: {event}")
