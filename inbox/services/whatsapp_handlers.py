# inbox/services/whatsapp_handlers.py
"""
Inbound WhatsApp handling: persist through the sync service, then fan out.

Failures are logged and swallowed; the bridge gets no retry or dead-letter.
"""
import logging

from inbox.context import AppContext
from inbox.db.session import get_db_session
from inbox.schemas.events import InboundMessageEvent
from inbox.services.chat_sync import message_payload

log = logging.getLogger("inbox.handlers")


def handle_inbound_event(context: AppContext, event: InboundMessageEvent) -> None:
    """Persist one inbound event and publish it to realtime subscribers."""
    service = context.chat_service()
    try:
        with get_db_session(context.session_factory) as db:
            result = service.ingest_inbound(db, event)
            if result is None:
                return
            chat, message = result
            chat_id = chat.id
            payload = message_payload(message)
    except Exception as e:
        log.error(f"❌ Failed to process inbound message from {event.number}: {e}", exc_info=True)
        return

    try:
        context.hub.publish_message_sync(chat_id, payload)
    except Exception as e:
        log.error(f"❌ Fan-out failed for chat {chat_id}: {e}", exc_info=True)


def register_handlers(context: AppContext) -> None:
    """Attach the inbound handler to the configured bridge."""
    if context.bridge is None:
        log.warning("⚠️ No WhatsApp bridge - inbound handling disabled")
        return

    def _handle(event: InboundMessageEvent) -> None:
        handle_inbound_event(context, event)

    context.bridge.on_message(_handle)
    log.info("✅ WhatsApp inbound handler registered")
