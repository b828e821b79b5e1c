# inbox/schemas/events.py
"""
Canonical message events.

Every origin (WhatsApp bridge, REST, WebSocket) is decoded once, here, into one
of two event types. Nothing past this module inspects raw payload shapes.
"""
import logging
from typing import Any, Optional, Literal

from pydantic import BaseModel

from inbox.models.message import SENTINEL_CONTENT, MEDIA_TYPES

log = logging.getLogger("inbox.events")

UNKNOWN_CONTACT = "Desconhecido"


def default_content(*candidates: Any) -> str:
    """First non-blank string among candidates, else the sentinel placeholder."""
    for value in candidates:
        if isinstance(value, str) and value.strip():
            return value
    return SENTINEL_CONTENT


def media_type_from_mime(mime: Optional[str]) -> str:
    """Map a MIME type (or a bridge message type) onto the stored media categories."""
    if not mime:
        return ""
    mime = str(mime).lower()
    if mime in MEDIA_TYPES:
        return mime
    if mime == "sticker":
        return "image"
    for kind in ("image", "video", "audio"):
        if mime.startswith(f"{kind}/"):
            return kind
    if mime in ("voice", "ptt"):
        return "audio"
    return "document"


class InboundMessageEvent(BaseModel):
    """A message received from a WhatsApp contact"""
    number: str
    contact_name: str = UNKNOWN_CONTACT
    content: str = SENTINEL_CONTENT
    media_url: str = ""
    media_type: str = ""
    is_status: bool = False
    is_group: bool = False

    @property
    def accepted(self) -> bool:
        return bool(self.number) and not self.is_status and not self.is_group


class OutboundMessageEvent(BaseModel):
    """A message written by an agent, through REST or the socket"""
    origin: Literal["rest", "socket"]
    chat_id: Optional[str] = None
    content: str = SENTINEL_CONTENT
    user_id: Optional[str] = None
    media_url: str = ""
    media_type: str = ""


# ────────────────────────────────────────────
# Decoders
# ────────────────────────────────────────────

def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def decode_bridge_payload(payload: dict) -> InboundMessageEvent:
    """
    Decode a bridge event dict:
    {from, sender: {pushname|name}, body, type, isStatus, isGroupMsg, hasMedia, mediaData}
    """
    sender = payload.get("sender") or {}
    name = sender.get("pushname") or sender.get("name") or UNKNOWN_CONTACT

    media_url = ""
    media_type = ""
    media = payload.get("mediaData")
    if payload.get("hasMedia") and isinstance(media, dict):
        media_url = media.get("mediaUrl") or ""
        media_type = media_type_from_mime(media.get("mimetype"))

    return InboundMessageEvent(
        number=_opt_str(payload.get("from")) or "",
        contact_name=name,
        content=default_content(payload.get("body"), payload.get("type")),
        media_url=media_url,
        media_type=media_type,
        is_status=bool(payload.get("isStatus")),
        is_group=bool(payload.get("isGroupMsg")),
    )


def decode_pywa_message(message: Any) -> InboundMessageEvent:
    """Decode a pywa Message (Cloud API delivers 1:1 chats only)."""
    from_user = getattr(message, "from_user", None)
    number = _opt_str(getattr(from_user, "wa_id", None)) or ""
    name = getattr(from_user, "name", None) or UNKNOWN_CONTACT

    msg_type = getattr(message, "type", None)
    msg_type = getattr(msg_type, "value", msg_type)
    msg_type = str(msg_type) if msg_type else None

    text = getattr(message, "text", None)
    media = getattr(message, "media", None) if getattr(message, "has_media", False) else None
    caption = getattr(media, "caption", None) if media is not None else None

    media_url = ""
    media_type = ""
    if media is not None:
        media_type = media_type_from_mime(getattr(media, "mime_type", None) or msg_type)
        try:
            media_url = media.get_media_url() or ""
        except Exception as e:
            log.warning(f"⚠️ Could not resolve media url for {number}: {e}")

    return InboundMessageEvent(
        number=number,
        contact_name=name,
        content=default_content(text, caption, msg_type),
        media_url=media_url,
        media_type=media_type,
    )


def decode_socket_payload(data: Any, origin: str = "socket") -> OutboundMessageEvent:
    """
    Decode a `send-message` payload {chatId, message, userId};
    `message` may be a string or an object carrying `content`.
    """
    if not isinstance(data, dict):
        return OutboundMessageEvent(origin=origin)

    message = data.get("message")
    if isinstance(message, str):
        content = default_content(message)
    elif isinstance(message, dict):
        content = default_content(message.get("content"))
    else:
        content = SENTINEL_CONTENT

    return OutboundMessageEvent(
        origin=origin,
        chat_id=_opt_str(data.get("chatId") or data.get("chat_id")),
        user_id=_opt_str(data.get("userId") or data.get("user_id")),
        content=content,
    )
