# inbox/services/bridge.py
"""
WhatsApp bridge adapter.

Wraps a pywa client behind two operations:
- on_message(handler): handler receives decoded InboundMessageEvent objects
- send_text(number, text): outbound delivery
"""
from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import FastAPI

from inbox.core.config import Settings
from inbox.core.logging_config import get_bridge_logger
from inbox.schemas.events import InboundMessageEvent, decode_pywa_message

log = get_bridge_logger()

InboundHandler = Callable[[InboundMessageEvent], None]


class WhatsAppBridge:
    """Adapter around a pywa WhatsApp client"""

    def __init__(self, client):
        self.client = client

    @classmethod
    def from_settings(cls, app: FastAPI, settings: Settings) -> Optional["WhatsAppBridge"]:
        """
        Start the pywa client on the FastAPI app (registers the webhook routes).
        Returns None when the bridge is not configured or fails to start.
        """
        if not settings.bridge_configured:
            log.warning("⚠️  WhatsApp not configured")
            return None
        try:
            from pywa import WhatsApp

            wa = WhatsApp(
                phone_id=settings.PHONE_ID,
                token=settings.TOKEN,
                server=app,
                verify_token=settings.VERIFY_TOKEN,
                validate_updates=settings.VALIDATE_UPDATES,
            )
        except Exception as e:
            log.error(f"❌ WhatsApp init failed: {e}", exc_info=True)
            return None
        log.info("✅ WhatsApp client initialized")
        if settings.CALLBACK_URL:
            log.info(f"🔗 Expecting webhook callbacks at {settings.CALLBACK_URL}")
        return cls(wa)

    def on_message(self, handler: InboundHandler) -> InboundHandler:
        """Register a handler for inbound contact messages."""

        @self.client.on_message()
        def _on_message(client, message):
            log.debug(f"📨 Raw inbound message: {message}")
            try:
                event = decode_pywa_message(message)
            except Exception as e:
                log.error(f"❌ Could not decode inbound message: {e}", exc_info=True)
                return
            log.info(f"📨 Inbound from {event.number} ({event.contact_name})")
            handler(event)

        return handler

    def send_text(self, number: str, text: str):
        log.info(f"📤 Sending text to {number}: {text[:50]}")
        response = self.client.send_text(to=number, text=text)
        log.debug(f"📤 Send response for {number}: {response}")
        return response
