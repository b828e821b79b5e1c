# inbox/context.py
"""
Explicit application context.

Created once at startup, stored on app.state, and handed to request handlers
(via get_context), socket handlers and bridge callbacks.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

from fastapi import Request
from sqlalchemy.orm import sessionmaker
from starlette.requests import HTTPConnection

from inbox.services.chat_sync import ChatSyncService
from inbox.ws.manager import RealtimeHub

if TYPE_CHECKING:
    from inbox.services.bridge import WhatsAppBridge


@dataclass
class AppContext:
    session_factory: sessionmaker
    hub: RealtimeHub = field(default_factory=RealtimeHub)
    bridge: Optional["WhatsAppBridge"] = None

    def chat_service(self) -> ChatSyncService:
        return ChatSyncService(self.bridge)


def context_from(connection: HTTPConnection) -> AppContext:
    return connection.app.state.context


def get_context(request: Request) -> AppContext:
    """FastAPI dependency"""
    return context_from(request)
