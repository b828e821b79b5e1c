# inbox/ws/manager.py
"""
Connection manager for realtime fan-out over WebSockets.

Frames are JSON: {"event": <name>, "data": <payload>}.

Usage:
- In the WebSocket route: await hub.connect(ws) / hub.disconnect(ws) / hub.join(ws, chat_id)
- From async code: await hub.publish_message(chat_id, payload)
- From sync code (threadpool routes, pywa handlers): hub.publish_message_sync(chat_id, payload)
"""
from __future__ import annotations

import logging
import asyncio
import threading
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Set

from fastapi import WebSocket

log = logging.getLogger("inbox.ws")

# Server -> client events
NEW_MESSAGE = "new-message"
RECEIVE_MESSAGE = "receive-message"
MESSAGE_ERROR = "message-error"
CHAT_UPDATED = "chat-updated"
USER_STATUS_CHANGED = "user-status-changed"


class RealtimeHub:
    def __init__(self) -> None:
        self.active: Set[WebSocket] = set()
        # Map chat_id -> set of WebSocket connections subscribed to it
        self.rooms: Dict[str, Set[WebSocket]] = {}

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a websocket."""
        await websocket.accept()
        self.active.add(websocket)
        log.info("WS connected: total=%d", self.connection_count())

    def disconnect(self, websocket: WebSocket) -> None:
        """Unregister a websocket and drop it from every room."""
        self.active.discard(websocket)
        for room in list(self.rooms):
            self.leave(websocket, room)
        log.info("WS disconnected: total=%d", self.connection_count())

    def join(self, websocket: WebSocket, room: str) -> None:
        self.rooms.setdefault(room, set()).add(websocket)
        log.debug("WS %s joined room %s (%d members)", id(websocket), room, len(self.rooms[room]))

    def leave(self, websocket: WebSocket, room: str) -> None:
        members = self.rooms.get(room)
        if members is None:
            return
        members.discard(websocket)
        if not members:
            # cleanup empty room
            self.rooms.pop(room, None)

    def connection_count(self, room: Optional[str] = None) -> int:
        if room is None:
            return len(self.active)
        return len(self.rooms.get(room, set()))

    # ────────────────────────────────────────────
    # Sending
    # ────────────────────────────────────────────

    async def send(self, websocket: WebSocket, event: str, data: Any) -> bool:
        """Send one frame to one connection; returns False on failure."""
        try:
            await websocket.send_json({"event": event, "data": data})
            return True
        except Exception as e:
            log.warning(f"⚠️ WS send failed, marking stale: {e}")
            return False

    async def _send_many(self, targets: Iterable[WebSocket], event: str, data: Any) -> int:
        connections = list(targets)
        if not connections:
            log.debug(f"No WebSocket subscribers for {event}")
            return 0

        stale: Set[WebSocket] = set()
        sent_count = 0
        for ws in connections:
            if await self.send(ws, event, data):
                sent_count += 1
            else:
                stale.add(ws)

        # remove stale connections
        for ws in stale:
            self.disconnect(ws)
        if stale:
            log.info(f"🧹 Removed {len(stale)} stale connections")

        log.debug(f"✅ {event} sent to {sent_count}/{len(connections)} clients")
        return sent_count

    async def broadcast(self, event: str, data: Any) -> int:
        """Send to every connected client."""
        return await self._send_many(self.active, event, data)

    async def emit_to_room(self, room: str, event: str, data: Any) -> int:
        """Send only to clients that joined the room."""
        return await self._send_many(self.rooms.get(room, set()), event, data)

    async def publish_message(self, chat_id: str, message_data: dict) -> None:
        """Global sidebar notification plus the room-scoped message record."""
        log.info(f"🔔 Publishing message for chat {chat_id}")
        await self.broadcast(NEW_MESSAGE, {"chatId": chat_id, "message": message_data})
        await self.emit_to_room(chat_id, RECEIVE_MESSAGE, message_data)

    # ────────────────────────────────────────────
    # Sync bridges
    # ────────────────────────────────────────────

    def publish_message_sync(self, chat_id: str, message_data: dict) -> None:
        self.run_sync(self.publish_message, chat_id, message_data)

    def broadcast_sync(self, event: str, data: Any) -> None:
        self.run_sync(self.broadcast, event, data)

    def run_sync(self, func: Callable[..., Awaitable[Any]], *args: Any) -> None:
        """
        Sync-safe helper to dispatch async sends from non-async contexts.

        Strategy:
        - Try anyio.from_thread.run to hop into the running loop (works from a worker thread)
        - Else, if we're on a running loop thread, create_task
        - Else, run the coroutine in a new daemon thread to avoid blocking
        """
        try:
            import anyio.from_thread
            anyio.from_thread.run(func, *args)
            return
        except RuntimeError as e:
            # Not in a worker thread bound to an event loop; fallback below
            log.debug(f"⚠️ anyio.from_thread.run unavailable: {e}")

        try:
            loop = asyncio.get_running_loop()
            loop.create_task(func(*args))
            return
        except RuntimeError:
            # No running loop in this thread
            pass

        def _runner():
            try:
                asyncio.run(func(*args))
            except Exception as e:
                log.error(f"❌ Background fan-out failed: {e}", exc_info=True)

        threading.Thread(target=_runner, daemon=True).start()
        log.debug("✅ Background thread started for WebSocket fan-out")
