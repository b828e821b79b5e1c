# inbox/main.py
"""
FastAPI application: REST API under /api, realtime socket at /ws,
WhatsApp webhook routes registered by the bridge when configured.
"""
import json
import logging
from typing import Optional

from fastapi import FastAPI, Request, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from inbox.api.v1.router import api_router
from inbox.context import AppContext, context_from
from inbox.core.config import settings
from inbox.core.logging_config import setup_logging
from inbox.db.session import SessionLocal, engine, init_db, test_db_connection
from inbox.services.bridge import WhatsAppBridge
from inbox.services.whatsapp_handlers import register_handlers
from inbox.ws.handlers import handle_frame

log = logging.getLogger("inbox")


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    """
    Build the application around an explicit context.
    Without one, the default engine is initialized and the bridge is started
    from settings.
    """
    app = FastAPI(
        title="Inbox - Multi-agent WhatsApp API",
        description="Shared WhatsApp inbox for a team of agents",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials="*" not in settings.ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    if context is None:
        context = AppContext(session_factory=SessionLocal)
        try:
            init_db(engine)
        except Exception as e:
            log.error(f"❌ Database error: {e}")

    if context.bridge is None:
        context.bridge = WhatsAppBridge.from_settings(app, settings)
    register_handlers(context)

    app.state.context = context
    app.include_router(api_router, prefix="/api")

    # ────────────────────────────────────────────
    # Public routes
    # ────────────────────────────────────────────

    @app.get("/healthz", tags=["System"])
    def health(request: Request):
        """Health check endpoint"""
        ctx = context_from(request)
        db_ok = test_db_connection(ctx.session_factory)
        return {
            "status": "ok" if db_ok else "degraded",
            "database_ok": db_ok,
            "bridge_ok": ctx.bridge is not None,
            "websocket_connections": ctx.hub.connection_count(),
        }

    # ────────────────────────────────────────────
    # WebSocket Endpoint
    # ────────────────────────────────────────────

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Realtime channel: JSON frames {"event": ..., "data": ...}"""
        ctx = context_from(websocket)
        await ctx.hub.connect(websocket)
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(message.get("code", 1000))
                text = message.get("text")
                if text is None:
                    log.debug("Ignoring binary frame")
                    continue
                if text == "ping":
                    await websocket.send_text("pong")
                    continue
                try:
                    frame = json.loads(text)
                except ValueError:
                    log.debug(f"Ignoring non-JSON frame: {text[:100]}")
                    continue
                await handle_frame(ctx, websocket, frame)
        except WebSocketDisconnect:
            log.info(f"🔌 WebSocket {id(websocket)} disconnected")
        finally:
            ctx.hub.disconnect(websocket)

    # ────────────────────────────────────────────
    # Exception Handlers
    # ────────────────────────────────────────────

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Render HTTP errors as {"detail": ...}"""
        if exc.status_code >= 500:
            log.error(f"❌ {request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    return app


setup_logging("inbox", settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    from inbox.core.config import PORT
    uvicorn.run(app, host="0.0.0.0", port=PORT)
