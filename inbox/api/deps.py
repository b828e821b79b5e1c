# inbox/api/deps.py
"""
API dependencies for authentication and database access.
Agents authenticate with a JWT in the x-auth-token header.
"""
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from inbox.context import AppContext, get_context
from inbox.core.jwt_auth import JWTAuth
from inbox.models.user import User
from inbox.services.chat_sync import ChatSyncService


# ────────────────────────────────────────────
# Database
# ────────────────────────────────────────────

def get_db(context: AppContext = Depends(get_context)):
    """
    FastAPI dependency for database sessions.

    Usage:
        @router.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = context.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_chat_service(context: AppContext = Depends(get_context)) -> ChatSyncService:
    return context.chat_service()


# ────────────────────────────────────────────
# Token Authentication
# ────────────────────────────────────────────

def get_current_user_id(x_auth_token: Optional[str] = Header(None)) -> str:
    """User id embedded in the x-auth-token JWT."""
    if not x_auth_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access denied. No token provided."
        )
    payload = JWTAuth.decode_token(x_auth_token)
    user_id = JWTAuth.get_user_id(payload)
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token"
        )
    return user_id


def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db)
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User for token no longer exists"
        )
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Permission denied"
        )
    return user
