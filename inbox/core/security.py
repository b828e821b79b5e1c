# inbox/core/security.py
"""
Password hashing and credential checks for agent accounts.
"""
import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy.orm import Session

from inbox.models.user import User

log = logging.getLogger("inbox.security")

pwd_context = CryptContext(
    schemes=["argon2"],
    default="argon2",
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, stored: str) -> bool:
    if not stored:
        return False
    try:
        return pwd_context.verify(password, stored)
    except (ValueError, TypeError) as e:
        log.warning(f"⚠️ Unreadable password hash: {e}")
        return False


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when email and password match, else None."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(password, user.password_hash):
        log.info(f"🔒 Failed login for {email}")
        return None
    return user


def create_user(
    db: Session,
    name: str,
    email: str,
    password: str,
    role: str = "agent",
) -> User:
    """Create and persist a user with a hashed password."""
    user = User(
        name=name,
        email=email.strip().lower(),
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info(f"✅ User created: {user.email} ({user.role})")
    return user
