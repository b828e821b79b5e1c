import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from inbox.api.deps import get_db, get_current_user, get_current_user_id, require_admin
from inbox.context import AppContext, get_context
from inbox.models.user import User, USER_STATUSES
from inbox.schemas.user import UserResponse, UserUpdate, UserStatusUpdate, UserEnvelope
from inbox.ws.manager import USER_STATUS_CHANGED

router = APIRouter(dependencies=[Depends(get_current_user_id)])
log = logging.getLogger("inbox.users")


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(404, "User not found")
    return user


@router.get("", response_model=List[UserResponse])
def list_users(db: Session = Depends(get_db)):
    """List users"""
    return db.query(User).order_by(User.created_at).all()


@router.patch("/status", response_model=UserResponse)
def update_my_status(
    data: UserStatusUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user),
    context: AppContext = Depends(get_context)
):
    """Update the caller's presence"""
    if data.status not in USER_STATUSES:
        raise HTTPException(400, "Invalid status")

    current.status = data.status
    db.commit()
    db.refresh(current)
    log.info(f"🟢 {current.email} is now {current.status}")

    context.hub.broadcast_sync(USER_STATUS_CHANGED, {"userId": current.id, "status": current.status})
    return current


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    """Get user"""
    return _get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserEnvelope)
def update_user(
    user_id: str,
    data: UserUpdate,
    db: Session = Depends(get_db),
    current: User = Depends(get_current_user)
):
    """Update user; only admins may change roles"""
    user = _get_user_or_404(db, user_id)

    if data.role and not current.is_admin:
        raise HTTPException(403, "Permission denied to change role")

    if data.email and data.email != user.email:
        taken = db.query(User).filter(User.email == data.email, User.id != user.id).first()
        if taken:
            raise HTTPException(400, "Email already in use")

    log.info(f"Updating user {user_id} fields={list(data.model_dump(exclude_unset=True).keys())}")
    for field in ("name", "email", "avatar", "status", "role"):
        value = getattr(data, field)
        if value:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Delete user (admin only)"""
    user = _get_user_or_404(db, user_id)
    log.info(f"Deleting user {user.email} by {admin.email}")
    db.delete(user)
    db.commit()
    return {"message": "User deleted"}
