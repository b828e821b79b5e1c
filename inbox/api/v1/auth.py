import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from inbox.api.deps import get_db, get_current_user_id
from inbox.core.jwt_auth import JWTAuth
from inbox.core.security import authenticate_user, create_user
from inbox.models.user import User
from inbox.schemas.user import RegisterRequest, LoginRequest, AuthResponse, UserResponse

router = APIRouter()
log = logging.getLogger("inbox.auth")


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Register an agent account and return a token"""
    if db.query(User).filter(User.email == data.email).first():
        raise HTTPException(400, "User already exists")

    user = create_user(db, name=data.name, email=data.email, password=data.password,
                       role=data.role or "agent")
    return AuthResponse(token=JWTAuth.create_token(user.id), user=UserResponse.model_validate(user))


@router.post("/login", response_model=AuthResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """Exchange credentials for a token"""
    user = authenticate_user(db, data.email, data.password)
    if not user:
        raise HTTPException(400, "Invalid credentials")
    log.info(f"🔑 Login: {user.email}")
    return AuthResponse(token=JWTAuth.create_token(user.id), user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
def me(user_id: str = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Get current user info"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(404, "User not found")
    return user
