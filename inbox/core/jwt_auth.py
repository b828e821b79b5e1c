# inbox/core/jwt_auth.py
"""
JWT handling for agent API access.
Tokens are issued at register/login and presented in the x-auth-token header.
"""
import jwt
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from fastapi import HTTPException

from inbox.core.config import (
    JWT_SECRET_KEY, JWT_ALGORITHM, JWT_ACCESS_TOKEN_LIFETIME_MINUTES
)


class JWTAuth:
    """JWT Authentication handler"""

    @staticmethod
    def create_token(user_id: str, lifetime_minutes: Optional[int] = None) -> str:
        """
        Issue a signed access token for a user.

        Args:
            user_id: Identifier of the authenticated user
            lifetime_minutes: Override for the configured token lifetime

        Returns:
            Encoded JWT string
        """
        now = datetime.utcnow()
        minutes = lifetime_minutes if lifetime_minutes is not None else JWT_ACCESS_TOKEN_LIFETIME_MINUTES
        payload = {
            "userId": user_id,
            "sub": user_id,
            "iat": now,
            "exp": now + timedelta(minutes=minutes),
        }
        return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> Dict[str, Any]:
        """
        Decode and validate JWT token.

        Raises:
            HTTPException: If token is invalid or expired
        """
        try:
            return jwt.decode(
                token,
                JWT_SECRET_KEY,
                algorithms=[JWT_ALGORITHM]
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=401,
                detail="Token has expired"
            )
        except jwt.InvalidTokenError:
            raise HTTPException(
                status_code=401,
                detail="Invalid token"
            )

    @staticmethod
    def get_user_id(payload: Dict[str, Any]) -> Optional[str]:
        """Extract user id from JWT payload."""
        user_id = (
            payload.get('userId') or
            payload.get('user_id') or
            payload.get('sub')
        )
        return str(user_id) if user_id else None
