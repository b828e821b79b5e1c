# inbox/models/user.py
"""
Agent accounts: identity, role and presence.
"""
from sqlalchemy import Column, String
from inbox.models.base import BaseModel

USER_ROLES = ("admin", "agent")
USER_STATUSES = ("available", "busy", "away")


class User(BaseModel):
    __tablename__ = "users"

    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=False, default="")
    role = Column(String(20), nullable=False, default="agent")
    status = Column(String(20), nullable=False, default="available")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self):
        return f"<User {self.email}>"
