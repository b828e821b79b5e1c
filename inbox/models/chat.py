# inbox/models/chat.py
"""Chat model: one conversation per WhatsApp contact number"""
from datetime import datetime
from sqlalchemy import Column, String, Integer, Boolean, DateTime
from sqlalchemy.orm import relationship
from inbox.models.base import BaseModel

CHAT_STATUSES = ("open", "closed", "paused", "snoozed", "unassigned")
CHAT_CATEGORIES = ("inbox", "mine", "unassigned", "team")


class Chat(BaseModel):
    __tablename__ = "chats"

    contact_name = Column(String(255), nullable=False)
    contact_number = Column(String(50), unique=True, index=True, nullable=False)
    contact_profile_pic = Column(String(500), nullable=False, default="")

    # User reference without FK enforcement; dangling ids populate as null
    assigned_to_id = Column(String(32), nullable=True, index=True)

    status = Column(String(20), nullable=False, default="unassigned", index=True)
    category = Column(String(20), nullable=False, default="unassigned", index=True)
    last_message = Column(String, nullable=False, default="")
    last_message_time = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    unread_count = Column(Integer, nullable=False, default=0)
    is_important = Column(Boolean, nullable=False, default=False)

    assigned_to = relationship(
        "User",
        primaryjoin="foreign(Chat.assigned_to_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    @property
    def contact(self) -> dict:
        return {
            "name": self.contact_name,
            "number": self.contact_number,
            "profile_pic": self.contact_profile_pic or "",
        }

    def __repr__(self):
        return f"<Chat {self.contact_number} ({self.status}/{self.category})>"
