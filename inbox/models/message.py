# inbox/models/message.py
"""
Message model: one row per chat turn, with agent comments embedded as JSON.
"""
from datetime import datetime
from sqlalchemy import Column, String, Text, JSON, Boolean, DateTime
from sqlalchemy.orm import relationship
from inbox.models.base import BaseModel

SENTINEL_CONTENT = "[Mensagem sem conteúdo]"
MEDIA_TYPES = ("", "image", "video", "audio", "document")


class Message(BaseModel):
    __tablename__ = "messages"

    chat_id = Column(String(32), index=True, nullable=False)
    sender = Column(String(20), nullable=False)  # 'user' or 'contact'
    user_id = Column(String(32), nullable=True)
    content = Column(Text, nullable=False, default=SENTINEL_CONTENT)
    media_url = Column(String(1000), nullable=False, default="")
    media_type = Column(String(20), nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    # [{"user_id": ..., "content": ..., "timestamp": iso8601}]
    comments = Column(JSON, nullable=False, default=list)

    user = relationship(
        "User",
        primaryjoin="foreign(Message.user_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    def __repr__(self):
        return f"<Message {self.id} in {self.chat_id} from {self.sender}>"
