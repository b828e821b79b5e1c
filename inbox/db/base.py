"""Import all models so metadata.create_all sees every table"""
from inbox.models.base import Base

from inbox.models.user import User
from inbox.models.chat import Chat
from inbox.models.message import Message

__all__ = ["Base", "User", "Chat", "Message"]
