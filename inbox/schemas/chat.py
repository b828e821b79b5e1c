# inbox/schemas/chat.py
from datetime import datetime
from typing import Optional, Literal

from pydantic import Field, field_validator

from inbox.schemas.common import CamelModel
from inbox.schemas.user import UserSummary

ChatStatus = Literal["open", "closed", "paused", "snoozed", "unassigned"]
ChatCategory = Literal["inbox", "mine", "unassigned", "team"]


class ContactInfo(CamelModel):
    name: str = Field(..., min_length=1, max_length=255)
    number: str = Field(..., min_length=1, max_length=50)
    profile_pic: str = ""

    @field_validator('number')
    @classmethod
    def strip_number(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Contact number is required')
        return v


class ChatCreate(CamelModel):
    contact: ContactInfo
    assigned_to: Optional[str] = None
    status: Optional[ChatStatus] = None
    category: Optional[ChatCategory] = None


class ChatUpdate(CamelModel):
    """Generic update; assignedTo present (even null) re-derives status/category"""
    assigned_to: Optional[str] = None
    status: Optional[ChatStatus] = None
    category: Optional[ChatCategory] = None
    is_important: Optional[bool] = None


class ChatAssign(CamelModel):
    user_id: Optional[str] = None


class ChatStatusUpdate(CamelModel):
    status: Optional[str] = None


class ChatImportantUpdate(CamelModel):
    is_important: bool


class ChatResponse(CamelModel):
    id: str
    contact: ContactInfo
    assigned_to: Optional[UserSummary] = None
    status: str
    category: str
    last_message: str = ""
    last_message_time: datetime
    unread_count: int = 0
    is_important: bool = False
    created_at: datetime
