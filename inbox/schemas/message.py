# inbox/schemas/message.py
"""
Pydantic schemas for Message API requests and responses.
"""
from datetime import datetime
from typing import Optional, List, Literal

from pydantic import Field

from inbox.schemas.common import CamelModel
from inbox.schemas.user import UserSummary

MediaType = Literal["", "image", "video", "audio", "document"]


# ────────────────────────────────────────────
# Request Schemas (Input)
# ────────────────────────────────────────────

class MessageCreate(CamelModel):
    """Agent reply sent through the REST API"""
    chat_id: str = Field(..., min_length=1)
    content: Optional[str] = None
    media_url: Optional[str] = None
    media_type: Optional[MediaType] = None


class CommentCreate(CamelModel):
    content: str = Field(..., min_length=1)


# ────────────────────────────────────────────
# Response Schemas (Output)
# ────────────────────────────────────────────

class CommentResponse(CamelModel):
    user_id: str
    content: str
    timestamp: datetime
    user: Optional[UserSummary] = None


class MessageResponse(CamelModel):
    id: str
    chat_id: str
    sender: Literal["user", "contact"]
    user_id: Optional[str] = None
    user: Optional[UserSummary] = None
    content: str
    media_url: str = ""
    media_type: str = ""
    is_read: bool = False
    timestamp: datetime
    comments: List[CommentResponse] = Field(default_factory=list)
