# inbox/models/base.py
"""
Base model with common fields for all database models.
"""
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    """Opaque document-style identifier"""
    return uuid.uuid4().hex


class BaseModel(Base):
    """
    Abstract base model with common fields.

    Provides:
    - id: Primary key (32-char hex string)
    - created_at: Auto timestamp on creation
    """
    __abstract__ = True

    id = Column(String(32), primary_key=True, default=new_id)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
