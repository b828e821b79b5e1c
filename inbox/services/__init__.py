"""
Service layer.
"""
from inbox.services.chat_sync import (
    ChatSyncService,
    ChatNotFoundError,
    MessageNotFoundError,
    UserNotFoundError,
)

__all__ = [
    'ChatSyncService',
    'ChatNotFoundError',
    'MessageNotFoundError',
    'UserNotFoundError',
]
