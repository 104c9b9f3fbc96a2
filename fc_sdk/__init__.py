"""SDK surface for forkchat."""

from .client import ChatsClient
from .config import Settings, load_settings
from .sdk import (
    create_chats_client,
    create_file_store,
    create_local_store,
    new_thread,
    open_session,
    save_session,
    to_state,
)

__all__ = [
    "ChatsClient",
    "Settings",
    "create_chats_client",
    "create_file_store",
    "create_local_store",
    "load_settings",
    "new_thread",
    "open_session",
    "save_session",
    "to_state",
]
