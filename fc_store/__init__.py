"""Chat thread persistence for forkchat."""

from .attachment_store import AttachmentStore, StoredAttachment
from .file_store import FileChatStore, title_from_messages
from .local_store import LocalFileStore
from .types import ChatStore, ChatSummary, ChatThread, ChatThreadState

__all__ = [
    "AttachmentStore",
    "ChatStore",
    "ChatSummary",
    "ChatThread",
    "ChatThreadState",
    "FileChatStore",
    "LocalFileStore",
    "StoredAttachment",
    "title_from_messages",
]
