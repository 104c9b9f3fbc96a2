"""Message model for forkchat."""

from .message_types import format_message_timestamp, has_model, has_timestamp
from .serialization import dump_message, dump_messages, load_message, load_messages
from .types import MessageLike, UIMessage, create_assistant_message, create_user_message

__all__ = [
    "message_types",
    "serialization",
    "types",
    "MessageLike",
    "UIMessage",
    "create_assistant_message",
    "create_user_message",
    "dump_message",
    "dump_messages",
    "load_message",
    "load_messages",
    "format_message_timestamp",
    "has_model",
    "has_timestamp",
]
