from __future__ import annotations

from fc_ai.types import UIMessage
from fc_store import ChatThread, ChatThreadState


def user_msg(message_id: str, text: str, parent_id="absent") -> UIMessage:
    metadata = None if parent_id == "absent" else {"parentId": parent_id}
    return UIMessage(
        id=message_id,
        role="user",
        parts=[{"type": "text", "text": text}],
        metadata=metadata,
        timestamp=1,
    )


def assistant_msg(message_id: str, text: str, parent_id: str) -> UIMessage:
    return UIMessage(
        id=message_id,
        role="assistant",
        parts=[{"type": "text", "text": text}],
        metadata={"parentId": parent_id},
        timestamp=2,
        model="openai/gpt-test",
    )


def thread_state(*messages: UIMessage, thread_id: str = "t1") -> ChatThreadState:
    thread = ChatThread(
        id=thread_id,
        title="Test thread",
        created_at="2025-01-01T00:00:00+00:00",
        updated_at="2025-01-01T00:00:00+00:00",
    )
    return ChatThreadState(thread=thread, messages=list(messages))
