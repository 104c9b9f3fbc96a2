"""Thread state models and the store contract.

Stores load and save the flat message list exactly as given, branching
metadata included.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field

from fc_ai.types import UIMessage


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatThread(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: Optional[str] = None
    created_at: str = Field(default_factory=now_iso, alias="createdAt")
    updated_at: str = Field(default_factory=now_iso, alias="updatedAt")


class ChatThreadState(BaseModel):
    thread: ChatThread
    messages: List[UIMessage] = Field(default_factory=list)


class ChatSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    updated_at: str = Field(alias="updatedAt")


class ChatStore(Protocol):
    def load_last_thread(self) -> Optional[ChatThreadState]:
        """Load the last-opened thread."""
        ...

    def save_thread(self, state: ChatThreadState) -> None:
        """Save the given thread state."""
        ...

    def clear(self) -> None:
        """Clear local state."""
        ...
