"""Core message types shared by the branching engine and the stores."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]


def _now_ms() -> int:
    return int(time.time() * 1000)


class UIMessage(BaseModel):
    """A chat message as the UI sees it.

    ``parts`` is opaque content (text, file, reasoning and tool parts as plain
    dicts). ``metadata`` is a free-form envelope; the branching engine keeps its
    ``parentId`` / ``editedFromId`` keys there. Unknown top-level fields are kept
    so messages round-trip through persistence unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    role: Role
    parts: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: Optional[Any] = None
    timestamp: Optional[int] = None
    model: Optional[str] = None


MessageLike = Union[UIMessage, Mapping[str, Any]]


def text_part(text: str) -> Dict[str, Any]:
    return {"type": "text", "text": text}


def file_part(url: str, media_type: str, filename: Optional[str] = None) -> Dict[str, Any]:
    part: Dict[str, Any] = {"type": "file", "url": url, "mediaType": media_type}
    if filename is not None:
        part["filename"] = filename
    return part


def create_user_message(message_id: str, text: str, *, timestamp: Optional[int] = None) -> UIMessage:
    return UIMessage(
        id=message_id,
        role="user",
        parts=[text_part(text)],
        timestamp=timestamp if timestamp is not None else _now_ms(),
    )


def create_assistant_message(
    message_id: str,
    text: str,
    *,
    model: Optional[str] = None,
    timestamp: Optional[int] = None,
) -> UIMessage:
    return UIMessage(
        id=message_id,
        role="assistant",
        parts=[text_part(text)],
        model=model,
        timestamp=timestamp if timestamp is not None else _now_ms(),
    )
