from __future__ import annotations

from fc_ai.types import UIMessage
from fc_branching import UNSET


def msg(message_id: str, parent_id=UNSET, *, role: str = "user", text: str | None = None, **extra) -> UIMessage:
    metadata = dict(extra.pop("metadata", {}) or {})
    if parent_id is not UNSET:
        metadata["parentId"] = parent_id
    return UIMessage(
        id=message_id,
        role=role,
        parts=[{"type": "text", "text": text if text is not None else message_id}],
        metadata=metadata or None,
        timestamp=1,
        **extra,
    )


def ids(messages) -> list[str]:
    return [m.id if hasattr(m, "id") else m["id"] for m in messages]
