"""Serialization helpers for persisting and transmitting messages."""

from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ValidationError

from .types import UIMessage

logger = logging.getLogger(__name__)

_OPTIONAL_ENVELOPE_FIELDS = ("metadata", "timestamp", "model")


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True)
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, dict):
        return {key: to_jsonable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


def dump_message(message: Any) -> Dict[str, Any]:
    """Dump a message to a plain dict.

    Top-level envelope fields that are ``None`` are dropped, but the metadata
    dict itself is copied verbatim so an explicit ``parentId: None`` survives.
    """
    data = to_jsonable(message)
    if not isinstance(data, dict):
        return {"message": str(message)}
    data = dict(data)
    for key in _OPTIONAL_ENVELOPE_FIELDS:
        if key in data and data[key] is None:
            data.pop(key)
    return data


def dump_messages(messages: Iterable[Any]) -> List[Dict[str, Any]]:
    return [dump_message(message) for message in messages]


def load_message(payload: Any) -> Optional[UIMessage]:
    if isinstance(payload, UIMessage):
        return payload
    if not isinstance(payload, dict):
        return None
    try:
        return UIMessage.model_validate(payload)
    except ValidationError as exc:
        logger.warning("Skipping invalid message %r: %s", payload.get("id"), exc)
        return None


def load_messages(payload: Any) -> List[UIMessage]:
    if not isinstance(payload, list):
        return []
    messages: List[UIMessage] = []
    for item in payload:
        message = load_message(item)
        if message is not None:
            messages.append(message)
    return messages
