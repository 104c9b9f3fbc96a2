"""Helpers for the timestamp/model fields that ride on every message."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from .types import MessageLike


def _field(message: MessageLike, name: str) -> Any:
    if isinstance(message, Mapping):
        return message.get(name)
    return getattr(message, name, None)


def has_timestamp(message: MessageLike) -> bool:
    value = _field(message, "timestamp")
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def has_model(message: MessageLike) -> bool:
    return isinstance(_field(message, "model"), str)


def format_message_timestamp(timestamp: int, *, now: Optional[datetime] = None) -> str:
    """Format a millisecond timestamp for display.

    Today's messages show only the time, messages from this year add the month
    and day, anything older gets the full date.
    """
    moment = datetime.fromtimestamp(timestamp / 1000)
    current = now or datetime.now()
    clock = f"{moment.hour % 12 or 12}:{moment:%M} {'AM' if moment.hour < 12 else 'PM'}"

    if moment.date() == current.date():
        return clock
    if moment.year == current.year:
        return f"{moment:%b} {moment.day}, {clock}"
    return f"{moment:%b} {moment.day}, {moment.year}, {clock}"
