"""Reconcile a base message list with freshly arrived messages."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence, Set

from .metadata import message_id_of


def merge_messages_by_id(base: Sequence[Any], incoming: Sequence[Any]) -> List[Any]:
    """Merge two message lists by id.

    Every id appears once. When both lists carry an id the incoming copy wins,
    but the id keeps the slot where it first appeared (base first, then
    incoming). Messages without an id are ignored.
    """
    latest: Dict[str, Any] = {}
    for message in (*base, *incoming):
        message_id = message_id_of(message)
        if message_id is not None:
            latest[message_id] = message

    merged: List[Any] = []
    seen: Set[str] = set()
    for message in (*base, *incoming):
        message_id = message_id_of(message)
        if message_id is None or message_id in seen:
            continue
        seen.add(message_id)
        merged.append(latest[message_id])
    return merged
