"""Tree index, visible path and sibling lookup over a flat message list.

Nothing here is cached: the index is rebuilt from the flat list on every call,
so the list stays the only source of truth.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set

from .metadata import ROOT_PARENT_KEY, message_id_of, parent_key_for_message

BranchSelection = Mapping[str, Any]


@dataclass
class SiblingInfo:
    parent_key: str
    siblings: List[Any] = field(default_factory=list)
    index: int = 0

    @property
    def count(self) -> int:
        return len(self.siblings)

    @property
    def has_previous(self) -> bool:
        return self.index > 0

    @property
    def has_next(self) -> bool:
        return self.index < len(self.siblings) - 1


def build_children_by_parent_key(messages: Sequence[Any]) -> Dict[str, List[Any]]:
    children: Dict[str, List[Any]] = {}
    for message in messages:
        children.setdefault(parent_key_for_message(message), []).append(message)
    return children


def get_selected_child_index(
    selection: Optional[BranchSelection],
    parent_key: str,
    child_count: int,
) -> int:
    if child_count <= 0:
        return 0
    raw = selection.get(parent_key) if selection else None
    if isinstance(raw, (int, float)) and not isinstance(raw, bool) and math.isfinite(raw):
        index = int(raw)
    else:
        index = child_count - 1
    return max(0, min(child_count - 1, index))


def derive_visible_path(
    messages: Sequence[Any],
    selection: Optional[BranchSelection] = None,
) -> List[Any]:
    children_by_parent_key = build_children_by_parent_key(messages)
    path: List[Any] = []
    seen: Set[Optional[str]] = set()

    parent_key = ROOT_PARENT_KEY
    while True:
        children = children_by_parent_key.get(parent_key)
        if not children:
            break
        chosen = children[get_selected_child_index(selection, parent_key, len(children))]
        chosen_id = message_id_of(chosen)
        # Stop on a repeat so corrupt parent links cannot loop forever.
        if chosen_id in seen:
            break
        path.append(chosen)
        if chosen_id is None:
            break
        seen.add(chosen_id)
        parent_key = chosen_id
    return path


def get_siblings_for_message(messages: Sequence[Any], message: Any) -> SiblingInfo:
    parent_key = parent_key_for_message(message)
    bucket = build_children_by_parent_key(messages).get(parent_key, [])
    target_id = message_id_of(message)
    for index, sibling in enumerate(bucket):
        if target_id is not None and message_id_of(sibling) == target_id:
            return SiblingInfo(parent_key=parent_key, siblings=bucket, index=index)
    return SiblingInfo(parent_key=parent_key, siblings=[message], index=0)
