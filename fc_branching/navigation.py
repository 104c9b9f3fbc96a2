"""Branch navigation and edit/retry helpers.

Selection maps passed in are never modified; every helper returns a new dict.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from .metadata import BranchingMetadata, message_id_of, read_metadata, with_metadata
from .tree import BranchSelection, derive_visible_path, get_siblings_for_message


def select_branch(selection: Optional[BranchSelection], parent_key: str, index: int) -> Dict[str, Any]:
    updated = dict(selection or {})
    updated[parent_key] = index
    return updated


def reveal_latest(selection: Optional[BranchSelection], parent_key: str) -> Dict[str, Any]:
    updated = dict(selection or {})
    updated.pop(parent_key, None)
    return updated


def step_branch(
    messages: Sequence[Any],
    selection: Optional[BranchSelection],
    message: Any,
    delta: int,
) -> Dict[str, Any]:
    info = get_siblings_for_message(messages, message)
    index = max(0, min(info.count - 1, info.index + delta))
    return select_branch(selection, info.parent_key, index)


def leaf_id(messages: Sequence[Any], selection: Optional[BranchSelection] = None) -> Optional[str]:
    path = derive_visible_path(messages, selection)
    return message_id_of(path[-1]) if path else None


def as_reply(message: Any, parent: Any = None):
    parent_id = message_id_of(parent) if parent is not None else None
    return with_metadata(message, BranchingMetadata(parent_id=parent_id))


def as_edit_of(replacement: Any, original: Any):
    """Attach ``replacement`` as an edited sibling of ``original``."""
    return with_metadata(
        replacement,
        BranchingMetadata(
            parent_id=read_metadata(original).effective_parent_id,
            edited_from_id=message_id_of(original),
        ),
    )


def as_retry_of(replacement: Any, original: Any):
    """Attach a regenerated ``replacement`` next to ``original``."""
    return with_metadata(
        replacement,
        BranchingMetadata(parent_id=read_metadata(original).effective_parent_id),
    )
