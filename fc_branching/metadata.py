"""Branching metadata stored in a message's ``metadata`` envelope.

Each message points at the message it continues from via ``metadata.parentId``.
Branches are simply several children under the same parent. Edits record the
message they replace in ``metadata.editedFromId``; that key is provenance only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union

from fc_ai.types import MessageLike

ROOT_PARENT_KEY = "__root__"

PARENT_ID_KEY = "parentId"
EDITED_FROM_ID_KEY = "editedFromId"


class _Unset:
    """Marker for a metadata field that is not present at all."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()

ParentId = Union[str, None, _Unset]


@dataclass(frozen=True)
class BranchingMetadata:
    # UNSET: never recorded. None: explicitly attached to the root.
    parent_id: ParentId = UNSET
    edited_from_id: Optional[str] = None

    @property
    def effective_parent_id(self) -> Optional[str]:
        return self.parent_id if isinstance(self.parent_id, str) else None

    @property
    def has_parent_id(self) -> bool:
        return self.parent_id is not UNSET

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        if self.parent_id is not UNSET:
            data[PARENT_ID_KEY] = self.parent_id
        if self.edited_from_id is not None:
            data[EDITED_FROM_ID_KEY] = self.edited_from_id
        return data


def parent_key_of(parent_id: ParentId) -> str:
    return parent_id if isinstance(parent_id, str) else ROOT_PARENT_KEY


def message_id_of(message: Any) -> Optional[str]:
    if isinstance(message, Mapping):
        value = message.get("id")
    else:
        value = getattr(message, "id", None)
    return value if isinstance(value, str) and value else None


def _raw_metadata(message: Any) -> Any:
    if isinstance(message, Mapping):
        return message.get("metadata")
    return getattr(message, "metadata", None)


def read_metadata(message: MessageLike) -> BranchingMetadata:
    raw = _raw_metadata(message)
    if not isinstance(raw, Mapping):
        return BranchingMetadata()

    parent_id: ParentId = UNSET
    if PARENT_ID_KEY in raw:
        value = raw[PARENT_ID_KEY]
        if isinstance(value, str) or value is None:
            parent_id = value
    edited_from_id = raw.get(EDITED_FROM_ID_KEY)
    return BranchingMetadata(
        parent_id=parent_id,
        edited_from_id=edited_from_id if isinstance(edited_from_id, str) else None,
    )


def get_parent_id(message: MessageLike) -> ParentId:
    return read_metadata(message).parent_id


def get_edited_from_id(message: MessageLike) -> Optional[str]:
    return read_metadata(message).edited_from_id


def parent_key_for_message(message: MessageLike) -> str:
    return parent_key_of(get_parent_id(message))


def with_metadata(message: MessageLike, patch: Union[BranchingMetadata, Mapping[str, Any]]):
    """Return a copy of ``message`` with ``patch`` shallow-merged into its metadata."""
    raw = _raw_metadata(message)
    current: Dict[str, Any] = dict(raw) if isinstance(raw, Mapping) else {}
    updates = patch.to_dict() if isinstance(patch, BranchingMetadata) else dict(patch)
    merged = {**current, **updates}

    if isinstance(message, Mapping):
        copied = dict(message)
        copied["metadata"] = merged
        return copied
    return message.model_copy(update={"metadata": merged})
