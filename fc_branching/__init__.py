"""Conversation branching and reconciliation engine."""

from .merge import merge_messages_by_id
from .metadata import (
    ROOT_PARENT_KEY,
    UNSET,
    BranchingMetadata,
    get_edited_from_id,
    get_parent_id,
    message_id_of,
    parent_key_for_message,
    parent_key_of,
    read_metadata,
    with_metadata,
)
from .navigation import as_edit_of, as_reply, as_retry_of, leaf_id, reveal_latest, select_branch, step_branch
from .session import ConversationSession
from .tree import (
    SiblingInfo,
    build_children_by_parent_key,
    derive_visible_path,
    get_selected_child_index,
    get_siblings_for_message,
)

__all__ = [
    "ROOT_PARENT_KEY",
    "UNSET",
    "BranchingMetadata",
    "ConversationSession",
    "SiblingInfo",
    "as_edit_of",
    "as_reply",
    "as_retry_of",
    "build_children_by_parent_key",
    "derive_visible_path",
    "get_edited_from_id",
    "get_parent_id",
    "get_selected_child_index",
    "get_siblings_for_message",
    "leaf_id",
    "merge_messages_by_id",
    "message_id_of",
    "parent_key_for_message",
    "parent_key_of",
    "read_metadata",
    "reveal_latest",
    "select_branch",
    "step_branch",
    "with_metadata",
]
