"""In-memory conversation state: the flat message list plus the branch selection."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional

from fc_ai.serialization import load_messages
from fc_store.file_store import title_from_messages
from fc_store.types import ChatThread, ChatThreadState

from .merge import merge_messages_by_id
from .metadata import message_id_of, parent_key_for_message, read_metadata
from .navigation import as_edit_of, as_reply, as_retry_of, reveal_latest, select_branch, step_branch
from .tree import SiblingInfo, derive_visible_path, get_siblings_for_message


class ConversationSession:
    """Owns the authoritative message list and selection map for one thread.

    All tree logic goes through the pure functions in ``fc_branching``; this
    class only keeps the latest list and selection so that every merge runs
    against the most recent base.
    """

    def __init__(
        self,
        messages: Iterable[Any] = (),
        selection: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._messages: List[Any] = merge_messages_by_id([], list(messages))
        self._selection: Dict[str, Any] = dict(selection or {})

    @property
    def messages(self) -> List[Any]:
        return list(self._messages)

    @property
    def selection(self) -> Dict[str, Any]:
        return dict(self._selection)

    def get_message(self, message_id: str) -> Any:
        for message in self._messages:
            if message_id_of(message) == message_id:
                return message
        raise KeyError(f"Message not found: {message_id}")

    def has_message(self, message_id: str) -> bool:
        return any(message_id_of(message) == message_id for message in self._messages)

    def visible_path(self) -> List[Any]:
        return derive_visible_path(self._messages, self._selection)

    def leaf(self) -> Optional[Any]:
        path = self.visible_path()
        return path[-1] if path else None

    def leaf_id(self) -> Optional[str]:
        leaf = self.leaf()
        return message_id_of(leaf) if leaf is not None else None

    def siblings(self, message_id: str) -> SiblingInfo:
        return get_siblings_for_message(self._messages, self.get_message(message_id))

    def append(self, message: Any) -> Any:
        """Add a message, replying to the visible leaf unless it already names a parent."""
        if not read_metadata(message).has_parent_id:
            message = as_reply(message, self.leaf())
        self._add(message)
        return message

    def edit(self, original_id: str, replacement: Any) -> Any:
        message = as_edit_of(replacement, self.get_message(original_id))
        self._add(message)
        return message

    def retry(self, original_id: str, replacement: Any) -> Any:
        message = as_retry_of(replacement, self.get_message(original_id))
        self._add(message)
        return message

    def switch_branch(self, message_id: str, delta: int) -> SiblingInfo:
        message = self.get_message(message_id)
        self._selection = step_branch(self._messages, self._selection, message, delta)
        info = get_siblings_for_message(self._messages, message)
        info.index = self._selection[info.parent_key]
        return info

    def select(self, parent_key: str, index: int) -> None:
        self._selection = select_branch(self._selection, parent_key, index)

    def apply_incoming(self, incoming: Iterable[Any]) -> List[Any]:
        self._messages = merge_messages_by_id(self._messages, list(incoming))
        return self.messages

    def replace(self, messages: Iterable[Any], selection: Optional[Mapping[str, Any]] = None) -> None:
        self._messages = merge_messages_by_id([], list(messages))
        self._selection = dict(selection or {})

    @classmethod
    def from_state(
        cls,
        state: ChatThreadState,
        selection: Optional[Mapping[str, Any]] = None,
    ) -> ConversationSession:
        return cls(state.messages, selection)

    def to_state(self, thread: ChatThread) -> ChatThreadState:
        """Snapshot the messages for saving. An untitled thread takes its title from the first user turn."""
        messages = load_messages(self._messages)
        title = thread.title or title_from_messages(messages)
        return ChatThreadState(thread=thread.model_copy(update={"title": title}), messages=messages)

    def _add(self, message: Any) -> None:
        self._messages = merge_messages_by_id(self._messages, [message])
        self._selection = reveal_latest(self._selection, parent_key_for_message(message))
