"""SDK entry points for embedding forkchat."""

from __future__ import annotations

from typing import Any, Mapping, Optional
from uuid import uuid4

from fc_branching.session import ConversationSession
from fc_store.file_store import FileChatStore
from fc_store.local_store import LocalFileStore
from fc_store.types import ChatStore, ChatThread, ChatThreadState

from .client import ChatsClient
from .config import Settings, load_settings


def create_local_store(settings: Optional[Settings] = None) -> LocalFileStore:
    resolved = settings or load_settings()
    return LocalFileStore(resolved.store_path)


def create_file_store(settings: Optional[Settings] = None) -> FileChatStore:
    resolved = settings or load_settings()
    return FileChatStore(resolved.data_dir)


def create_chats_client(settings: Optional[Settings] = None) -> ChatsClient:
    resolved = settings or load_settings()
    return ChatsClient(resolved.api_base_url, timeout=resolved.http_timeout)


def new_thread(title: Optional[str] = None) -> ChatThread:
    return ChatThread(id=uuid4().hex[:16], title=title)


def open_session(
    store: ChatStore,
    *,
    selection: Optional[Mapping[str, Any]] = None,
) -> tuple[ChatThread, ConversationSession]:
    """Load the last thread from ``store`` into a session, or start a new one."""
    state = store.load_last_thread()
    if state is None:
        return new_thread(), ConversationSession(selection=selection)
    return state.thread, ConversationSession.from_state(state, selection)


def to_state(thread: ChatThread, session: ConversationSession) -> ChatThreadState:
    return session.to_state(thread)


def save_session(store: ChatStore, thread: ChatThread, session: ConversationSession) -> ChatThreadState:
    state = to_state(thread, session)
    store.save_thread(state)
    return state
