"""Single-thread JSON file store.

Keeps exactly one thread (the last one opened) in a versioned file so the
format can be migrated later without breaking existing data. Writes never
raise: when a save fails the store retries with a smaller payload, and as a
last resort drops the stored thread.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from fc_ai.serialization import load_messages

from .sanitize import LOCAL_OMITTED_FILE_URL, sanitize_messages
from .types import ChatThread, ChatThreadState, now_iso

logger = logging.getLogger(__name__)

STORE_FILENAME = "chat.v1.json"
MAX_FILE_URL_LENGTH = 512
MAX_TOOL_PAYLOAD_CHARS = 50_000
MAX_FALLBACK_MESSAGES = 30
TOOL_PAYLOAD_REPLACEMENT = "[omitted for local storage]"


class LocalFileStore:
    def __init__(self, path: str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> str:
        return str(self._path)

    def load_last_thread(self) -> Optional[ChatThreadState]:
        if not self._path.exists():
            return None
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable chat store %s: %s", self._path, exc)
            return None
        if not isinstance(raw, dict):
            return None
        thread = raw.get("thread")
        messages = raw.get("messages")
        if not isinstance(thread, dict) or not isinstance(messages, list):
            return None
        try:
            return ChatThreadState(thread=ChatThread.model_validate(thread), messages=load_messages(messages))
        except ValidationError as exc:
            logger.warning("Ignoring malformed chat store %s: %s", self._path, exc)
            return None

    def save_thread(self, state: ChatThreadState) -> None:
        thread = self._touched_thread(state.thread)
        payload = {
            "thread": thread,
            "messages": sanitize_messages(
                state.messages,
                file_placeholder=LOCAL_OMITTED_FILE_URL,
                max_url_length=MAX_FILE_URL_LENGTH,
                max_tool_payload_chars=MAX_TOOL_PAYLOAD_CHARS,
                tool_replacement=TOOL_PAYLOAD_REPLACEMENT,
            ),
        }
        try:
            self._write(payload)
            return
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Failed to persist chat thread to %s: %s", self._path, exc)

        fallback = {
            "thread": thread,
            "messages": sanitize_messages(
                state.messages[-MAX_FALLBACK_MESSAGES:],
                file_placeholder=LOCAL_OMITTED_FILE_URL,
                max_url_length=MAX_FILE_URL_LENGTH,
                max_tool_payload_chars=MAX_TOOL_PAYLOAD_CHARS,
                tool_replacement=TOOL_PAYLOAD_REPLACEMENT,
                drop_files=True,
            ),
        }
        try:
            self._write(fallback)
            return
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("Fallback persistence also failed; clearing stored thread: %s", exc)

        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not clear chat store %s: %s", self._path, exc)

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def _touched_thread(self, thread: ChatThread) -> Dict[str, Any]:
        touched = thread.model_copy(update={"updated_at": now_iso()})
        return touched.model_dump(by_alias=True, exclude_none=True)

    def _write(self, payload: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload), encoding="utf-8")
