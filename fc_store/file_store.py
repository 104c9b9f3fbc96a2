"""Directory-backed chat store: one ``{id}.json`` file per chat."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from fc_ai.serialization import load_messages

from .attachment_store import AttachmentStore, is_stored_attachment_url, path_to_stored_url, stored_url_to_path
from .sanitize import OMITTED_ATTACHMENT_URL, sanitize_messages
from .types import ChatSummary, ChatThread, ChatThreadState

logger = logging.getLogger(__name__)

MAX_TOOL_PAYLOAD_CHARS = 200_000
TOOL_PAYLOAD_REPLACEMENT = "[omitted for persistence]"
MAX_TITLE_LENGTH = 60
DEFAULT_TITLE = "New chat"

_CHAT_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_WHITESPACE_RE = re.compile(r"\s+")


def _generate_id() -> str:
    return uuid4().hex[:16]


def _field(message: Any, name: str) -> Any:
    if isinstance(message, dict):
        return message.get(name)
    return getattr(message, name, None)


def title_from_messages(messages: Sequence[Any]) -> str:
    for message in messages:
        if _field(message, "role") != "user":
            continue
        for part in _field(message, "parts") or []:
            if not isinstance(part, dict):
                continue
            if part.get("type") == "text":
                text = _WHITESPACE_RE.sub(" ", str(part.get("text", "")).strip())
                if text:
                    return f"{text[:MAX_TITLE_LENGTH]}…" if len(text) > MAX_TITLE_LENGTH else text
            if part.get("type") == "file":
                name = str(part.get("filename") or "").strip()
                return f"Attachment: {name}" if name else "Attachment"
    return DEFAULT_TITLE


class FileChatStore:
    def __init__(self, directory: str) -> None:
        self._dir = Path(directory)
        self._attachments = AttachmentStore(directory)

    @property
    def directory(self) -> str:
        return str(self._dir)

    def create_chat(self) -> str:
        chat_id = _generate_id()
        self._chat_file(chat_id).write_text("[]", encoding="utf-8")
        logger.info("Created chat %s", chat_id)
        return chat_id

    def load_chat(self, chat_id: str) -> List[Any]:
        path = self._chat_file(chat_id)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError) as exc:
            logger.warning("Could not read chat %s, starting fresh: %s", chat_id, exc)
            return []
        return load_messages(self._restore_attachments(raw))

    def save_chat(self, chat_id: str, messages: Sequence[Any]) -> None:
        sanitized = sanitize_messages(
            messages,
            file_placeholder=OMITTED_ATTACHMENT_URL,
            max_url_length=None,
            max_tool_payload_chars=MAX_TOOL_PAYLOAD_CHARS,
            tool_replacement=TOOL_PAYLOAD_REPLACEMENT,
            store_inline=lambda part: self._store_attachment(chat_id, part),
        )
        self._chat_file(chat_id).write_text(json.dumps(sanitized, indent=2), encoding="utf-8")

    def list_chats(self) -> List[ChatSummary]:
        if not self._dir.exists():
            return []
        summaries: List[ChatSummary] = []
        for path in self._dir.glob("*.json"):
            if not path.is_file():
                continue
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                modified = path.stat().st_mtime
            except (OSError, ValueError):
                continue
            if not isinstance(raw, list) or not raw:
                # Chats nobody has written to yet stay hidden.
                continue
            summaries.append(
                ChatSummary(
                    id=path.stem,
                    title=title_from_messages(raw),
                    updated_at=datetime.fromtimestamp(modified, timezone.utc).isoformat(),
                )
            )
        summaries.sort(key=lambda summary: summary.updated_at, reverse=True)
        return summaries

    def delete_chat(self, chat_id: str) -> bool:
        """Delete a chat. A chat that does not exist counts as already deleted."""
        path = self._chat_file(chat_id)
        self._attachments.delete(chat_id)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.info("Chat %s already deleted", chat_id)
            return False
        logger.info("Deleted chat %s", chat_id)
        return True

    def load_last_thread(self) -> Optional[ChatThreadState]:
        chats = self.list_chats()
        if not chats:
            return None
        latest = chats[0]
        thread = ChatThread(
            id=latest.id,
            title=latest.title,
            created_at=latest.updated_at,
            updated_at=latest.updated_at,
        )
        return ChatThreadState(thread=thread, messages=self.load_chat(latest.id))

    def save_thread(self, state: ChatThreadState) -> None:
        self.save_chat(state.thread.id, state.messages)

    def clear(self) -> None:
        if not self._dir.exists():
            return
        for path in self._dir.glob("*.json"):
            path.unlink(missing_ok=True)
        self._attachments.clear()

    def _chat_file(self, chat_id: str) -> Path:
        if not isinstance(chat_id, str) or not _CHAT_ID_RE.match(chat_id):
            raise ValueError(f"Invalid chat id: {chat_id!r}")
        self._dir.mkdir(parents=True, exist_ok=True)
        return self._dir / f"{chat_id}.json"

    def _store_attachment(self, chat_id: str, part: Dict[str, Any]) -> Optional[str]:
        filename = part.get("filename")
        media_type = part.get("mediaType")
        stored = self._attachments.save(
            chat_id,
            part["url"],
            filename if isinstance(filename, str) else None,
            media_type if isinstance(media_type, str) else None,
        )
        return path_to_stored_url(stored.path) if stored is not None else None

    def _restore_attachments(self, raw: Any) -> Any:
        if not isinstance(raw, list):
            return raw
        restored = []
        for item in raw:
            parts = item.get("parts") if isinstance(item, dict) else None
            if isinstance(parts, list):
                item = {**item, "parts": [self._restore_file_part(part) for part in parts]}
            restored.append(item)
        return restored

    def _restore_file_part(self, part: Any) -> Any:
        if not isinstance(part, dict) or part.get("type") != "file":
            return part
        url = part.get("url")
        if not isinstance(url, str) or not is_stored_attachment_url(url):
            return part
        data_url = self._attachments.load(stored_url_to_path(url))
        if data_url is None:
            logger.warning("Attachment %s is missing, marking it omitted", url)
        return {**part, "url": data_url or OMITTED_ATTACHMENT_URL}
