"""JSON-over-stdin/stdout RPC bridge for forkchat."""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from fc_ai.serialization import dump_messages, to_jsonable
from fc_branching.merge import merge_messages_by_id
from fc_branching.metadata import message_id_of
from fc_branching.tree import derive_visible_path, get_siblings_for_message
from fc_store.file_store import FileChatStore
from fc_store.local_store import LocalFileStore
from fc_store.types import ChatThreadState

from .config import load_settings

logger = logging.getLogger(__name__)


@dataclass
class RpcContext:
    local_store: LocalFileStore
    file_store: FileChatStore


def _emit(obj: Any) -> None:
    sys.stdout.write(json.dumps(to_jsonable(obj)) + "\n")
    sys.stdout.flush()


def _success(command: str, request_id: Optional[str] = None, data: Optional[dict] = None) -> dict:
    payload = {"type": "response", "command": command, "success": True}
    if request_id:
        payload["id"] = request_id
    if data is not None:
        payload["data"] = data
    return payload


def _error(command: str, message: str, request_id: Optional[str] = None) -> dict:
    payload = {"type": "response", "command": command, "success": False, "error": message}
    if request_id:
        payload["id"] = request_id
    return payload


def _message_list(payload: Dict[str, Any], key: str) -> List[Any]:
    value = payload.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list of messages")
    return value


def _chat_id(payload: Dict[str, Any]) -> str:
    chat_id = payload.get("chat_id")
    if not isinstance(chat_id, str) or not chat_id.strip():
        raise ValueError("Missing chat_id")
    return chat_id


def _handle_get_visible_path(_ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    selection = payload.get("selection")
    if selection is not None and not isinstance(selection, dict):
        raise ValueError("'selection' must be an object")
    path = derive_visible_path(_message_list(payload, "messages"), selection)
    return {"messages": dump_messages(path)}


def _handle_get_siblings(_ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    messages = _message_list(payload, "messages")
    message_id = payload.get("message_id")
    message = next((m for m in messages if message_id_of(m) == message_id), None)
    if message is None:
        raise KeyError(f"Message not found: {message_id}")
    info = get_siblings_for_message(messages, message)
    return {"parent_key": info.parent_key, "siblings": dump_messages(info.siblings), "index": info.index}


def _handle_merge(_ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    merged = merge_messages_by_id(_message_list(payload, "base"), _message_list(payload, "incoming"))
    return {"messages": dump_messages(merged)}


def _handle_load_thread(ctx: RpcContext, _payload: Dict[str, Any]) -> dict:
    state = ctx.local_store.load_last_thread()
    return {"state": state.model_dump(by_alias=True) if state else None}


def _handle_save_thread(ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    ctx.local_store.save_thread(ChatThreadState.model_validate(payload.get("state")))
    return {}


def _handle_clear(ctx: RpcContext, _payload: Dict[str, Any]) -> dict:
    ctx.local_store.clear()
    return {}


def _handle_list_chats(ctx: RpcContext, _payload: Dict[str, Any]) -> dict:
    return {"chats": [summary.model_dump(by_alias=True) for summary in ctx.file_store.list_chats()]}


def _handle_create_chat(ctx: RpcContext, _payload: Dict[str, Any]) -> dict:
    return {"id": ctx.file_store.create_chat()}


def _handle_load_chat(ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    return {"messages": dump_messages(ctx.file_store.load_chat(_chat_id(payload)))}


def _handle_save_chat(ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    ctx.file_store.save_chat(_chat_id(payload), _message_list(payload, "messages"))
    return {}


def _handle_delete_chat(ctx: RpcContext, payload: Dict[str, Any]) -> dict:
    return {"deleted": ctx.file_store.delete_chat(_chat_id(payload))}


_HANDLERS: Dict[str, Callable[[RpcContext, Dict[str, Any]], dict]] = {
    "get_visible_path": _handle_get_visible_path,
    "get_siblings": _handle_get_siblings,
    "merge": _handle_merge,
    "load_thread": _handle_load_thread,
    "save_thread": _handle_save_thread,
    "clear": _handle_clear,
    "list_chats": _handle_list_chats,
    "create_chat": _handle_create_chat,
    "load_chat": _handle_load_chat,
    "save_chat": _handle_save_chat,
    "delete_chat": _handle_delete_chat,
}


def handle_request(ctx: RpcContext, data: Dict[str, Any]) -> dict:
    msg_type = data.get("type")
    request_id = data.get("id")
    handler = _HANDLERS.get(msg_type) if isinstance(msg_type, str) else None
    if handler is None:
        return _error(msg_type or "unknown", "Unknown message type", request_id)
    try:
        result = handler(ctx, data)
    except Exception as exc:
        logger.warning("RPC command %s failed: %s", msg_type, exc)
        return _error(msg_type, str(exc), request_id)
    return _success(msg_type, request_id, result)


def _read_lines(ctx: RpcContext) -> None:
    for line in sys.stdin:
        line = line.strip()
        if not line:
            continue
        try:
            data = json.loads(line)
        except ValueError as exc:
            _emit(_error("parse", f"Invalid JSON: {exc}"))
            continue
        if not isinstance(data, dict):
            _emit(_error("parse", "Request must be a JSON object"))
            continue
        _emit(handle_request(ctx, data))


def main() -> None:
    settings = load_settings()
    logging.basicConfig(stream=sys.stderr, level=settings.log_level)
    ctx = RpcContext(
        local_store=LocalFileStore(settings.store_path),
        file_store=FileChatStore(settings.data_dir),
    )
    _read_lines(ctx)


if __name__ == "__main__":
    main()
