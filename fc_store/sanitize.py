"""Shrink oversized message parts before they are written to disk."""

from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional, Sequence

from fc_ai.serialization import dump_message

LOCAL_OMITTED_FILE_URL = "local-storage://omitted"
OMITTED_ATTACHMENT_URL = "stored://omitted"

_TOOL_PAYLOAD_KEYS = ("input", "output", "errorText")


def _safe_json_length(value: Any) -> Optional[int]:
    if isinstance(value, str):
        return len(value)
    try:
        return len(json.dumps(value))
    except (TypeError, ValueError):
        return None


def is_tool_part(part: Dict[str, Any]) -> bool:
    part_type = part.get("type")
    return isinstance(part_type, str) and (part_type == "dynamic-tool" or part_type.startswith("tool-"))


StoreInline = Callable[[Dict[str, Any]], Optional[str]]


def _sanitize_file_part(
    part: Dict[str, Any],
    placeholder: str,
    max_url_length: Optional[int],
    store_inline: Optional[StoreInline] = None,
) -> Dict[str, Any]:
    url = part.get("url")
    url = url if isinstance(url, str) else ""
    if store_inline is not None and url.startswith("data:"):
        return {**part, "url": store_inline(part) or placeholder}
    if url.startswith(("data:", LOCAL_OMITTED_FILE_URL)) or (max_url_length is not None and len(url) > max_url_length):
        return {**part, "url": placeholder}
    return part


def _sanitize_tool_part(part: Dict[str, Any], max_payload_chars: int, replacement: str) -> Dict[str, Any]:
    sanitized = dict(part)
    for key in _TOOL_PAYLOAD_KEYS:
        if key not in sanitized:
            continue
        length = _safe_json_length(sanitized[key])
        if length is not None and length > max_payload_chars:
            sanitized[key] = replacement
    return sanitized


def sanitize_messages(
    messages: Sequence[Any],
    *,
    file_placeholder: str,
    max_url_length: Optional[int],
    max_tool_payload_chars: int,
    tool_replacement: str,
    drop_files: bool = False,
    store_inline: Optional[StoreInline] = None,
) -> List[Dict[str, Any]]:
    """Return plain-dict copies of ``messages`` with heavy parts replaced.

    File parts carrying inline data (or URLs over ``max_url_length``) get
    ``file_placeholder`` as their URL. Tool payloads over
    ``max_tool_payload_chars`` serialized characters become ``tool_replacement``.
    When ``store_inline`` is given it is called for each inline file part and
    the URL it returns replaces the data URL; ``None`` means the placeholder.
    Metadata is left untouched.
    """
    sanitized: List[Dict[str, Any]] = []
    for message in messages:
        data = dump_message(message)
        parts = data.get("parts")
        if isinstance(parts, list):
            next_parts = []
            for part in parts:
                if not isinstance(part, dict):
                    next_parts.append(part)
                elif part.get("type") == "file":
                    if drop_files:
                        continue
                    next_parts.append(_sanitize_file_part(part, file_placeholder, max_url_length, store_inline))
                elif is_tool_part(part):
                    next_parts.append(_sanitize_tool_part(part, max_tool_payload_chars, tool_replacement))
                else:
                    next_parts.append(part)
            data["parts"] = next_parts
        sanitized.append(data)
    return sanitized
