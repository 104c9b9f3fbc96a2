"""Async HTTP client for the chats endpoints."""

from __future__ import annotations

import logging
from typing import List, Optional
from urllib.parse import quote

import httpx

from fc_store.types import ChatSummary

logger = logging.getLogger(__name__)


class ChatsClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout, transport=self._transport)

    async def list_chats(self) -> List[ChatSummary]:
        async with self._client() as client:
            response = await client.get("/api/chats")
            response.raise_for_status()
            data = response.json()
        chats = data.get("chats") if isinstance(data, dict) else None
        return [ChatSummary.model_validate(item) for item in chats or []]

    async def create_chat(self) -> str:
        async with self._client() as client:
            response = await client.post("/api/chats")
            response.raise_for_status()
            data = response.json()
        chat_id = data.get("id") if isinstance(data, dict) else None
        if not isinstance(chat_id, str) or not chat_id:
            raise RuntimeError("Create chat response missing id")
        return chat_id

    async def delete_chat(self, chat_id: str) -> None:
        """Delete a chat on the server. Deleting a missing chat succeeds."""
        if not chat_id or not chat_id.strip():
            raise ValueError("Missing chat id")
        async with self._client() as client:
            response = await client.delete(f"/api/chats/{quote(chat_id, safe='')}")
        if response.status_code == 404:
            logger.info("Chat %s not found on server, treating as deleted", chat_id)
            return
        response.raise_for_status()
