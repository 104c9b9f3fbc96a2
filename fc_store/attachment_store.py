"""Binary attachments kept beside the chat files.

Inline ``data:`` file parts are decoded and written to
``<root>/attachments/<chat_id>/<sha256[:16]>.<ext>``. The chat JSON keeps a
``stored://attachments/...`` reference, which is turned back into a data URL
on load.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional

logger = logging.getLogger(__name__)

ATTACHMENTS_DIRNAME = "attachments"
STORED_URL_PREFIX = "stored://"
DEFAULT_MEDIA_TYPE = "application/octet-stream"

_EXTENSION_BY_MEDIA_TYPE = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/gif": "gif",
    "image/webp": "webp",
    "application/pdf": "pdf",
    "text/plain": "txt",
    "text/html": "html",
    "text/markdown": "md",
    "application/json": "json",
}

_MEDIA_TYPE_BY_EXTENSION = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "pdf": "application/pdf",
    "txt": "text/plain",
    "html": "text/html",
    "md": "text/markdown",
    "json": "application/json",
}


@dataclass(frozen=True)
class StoredAttachment:
    path: str
    filename: str
    media_type: str
    size: int


def is_stored_attachment_url(url: str) -> bool:
    return url.startswith(f"{STORED_URL_PREFIX}{ATTACHMENTS_DIRNAME}/")


def stored_url_to_path(url: str) -> str:
    return url[len(STORED_URL_PREFIX) :] if url.startswith(STORED_URL_PREFIX) else url


def path_to_stored_url(path: str) -> str:
    return f"{STORED_URL_PREFIX}{path}"


def file_extension(filename: Optional[str], media_type: Optional[str]) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[1] or "bin"
    if media_type:
        return _EXTENSION_BY_MEDIA_TYPE.get(media_type, "bin")
    return "bin"


def decode_data_url(data_url: str) -> Optional[bytes]:
    """Decode a base64 ``data:`` URL. Anything else gives ``None``."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or "base64" not in header or not payload:
        return None
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        logger.warning("Could not decode data URL: %s", exc)
        return None


class AttachmentStore:
    def __init__(self, root: str) -> None:
        self._root = Path(root)

    @property
    def directory(self) -> Path:
        return self._root / ATTACHMENTS_DIRNAME

    def save(
        self,
        chat_id: str,
        data_url: str,
        filename: Optional[str] = None,
        media_type: Optional[str] = None,
    ) -> Optional[StoredAttachment]:
        """Write an inline attachment to disk, or return ``None`` if it cannot be stored."""
        if not data_url.startswith("data:"):
            return None
        data = decode_data_url(data_url)
        if data is None:
            return None

        digest = hashlib.sha256(data).hexdigest()[:16]
        stored_name = f"{digest}.{file_extension(filename, media_type)}"
        target_dir = self.directory / chat_id
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / stored_name).write_bytes(data)
        except OSError as exc:
            logger.warning("Could not save attachment %s for chat %s: %s", filename, chat_id, exc)
            return None

        return StoredAttachment(
            path=str(PurePosixPath(ATTACHMENTS_DIRNAME, chat_id, stored_name)),
            filename=filename or stored_name,
            media_type=media_type or DEFAULT_MEDIA_TYPE,
            size=len(data),
        )

    def load(self, relative_path: str) -> Optional[str]:
        """Read a stored attachment back as a data URL. Missing files give ``None``."""
        path = self._resolve(relative_path)
        if path is None:
            return None
        try:
            data = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not load attachment %s: %s", relative_path, exc)
            return None
        media_type = _MEDIA_TYPE_BY_EXTENSION.get(path.suffix.lstrip(".").lower(), DEFAULT_MEDIA_TYPE)
        return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"

    def delete(self, chat_id: str) -> None:
        target_dir = self.directory / chat_id
        if not target_dir.exists():
            return
        shutil.rmtree(target_dir)
        logger.info("Deleted attachments for chat %s", chat_id)

    def clear(self) -> None:
        if self.directory.exists():
            shutil.rmtree(self.directory)

    def _resolve(self, relative_path: str) -> Optional[Path]:
        base = self.directory.resolve()
        path = (self._root / relative_path).resolve()
        if base not in path.parents:
            logger.warning("Ignoring attachment path outside %s: %s", base, relative_path)
            return None
        return path
