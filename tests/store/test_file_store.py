import hashlib
import json
import os
import shutil
from pathlib import Path

import pytest

from fc_branching import get_parent_id
from fc_store import FileChatStore, title_from_messages
from fc_store.file_store import TOOL_PAYLOAD_REPLACEMENT
from fc_store.sanitize import OMITTED_ATTACHMENT_URL
from tests.store.helpers import assistant_msg, thread_state, user_msg


def test_create_chat_starts_empty(tmp_path: Path):
    store = FileChatStore(str(tmp_path / ".chats"))
    chat_id = store.create_chat()
    assert (tmp_path / ".chats" / f"{chat_id}.json").read_text(encoding="utf-8") == "[]"
    assert store.load_chat(chat_id) == []


def test_load_missing_or_corrupt_chat_returns_empty(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    assert store.load_chat("nope") == []
    (tmp_path / "broken.json").write_text("{", encoding="utf-8")
    assert store.load_chat("broken") == []


def test_save_and_load_round_trip(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    store.save_chat("c1", [user_msg("u1", "hello", parent_id=None), assistant_msg("a1", "hi", "u1")])

    loaded = store.load_chat("c1")
    assert [m.id for m in loaded] == ["u1", "a1"]
    assert get_parent_id(loaded[0]) is None
    assert get_parent_id(loaded[1]) == "u1"


def test_save_moves_inline_attachments_to_disk_and_trims_tool_output(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    message = {
        "id": "u1",
        "role": "user",
        "parts": [
            {"type": "file", "url": "data:image/png;base64,AAAA", "mediaType": "image/png"},
            {"type": "file", "url": "local-storage://omitted", "mediaType": "image/png"},
            {"type": "file", "url": "https://example.com/" + "x" * 1000, "mediaType": "image/png"},
            {"type": "dynamic-tool", "output": {"blob": "z" * 200_001}},
            {"type": "tool-getTime", "output": "12:00"},
        ],
    }
    store.save_chat("c1", [message])

    parts = json.loads((tmp_path / "c1.json").read_text(encoding="utf-8"))[0]["parts"]
    assert parts[0]["url"].startswith("stored://attachments/c1/")
    assert parts[0]["url"].endswith(".png")
    assert parts[1]["url"] == OMITTED_ATTACHMENT_URL
    assert parts[2]["url"].startswith("https://example.com/")
    assert parts[3]["output"] == TOOL_PAYLOAD_REPLACEMENT
    assert parts[4]["output"] == "12:00"


def _file_message(url: str, filename: str = "note.txt", media_type: str = "text/plain") -> dict:
    return {
        "id": "u1",
        "role": "user",
        "parts": [{"type": "file", "url": url, "mediaType": media_type, "filename": filename}],
    }


def test_attachments_round_trip_through_disk(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    store.save_chat("c1", [_file_message("data:text/plain;base64,aGVsbG8=")])

    stored_url = json.loads((tmp_path / "c1.json").read_text(encoding="utf-8"))[0]["parts"][0]["url"]
    digest = hashlib.sha256(b"hello").hexdigest()[:16]
    assert stored_url == f"stored://attachments/c1/{digest}.txt"
    assert (tmp_path / "attachments" / "c1" / f"{digest}.txt").read_bytes() == b"hello"

    part = store.load_chat("c1")[0].parts[0]
    assert part["url"] == "data:text/plain;base64,aGVsbG8="
    assert part["filename"] == "note.txt"

    # Saving the loaded messages again keeps the same reference.
    store.save_chat("c1", store.load_chat("c1"))
    assert json.loads((tmp_path / "c1.json").read_text(encoding="utf-8"))[0]["parts"][0]["url"] == stored_url


def test_missing_or_undecodable_attachments_become_omitted(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    store.save_chat("c1", [_file_message("data:text/plain;base64,aGVsbG8=")])
    shutil.rmtree(tmp_path / "attachments" / "c1")
    assert store.load_chat("c1")[0].parts[0]["url"] == OMITTED_ATTACHMENT_URL

    store.save_chat("c2", [_file_message("data:text/plain,not-base64")])
    assert store.load_chat("c2")[0].parts[0]["url"] == OMITTED_ATTACHMENT_URL


def test_stored_reference_outside_attachments_is_not_read(tmp_path: Path):
    (tmp_path / "secret.txt").write_text("secret", encoding="utf-8")
    (tmp_path / "c1.json").write_text(
        json.dumps([_file_message("stored://attachments/../secret.txt")]),
        encoding="utf-8",
    )
    store = FileChatStore(str(tmp_path))
    assert store.load_chat("c1")[0].parts[0]["url"] == OMITTED_ATTACHMENT_URL


def test_delete_chat_removes_its_attachments(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    store.save_chat("c1", [_file_message("data:image/png;base64,AAAA", "pic.png", "image/png")])
    store.save_chat("c2", [_file_message("data:text/plain;base64,aGVsbG8=")])
    assert (tmp_path / "attachments" / "c1").is_dir()

    assert store.delete_chat("c1") is True
    assert not (tmp_path / "attachments" / "c1").exists()
    assert (tmp_path / "attachments" / "c2").is_dir()

    store.clear()
    assert not (tmp_path / "attachments").exists()


def test_list_chats_hides_empty_and_sorts_newest_first(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    empty_id = store.create_chat()
    store.save_chat("older", [user_msg("u1", "first question")])
    store.save_chat("newer", [user_msg("u1", "second question")])
    os.utime(tmp_path / "older.json", (1_000_000, 1_000_000))
    os.utime(tmp_path / "newer.json", (2_000_000, 2_000_000))

    chats = store.list_chats()
    assert [chat.id for chat in chats] == ["newer", "older"]
    assert chats[0].title == "second question"
    assert empty_id not in [chat.id for chat in chats]


def test_list_chats_without_directory(tmp_path: Path):
    assert FileChatStore(str(tmp_path / "missing")).list_chats() == []


def test_delete_chat_is_idempotent(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    store.save_chat("c1", [user_msg("u1", "hello")])

    assert store.delete_chat("c1") is True
    assert not (tmp_path / "c1.json").exists()
    assert store.delete_chat("c1") is False
    assert store.delete_chat("never-existed") is False


@pytest.mark.parametrize("bad_id", ["", "../etc/passwd", "a/b", "with space"])
def test_invalid_chat_ids_are_rejected(tmp_path: Path, bad_id):
    store = FileChatStore(str(tmp_path))
    with pytest.raises(ValueError):
        store.delete_chat(bad_id)


def test_store_contract_uses_latest_chat(tmp_path: Path):
    store = FileChatStore(str(tmp_path))
    assert store.load_last_thread() is None

    store.save_thread(thread_state(user_msg("u1", "hello"), thread_id="c1"))
    state = store.load_last_thread()
    assert state is not None
    assert state.thread.id == "c1"
    assert state.thread.title == "hello"
    assert [m.id for m in state.messages] == ["u1"]

    store.clear()
    assert store.load_last_thread() is None


def test_title_from_messages():
    long_text = "word " * 30
    assert title_from_messages([]) == "New chat"
    assert title_from_messages([assistant_msg("a", "hi", "x")]) == "New chat"
    assert title_from_messages([user_msg("u", "  spaced \n  out  ")]) == "spaced out"
    clipped = title_from_messages([user_msg("u", long_text)])
    assert clipped.endswith("…")
    assert len(clipped) == 61
    files = [{"id": "u", "role": "user", "parts": [{"type": "file", "filename": "report.pdf"}]}]
    assert title_from_messages(files) == "Attachment: report.pdf"
    unnamed = [{"id": "u", "role": "user", "parts": [{"type": "file"}]}]
    assert title_from_messages(unnamed) == "Attachment"
