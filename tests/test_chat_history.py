from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from app.services.chat_history import ChatHistoryStore


def test_chat_history_in_memory_keeps_order() -> None:
    store = ChatHistoryStore()
    store.append(user_id="u_1", message="hi")
    store.append(user_id="u_1", message="Hello!", is_bot=True, category="greeting")
    store.append(user_id="u_2", message="other user")

    items = store.recent(user_id="u_1")

    assert [item.message for item in items] == ["hi", "Hello!"]
    assert items[1].is_bot is True
    assert store.snapshot()["persistent"] is False
    assert store.snapshot()["message_total"] == 3


def test_chat_history_caps_messages_per_user() -> None:
    store = ChatHistoryStore(max_messages_per_user=3)
    for idx in range(5):
        store.append(user_id="u_1", message=f"m{idx}")

    assert [item.message for item in store.recent(user_id="u_1")] == ["m2", "m3", "m4"]
    assert [item.message for item in store.recent(user_id="u_1", limit=1)] == ["m4"]


def test_chat_history_persists_and_reloads(tmp_path: Path) -> None:
    storage = tmp_path / "nested" / "history.json"
    store = ChatHistoryStore(storage_path=str(storage))
    store.append(user_id="u_1", message="I feel lonely", trace_id="trace_1")
    store.append(user_id="u_1", message="reply", is_bot=True, category="loneliness")

    payload = json.loads(storage.read_text(encoding="utf-8"))
    assert len(payload["messages"]["u_1"]) == 2

    reloaded = ChatHistoryStore(storage_path=str(storage))
    items = reloaded.recent(user_id="u_1")
    assert [item.message for item in items] == ["I feel lonely", "reply"]
    assert items[0].trace_id == "trace_1"
    assert items[1].category == "loneliness"
    assert items[0].created_at <= items[1].created_at


def test_chat_history_ignores_corrupt_file(tmp_path: Path) -> None:
    storage = tmp_path / "history.json"
    storage.write_text("{not json", encoding="utf-8")

    store = ChatHistoryStore(storage_path=str(storage))

    assert store.recent(user_id="u_1") == []


def test_chat_history_records_save_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    store = ChatHistoryStore(storage_path=str(tmp_path / "history.json"))

    def _broken_replace(src: str, dst: str) -> None:
        _ = (src, dst)
        raise OSError("disk full")

    monkeypatch.setattr("app.services.chat_history.os.replace", _broken_replace)
    item = store.append(user_id="u_1", message="still kept")

    assert item.message == "still kept"
    assert store.recent(user_id="u_1")[0].message == "still kept"
    snapshot = store.snapshot()
    assert snapshot["last_save_ok"] is False
    assert "disk full" in str(snapshot["last_save_error"])
    assert list(tmp_path.glob(".chat_history_*.tmp")) == []


def test_chat_history_concurrent_appends_and_snapshots() -> None:
    store = ChatHistoryStore(max_messages_per_user=1000)
    errors: list[BaseException] = []

    def _writer(worker: int) -> None:
        for idx in range(200):
            store.append(user_id=f"u_{worker}_{idx}", message="hi")

    def _reader() -> None:
        try:
            for _ in range(500):
                store.snapshot()
        except RuntimeError as exc:
            errors.append(exc)

    threads = [threading.Thread(target=_writer, args=(worker,)) for worker in range(4)]
    threads.append(threading.Thread(target=_reader))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert store.snapshot()["user_total"] == 800
    assert store.snapshot()["message_total"] == 800
