from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from collections import defaultdict, deque
from datetime import UTC, datetime
from typing import Any

from app.intelligence.models import ChatMessage

logger = logging.getLogger(__name__)


class ChatHistoryStore:
    """
    Per-user chat transcript.
    Kept in memory and, when a storage path is configured, mirrored to a JSON file
    with atomic replace. A failed save is recorded and logged, never raised.
    Safe to share between the event loop and threadpool handlers.
    """

    def __init__(
        self,
        *,
        storage_path: str | None = None,
        max_messages_per_user: int = 500,
    ) -> None:
        self._storage_path = (storage_path or "").strip() or None
        self._max_messages_per_user = max(int(max_messages_per_user), 1)
        self._messages: dict[str, deque[ChatMessage]] = defaultdict(self._new_queue)
        self._last_save_ok = True
        self._last_save_error: str | None = None
        self._lock = threading.RLock()
        if self._storage_path:
            self._load_from_disk()

    def append(
        self,
        *,
        user_id: str,
        message: str,
        is_bot: bool = False,
        category: str | None = None,
        trace_id: str | None = None,
    ) -> ChatMessage:
        item = ChatMessage(
            user_id=user_id,
            message=message,
            is_bot=is_bot,
            category=category,
            trace_id=trace_id,
        )
        with self._lock:
            self._messages[user_id].append(item)
            self._save_to_disk()
        return item

    def recent(self, *, user_id: str, limit: int = 50) -> list[ChatMessage]:
        capped = max(int(limit), 1)
        with self._lock:
            queue = self._messages.get(user_id)
            if not queue:
                return []
            return list(queue)[-capped:]

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {
                "user_total": len(self._messages),
                "message_total": sum(len(queue) for queue in self._messages.values()),
                "persistent": self._storage_path is not None,
                "last_save_ok": self._last_save_ok,
                "last_save_error": self._last_save_error,
            }

    def _new_queue(self) -> deque[ChatMessage]:
        return deque(maxlen=self._max_messages_per_user)

    def _load_from_disk(self) -> None:
        assert self._storage_path is not None
        if not os.path.exists(self._storage_path):
            return
        try:
            with open(self._storage_path, encoding="utf-8") as fh:
                payload: Any = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "chat_history_load_failed path=%s err=%s",
                self._storage_path,
                exc,
            )
            return
        if not isinstance(payload, dict):
            return

        for user_id, items in dict(payload.get("messages", {})).items():
            if not isinstance(items, list):
                continue
            queue = self._messages[str(user_id)]
            for item in items:
                if not isinstance(item, dict):
                    continue
                queue.append(
                    ChatMessage(
                        user_id=str(user_id),
                        message=str(item.get("message", "")),
                        is_bot=bool(item.get("is_bot", False)),
                        category=(
                            str(item.get("category"))
                            if item.get("category") is not None
                            else None
                        ),
                        trace_id=(
                            str(item.get("trace_id"))
                            if item.get("trace_id") is not None
                            else None
                        ),
                        created_at=_parse_datetime(item.get("created_at")),
                    )
                )

    def _save_to_disk(self) -> None:
        if not self._storage_path:
            return
        payload = {
            "messages": {
                user_id: [
                    {
                        "message": item.message,
                        "is_bot": item.is_bot,
                        "category": item.category,
                        "trace_id": item.trace_id,
                        "created_at": item.created_at.isoformat(),
                    }
                    for item in queue
                ]
                for user_id, queue in self._messages.items()
            }
        }
        directory = os.path.dirname(self._storage_path) or "."
        temp_path: str | None = None
        try:
            os.makedirs(directory, exist_ok=True)
            temp_fd, temp_path = tempfile.mkstemp(
                prefix=".chat_history_",
                suffix=".tmp",
                dir=directory,
                text=True,
            )
            with os.fdopen(temp_fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh, ensure_ascii=False, indent=2)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(temp_path, self._storage_path)
            self._last_save_ok = True
            self._last_save_error = None
        except OSError as exc:
            self._last_save_ok = False
            self._last_save_error = str(exc)
            logger.warning(
                "chat_history_atomic_write_failed path=%s err=%s",
                self._storage_path,
                exc,
            )
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                try:
                    os.remove(temp_path)
                except OSError:
                    pass


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    return datetime.now(UTC)
