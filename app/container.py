from __future__ import annotations

from dataclasses import dataclass
from os import getenv

from app.services.chat_history import ChatHistoryStore
from app.services.completion_client import CompletionClient
from app.services.reply_engine import SupportiveReplyEngine


@dataclass
class ServiceContainer:
    completion_client: CompletionClient
    reply_engine: SupportiveReplyEngine
    chat_history: ChatHistoryStore


def build_container() -> ServiceContainer:
    completion_client = CompletionClient(
        enabled=_parse_bool(getenv("TRANQUIL_AI_ENABLED"), default=False),
        base_url=getenv("TRANQUIL_COMPLETION_BASE_URL"),
        chat_path=getenv("TRANQUIL_COMPLETION_CHAT_PATH", "/v1/chat/completions"),
        model=getenv("TRANQUIL_COMPLETION_MODEL", "tngtech/deepseek-r1t2-chimera:free"),
        token=getenv("TRANQUIL_COMPLETION_TOKEN"),
        timeout_sec=_parse_float(getenv("TRANQUIL_COMPLETION_TIMEOUT_SEC"), default=25.0),
        max_tokens=_parse_int(getenv("TRANQUIL_COMPLETION_MAX_TOKENS"), default=200),
        temperature=_parse_float(getenv("TRANQUIL_COMPLETION_TEMPERATURE"), default=0.7),
    )
    return ServiceContainer(
        completion_client=completion_client,
        reply_engine=SupportiveReplyEngine(completion_client=completion_client),
        chat_history=ChatHistoryStore(
            storage_path=getenv("TRANQUIL_CHAT_HISTORY_FILE"),
            max_messages_per_user=_parse_int(
                getenv("TRANQUIL_CHAT_HISTORY_MAX_PER_USER"),
                default=500,
            ),
        ),
    )


def _parse_int(value: str | None, *, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str | None, *, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default
