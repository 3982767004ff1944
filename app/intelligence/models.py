from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


class ReplyCategory(StrEnum):
    CRISIS = "crisis"
    HELP_REQUEST = "help_request"
    ANXIETY = "anxiety"
    DEPRESSION = "depression"
    STRESS = "stress"
    SLEEP = "sleep"
    RESOURCE_REQUEST = "resource_request"
    GREETING = "greeting"
    QUESTION = "question"
    GRATITUDE = "gratitude"
    IMPROVEMENT = "improvement"
    LONELINESS = "loneliness"
    ANGER = "anger"
    GENERAL = "general"


class ReplySource(StrEnum):
    AI = "ai"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class ReplyResult:
    reply: str
    category: ReplyCategory
    source: ReplySource
    ai_error: str | None = None


@dataclass
class ChatMessage:
    user_id: str
    message: str
    is_bot: bool = False
    category: str | None = None
    trace_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
