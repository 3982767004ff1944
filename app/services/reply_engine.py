from __future__ import annotations

import logging

from app.intelligence.models import ReplyCategory, ReplyResult, ReplySource
from app.intelligence.reply_templates import CRISIS_REPLY
from app.intelligence.triage import match_rule, normalize_utterance
from app.services.completion_client import CompletionClient, CompletionResult

logger = logging.getLogger(__name__)


class SupportiveReplyEngine:
    """
    Produce one supportive reply per utterance.

    One completion attempt when a client is configured; any failure falls back to
    the deterministic triage table. A crisis reply always carries the emergency
    resources, even when the text comes from the model. Never raises and keeps no
    per-call state.
    """

    def __init__(self, *, completion_client: CompletionClient | None = None) -> None:
        self._completion_client = completion_client

    @property
    def ai_enabled(self) -> bool:
        return self._completion_client is not None and self._completion_client.enabled

    async def generate_reply(self, utterance: str) -> ReplyResult:
        normalized = normalize_utterance(utterance)
        rule = match_rule(normalized)
        ai_error: str | None = None

        if self._completion_client is not None and self._completion_client.enabled:
            try:
                result = await self._completion_client.complete(utterance)
            except Exception as exc:  # pragma: no cover
                logger.exception("reply_ai_unexpected_error err=%s", exc)
                result = CompletionResult(ok=False, error="completion_unexpected_error")
            if result.ok and result.content:
                reply = result.content
                if rule.category is ReplyCategory.CRISIS:
                    # Emergency resources are never left to the model.
                    reply = f"{reply}\n\n{CRISIS_REPLY}"
                return ReplyResult(
                    reply=reply,
                    category=rule.category,
                    source=ReplySource.AI,
                )
            ai_error = result.error or "completion_failed"
            logger.info(
                "reply_fallback reason=%s category=%s",
                ai_error,
                rule.category,
            )

        return ReplyResult(
            reply=rule.template(normalized),
            category=rule.category,
            source=ReplySource.FALLBACK,
            ai_error=ai_error,
        )
