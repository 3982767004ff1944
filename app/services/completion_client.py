from __future__ import annotations

import logging
from dataclasses import dataclass
from time import monotonic
from typing import Any

import httpx

from app.intelligence.prompts import SUPPORT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionResult:
    ok: bool
    content: str | None = None
    error: str | None = None


class CompletionClient:
    """
    Chat-completion client for the supportive-reply engine.
    Talks to the trusted completion proxy; the upstream API key never lives here.
    """

    def __init__(
        self,
        *,
        enabled: bool,
        base_url: str | None = None,
        chat_path: str = "/v1/chat/completions",
        model: str = "tngtech/deepseek-r1t2-chimera:free",
        token: str | None = None,
        timeout_sec: float = 25.0,
        max_tokens: int = 200,
        temperature: float = 0.7,
        system_prompt: str = SUPPORT_SYSTEM_PROMPT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._enabled = enabled
        self._base_url = (base_url or "").strip()
        normalized_path = (chat_path or "").strip() or "/v1/chat/completions"
        if not normalized_path.startswith("/"):
            normalized_path = f"/{normalized_path}"
        self._chat_path = normalized_path
        self._model = model
        self._token = (token or "").strip() or None
        self._timeout_sec = max(float(timeout_sec), 0.5)
        self._max_tokens = max(int(max_tokens), 1)
        self._temperature = float(temperature)
        self._system_prompt = system_prompt
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return self._enabled and bool(self._base_url)

    @property
    def model(self) -> str:
        return self._model

    @property
    def endpoint(self) -> str:
        return self._base_url.rstrip("/") + self._chat_path

    def build_payload(self, text: str) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": self._system_prompt},
                {"role": "user", "content": text},
            ],
            "max_tokens": self._max_tokens,
            "temperature": self._temperature,
        }

    async def complete(self, text: str) -> CompletionResult:
        if not self.enabled:
            return CompletionResult(ok=False, error="disabled")

        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        started = monotonic()
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout_sec),
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self.endpoint,
                    json=self.build_payload(text),
                    headers=headers,
                )
        except httpx.TimeoutException:
            logger.warning(
                "completion_timeout endpoint=%s timeout_sec=%s",
                self.endpoint,
                self._timeout_sec,
            )
            return CompletionResult(ok=False, error="completion_timeout")
        except httpx.HTTPError as exc:
            logger.warning("completion_transport_error endpoint=%s err=%s", self.endpoint, exc)
            return CompletionResult(ok=False, error=f"completion_transport_error:{exc}")

        duration_ms = int((monotonic() - started) * 1000)
        logger.info(
            "completion_response status=%s duration_ms=%s model=%s",
            response.status_code,
            duration_ms,
            self._model,
        )
        if not response.is_success:
            return CompletionResult(
                ok=False,
                error=f"completion_http_status:{response.status_code}",
            )

        try:
            data: Any = response.json()
        except ValueError:
            return CompletionResult(ok=False, error="completion_invalid_json")
        if not isinstance(data, dict):
            return CompletionResult(ok=False, error="completion_invalid_response")

        content = extract_completion_content(data)
        if content is None:
            return CompletionResult(ok=False, error="completion_invalid_response")
        if not content:
            return CompletionResult(ok=False, error="completion_empty_content")
        return CompletionResult(ok=True, content=content)


def extract_completion_content(data: dict[str, Any]) -> str | None:
    """
    Return the trimmed content of the first choice, or None when the body has no
    usable message field. The legacy proxy shape ``{"reply": ...}`` is accepted too.
    """
    choices = data.get("choices")
    if isinstance(choices, list) and choices:
        first = choices[0]
        if not isinstance(first, dict):
            return None
        message = first.get("message")
        if not isinstance(message, dict):
            return None
        content = message.get("content")
        if not isinstance(content, str):
            return None
        return content.strip()
    reply = data.get("reply")
    if isinstance(reply, str):
        return reply.strip()
    return None
