from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from time import monotonic
from typing import Any, Literal

import httpx
from fastapi import FastAPI, Header, HTTPException, status
from pydantic import BaseModel, Field

from app.intelligence.prompts import SUPPORT_SYSTEM_PROMPT
from app.services.completion_client import extract_completion_content
from app.startup_self_check import run_proxy_self_check

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):  # type: ignore[no-untyped-def]
    _app.state.proxy_self_check = run_proxy_self_check(logger=logger)
    yield


app = FastAPI(title="TranquilMind Completion Proxy", version="0.1.0", lifespan=lifespan)

_DEFAULT_MODEL = "tngtech/deepseek-r1t2-chimera:free"
_DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
_DEFAULT_SITE_URL = "https://tranquilmind.app"
_APP_TITLE = "TranquilMind Chat Assistant"


class ProxyMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(min_length=1, max_length=8000)


class ProxyCompletionRequest(BaseModel):
    model: str | None = None
    messages: list[ProxyMessage] = Field(min_length=1, max_length=20)
    max_tokens: int = Field(default=200, ge=1, le=1024)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)


class BackendChatRequest(BaseModel):
    message: str = Field(min_length=1, max_length=8000)


class BackendChatResponse(BaseModel):
    reply: str


@app.get("/healthz")
def healthz() -> dict[str, object]:
    self_check = getattr(app.state, "proxy_self_check", None)
    issues = self_check.issues if self_check is not None else ["proxy_self_check_not_available"]
    return {
        "status": "degraded" if issues else "ok",
        "service": "tranquilmind-completion-proxy",
        "model": _model(),
        "api_key_configured": _api_key() is not None,
        "self_check_issues": issues,
    }


@app.post("/v1/chat/completions")
async def chat_completions(
    req: ProxyCompletionRequest,
    authorization: str | None = Header(default=None),
) -> dict[str, Any]:
    _verify_token(authorization=authorization)
    # Persona is pinned server-side; client system messages are dropped.
    conversation = [item.model_dump() for item in req.messages if item.role != "system"]
    if not any(item["role"] == "user" for item in conversation):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="at least one user message is required",
        )
    dropped = len(req.messages) - len(conversation)
    if dropped:
        logger.info("completion_proxy_system_messages_dropped count=%s", dropped)
    payload = {
        # Model is pinned server-side; the client value is ignored.
        "model": _model(),
        "messages": [{"role": "system", "content": SUPPORT_SYSTEM_PROMPT}, *conversation],
        "max_tokens": req.max_tokens,
        "temperature": req.temperature,
    }
    return await _forward_completion(payload=payload)


@app.post("/backend-chat", response_model=BackendChatResponse)
async def backend_chat(
    req: BackendChatRequest,
    authorization: str | None = Header(default=None),
) -> BackendChatResponse:
    _verify_token(authorization=authorization)
    message = req.message.strip()
    if not message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Missing or invalid "message" field',
        )
    logger.info("completion_proxy_backend_chat message_chars=%s", len(message))
    data = await _forward_completion(
        payload={
            "model": _model(),
            "messages": [
                {"role": "system", "content": SUPPORT_SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
            "max_tokens": 200,
            "temperature": 0.7,
        }
    )
    reply = extract_completion_content(data)
    if not reply:
        logger.error("completion_proxy_unexpected_format keys=%s", sorted(data))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected response format from OpenRouter",
        )
    return BackendChatResponse(reply=reply)


async def _forward_completion(*, payload: dict[str, Any]) -> dict[str, Any]:
    api_key = _api_key()
    if api_key is None:
        logger.error("completion_proxy_missing_api_key env=OPENROUTER_API_KEY")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="OpenRouter API key not configured",
        )

    url = _base_url().rstrip("/") + "/chat/completions"
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
        "X-Title": _APP_TITLE,
        "HTTP-Referer": _site_url(),
    }
    started = monotonic()
    try:
        async with _build_upstream_client() as client:
            response = await client.post(url, json=payload, headers=headers)
    except httpx.TimeoutException as exc:
        logger.error("completion_proxy_upstream_timeout timeout_sec=%s", _timeout_sec())
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="OpenRouter API request timeout",
        ) from exc
    except httpx.HTTPError as exc:
        logger.error("completion_proxy_upstream_error err=%s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error calling OpenRouter API",
        ) from exc

    duration_ms = int((monotonic() - started) * 1000)
    logger.info(
        "completion_proxy_upstream_response status=%s duration_ms=%s model=%s",
        response.status_code,
        duration_ms,
        payload.get("model"),
    )
    if not response.is_success:
        details = response.text[:500]
        logger.error(
            "completion_proxy_upstream_http_status status=%s hint=%s",
            response.status_code,
            _status_hint(response.status_code),
        )
        raise HTTPException(
            status_code=response.status_code,
            detail={
                "error": "OpenRouter API error",
                "status": response.status_code,
                "details": details,
            },
        )
    try:
        data: Any = response.json()
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error parsing OpenRouter response",
        ) from exc
    if not isinstance(data, dict):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unexpected response format from OpenRouter",
        )
    return data


def _build_upstream_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(_timeout_sec()))


def _verify_token(*, authorization: str | None) -> None:
    expected = _proxy_token()
    if not expected:
        return
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="missing bearer token",
        )
    provided = authorization.removeprefix("Bearer ").strip()
    if provided != expected:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid bearer token",
        )


def _status_hint(status_code: int) -> str:
    if status_code == 401:
        return "check_openrouter_api_key"
    if status_code == 402:
        return "check_openrouter_credits"
    if status_code == 429:
        return "rate_limited"
    return "none"


def _api_key() -> str | None:
    key = os.getenv("OPENROUTER_API_KEY", "").strip()
    return key or None


def _model() -> str:
    return os.getenv("OPENROUTER_MODEL", _DEFAULT_MODEL).strip() or _DEFAULT_MODEL


def _base_url() -> str:
    return os.getenv("OPENROUTER_BASE_URL", _DEFAULT_BASE_URL).strip() or _DEFAULT_BASE_URL


def _site_url() -> str:
    return os.getenv("SITE_URL", _DEFAULT_SITE_URL).strip() or _DEFAULT_SITE_URL


def _proxy_token() -> str | None:
    token = os.getenv("COMPLETION_PROXY_TOKEN", "").strip()
    return token or None


def _timeout_sec() -> float:
    raw = os.getenv("COMPLETION_PROXY_TIMEOUT_SEC", "25")
    try:
        return max(float(raw), 1.0)
    except ValueError:
        return 25.0
