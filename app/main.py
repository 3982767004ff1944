import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool

from app.container import build_container
from app.intelligence.models import ReplySource
from app.schemas import (
    ChatHistoryItem,
    ChatHistoryResponse,
    ChatRequest,
    ChatResponse,
)
from app.startup_self_check import run_startup_self_check

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):  # type: ignore[no-untyped-def]
    _app.state.startup_self_check = run_startup_self_check(logger=logger)
    _app.state.started_at = datetime.now(UTC).isoformat()
    yield


app = FastAPI(title="TranquilMind Backend", version="0.1.0", lifespan=lifespan)
app.state.container = build_container()


@app.middleware("http")
async def attach_trace_id(request: Request, call_next):  # type: ignore[no-untyped-def]
    trace_id = request.headers.get("x-trace-id") or str(uuid4())
    request.state.trace_id = trace_id
    response = await call_next(request)
    response.headers["x-trace-id"] = trace_id
    return response


@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"status": "ok", "service": "tranquilmind-backend"}


@app.get("/api/v1/ops/health")
def ops_health() -> dict[str, object]:
    startup = getattr(app.state, "startup_self_check", None)
    startup_payload = (
        {
            "ai_enabled": startup.ai_enabled,
            "completion_base_url_configured": startup.completion_base_url_configured,
            "completion_base_url_secure": startup.completion_base_url_secure,
            "chat_history_persistent": startup.chat_history_persistent,
            "issues": startup.issues,
        }
        if startup is not None
        else {
            "ai_enabled": False,
            "completion_base_url_configured": False,
            "completion_base_url_secure": True,
            "chat_history_persistent": False,
            "issues": ["startup_self_check_not_available"],
        }
    )
    container = app.state.container
    history_snapshot = container.chat_history.snapshot()
    degraded = bool(startup_payload["issues"]) or not bool(history_snapshot["last_save_ok"])
    return {
        "status": "degraded" if degraded else "ok",
        "service": "tranquilmind-backend",
        "timestamp": datetime.now(UTC).isoformat(),
        "started_at": getattr(app.state, "started_at", None),
        "startup_self_check": startup_payload,
        "reply_engine": {
            "ai_enabled": container.reply_engine.ai_enabled,
            "model": container.completion_client.model,
        },
        "chat_history": history_snapshot,
    }


@app.post("/api/v1/chat", response_model=ChatResponse)
async def chat(req: ChatRequest, request: Request) -> ChatResponse:
    trace_id = getattr(request.state, "trace_id", str(uuid4()))
    container = app.state.container
    logger.info(
        "chat_request trace_id=%s user_id=%s chars=%s",
        trace_id,
        req.user_id,
        len(req.message),
    )
    # History writes fsync the JSON mirror, so they stay off the event loop.
    if req.user_id:
        await run_in_threadpool(
            container.chat_history.append,
            user_id=req.user_id,
            message=req.message,
            trace_id=trace_id,
        )

    result = await container.reply_engine.generate_reply(req.message)
    logger.info(
        "chat_reply trace_id=%s category=%s source=%s ai_error=%s",
        trace_id,
        result.category,
        result.source,
        result.ai_error,
    )

    if req.user_id:
        await run_in_threadpool(
            container.chat_history.append,
            user_id=req.user_id,
            message=result.reply,
            is_bot=True,
            category=result.category.value,
            trace_id=trace_id,
        )
    return ChatResponse(
        reply=result.reply,
        category=result.category.value,
        source=result.source.value,
        trace_id=trace_id,
        model=container.completion_client.model if result.source == ReplySource.AI else None,
    )


@app.get("/api/v1/chat/history/{user_id}", response_model=ChatHistoryResponse)
def chat_history(user_id: str, limit: int = 50) -> ChatHistoryResponse:
    messages = app.state.container.chat_history.recent(
        user_id=user_id,
        limit=max(1, min(limit, 200)),
    )
    return ChatHistoryResponse(
        user_id=user_id,
        count=len(messages),
        messages=[
            ChatHistoryItem(
                message=item.message,
                is_bot=item.is_bot,
                category=item.category,
                created_at=item.created_at.isoformat(),
            )
            for item in messages
        ],
    )
