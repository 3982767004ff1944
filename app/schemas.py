from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    user_id: str | None = Field(default=None, min_length=1, max_length=64)
    message: str = Field(min_length=1, max_length=4000)

    @field_validator("message")
    @classmethod
    def _strip_message(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("message must not be blank")
        return stripped


class ChatResponse(BaseModel):
    reply: str
    category: str
    source: str
    trace_id: str
    model: str | None = None


class ChatHistoryItem(BaseModel):
    message: str
    is_bot: bool
    category: str | None = None
    created_at: str


class ChatHistoryResponse(BaseModel):
    user_id: str
    count: int
    messages: list[ChatHistoryItem] = Field(default_factory=list)
