from blog_rag.schemas.chat import (
    MAX_MESSAGE_CHARS,
    ChatRequest,
    ChatResponse,
    ErrorResponse,
    SourceModel,
)

__all__ = [
    "MAX_MESSAGE_CHARS",
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "SourceModel",
]
