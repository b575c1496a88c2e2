"""
Request/response contracts for the chat endpoint.

These Pydantic models are the wire format. Validation of the incoming
message happens here, before anything reaches the pipeline.
"""

from pydantic import BaseModel, Field, field_validator

MAX_MESSAGE_CHARS = 2000


class ChatRequest(BaseModel):
    """A visitor's question."""

    message: str = Field(
        min_length=1,
        max_length=MAX_MESSAGE_CHARS,
        description="The question to answer from the blog",
    )

    conversation_id: str | None = Field(
        default=None,
        max_length=200,
        description="Optional key grouping questions from one chat session",
    )

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value


class SourceModel(BaseModel):
    """A post the answer was grounded on."""

    title: str
    slug: str
    topic: str | None = None


class ChatResponse(BaseModel):
    response: str = Field(description="Generated answer")
    sources: list[SourceModel] = Field(
        default_factory=list,
        description="Posts supplied as context, in retrieval order",
    )


class ErrorResponse(BaseModel):
    """Generic failure body. Never contains internal error text."""

    error: str
