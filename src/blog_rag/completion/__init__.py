"""
Completion module - language model text generation.

Same shape as the embeddings module: Protocol in blog_rag.core,
OpenAICompletion for production, MockCompletion for tests, and a factory.
"""

from blog_rag.core import CompletionProvider
from blog_rag.completion.openai_completion import (
    DEFAULT_COMPLETION_MODEL,
    INSUFFICIENT_CONTEXT_ANSWER,
    OpenAICompletion,
    MockCompletion,
    get_completion_provider,
)

__all__ = [
    "CompletionProvider",
    "DEFAULT_COMPLETION_MODEL",
    "INSUFFICIENT_CONTEXT_ANSWER",
    "OpenAICompletion",
    "MockCompletion",
    "get_completion_provider",
]
