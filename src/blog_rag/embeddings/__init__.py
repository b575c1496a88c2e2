"""
Embeddings module - text embedding generation.

1. Protocol (EmbeddingProvider, in blog_rag.core) defines the interface
2. Production implementation (OpenAIEmbeddings)
3. Test double (MockEmbeddings) for fast offline runs
4. Factory function (get_embedding_provider)
"""

from blog_rag.core import EmbeddingProvider
from blog_rag.embeddings.openai_embeddings import (
    DEFAULT_EMBEDDING_MODEL,
    OpenAIEmbeddings,
    MockEmbeddings,
    get_embedding_provider,
)

__all__ = [
    "EmbeddingProvider",
    "DEFAULT_EMBEDDING_MODEL",
    "OpenAIEmbeddings",
    "MockEmbeddings",
    "get_embedding_provider",
]
