"""
Embeddings Module - Single Responsibility: turn text into vectors.

The pipeline treats embedding as an opaque text -> vector function. This
module only adapts concrete providers to the EmbeddingProvider protocol;
it has no knowledge of documents or stores.
"""

import hashlib
import os
import re

import numpy as np
from openai import OpenAI

from blog_rag.core import EmbeddingProvider

# The blog corpus was embedded with ada-002; queries must use the same model.
DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"

_MODEL_DIMS = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbeddings:
    """
    OpenAI-based embedding provider.

    `timeout` is handed to the HTTP client; the retriever applies its own
    deadline on top of it.
    """

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ):
        self.model = model or os.environ.get("EMBEDDING_MODEL", DEFAULT_EMBEDDING_MODEL)
        self._client = OpenAI(
            api_key=api_key or os.environ.get("OPENAI_API_KEY"),
            timeout=timeout,
            max_retries=0,
        )

    @property
    def dimensions(self) -> int:
        """Return embedding dimensions for the model."""
        return _MODEL_DIMS.get(self.model, 1536)

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        response = self._client.embeddings.create(input=text, model=self.model)
        return np.array(response.data[0].embedding, dtype=np.float32)

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        if not texts:
            return []

        response = self._client.embeddings.create(input=texts, model=self.model)
        return [np.array(item.embedding, dtype=np.float32) for item in response.data]


_TOKEN_RE = re.compile(r"[a-z0-9]+")


class MockEmbeddings:
    """
    Offline embedding provider for tests and local development.

    Hashes lowercase word tokens into a fixed number of buckets and
    L2-normalises the counts, so texts sharing vocabulary land close
    together. Deterministic across runs and processes.
    NOT for production use.
    """

    def __init__(self, dimensions: int = 256):
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _bucket(self, token: str) -> int:
        digest = hashlib.sha256(token.encode()).digest()
        return int.from_bytes(digest[:4], "big") % self._dimensions

    def embed(self, text: str) -> np.ndarray:
        vector = np.zeros(self._dimensions, dtype=np.float32)
        for token in _TOKEN_RE.findall(text.lower()):
            vector[self._bucket(token)] += 1.0
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        return [self.embed(text) for text in texts]


def get_embedding_provider(use_mock: bool = False, timeout: float | None = None) -> EmbeddingProvider:
    """
    Factory function to get the appropriate embedding provider.

    Args:
        use_mock: If True, return MockEmbeddings (for testing)
        timeout: HTTP timeout for the OpenAI client
    """
    if use_mock:
        return MockEmbeddings()
    return OpenAIEmbeddings(timeout=timeout)
