"""
Core protocols defining contracts for the retrieval-and-grounding pipeline.

Every external collaborator (embeddings, completion, document store) is
described here as a Protocol. Concrete implementations live in their own
packages and are INJECTED into the retriever, assembler and recorder.

PATTERN:
- Protocol defines the contract
- Production implementation (OpenAI, pgvector)
- Test double (mock / in-memory)
- Factory function for instantiation

The per-query value types (RetrievedCandidate, Citation) and the persisted
InteractionRecord are defined alongside the protocols that produce them.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from blog_rag.retrieval.document import Document


# ---------------------------------------------------------------------------
# EMBEDDING PROVIDER PROTOCOL
# ---------------------------------------------------------------------------

@runtime_checkable
class EmbeddingProvider(Protocol):
    """
    Contract for embedding generation.

    Implementations:
    - OpenAIEmbeddings (production)
    - MockEmbeddings (testing)
    """

    @property
    def dimensions(self) -> int:
        """Output dimensionality of every vector this provider returns."""
        ...

    def embed(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        ...

    def embed_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate embeddings for multiple texts."""
        ...


# ---------------------------------------------------------------------------
# COMPLETION PROVIDER PROTOCOL
# ---------------------------------------------------------------------------

@runtime_checkable
class CompletionProvider(Protocol):
    """
    Contract for text generation.

    Implementations:
    - OpenAICompletion (production)
    - MockCompletion (testing)
    """

    def complete(self, prompt: str) -> str:
        """Generate an answer for a fully assembled prompt."""
        ...


# ---------------------------------------------------------------------------
# RETRIEVAL VALUE TYPES
# ---------------------------------------------------------------------------

class CandidateSource(str, Enum):
    """Which search path produced a candidate."""
    VECTOR = "vector"
    KEYWORD = "keyword"


# Keyword hits carry no similarity; they rank below every vector hit.
KEYWORD_MATCH_SCORE = 0.0


@dataclass(frozen=True)
class RetrievedCandidate:
    """A document surfaced for one query. Never persisted."""
    document: Document
    relevance_score: float
    source: CandidateSource

    @property
    def id(self) -> str:
        return self.document.id


@dataclass(frozen=True)
class Citation:
    """Stable reference to a document used in the prompt context."""
    id: str
    title: str
    slug: str
    topic: str | None = None

    @classmethod
    def from_document(cls, document: Document) -> Citation:
        return cls(
            id=document.id,
            title=document.title,
            slug=document.slug,
            topic=document.topic,
        )

    def as_source(self) -> dict[str, Any]:
        """Shape exposed to API callers (no internal id)."""
        return {"title": self.title, "slug": self.slug, "topic": self.topic}


# ---------------------------------------------------------------------------
# INTERACTION RECORD
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class InteractionRecord:
    """
    One completed question/answer exchange.

    Append-only: records are created once by the InteractionRecorder and
    never updated. `id` is unique per record, so logging the same exchange
    twice yields two entries.
    """
    query: str
    answer: str
    source_ids: frozenset[str]
    conversation_id: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "answer": self.answer,
            "source_ids": sorted(self.source_ids),
            "conversation_id": self.conversation_id,
            "timestamp": self.timestamp.isoformat(),
        }


# ---------------------------------------------------------------------------
# DOCUMENT STORE PROTOCOL
# ---------------------------------------------------------------------------

@runtime_checkable
class DocumentStore(Protocol):
    """
    Contract for the persistence collaborator.

    Implementations:
    - PgVectorStore (production with PostgreSQL + pgvector)
    - InMemoryDocumentStore (testing/development)
    """

    def vector_search(
        self,
        vector: np.ndarray,
        threshold: float,
        limit: int,
    ) -> list[tuple[Document, float]]:
        """Nearest neighbours with similarity >= threshold, best first."""
        ...

    def keyword_search(
        self,
        pattern: str,
        filters: dict[str, str] | None,
        limit: int,
    ) -> list[Document]:
        """Substring match on title/content or exact tag match."""
        ...

    def append_log(self, record: InteractionRecord) -> None:
        """Append one interaction record."""
        ...

    def upsert(self, document: Document) -> None:
        """Insert or replace a document by id."""
        ...
