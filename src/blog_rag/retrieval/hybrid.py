"""
Hybrid retrieval: semantic vector search combined with keyword search.

The two paths run concurrently:

    embed(query) ──> store.vector_search ─┐
                                          ├──> merge ──> top_k
    store.keyword_search ─────────────────┘

Vector search is a quality enhancement. If the embedding call or the
vector query fails or times out, retrieval continues with keyword hits
only (degraded mode). Only when the keyword path fails as well does the
query fail with RetrievalUnavailable.

Merge policy: candidates are keyed by document id and inserted in
priority order, vector hits first. A document found by both paths keeps
its vector score; keyword-only hits are appended in store order.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

from blog_rag.core import (
    KEYWORD_MATCH_SCORE,
    CandidateSource,
    DocumentStore,
    EmbeddingDimensionMismatch,
    EmbeddingProvider,
    InvalidQuery,
    RetrievalConfig,
    RetrievalUnavailable,
    RetrievedCandidate,
    call_in_executor,
    make_executor,
    run_blocking,
)
from blog_rag.observability import (
    RETRIEVAL_THRESHOLD,
    RETRIEVAL_TOP_K,
    retrieval_attributes,
    traced,
)
from blog_rag.retrieval.document import DocumentStatus

logger = logging.getLogger(__name__)

PUBLISHED_ONLY = {"status": DocumentStatus.PUBLISHED.value}


class PathStatus(str, Enum):
    """How one search path ended for a query."""
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"
    TIMEOUT = "timeout"

    @property
    def succeeded(self) -> bool:
        return self in (PathStatus.OK, PathStatus.EMPTY)


@dataclass
class PathResult:
    status: PathStatus
    candidates: list[RetrievedCandidate] = field(default_factory=list)
    error: str | None = None


@dataclass
class RetrievalOutcome:
    """Merged candidates plus per-path diagnostics for one query."""
    candidates: list[RetrievedCandidate]
    vector_status: PathStatus
    keyword_status: PathStatus
    vector_count: int = 0
    keyword_count: int = 0

    @property
    def degraded(self) -> bool:
        """One path failed but the query still produced an answer set."""
        return not (self.vector_status.succeeded and self.keyword_status.succeeded)

    @property
    def is_empty(self) -> bool:
        return not self.candidates


def merge_candidates(
    vector: list[RetrievedCandidate],
    keyword: list[RetrievedCandidate],
    top_k: int,
) -> list[RetrievedCandidate]:
    """
    Deduplicate by document id, vector hits taking precedence.

    `vector` must already be ordered by descending similarity; `keyword`
    keeps the order the store returned it in.
    """
    merged: dict[str, RetrievedCandidate] = {}
    for candidate in vector:
        merged.setdefault(candidate.id, candidate)
    for candidate in keyword:
        merged.setdefault(candidate.id, candidate)
    return list(merged.values())[:top_k]


class HybridRetriever:
    """
    Retrieves published posts for a question.

    Dependencies are INJECTED so tests can pass fake collaborators.
    Holds no per-query state; one instance serves concurrent requests.
    """

    def __init__(
        self,
        embeddings: EmbeddingProvider,
        store: DocumentStore,
        config: RetrievalConfig | None = None,
        executor: ThreadPoolExecutor | None = None,
    ):
        self._embeddings = embeddings
        self._store = store
        self.config = config or RetrievalConfig()
        self._executor = executor or make_executor("retrieval")

    async def _call(self, fn: Callable[..., Any], *args: Any, timeout: float) -> Any:
        """Run a blocking collaborator call in a worker thread under a deadline."""
        return await call_in_executor(self._executor, fn, *args, timeout=timeout)

    def close(self) -> None:
        """Release worker threads without waiting for calls still in flight."""
        self._executor.shutdown(wait=False)

    def _validate(self, query: str, top_k: int | None) -> tuple[str, int]:
        if query is None or not query.strip():
            raise InvalidQuery("Query must be a non-empty string")
        top_k = self.config.top_k if top_k is None else top_k
        if top_k < 1:
            raise InvalidQuery(f"top_k must be >= 1, got {top_k}")
        return query.strip(), top_k

    async def _vector_path(self, query: str) -> PathResult:
        cfg = self.config
        try:
            vector = await self._call(
                self._embeddings.embed, query, timeout=cfg.embedding_timeout_s
            )
            hits = await self._call(
                self._store.vector_search,
                vector,
                cfg.similarity_threshold,
                cfg.vector_limit,
                timeout=cfg.vector_timeout_s,
            )
        except EmbeddingDimensionMismatch:
            raise
        except asyncio.TimeoutError:
            return PathResult(PathStatus.TIMEOUT, error="vector path timed out")
        except Exception as e:
            return PathResult(PathStatus.FAILED, error=f"{type(e).__name__}: {e}")

        published = [(doc, score) for doc, score in hits if doc.is_published]
        published.sort(key=lambda hit: hit[1], reverse=True)
        candidates = [
            RetrievedCandidate(document=doc, relevance_score=float(score), source=CandidateSource.VECTOR)
            for doc, score in published
        ]
        return PathResult(PathStatus.OK if candidates else PathStatus.EMPTY, candidates)

    async def _keyword_path(self, query: str) -> PathResult:
        cfg = self.config
        try:
            docs = await self._call(
                self._store.keyword_search,
                query,
                dict(PUBLISHED_ONLY),
                cfg.keyword_limit,
                timeout=cfg.keyword_timeout_s,
            )
        except asyncio.TimeoutError:
            return PathResult(PathStatus.TIMEOUT, error="keyword path timed out")
        except Exception as e:
            return PathResult(PathStatus.FAILED, error=f"{type(e).__name__}: {e}")

        candidates = [
            RetrievedCandidate(document=doc, relevance_score=KEYWORD_MATCH_SCORE, source=CandidateSource.KEYWORD)
            for doc in docs
            if doc.is_published
        ]
        return PathResult(PathStatus.OK if candidates else PathStatus.EMPTY, candidates)

    async def _run_paths(self, query: str) -> tuple[PathResult, PathResult]:
        """Both paths side by side; if one raises, the other is cancelled and reaped."""
        tasks = [
            asyncio.create_task(self._vector_path(query)),
            asyncio.create_task(self._keyword_path(query)),
        ]
        try:
            vector, keyword = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return vector, keyword

    async def aretrieve(self, query: str, top_k: int | None = None) -> RetrievalOutcome:
        """
        Run both search paths concurrently and merge them.

        Raises:
            InvalidQuery: blank query or top_k < 1
            RetrievalUnavailable: neither path succeeded
            EmbeddingDimensionMismatch: query vector does not fit the store
        """
        query, top_k = self._validate(query, top_k)

        with traced(
            "retrieval.hybrid",
            attributes={
                RETRIEVAL_TOP_K: top_k,
                RETRIEVAL_THRESHOLD: self.config.similarity_threshold,
            },
        ) as span:
            vector, keyword = await self._run_paths(query)

            if not vector.status.succeeded:
                logger.warning(
                    f"Degraded retrieval, continuing keyword-only: {vector.error}"
                )
            if not keyword.status.succeeded:
                logger.warning(f"Keyword search failed: {keyword.error}")
                if not vector.status.succeeded:
                    raise RetrievalUnavailable(
                        f"Both search paths failed (vector: {vector.error}; keyword: {keyword.error})"
                    )

            outcome = RetrievalOutcome(
                candidates=merge_candidates(vector.candidates, keyword.candidates, top_k),
                vector_status=vector.status,
                keyword_status=keyword.status,
                vector_count=len(vector.candidates),
                keyword_count=len(keyword.candidates),
            )
            span.set_attributes(retrieval_attributes(outcome))

        if outcome.is_empty:
            logger.info("No published posts matched the query")
        return outcome

    async def aretrieve_candidates(self, query: str, top_k: int | None = None) -> list[RetrievedCandidate]:
        outcome = await self.aretrieve(query, top_k)
        return outcome.candidates

    def retrieve(self, query: str, top_k: int | None = None) -> list[RetrievedCandidate]:
        """Blocking entry point. Must not be called from a running event loop."""
        return run_blocking(self.aretrieve_candidates(query, top_k))
