"""
Unit Tests for HybridRetriever

Tests concurrent vector + keyword retrieval against an in-memory store,
with fake embedders and stores to drive the failure paths.

STAFF ENGINEER PATTERNS:
------------------------
1. Deterministic embeddings keyed on query text
2. Fault injection through wrapped stores (errors, slow calls)
3. Verify the merge contract: unique ids, bounded size, vector score wins
"""

import asyncio
import time
from unittest.mock import MagicMock

import numpy as np
import pytest

from blog_rag.core import (
    KEYWORD_MATCH_SCORE,
    CandidateSource,
    EmbeddingDimensionMismatch,
    InvalidQuery,
    RetrievalConfig,
    RetrievalUnavailable,
    RetrievedCandidate,
)
from blog_rag.retrieval import (
    Document,
    DocumentStatus,
    HybridRetriever,
    InMemoryDocumentStore,
    PathStatus,
    merge_candidates,
)


# ---------------------------------------------------------------------------
# FIXTURES
# ---------------------------------------------------------------------------


def _vec(*values):
    return np.array(values, dtype=np.float32)


def _doc(doc_id, title, content, embedding=None, status=DocumentStatus.PUBLISHED):
    return Document(
        id=doc_id,
        slug=doc_id.replace("_", "-"),
        title=title,
        content=content,
        status=status,
        embedding=embedding,
    )


@pytest.fixture
def mock_embeddings():
    """Embeds any text mentioning 'hash' onto the first axis."""
    embeddings = MagicMock()
    embeddings.dimensions = 3

    def mock_embed(text):
        if "hash" in text.lower():
            return _vec(1.0, 0.0, 0.0)
        if "git" in text.lower():
            return _vec(0.0, 0.0, 1.0)
        return _vec(0.0, 1.0, 0.0)

    embeddings.embed.side_effect = mock_embed
    return embeddings


@pytest.fixture
def store():
    store = InMemoryDocumentStore(embedding_dim=3)
    store.upsert_many([
        _doc("post_hash_tables", "Hash Tables Explained", "A hash table maps keys to slots.",
             _vec(1.0, 0.0, 0.0)),
        _doc("post_big_o", "Big O", "Looking up a key in a hash table averages O(1).",
             _vec(0.6, -0.8, 0.0)),
        _doc("post_hashing_notes", "Hashing Notes", "Notes on hash functions.",
             _vec(0.9, 0.1, 0.0)),
        _doc("post_git", "Git Branching", "Trunk-based development.", _vec(0.0, 0.0, 1.0)),
        _doc("post_hash_draft", "Hash Maps (Draft)", "Unfinished hash table post.",
             _vec(1.0, 0.0, 0.0), status=DocumentStatus.DRAFT),
    ])
    return store


@pytest.fixture
def config():
    return RetrievalConfig(
        similarity_threshold=0.7,
        vector_limit=5,
        keyword_limit=3,
        top_k=5,
        embedding_timeout_s=1.0,
        vector_timeout_s=1.0,
        keyword_timeout_s=1.0,
    )


@pytest.fixture
def retriever(mock_embeddings, store, config):
    return HybridRetriever(mock_embeddings, store, config)


class FlakyStore:
    """Wraps a store and breaks selected operations."""

    def __init__(self, inner, fail_vector=False, fail_keyword=False, delay_vector=0.0, delay_keyword=0.0):
        self._inner = inner
        self.fail_vector = fail_vector
        self.fail_keyword = fail_keyword
        self.delay_vector = delay_vector
        self.delay_keyword = delay_keyword

    def vector_search(self, vector, threshold, limit):
        if self.delay_vector:
            time.sleep(self.delay_vector)
        if self.fail_vector:
            raise ConnectionError("vector index unavailable")
        return self._inner.vector_search(vector, threshold, limit)

    def keyword_search(self, pattern, filters, limit):
        if self.delay_keyword:
            time.sleep(self.delay_keyword)
        if self.fail_keyword:
            raise ConnectionError("database unavailable")
        return self._inner.keyword_search(pattern, filters, limit)

    def append_log(self, record):
        self._inner.append_log(record)

    def upsert(self, document):
        self._inner.upsert(document)


# ---------------------------------------------------------------------------
# MERGE POLICY
# ---------------------------------------------------------------------------


class TestMergeCandidates:
    """Test the pure merge function."""

    def _candidate(self, doc_id, score, source):
        return RetrievedCandidate(_doc(doc_id, doc_id, ""), score, source)

    def test_vector_score_wins_on_conflict(self):
        vector = [self._candidate("a", 0.9, CandidateSource.VECTOR)]
        keyword = [self._candidate("a", KEYWORD_MATCH_SCORE, CandidateSource.KEYWORD)]

        merged = merge_candidates(vector, keyword, top_k=5)

        assert len(merged) == 1
        assert merged[0].relevance_score == 0.9
        assert merged[0].source == CandidateSource.VECTOR

    def test_keyword_hits_follow_vector_hits(self):
        vector = [self._candidate("a", 0.9, CandidateSource.VECTOR)]
        keyword = [
            self._candidate("b", KEYWORD_MATCH_SCORE, CandidateSource.KEYWORD),
            self._candidate("c", KEYWORD_MATCH_SCORE, CandidateSource.KEYWORD),
        ]

        merged = merge_candidates(vector, keyword, top_k=5)

        assert [c.id for c in merged] == ["a", "b", "c"]

    def test_truncates_to_top_k(self):
        keyword = [self._candidate(str(i), KEYWORD_MATCH_SCORE, CandidateSource.KEYWORD) for i in range(6)]

        assert len(merge_candidates([], keyword, top_k=2)) == 2


# ---------------------------------------------------------------------------
# NORMAL OPERATION
# ---------------------------------------------------------------------------


class TestRetrieve:
    """Test both paths healthy."""

    def test_vector_hit_ranks_first_with_score(self, retriever):
        candidates = retriever.retrieve("what is a hash table")

        first = candidates[0]
        assert first.id == "post_hash_tables"
        assert first.source == CandidateSource.VECTOR
        assert first.relevance_score >= 0.7

    def test_ids_unique_and_bounded(self, retriever):
        candidates = retriever.retrieve("hash table", top_k=3)

        ids = [c.id for c in candidates]
        assert len(ids) <= 3
        assert len(ids) == len(set(ids))

    def test_document_in_both_paths_keeps_vector_score(self, retriever):
        candidates = retriever.retrieve("hash table")

        by_id = {c.id: c for c in candidates}
        assert by_id["post_hash_tables"].source == CandidateSource.VECTOR
        assert by_id["post_hash_tables"].relevance_score == pytest.approx(1.0)

    def test_keyword_only_hit_scores_zero(self, retriever):
        # post_big_o is below the similarity threshold but matches the text
        candidates = retriever.retrieve("hash table")

        by_id = {c.id: c for c in candidates}
        assert by_id["post_big_o"].source == CandidateSource.KEYWORD
        assert by_id["post_big_o"].relevance_score == KEYWORD_MATCH_SCORE

    def test_vector_hits_sorted_by_score(self, retriever):
        candidates = retriever.retrieve("hash")

        vector_scores = [c.relevance_score for c in candidates if c.source == CandidateSource.VECTOR]
        assert vector_scores == sorted(vector_scores, reverse=True)

    def test_drafts_never_returned(self, retriever):
        candidates = retriever.retrieve("hash table")

        assert all(c.document.is_published for c in candidates)
        assert "post_hash_draft" not in [c.id for c in candidates]

    def test_unpublished_hits_from_store_are_dropped(self, mock_embeddings, config):
        draft = _doc("leaky", "Hash", "hash", _vec(1.0, 0.0, 0.0), status=DocumentStatus.DRAFT)
        leaky = MagicMock()
        leaky.vector_search.return_value = [(draft, 0.99)]
        leaky.keyword_search.return_value = [draft]

        retriever = HybridRetriever(mock_embeddings, leaky, config)

        assert retriever.retrieve("hash") == []

    def test_no_match_is_empty_not_error(self, retriever):
        outcome = asyncio.run(retriever.aretrieve("quantum computing"))

        assert outcome.is_empty
        assert not outcome.degraded
        assert outcome.keyword_status == PathStatus.EMPTY

    def test_keyword_search_receives_published_filter(self, mock_embeddings, config):
        store = MagicMock()
        store.vector_search.return_value = []
        store.keyword_search.return_value = []

        HybridRetriever(mock_embeddings, store, config).retrieve("git", top_k=2)

        store.keyword_search.assert_called_once_with("git", {"status": "published"}, 3)
        store.vector_search.assert_called_once()
        _, threshold, limit = store.vector_search.call_args[0]
        assert threshold == 0.7
        assert limit == 5

    def test_query_is_stripped(self, mock_embeddings, config):
        store = MagicMock()
        store.vector_search.return_value = []
        store.keyword_search.return_value = []

        HybridRetriever(mock_embeddings, store, config).retrieve("  git  ")

        assert store.keyword_search.call_args[0][0] == "git"


# ---------------------------------------------------------------------------
# VALIDATION
# ---------------------------------------------------------------------------


class TestValidation:
    """Test caller errors."""

    @pytest.mark.parametrize("query", ["", "   ", "\n\t"])
    def test_blank_query_rejected(self, retriever, query):
        with pytest.raises(InvalidQuery):
            retriever.retrieve(query)

    def test_top_k_must_be_positive(self, retriever):
        with pytest.raises(InvalidQuery):
            retriever.retrieve("hash", top_k=0)

    def test_invalid_query_is_a_value_error(self, retriever):
        with pytest.raises(ValueError):
            retriever.retrieve("")


# ---------------------------------------------------------------------------
# DEGRADED MODE & FAILURES
# ---------------------------------------------------------------------------


class TestDegradedMode:
    """Test fallback to keyword-only and total failure."""

    def test_embedding_failure_falls_back_to_keyword(self, store, config):
        embeddings = MagicMock()
        embeddings.embed.side_effect = RuntimeError("embedding service down")
        retriever = HybridRetriever(embeddings, store, config)

        outcome = asyncio.run(retriever.aretrieve("hash table"))

        assert outcome.degraded
        assert outcome.vector_status == PathStatus.FAILED
        assert outcome.candidates
        assert all(c.source == CandidateSource.KEYWORD for c in outcome.candidates)
        assert all(c.relevance_score == KEYWORD_MATCH_SCORE for c in outcome.candidates)

    def test_vector_search_failure_falls_back_to_keyword(self, mock_embeddings, store, config):
        retriever = HybridRetriever(mock_embeddings, FlakyStore(store, fail_vector=True), config)

        candidates = retriever.retrieve("git")

        assert [c.id for c in candidates] == ["post_git"]
        assert candidates[0].source == CandidateSource.KEYWORD

    def test_degraded_mode_logs_warning(self, mock_embeddings, store, config, caplog):
        retriever = HybridRetriever(mock_embeddings, FlakyStore(store, fail_vector=True), config)

        with caplog.at_level("WARNING", logger="blog_rag.retrieval.hybrid"):
            retriever.retrieve("git")

        assert "Degraded retrieval" in caplog.text

    def test_keyword_failure_with_vector_success_still_answers(self, mock_embeddings, store, config):
        retriever = HybridRetriever(mock_embeddings, FlakyStore(store, fail_keyword=True), config)

        candidates = retriever.retrieve("hash")

        assert candidates
        assert all(c.source == CandidateSource.VECTOR for c in candidates)

    def test_both_paths_failing_raises(self, mock_embeddings, store, config):
        flaky = FlakyStore(store, fail_vector=True, fail_keyword=True)
        retriever = HybridRetriever(mock_embeddings, flaky, config)

        with pytest.raises(RetrievalUnavailable):
            retriever.retrieve("hash")

    def test_dimension_mismatch_is_fatal(self, store, config):
        embeddings = MagicMock()
        embeddings.embed.return_value = _vec(1.0, 0.0)
        retriever = HybridRetriever(embeddings, store, config)

        with pytest.raises(EmbeddingDimensionMismatch):
            retriever.retrieve("hash table")


class TestTimeouts:
    """Test per-call deadlines."""

    def test_slow_vector_search_times_out_to_keyword_only(self, mock_embeddings, store):
        config = RetrievalConfig(vector_timeout_s=0.05)
        flaky = FlakyStore(store, delay_vector=0.5)
        retriever = HybridRetriever(mock_embeddings, flaky, config)

        outcome = asyncio.run(retriever.aretrieve("git"))

        assert outcome.vector_status == PathStatus.TIMEOUT
        assert [c.id for c in outcome.candidates] == ["post_git"]

    def test_slow_embedding_times_out(self, store):
        embeddings = MagicMock()

        def slow_embed(text):
            time.sleep(0.5)
            return _vec(1.0, 0.0, 0.0)

        embeddings.embed.side_effect = slow_embed
        config = RetrievalConfig(embedding_timeout_s=0.05)

        outcome = asyncio.run(HybridRetriever(embeddings, store, config).aretrieve("git"))

        assert outcome.vector_status == PathStatus.TIMEOUT
        assert outcome.degraded

    def test_both_paths_timing_out_raises(self, mock_embeddings, store):
        config = RetrievalConfig(vector_timeout_s=0.05, keyword_timeout_s=0.05)
        flaky = FlakyStore(store, delay_vector=0.5, delay_keyword=0.5)
        retriever = HybridRetriever(mock_embeddings, flaky, config)

        with pytest.raises(RetrievalUnavailable):
            retriever.retrieve("git")


# ---------------------------------------------------------------------------
# LATENCY
# ---------------------------------------------------------------------------


class TestLatency:
    """Deadlines bound wall-clock time, not just the reported status."""

    def test_paths_overlap(self, mock_embeddings, store):
        config = RetrievalConfig(vector_timeout_s=2.0, keyword_timeout_s=2.0)
        flaky = FlakyStore(store, delay_vector=0.4, delay_keyword=0.4)
        retriever = HybridRetriever(mock_embeddings, flaky, config)

        start = time.perf_counter()
        outcome = asyncio.run(retriever.aretrieve("hash table"))
        elapsed = time.perf_counter() - start

        assert outcome.vector_status == PathStatus.OK
        assert outcome.keyword_status == PathStatus.OK
        assert elapsed < 0.7

    def test_blocking_retrieve_returns_at_deadline(self, store):
        embeddings = MagicMock()

        def hung_embed(text):
            time.sleep(3.0)
            return _vec(1.0, 0.0, 0.0)

        embeddings.embed.side_effect = hung_embed
        retriever = HybridRetriever(embeddings, store, RetrievalConfig(embedding_timeout_s=0.05))

        start = time.perf_counter()
        candidates = retriever.retrieve("hash table")
        elapsed = time.perf_counter() - start

        assert elapsed < 1.0
        assert "post_hash_tables" in [c.id for c in candidates]
        assert all(c.source == CandidateSource.KEYWORD for c in candidates)

    def test_dimension_mismatch_cancels_keyword_search(self, store, config):
        embeddings = MagicMock()
        embeddings.embed.return_value = _vec(1.0, 0.0)
        retriever = HybridRetriever(embeddings, FlakyStore(store, delay_keyword=0.3), config)

        async def scenario():
            start = time.perf_counter()
            with pytest.raises(EmbeddingDimensionMismatch):
                await retriever.aretrieve("hash table")
            elapsed = time.perf_counter() - start
            leftover = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
            return elapsed, leftover

        elapsed, leftover = asyncio.run(scenario())

        assert elapsed < 0.3
        assert leftover == []

    def test_close_stops_new_calls(self, mock_embeddings, store, config):
        retriever = HybridRetriever(mock_embeddings, store, config)
        retriever.close()

        with pytest.raises(RetrievalUnavailable):
            retriever.retrieve("hash table")
