"""
Sample blog corpus.

A handful of posts in the same shape the content sync produces, used for
local development, the retrieval quality gate and end-to-end tests.
One post is a draft and must never be retrieved.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from blog_rag.retrieval.document import Document, DocumentStatus

if TYPE_CHECKING:
    from blog_rag.core import DocumentStore, EmbeddingProvider


def _date(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=timezone.utc)


def get_blog_documents() -> list[Document]:
    """Sample posts, without embeddings."""
    return [
        Document(
            id="post_hash_tables",
            slug="hash-tables-explained",
            title="Hash Tables Explained",
            summary="How hash tables turn keys into array slots and why lookups average O(1).",
            content="""A hash table stores key/value pairs in an array. A hash function maps each key
to an index, so finding a value means hashing the key and jumping straight to its slot.

Two keys can hash to the same index. This is a collision. Chaining keeps a small list
per slot; open addressing probes for the next free slot instead.

As the table fills up, collisions get more frequent. Most implementations resize once
the load factor passes roughly 0.7, rehashing every entry into a bigger array.

Python's dict and set are hash tables, which is why membership tests are fast.""",
            topic="data-structures",
            secondary_topics=["algorithms"],
            tags=["hash table", "data structures", "hashing"],
            difficulty="beginner",
            audience="self-taught developers",
            prerequisites=["arrays", "big o notation"],
            estimated_value="Understand the most used data structure in everyday code",
            status=DocumentStatus.PUBLISHED,
            published_at=_date(2024, 3, 14),
            word_count=112,
            reading_time_minutes=1,
        ),
        Document(
            id="post_big_o",
            slug="big-o-notation-without-the-math",
            title="Big O Notation Without the Math",
            summary="A practical way to reason about how code slows down as input grows.",
            content="""Big O describes how the work an algorithm does grows with the size of its input.
O(1) means constant time, O(n) grows linearly, O(n^2) grows with the square.

Nested loops over the same list are the classic O(n^2) pattern. Sorting is usually
O(n log n). Looking up a key in a hash table averages O(1).""",
            topic="algorithms",
            tags=["big o", "complexity", "performance"],
            difficulty="beginner",
            audience="self-taught developers",
            status=DocumentStatus.PUBLISHED,
            published_at=_date(2024, 2, 2),
            word_count=62,
            reading_time_minutes=1,
        ),
        Document(
            id="post_bst",
            slug="binary-search-trees",
            title="Binary Search Trees",
            summary="Ordered lookups, inserts and deletes in logarithmic time when balanced.",
            content="""A binary search tree keeps smaller keys in the left subtree and larger keys in the
right subtree. Searching walks down from the root, discarding half the tree at each step.

Unbalanced trees degrade into linked lists. Red-black and AVL trees rebalance on insert
to keep operations at O(log n).""",
            topic="data-structures",
            tags=["trees", "data structures", "binary search"],
            difficulty="intermediate",
            audience="self-taught developers",
            prerequisites=["recursion"],
            status=DocumentStatus.PUBLISHED,
            published_at=_date(2024, 4, 20),
            word_count=58,
            reading_time_minutes=1,
        ),
        Document(
            id="post_recursion",
            slug="understanding-recursion",
            title="Understanding Recursion",
            summary=None,
            content="""A recursive function solves a problem by calling itself on a smaller piece of it.
Every recursive function needs a base case that stops the calls.

Python limits recursion depth to about a thousand frames, so deep recursion is better
rewritten as a loop with an explicit stack.""",
            topic="fundamentals",
            tags=["recursion", "functions"],
            difficulty="beginner",
            status=DocumentStatus.PUBLISHED,
            published_at=_date(2023, 11, 5),
            word_count=54,
            reading_time_minutes=1,
        ),
        Document(
            id="post_git_branching",
            slug="git-branching-strategies",
            title="Git Branching Strategies",
            summary="Trunk-based development versus long-lived feature branches.",
            content="""Trunk-based development merges small changes into main several times a day.
Feature branches isolate larger work but drift from main the longer they live.

Whatever the strategy, keep branches short and rebase or merge from main often.""",
            topic="tooling",
            tags=["git", "workflow"],
            difficulty="intermediate",
            status=DocumentStatus.PUBLISHED,
            published_at=_date(2024, 5, 30),
            word_count=45,
            reading_time_minutes=1,
        ),
        Document(
            id="post_graphs_draft",
            slug="graph-algorithms",
            title="Graph Algorithms (Draft)",
            summary="Breadth-first and depth-first search.",
            content="""Notes for an upcoming post on graph traversal. Breadth-first search uses a queue,
depth-first search uses a stack. A hash table tracks visited nodes.""",
            topic="algorithms",
            tags=["graphs", "hash table"],
            difficulty="intermediate",
            status=DocumentStatus.DRAFT,
        ),
    ]


def seed_document_store(
    store: DocumentStore,
    embeddings: EmbeddingProvider | None = None,
) -> list[Document]:
    """
    Load the sample posts into a store.

    With an embedding provider, vectors are computed the same way the batch
    embedding job computes them; without one, posts stay keyword-only.
    """
    from blog_rag.ingestion.embedding_job import build_embedding_text

    documents = get_blog_documents()
    if embeddings is not None:
        vectors = embeddings.embed_batch([build_embedding_text(d) for d in documents])
        for doc, vector in zip(documents, vectors):
            doc.embedding = vector

    for doc in documents:
        store.upsert(doc)
    return documents
