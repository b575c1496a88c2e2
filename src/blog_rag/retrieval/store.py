"""
Document store implementations.

Pattern: Protocol → Production impl → Test double → Factory

This module contains:
1. StoreConfig - Configuration dataclass
2. PgVectorStore - PostgreSQL with pgvector (production)
3. InMemoryDocumentStore - In-memory store (testing/development)
4. get_document_store() - Factory function

Both stores apply the `status = published` filter themselves; the hybrid
retriever checks it again because the two query paths do not share a
filtering contract.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np
import psycopg
from pgvector.psycopg import register_vector

from blog_rag.core import (
    DocumentStore,
    EmbeddingDimensionMismatch,
    InteractionRecord,
    LoggingFailure,
)
from blog_rag.retrieval.document import Document, DocumentStatus

# Columns a keyword filter may constrain.
FILTERABLE_FIELDS = ("status", "topic", "difficulty", "audience")


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@dataclass
class StoreConfig:
    """Configuration for the pgvector store."""

    connection_string: str = "postgresql://localhost/blog_rag"
    embedding_dim: int = 1536
    table_name: str = "blog_posts"
    log_table_name: str = "chat_interactions"


# ---------------------------------------------------------------------------
# HELPERS
# ---------------------------------------------------------------------------


def _check_dimensions(expected: int, vector: np.ndarray) -> None:
    actual = int(np.asarray(vector).shape[-1])
    if actual != expected:
        raise EmbeddingDimensionMismatch(expected=expected, actual=actual)


def _escape_like(pattern: str) -> str:
    """Escape LIKE wildcards so the query is matched literally."""
    return pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _validate_filters(filters: dict[str, str] | None) -> dict[str, str]:
    filters = dict(filters or {})
    unknown = set(filters) - set(FILTERABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unsupported keyword filter(s): {sorted(unknown)}")
    return filters


_DOCUMENT_COLUMNS = (
    "id", "slug", "title", "summary", "content", "topic", "secondary_topics",
    "tags", "difficulty", "audience", "prerequisites", "estimated_value",
    "status", "published_at", "word_count", "reading_time_minutes",
    "has_code_examples", "has_images", "has_external_links",
)


def _row_to_document(row: tuple, embedding: np.ndarray | None = None) -> Document:
    values = dict(zip(_DOCUMENT_COLUMNS, row))
    return Document(
        id=values["id"],
        slug=values["slug"],
        title=values["title"],
        summary=values["summary"],
        content=values["content"],
        topic=values["topic"],
        secondary_topics=list(values["secondary_topics"] or []),
        tags=list(values["tags"] or []),
        difficulty=values["difficulty"],
        audience=values["audience"],
        prerequisites=list(values["prerequisites"] or []),
        estimated_value=values["estimated_value"],
        status=DocumentStatus(values["status"]),
        published_at=values["published_at"],
        word_count=values["word_count"] or 0,
        reading_time_minutes=values["reading_time_minutes"] or 0,
        has_code_examples=bool(values["has_code_examples"]),
        has_images=bool(values["has_images"]),
        has_external_links=bool(values["has_external_links"]),
        embedding=embedding,
    )


# ---------------------------------------------------------------------------
# PGVECTOR STORE (Production)
# ---------------------------------------------------------------------------


class PgVectorStore:
    """
    PostgreSQL document store using pgvector.

    Nearest-neighbour search is delegated to pgvector's HNSW index over
    cosine distance; similarity is reported as `1 - distance`.
    """

    def __init__(self, config: StoreConfig):
        self.config = config
        self._conn = None

    def connect(self) -> None:
        """Establish database connection."""
        self._conn = psycopg.connect(self.config.connection_string, autocommit=True)
        self._conn.execute("CREATE EXTENSION IF NOT EXISTS vector")
        register_vector(self._conn)

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def _connection(self):
        if not self._conn:
            self.connect()
        return self._conn

    def create_schema(self) -> None:
        """Create the posts and interaction tables plus their indexes."""
        conn = self._connection()
        table = self.config.table_name

        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {table} (
                id TEXT PRIMARY KEY,
                slug TEXT NOT NULL UNIQUE,
                title TEXT NOT NULL,
                summary TEXT,
                content TEXT NOT NULL,
                topic TEXT,
                secondary_topics TEXT[],
                tags TEXT[],
                difficulty TEXT,
                audience TEXT,
                prerequisites TEXT[],
                estimated_value TEXT,
                status TEXT NOT NULL DEFAULT 'draft',
                published_at TIMESTAMPTZ,
                word_count INTEGER,
                reading_time_minutes INTEGER,
                has_code_examples BOOLEAN,
                has_images BOOLEAN,
                has_external_links BOOLEAN,
                embedding vector({self.config.embedding_dim})
            )
        """
        )

        conn.execute(
            f"""
            CREATE INDEX IF NOT EXISTS {table}_embedding_idx
            ON {table}
            USING hnsw (embedding vector_cosine_ops)
            WITH (m = 16, ef_construction = 64)
        """
        )

        conn.execute(
            f"""
            CREATE INDEX IF NOT EXISTS {table}_tags_idx
            ON {table}
            USING GIN (tags)
        """
        )

        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self.config.log_table_name} (
                id TEXT PRIMARY KEY,
                query TEXT NOT NULL,
                answer TEXT NOT NULL,
                source_ids TEXT[],
                conversation_id TEXT,
                created_at TIMESTAMPTZ NOT NULL
            )
        """
        )

    def upsert(self, document: Document) -> None:
        """Insert or replace a post by id. The embedding may be None."""
        if document.embedding is not None:
            _check_dimensions(self.config.embedding_dim, document.embedding)

        columns = _DOCUMENT_COLUMNS + ("embedding",)
        values = [
            document.id,
            document.slug,
            document.title,
            document.summary,
            document.content,
            document.topic,
            list(document.secondary_topics),
            list(document.tags),
            document.difficulty,
            document.audience,
            list(document.prerequisites),
            document.estimated_value,
            document.status.value,
            document.published_at,
            document.word_count,
            document.reading_time_minutes,
            document.has_code_examples,
            document.has_images,
            document.has_external_links,
            document.embedding,
        ]
        placeholders = ", ".join(["%s"] * len(columns))
        updates = ", ".join(f"{c} = EXCLUDED.{c}" for c in columns if c != "id")

        self._connection().execute(
            f"""
            INSERT INTO {self.config.table_name} ({", ".join(columns)})
            VALUES ({placeholders})
            ON CONFLICT (id) DO UPDATE SET {updates}
            """,
            values,
        )

    def vector_search(
        self,
        vector: np.ndarray,
        threshold: float,
        limit: int,
    ) -> list[tuple[Document, float]]:
        """Published posts with cosine similarity >= threshold, best first."""
        _check_dimensions(self.config.embedding_dim, vector)

        rows = self._connection().execute(
            f"""
            SELECT {", ".join(_DOCUMENT_COLUMNS)},
                   1 - (embedding <=> %s) AS similarity
            FROM {self.config.table_name}
            WHERE status = 'published'
              AND embedding IS NOT NULL
              AND 1 - (embedding <=> %s) >= %s
            ORDER BY embedding <=> %s
            LIMIT %s
            """,
            (vector, vector, threshold, vector, limit),
        ).fetchall()

        return [(_row_to_document(row[:-1]), float(row[-1])) for row in rows]

    def keyword_search(
        self,
        pattern: str,
        filters: dict[str, str] | None,
        limit: int,
    ) -> list[Document]:
        """Case-insensitive substring on title/content, exact match on tags."""
        filters = _validate_filters(filters)
        like = f"%{_escape_like(pattern)}%"

        clauses = ["(title ILIKE %s ESCAPE '\\' OR content ILIKE %s ESCAPE '\\' OR %s = ANY(tags))"]
        params: list = [like, like, pattern]
        for name, value in filters.items():
            clauses.append(f"{name} = %s")
            params.append(value)
        params.append(limit)

        rows = self._connection().execute(
            f"""
            SELECT {", ".join(_DOCUMENT_COLUMNS)}
            FROM {self.config.table_name}
            WHERE {" AND ".join(clauses)}
            ORDER BY published_at DESC NULLS LAST, id
            LIMIT %s
            """,
            params,
        ).fetchall()

        return [_row_to_document(row) for row in rows]

    def documents_missing_embeddings(self) -> list[Document]:
        rows = self._connection().execute(
            f"""
            SELECT {", ".join(_DOCUMENT_COLUMNS)}
            FROM {self.config.table_name}
            WHERE embedding IS NULL
            ORDER BY id
            """
        ).fetchall()
        return [_row_to_document(row) for row in rows]

    def append_log(self, record: InteractionRecord) -> None:
        try:
            self._connection().execute(
                f"""
                INSERT INTO {self.config.log_table_name}
                    (id, query, answer, source_ids, conversation_id, created_at)
                VALUES (%s, %s, %s, %s, %s, %s)
                """,
                (
                    record.id,
                    record.query,
                    record.answer,
                    sorted(record.source_ids),
                    record.conversation_id,
                    record.timestamp,
                ),
            )
        except psycopg.Error as e:
            raise LoggingFailure(f"Could not write interaction {record.id}: {e}") from e


# ---------------------------------------------------------------------------
# IN-MEMORY STORE (Testing/Development)
# ---------------------------------------------------------------------------


class InMemoryDocumentStore:
    """
    In-memory document store for development/testing.

    Implements the same interface as PgVectorStore without Postgres.
    Uses brute-force cosine similarity for vector search.
    """

    def __init__(self, embedding_dim: int | None = None):
        self.embedding_dim = embedding_dim
        self._documents: dict[str, Document] = {}
        self._log: list[InteractionRecord] = []

    def __len__(self) -> int:
        return len(self._documents)

    def get(self, document_id: str) -> Document | None:
        return self._documents.get(document_id)

    def upsert(self, document: Document) -> None:
        if document.embedding is not None and self.embedding_dim is not None:
            _check_dimensions(self.embedding_dim, document.embedding)
        self._documents[document.id] = document

    def upsert_many(self, documents: list[Document]) -> None:
        for document in documents:
            self.upsert(document)

    @staticmethod
    def _cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
        denom = np.linalg.norm(a) * np.linalg.norm(b)
        if denom == 0:
            return 0.0
        return float(np.dot(a, b) / denom)

    def vector_search(
        self,
        vector: np.ndarray,
        threshold: float,
        limit: int,
    ) -> list[tuple[Document, float]]:
        query = np.asarray(vector, dtype=np.float32)
        if self.embedding_dim is not None:
            _check_dimensions(self.embedding_dim, query)

        scored = []
        for doc in self._documents.values():
            if not doc.is_published or doc.embedding is None:
                continue
            _check_dimensions(int(doc.embedding.shape[-1]), query)
            score = self._cosine_similarity(query, doc.embedding)
            if score >= threshold:
                scored.append((doc, score))

        scored.sort(key=lambda x: x[1], reverse=True)
        return scored[:limit]

    def keyword_search(
        self,
        pattern: str,
        filters: dict[str, str] | None,
        limit: int,
    ) -> list[Document]:
        filters = _validate_filters(filters)
        needle = pattern.lower()

        matches = []
        for doc in self._documents.values():
            if any(_field_value(doc, name) != value for name, value in filters.items()):
                continue
            if (
                needle in doc.title.lower()
                or needle in doc.content.lower()
                or pattern in doc.tags
            ):
                matches.append(doc)
            if len(matches) >= limit:
                break
        return matches

    def documents_missing_embeddings(self) -> list[Document]:
        return [doc for doc in self._documents.values() if doc.embedding is None]

    def published_documents(self) -> list[Document]:
        """Published posts, newest first (undated posts last)."""
        oldest = datetime.min.replace(tzinfo=timezone.utc)
        published = [doc for doc in self._documents.values() if doc.is_published]
        return sorted(
            published,
            key=lambda d: _as_aware(d.published_at) or oldest,
            reverse=True,
        )

    def append_log(self, record: InteractionRecord) -> None:
        self._log.append(record)

    @property
    def interactions(self) -> tuple[InteractionRecord, ...]:
        return tuple(self._log)


def _field_value(doc: Document, name: str) -> str | None:
    value = getattr(doc, name)
    if isinstance(value, DocumentStatus):
        return value.value
    return value


def _as_aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------------------------------------------------------------------
# FACTORY FUNCTION
# ---------------------------------------------------------------------------


def get_document_store(
    use_postgres: bool = False,
    config: StoreConfig | None = None,
) -> DocumentStore:
    """
    Factory function to get the appropriate document store.

    Args:
        use_postgres: Use PostgreSQL store (default: False for dev)
        config: Store configuration (DATABASE_URL is read when omitted)
    """
    if use_postgres:
        config = config or StoreConfig(
            connection_string=os.environ.get(
                "DATABASE_URL", "postgresql://localhost/blog_rag"
            )
        )
        return PgVectorStore(config)
    return InMemoryDocumentStore()
