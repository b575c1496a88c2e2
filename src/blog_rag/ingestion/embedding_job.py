"""
Batch embedding job.

Finds posts without an embedding, embeds a labelled rendering of each one
and writes it back. A failure on one post is logged and the job moves on;
the post stays keyword-only until the next run.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Protocol

from blog_rag.core import DocumentStore, EmbeddingProvider
from blog_rag.retrieval.document import Document

logger = logging.getLogger(__name__)

# Pause between provider calls to stay under embedding rate limits
DEFAULT_DELAY_S = 0.1


class EmbeddableStore(DocumentStore, Protocol):
    def documents_missing_embeddings(self) -> list[Document]: ...


def build_embedding_text(document: Document) -> str:
    """Labelled text that gets embedded; empty parts are skipped."""
    parts = [
        f"Title: {document.title}",
        f"Summary: {document.summary}" if document.summary else "",
        f"Topic: {document.topic}" if document.topic else "",
        f"Subtopics: {', '.join(document.secondary_topics)}" if document.secondary_topics else "",
        f"Tags: {', '.join(document.tags)}" if document.tags else "",
        f"Audience: {document.audience}" if document.audience else "",
        f"Prerequisites: {', '.join(document.prerequisites)}" if document.prerequisites else "",
        f"Value: {document.estimated_value}" if document.estimated_value else "",
        f"Content: {document.content}",
    ]
    return "\n\n".join(p for p in parts if p)


@dataclass
class EmbeddingJobReport:
    processed: int = 0
    succeeded: int = 0
    failed_ids: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failed_ids)


def generate_missing_embeddings(
    store: EmbeddableStore,
    embeddings: EmbeddingProvider,
    delay_s: float = DEFAULT_DELAY_S,
) -> EmbeddingJobReport:
    documents = store.documents_missing_embeddings()
    logger.info(f"Generating embeddings for {len(documents)} posts...")

    report = EmbeddingJobReport()
    for i, doc in enumerate(documents):
        if i and delay_s > 0:
            time.sleep(delay_s)
        report.processed += 1
        try:
            doc.embedding = embeddings.embed(build_embedding_text(doc))
            store.upsert(doc)
        except Exception as e:
            doc.embedding = None
            report.failed_ids.append(doc.id)
            logger.error(f"Error embedding {doc.slug}: {e}")
            continue
        report.succeeded += 1
        logger.info(f"Generated embedding for: {doc.title}")

    return report
