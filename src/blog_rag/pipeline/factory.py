"""
Wiring: build an AskPipeline from PipelineConfig.

Anything passed explicitly wins over what the config would build, so tests
and the API can swap individual collaborators.
"""

from __future__ import annotations

import logging

from blog_rag.completion import get_completion_provider
from blog_rag.context import ContextAssembler
from blog_rag.core import (
    CompletionProvider,
    DocumentStore,
    EmbeddingProvider,
    PipelineConfig,
    get_config,
)
from blog_rag.embeddings import get_embedding_provider
from blog_rag.pipeline.orchestrator import AskPipeline
from blog_rag.recording import InteractionRecorder
from blog_rag.retrieval import (
    HybridRetriever,
    InMemoryDocumentStore,
    get_document_store,
    seed_document_store,
)

logger = logging.getLogger(__name__)


def create_pipeline(
    config: PipelineConfig | None = None,
    store: DocumentStore | None = None,
    embeddings: EmbeddingProvider | None = None,
    completion: CompletionProvider | None = None,
    seed_sample_corpus: bool = False,
) -> AskPipeline:
    """
    Assemble the full pipeline.

    Args:
        config: Pipeline settings (env-derived global config if omitted)
        store: Document store (pgvector or in-memory per config if omitted)
        embeddings: Embedding provider (OpenAI or mock per config if omitted)
        completion: Completion provider (OpenAI or mock per config if omitted)
        seed_sample_corpus: Load the sample posts into an empty in-memory store
    """
    if config is None:
        config = get_config()
    retrieval = config.retrieval

    if embeddings is None:
        embeddings = get_embedding_provider(
            use_mock=config.use_mock_embeddings,
            timeout=retrieval.embedding_timeout_s,
        )
    if completion is None:
        completion = get_completion_provider(
            use_mock=config.use_mock_completion,
            timeout=config.completion_timeout_s,
        )
    if store is None:
        store = get_document_store(use_postgres=config.use_postgres)

    if seed_sample_corpus and isinstance(store, InMemoryDocumentStore) and len(store) == 0:
        seeded = seed_document_store(store, embeddings)
        logger.info(f"Seeded in-memory store with {len(seeded)} sample posts")

    return AskPipeline(
        retriever=HybridRetriever(embeddings, store, retrieval),
        assembler=ContextAssembler(excerpt_chars=config.excerpt_chars),
        completion=completion,
        recorder=InteractionRecorder(store, timeout_s=config.logging_timeout_s),
        completion_timeout_s=config.completion_timeout_s,
    )
