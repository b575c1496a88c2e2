"""
Retrieval module - hybrid search over the blog corpus.

This module provides:
- Document / DocumentStatus: the post model
- StoreConfig, PgVectorStore, InMemoryDocumentStore, get_document_store()
- HybridRetriever: concurrent vector + keyword search with merge
- Seed corpus helpers

ARCHITECTURE:
-------------
1. Protocols define the contracts (in blog_rag.core)
2. Multiple store implementations (PgVectorStore, InMemoryDocumentStore)
3. Factory function for instantiation
4. The retriever receives its collaborators through its constructor
"""

from blog_rag.retrieval.document import Document, DocumentStatus

from blog_rag.retrieval.store import (
    StoreConfig,
    PgVectorStore,
    InMemoryDocumentStore,
    get_document_store,
)

from blog_rag.retrieval.hybrid import (
    HybridRetriever,
    PathStatus,
    RetrievalOutcome,
    merge_candidates,
)

from blog_rag.retrieval.seeds import (
    get_blog_documents,
    seed_document_store,
)

__all__ = [
    "Document",
    "DocumentStatus",
    "StoreConfig",
    "PgVectorStore",
    "InMemoryDocumentStore",
    "get_document_store",
    "HybridRetriever",
    "PathStatus",
    "RetrievalOutcome",
    "merge_candidates",
    "get_blog_documents",
    "seed_document_store",
]
