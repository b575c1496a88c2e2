"""
Seed data for the retrieval system.

Keeping sample content out of the store implementations lets tests and the
retrieval quality gate run against a known corpus.
"""

from blog_rag.retrieval.seeds.blog_posts import (
    get_blog_documents,
    seed_document_store,
)

__all__ = ["get_blog_documents", "seed_document_store"]
