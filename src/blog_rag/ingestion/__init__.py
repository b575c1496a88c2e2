"""
Ingestion module - content sync and batch embedding.

These jobs write the documents the retriever reads; they never run on the
question-answering path.
"""

from blog_rag.ingestion.markdown import (
    ContentMetadata,
    convert_wikilinks,
    extract_content_metadata,
    load_posts,
    parse_post,
    slugify,
    split_frontmatter,
    sync_posts,
)
from blog_rag.ingestion.embedding_job import (
    EmbeddingJobReport,
    build_embedding_text,
    generate_missing_embeddings,
)

__all__ = [
    "ContentMetadata",
    "convert_wikilinks",
    "extract_content_metadata",
    "load_posts",
    "parse_post",
    "slugify",
    "split_frontmatter",
    "sync_posts",
    "EmbeddingJobReport",
    "build_embedding_text",
    "generate_missing_embeddings",
]
