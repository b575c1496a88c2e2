"""
Golden Sets Package

Reader questions with expected retrieval results, used by the retrieval
quality gate.
"""

from blog_rag.golden_sets.blog_queries import (
    BLOG_QUERIES,
    GoldenQuery,
    get_all_golden_queries,
    get_query_by_id,
)

__all__ = [
    "BLOG_QUERIES",
    "GoldenQuery",
    "get_all_golden_queries",
    "get_query_by_id",
]
