"""
Golden queries for the sample blog corpus.

Each case pairs a reader's question with the slugs a correct retriever
should surface. Cases are written against
blog_rag.retrieval.seeds.get_blog_documents(); keep both in sync.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GoldenQuery:
    id: str
    description: str
    query: str
    expected_slugs: list[str] = field(default_factory=list)


BLOG_QUERIES: list[GoldenQuery] = [
    GoldenQuery(
        id="blog-001",
        description="Term appearing in a title and in another post's body",
        query="hash table",
        expected_slugs=["hash-tables-explained", "big-o-notation-without-the-math"],
    ),
    GoldenQuery(
        id="blog-002",
        description="Exact tag match",
        query="recursion",
        expected_slugs=["understanding-recursion"],
    ),
    GoldenQuery(
        id="blog-003",
        description="Proper noun only found in one post",
        query="git",
        expected_slugs=["git-branching-strategies"],
    ),
    GoldenQuery(
        id="blog-004",
        description="Multi-word title phrase",
        query="binary search",
        expected_slugs=["binary-search-trees"],
    ),
    GoldenQuery(
        id="blog-005",
        description="Nothing in the corpus covers this; nothing should be retrieved",
        query="quantum computing",
        expected_slugs=[],
    ),
    GoldenQuery(
        id="blog-006",
        description="Term only present in a draft post",
        query="breadth-first",
        expected_slugs=[],
    ),
]


def get_all_golden_queries() -> list[GoldenQuery]:
    return list(BLOG_QUERIES)


def get_query_by_id(query_id: str) -> GoldenQuery | None:
    for case in BLOG_QUERIES:
        if case.id == query_id:
            return case
    return None
