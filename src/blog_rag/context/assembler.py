"""
Context assembly: ranked candidates -> grounded prompt.

Each candidate becomes one fixed-shape block:

    ### <title>
    Topic: <topic>
    Difficulty: <difficulty>
    Summary: <summary>
    URL: /<slug>/
    Excerpt: <first N characters of content>

Blocks keep retrieval order and are joined by a visible separator. Every
field is capped, so a block never exceeds `excerpt_chars + BLOCK_OVERHEAD`
characters and the whole context is bounded by the number of candidates,
whatever the size of the corpus.

PROMPT_TEMPLATE is versioned. Changing its wording changes model behaviour;
bump PROMPT_TEMPLATE_VERSION and the pinned test fixture together.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from blog_rag.core import Citation, RetrievedCandidate
from blog_rag.retrieval.document import Document

DEFAULT_EXCERPT_CHARS = 500

PROMPT_TEMPLATE_VERSION = "2024-06.v1"

PROMPT_TEMPLATE = """You are the assistant for a programming blog. Answer the reader's question using ONLY the blog content provided below.

RULES:
1. Use only the information in the BLOG CONTENT section. Do not rely on outside knowledge.
2. If the content does not contain enough information to answer, say so plainly instead of guessing.
3. When you draw on a specific post, cite it by its title and URL, for example: "Hash Tables Explained" (/hash-tables-explained/).
4. Keep a friendly, conversational tone.

BLOG CONTENT:
{context}

QUESTION: {query}

ANSWER:"""

NO_CONTEXT_MARKER = "NO RELEVANT CONTENT FOUND: none of the published posts match this question."

BLOCK_SEPARATOR = "\n\n---\n\n"
TRUNCATION_MARK = "..."

BLOCK_TEMPLATE = (
    "### {title}\n"
    "Topic: {topic}\n"
    "Difficulty: {difficulty}\n"
    "Summary: {summary}\n"
    "URL: {url}\n"
    "Excerpt: {excerpt}"
)

# Per-field caps for the single-line fields
TITLE_CAP = 150
TOPIC_CAP = 60
DIFFICULTY_CAP = 40
SUMMARY_CAP = 300
SLUG_CAP = 120

SUMMARY_PLACEHOLDER = "(no summary)"
TOPIC_PLACEHOLDER = "general"
DIFFICULTY_PLACEHOLDER = "unspecified"

_EMPTY_BLOCK_CHARS = len(
    BLOCK_TEMPLATE.format(title="", topic="", difficulty="", summary="", url="", excerpt="")
)

# Everything in a block except the excerpt body, at its maximum size
BLOCK_OVERHEAD = (
    _EMPTY_BLOCK_CHARS
    + TITLE_CAP
    + TOPIC_CAP
    + DIFFICULTY_CAP
    + SUMMARY_CAP
    + SLUG_CAP + len("//")
    + len(TRUNCATION_MARK)
    + len(BLOCK_SEPARATOR)
)


def max_context_length(block_count: int, excerpt_chars: int = DEFAULT_EXCERPT_CHARS) -> int:
    """Upper bound on the context section for `block_count` candidates."""
    return max(block_count * (excerpt_chars + BLOCK_OVERHEAD), len(NO_CONTEXT_MARKER))


def _single_line(text: str | None, cap: int, placeholder: str) -> str:
    if not text or not text.strip():
        return placeholder
    return " ".join(text.split())[:cap]


def _excerpt(content: str, limit: int) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + TRUNCATION_MARK


@dataclass(frozen=True)
class AssembledPrompt:
    """Prompt text plus the citations it was built from.

    Unpacks as `(prompt, citations)`.
    """
    prompt: str
    context: str
    citations: tuple[Citation, ...]

    def __iter__(self) -> Iterator:
        yield self.prompt
        yield self.citations

    @property
    def has_context(self) -> bool:
        return bool(self.citations)


class ContextAssembler:
    """Builds the grounded prompt sent to the completion provider."""

    def __init__(self, excerpt_chars: int = DEFAULT_EXCERPT_CHARS):
        if excerpt_chars < 1:
            raise ValueError(f"excerpt_chars must be >= 1, got {excerpt_chars}")
        self.excerpt_chars = excerpt_chars

    def format_block(self, document: Document) -> str:
        return BLOCK_TEMPLATE.format(
            title=_single_line(document.title, TITLE_CAP, "Untitled"),
            topic=_single_line(document.topic, TOPIC_CAP, TOPIC_PLACEHOLDER),
            difficulty=_single_line(document.difficulty, DIFFICULTY_CAP, DIFFICULTY_PLACEHOLDER),
            summary=_single_line(document.summary, SUMMARY_CAP, SUMMARY_PLACEHOLDER),
            url=f"/{document.slug[:SLUG_CAP]}/",
            excerpt=_excerpt(document.content or "", self.excerpt_chars),
        )

    def build_context(self, candidates: Sequence[RetrievedCandidate]) -> str:
        if not candidates:
            return NO_CONTEXT_MARKER
        return BLOCK_SEPARATOR.join(self.format_block(c.document) for c in candidates)

    def build(self, query: str, candidates: Sequence[RetrievedCandidate]) -> AssembledPrompt:
        context = self.build_context(candidates)
        citations = tuple(Citation.from_document(c.document) for c in candidates)
        prompt = PROMPT_TEMPLATE.format(context=context, query=query.strip())
        return AssembledPrompt(prompt=prompt, context=context, citations=citations)
