"""
Markdown content sync.

Reads Obsidian-style markdown posts (YAML frontmatter + body), rewrites
[[wikilinks]] into site links, derives content metadata and turns each
file into a Document ready for upsert. Embeddings are left empty; the
embedding job fills them in later.

Frontmatter keys understood (aliases in parentheses):
    id, title, slug, summary, topic (primary_topic), secondary_topics, tags,
    difficulty, audience (target_audience), prerequisites
    (prerequisite_concepts), estimated_value, status, date
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from blog_rag.core import DocumentStore
from blog_rag.retrieval.document import Document, DocumentStatus

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200

_FRONTMATTER_RE = re.compile(r"\A---\s*\n(?P<meta>.*?)\n---\s*(?:\n|\Z)(?P<body>.*)\Z", re.DOTALL)
_WIKILINK_RE = re.compile(r"\[\[([^\]]+)\]\]")
_CODE_FENCE_RE = re.compile(r"```")
_MD_IMAGE_RE = re.compile(r"!\[.*\]\(.*\)")
_HTML_IMAGE_RE = re.compile(r"<img")
_EXTERNAL_LINK_RE = re.compile(r"\[.*\]\((https?://.*)\)")


def slugify(title: str) -> str:
    """URL slug: lowercase, punctuation dropped, whitespace runs -> '-'."""
    slug = title.strip().lower()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug


def convert_wikilinks(text: str) -> str:
    """[[Internal Link]] -> [Internal Link](/internal-link/)"""
    return _WIKILINK_RE.sub(lambda m: f"[{m.group(1)}](/{slugify(m.group(1))}/)", text)


@dataclass
class ContentMetadata:
    word_count: int
    reading_time_minutes: int
    has_code_examples: bool
    has_images: bool
    has_external_links: bool


def extract_content_metadata(text: str) -> ContentMetadata:
    words = [w for w in re.sub(r"[^\w\s]", "", text).split() if w]
    return ContentMetadata(
        word_count=len(words),
        reading_time_minutes=math.ceil(len(words) / WORDS_PER_MINUTE),
        has_code_examples=bool(_CODE_FENCE_RE.search(text)),
        has_images=bool(_MD_IMAGE_RE.search(text) or _HTML_IMAGE_RE.search(text)),
        has_external_links=bool(_EXTERNAL_LINK_RE.search(text)),
    )


def split_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Return (frontmatter dict, body). Files without frontmatter get {}."""
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return {}, text
    meta = yaml.safe_load(match.group("meta")) or {}
    if not isinstance(meta, dict):
        raise ValueError("Frontmatter must be a YAML mapping")
    return meta, match.group("body")


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    parsed = datetime.fromisoformat(str(value))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def parse_post(text: str, default_id: str) -> Document:
    """
    Build a Document from one markdown file's text.

    Raises:
        ValueError: missing title, unknown status or malformed frontmatter
    """
    meta, body = split_frontmatter(text)

    title = meta.get("title")
    if not title:
        raise ValueError(f"Post {default_id!r} has no title")
    # YAML reads `title: 1984` as an int
    title = str(title)

    content = convert_wikilinks(body).strip()
    stats = extract_content_metadata(content)

    return Document(
        id=str(meta.get("id") or default_id),
        slug=str(meta.get("slug") or slugify(title)),
        title=title,
        summary=meta.get("summary"),
        content=content,
        topic=meta.get("topic") or meta.get("primary_topic"),
        secondary_topics=_as_list(meta.get("secondary_topics")),
        tags=_as_list(meta.get("tags")),
        difficulty=meta.get("difficulty"),
        audience=meta.get("audience") or meta.get("target_audience"),
        prerequisites=_as_list(meta.get("prerequisites") or meta.get("prerequisite_concepts")),
        estimated_value=meta.get("estimated_value"),
        status=DocumentStatus(meta.get("status", DocumentStatus.DRAFT.value)),
        published_at=_as_datetime(meta.get("date")),
        word_count=stats.word_count,
        reading_time_minutes=stats.reading_time_minutes,
        has_code_examples=stats.has_code_examples,
        has_images=stats.has_images,
        has_external_links=stats.has_external_links,
    )


def load_posts(directory: str | Path) -> list[Document]:
    """Parse every *.md file in `directory` (sorted by filename)."""
    documents = []
    for path in sorted(Path(directory).glob("*.md")):
        documents.append(parse_post(path.read_text(encoding="utf-8"), default_id=path.stem))
    return documents


def sync_posts(store: DocumentStore, directory: str | Path) -> list[Document]:
    """Load posts from disk and upsert them. Returns the documents written."""
    documents = load_posts(directory)
    for doc in documents:
        store.upsert(doc)
        logger.info(f"Synced: {doc.slug} ({doc.status.value})")
    return documents
