"""
Document model for the retrieval system.

Single responsibility: define the structure of blog posts held by
document stores. Documents are read-only from the retriever's perspective;
they are written by the content sync and embedding jobs.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

import numpy as np


class DocumentStatus(str, Enum):
    """Publication state. Only published posts are retrievable."""
    DRAFT = "draft"
    PUBLISHED = "published"


@dataclass
class Document:
    """
    A blog post with optional embedding.

    `embedding` stays None until the batch embedding job has processed the
    post; such posts are invisible to vector search but still match keywords.
    """
    id: str
    slug: str
    title: str
    content: str
    summary: str | None = None
    topic: str | None = None
    secondary_topics: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    difficulty: str | None = None
    audience: str | None = None
    prerequisites: list[str] = field(default_factory=list)
    estimated_value: str | None = None
    status: DocumentStatus = DocumentStatus.DRAFT
    published_at: datetime | None = None
    # Derived from the body at sync time
    word_count: int = 0
    reading_time_minutes: int = 0
    has_code_examples: bool = False
    has_images: bool = False
    has_external_links: bool = False
    embedding: np.ndarray | None = None

    @property
    def is_published(self) -> bool:
        return self.status == DocumentStatus.PUBLISHED

    @property
    def url(self) -> str:
        """Relative URL of the rendered post."""
        return f"/{self.slug}/"
