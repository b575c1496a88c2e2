"""Context module - bounded, citation-preserving prompt assembly."""

from blog_rag.context.assembler import (
    AssembledPrompt,
    BLOCK_OVERHEAD,
    BLOCK_SEPARATOR,
    ContextAssembler,
    DEFAULT_EXCERPT_CHARS,
    NO_CONTEXT_MARKER,
    PROMPT_TEMPLATE,
    PROMPT_TEMPLATE_VERSION,
    max_context_length,
)

__all__ = [
    "AssembledPrompt",
    "BLOCK_OVERHEAD",
    "BLOCK_SEPARATOR",
    "ContextAssembler",
    "DEFAULT_EXCERPT_CHARS",
    "NO_CONTEXT_MARKER",
    "PROMPT_TEMPLATE",
    "PROMPT_TEMPLATE_VERSION",
    "max_context_length",
]
