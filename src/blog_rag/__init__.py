"""Blog question-answering assistant: hybrid retrieval over published posts."""

__version__ = "0.1.0"
