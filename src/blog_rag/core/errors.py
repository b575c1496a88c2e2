"""
Error taxonomy for the pipeline.

Only RetrievalUnavailable, CompletionFailure and EmbeddingDimensionMismatch
are fatal to an invocation. LoggingFailure is raised by stores and always
swallowed by the recorder. Degraded retrieval and empty results are
conditions reported on RetrievalOutcome, not exceptions.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""


class RetrievalUnavailable(PipelineError):
    """Both the vector path and the keyword path failed."""


class CompletionFailure(PipelineError):
    """The completion provider failed, timed out or returned nothing."""


class EmbeddingDimensionMismatch(PipelineError):
    """Query vector and stored vectors disagree on dimensionality."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimension mismatch: store expects {expected}, got {actual}"
        )


class InvalidQuery(PipelineError, ValueError):
    """Rejected input (blank query, non-positive top_k)."""


class LoggingFailure(PipelineError):
    """An interaction record could not be written."""
