"""
Pipeline orchestrator - retrieve, assemble, complete, record.

The orchestrator is the only place that turns internal failures into the
user-facing contract:

- RetrievalUnavailable, CompletionFailure, EmbeddingDimensionMismatch and
  any unexpected error -> generic message, ok=False, no sources
- degraded or empty retrieval -> normal answer from whatever was found
- recording failures -> invisible to the caller

Recording is fire-and-forget: the task is scheduled and the response
returned without waiting for it. `drain()` waits for outstanding writes
(used by the blocking `answer()` wrapper and by tests).
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from blog_rag.context import ContextAssembler, PROMPT_TEMPLATE_VERSION
from blog_rag.core import (
    CompletionFailure,
    CompletionProvider,
    InvalidQuery,
    PipelineError,
    RetrievedCandidate,
    call_in_executor,
    make_executor,
    run_blocking,
)
from blog_rag.observability import (
    GEN_AI_COMPLETION,
    PIPELINE_CONVERSATION_ID,
    PIPELINE_ERROR_TYPE,
    completion_attributes,
    get_config as get_phoenix_config,
    prompt_attributes,
    traced,
)
from blog_rag.recording import InteractionRecorder
from blog_rag.retrieval import HybridRetriever

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = (
    "Sorry, something went wrong while answering your question. Please try again in a moment."
)

DEFAULT_COMPLETION_TIMEOUT_S = 30.0


@dataclass
class PipelineResponse:
    """What the caller sees. Never carries internal error detail."""
    answer: str
    sources: list[dict[str, Any]] = field(default_factory=list)
    ok: bool = True

    @classmethod
    def failure(cls) -> PipelineResponse:
        return cls(answer=GENERIC_ERROR_MESSAGE, sources=[], ok=False)


class AskPipeline:
    """
    Answers one question per call; holds no per-request state.

    All collaborators are injected. See `create_pipeline()` for wiring from
    configuration.
    """

    def __init__(
        self,
        retriever: HybridRetriever,
        assembler: ContextAssembler,
        completion: CompletionProvider,
        recorder: InteractionRecorder,
        completion_timeout_s: float = DEFAULT_COMPLETION_TIMEOUT_S,
        executor: ThreadPoolExecutor | None = None,
    ):
        self._retriever = retriever
        self._assembler = assembler
        self._completion = completion
        self._recorder = recorder
        self.completion_timeout_s = completion_timeout_s
        self._pending: set[asyncio.Task] = set()
        self._executor = executor or make_executor("completion")

    def close(self) -> None:
        """Release worker threads held by the pipeline and its collaborators."""
        self._executor.shutdown(wait=False)
        self._retriever.close()
        self._recorder.close()

    async def _complete(self, prompt: str) -> str:
        try:
            text = await call_in_executor(
                self._executor,
                self._completion.complete,
                prompt,
                timeout=self.completion_timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise CompletionFailure(
                f"Completion timed out after {self.completion_timeout_s}s"
            ) from e
        except Exception as e:
            raise CompletionFailure(f"Completion failed: {type(e).__name__}: {e}") from e

        if not text or not text.strip():
            raise CompletionFailure("Completion returned no text")
        return text.strip()

    def _schedule_recording(
        self,
        query: str,
        answer: str,
        candidates: list[RetrievedCandidate],
        conversation_id: str | None,
    ) -> None:
        task = asyncio.create_task(
            self._recorder.arecord(query, answer, candidates, conversation_id)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def aanswer(self, message: str, conversation_id: str | None = None) -> PipelineResponse:
        """
        Answer a question from the blog corpus.

        Raises:
            InvalidQuery: blank message (a caller error, not a server fault)
        """
        capture = get_phoenix_config().capture_llm_content

        with traced(
            "pipeline.answer",
            attributes={
                PIPELINE_CONVERSATION_ID: conversation_id or "",
                **completion_attributes(self._completion),
            },
        ) as span:
            try:
                outcome = await self._retriever.aretrieve(message)
                assembled = self._assembler.build(message, outcome.candidates)
                span.set_attributes(
                    prompt_attributes(
                        PROMPT_TEMPLATE_VERSION,
                        assembled.prompt,
                        len(assembled.citations),
                        capture_content=capture,
                    )
                )
                answer = await self._complete(assembled.prompt)
            except InvalidQuery:
                raise
            except PipelineError as e:
                logger.error(f"Question failed with {type(e).__name__}: {e}")
                span.record_exception(e)
                span.set_status("error", type(e).__name__)
                span.set_attribute(PIPELINE_ERROR_TYPE, type(e).__name__)
                return PipelineResponse.failure()
            except Exception as e:
                logger.exception(f"Unexpected error while answering: {e}")
                span.record_exception(e)
                span.set_status("error", type(e).__name__)
                span.set_attribute(PIPELINE_ERROR_TYPE, type(e).__name__)
                return PipelineResponse.failure()

            if capture:
                span.set_attribute(GEN_AI_COMPLETION, answer)

        self._schedule_recording(message, answer, outcome.candidates, conversation_id)

        return PipelineResponse(
            answer=answer,
            sources=[citation.as_source() for citation in assembled.citations],
        )

    async def drain(self) -> None:
        """Wait for every scheduled interaction write to finish."""
        pending = list(self._pending)
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    def answer(self, message: str, conversation_id: str | None = None) -> PipelineResponse:
        """Blocking entry point; waits for the interaction write before returning."""

        async def run() -> PipelineResponse:
            response = await self.aanswer(message, conversation_id)
            await self.drain()
            return response

        return run_blocking(run())
