"""
Interaction recording - best-effort telemetry.

Every answered question is appended to the store's interaction log
together with the ids of the posts it was grounded on. Recording must
never affect the visitor's answer: every failure, including a timeout,
is logged here and reported as a False return value.

Identical calls are NOT deduplicated. Each call appends a new record with
its own id and timestamp; repeated questions are real traffic.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Sequence

from blog_rag.core import (
    DocumentStore,
    InteractionRecord,
    RetrievedCandidate,
    call_in_executor,
    make_executor,
)

logger = logging.getLogger(__name__)

DEFAULT_LOGGING_TIMEOUT_S = 5.0


class InteractionRecorder:
    """Writes InteractionRecords through an injected DocumentStore."""

    def __init__(
        self,
        store: DocumentStore,
        timeout_s: float = DEFAULT_LOGGING_TIMEOUT_S,
        executor: ThreadPoolExecutor | None = None,
    ):
        self._store = store
        self.timeout_s = timeout_s
        self._executor = executor or make_executor("recording")

    def close(self) -> None:
        self._executor.shutdown(wait=False)

    @staticmethod
    def build_record(
        query: str,
        answer: str,
        candidates: Sequence[RetrievedCandidate],
        conversation_id: str | None = None,
    ) -> InteractionRecord:
        return InteractionRecord(
            query=query,
            answer=answer,
            source_ids=frozenset(c.id for c in candidates),
            conversation_id=conversation_id,
        )

    def record(
        self,
        query: str,
        answer: str,
        candidates: Sequence[RetrievedCandidate],
        conversation_id: str | None = None,
    ) -> bool:
        """Append one record. Returns False instead of raising on failure."""
        try:
            record = self.build_record(query, answer, candidates, conversation_id)
            self._store.append_log(record)
        except Exception as e:
            logger.warning(f"Interaction logging failed ({type(e).__name__}): {e}")
            return False
        return True

    async def arecord(
        self,
        query: str,
        answer: str,
        candidates: Sequence[RetrievedCandidate],
        conversation_id: str | None = None,
    ) -> bool:
        """Async variant with a deadline; a timeout counts as a failure."""
        try:
            return await call_in_executor(
                self._executor,
                self.record,
                query,
                answer,
                candidates,
                conversation_id,
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Interaction logging timed out after {self.timeout_s}s")
            return False
