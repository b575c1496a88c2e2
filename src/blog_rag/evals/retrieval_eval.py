"""
Retrieval Quality Eval

Runs the golden queries through the real HybridRetriever and checks that
the right posts come back. Catches regressions from changed thresholds,
result caps, merge policy, keyword matching or corpus edits.

METRICS:
--------
RECALL:    |retrieved ∩ expected| / |expected|
PRECISION: |retrieved ∩ expected| / |retrieved|
F1:        2 * precision * recall / (precision + recall)

A case with no expected posts passes only if nothing was retrieved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from blog_rag.embeddings import MockEmbeddings
from blog_rag.golden_sets import GoldenQuery, get_all_golden_queries
from blog_rag.retrieval import (
    HybridRetriever,
    InMemoryDocumentStore,
    seed_document_store,
)

logger = logging.getLogger(__name__)

DEFAULT_F1_THRESHOLD = 0.8


@dataclass
class RetrievalMetrics:
    recall: float
    precision: float
    f1_score: float
    retrieved: list[str]
    expected: list[str]
    missing: list[str]
    extra: list[str]


@dataclass
class RetrievalEvalResult:
    case_id: str
    query: str
    passed: bool
    metrics: RetrievalMetrics


@dataclass
class RetrievalEvalReport:
    results: list[RetrievalEvalResult]
    threshold: float

    @property
    def total_cases(self) -> int:
        return len(self.results)

    @property
    def passed_cases(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed_cases(self) -> int:
        return self.total_cases - self.passed_cases

    @property
    def all_passed(self) -> bool:
        return self.failed_cases == 0

    def _average(self, attr: str) -> float:
        if not self.results:
            return 0.0
        return sum(getattr(r.metrics, attr) for r in self.results) / len(self.results)

    @property
    def avg_recall(self) -> float:
        return self._average("recall")

    @property
    def avg_precision(self) -> float:
        return self._average("precision")

    @property
    def avg_f1(self) -> float:
        return self._average("f1_score")


def calculate_retrieval_metrics(retrieved: list[str], expected: list[str]) -> RetrievalMetrics:
    got, want = set(retrieved), set(expected)

    if not want:
        clean = 1.0 if not got else 0.0
        return RetrievalMetrics(
            recall=1.0,
            precision=clean,
            f1_score=clean,
            retrieved=retrieved,
            expected=expected,
            missing=[],
            extra=sorted(got),
        )

    hits = got & want
    recall = len(hits) / len(want)
    precision = len(hits) / len(got) if got else 0.0
    f1 = 2 * precision * recall / (precision + recall) if precision + recall else 0.0

    return RetrievalMetrics(
        recall=recall,
        precision=precision,
        f1_score=f1,
        retrieved=retrieved,
        expected=expected,
        missing=sorted(want - got),
        extra=sorted(got - want),
    )


def build_sample_retriever() -> HybridRetriever:
    """Retriever over the seeded sample corpus with offline embeddings."""
    embeddings = MockEmbeddings()
    store = InMemoryDocumentStore(embedding_dim=embeddings.dimensions)
    seed_document_store(store, embeddings)
    return HybridRetriever(embeddings, store)


def run_retrieval_eval(
    cases: list[GoldenQuery] | None = None,
    retriever: HybridRetriever | None = None,
    threshold: float = DEFAULT_F1_THRESHOLD,
    verbose: bool = False,
) -> RetrievalEvalReport:
    """
    Evaluate retrieval on golden queries.

    Args:
        cases: Queries to run. Defaults to all golden queries.
        retriever: Retriever under test. Defaults to the sample corpus.
        threshold: Minimum F1 for a case to pass.
        verbose: Print progress.
    """
    cases = cases if cases is not None else get_all_golden_queries()
    retriever = retriever or build_sample_retriever()

    results = []
    for case in cases:
        if verbose:
            print(f"Running retrieval eval: {case.id}...")

        candidates = retriever.retrieve(case.query)
        slugs = [c.document.slug for c in candidates]
        metrics = calculate_retrieval_metrics(slugs, case.expected_slugs)
        passed = metrics.f1_score >= threshold

        if not passed:
            logger.info(f"{case.id} below threshold: F1={metrics.f1_score:.2f}")
        results.append(RetrievalEvalResult(
            case_id=case.id,
            query=case.query,
            passed=passed,
            metrics=metrics,
        ))

    return RetrievalEvalReport(results=results, threshold=threshold)
