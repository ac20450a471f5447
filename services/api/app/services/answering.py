"""Per-question coordination of routing, retrieval, assembly and synthesis.

One call walks ``Idle -> EmbeddingQuestion -> Retrieving -> Assembling ->
Synthesizing -> Done``. Any failure moves the run to ``Failed`` and the
originating error is re-raised unchanged; no partial answer is returned.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from opentelemetry import trace

from studymate_shared import Answer, AnswerMode, CollectionKind, SourceScore
from studymate_shared.errors import InvalidRequest, NoResults
from studymate_shared.providers import EmbeddingProvider

from .context import combined_context, document_context
from .deadlines import bounded
from .generation import AnswerSynthesizer
from .retrieval import Retriever
from .routing import plan_for
from .similarity import similarity

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

# Placeholder Answer.similarity for multi-collection answers.
AGGREGATE_SIMILARITY = 1.0

DOCUMENT_MODES: Dict[CollectionKind, AnswerMode] = {
    CollectionKind.AUDIO: AnswerMode.DOCUMENT,
    CollectionKind.NOTE: AnswerMode.DOCUMENT,
    CollectionKind.PAST_PAPER: AnswerMode.PAST_PAPER,
}


class AnswerState(str, Enum):
    IDLE = "idle"
    EMBEDDING_QUESTION = "embedding_question"
    RETRIEVING = "retrieving"
    ASSEMBLING = "assembling"
    SYNTHESIZING = "synthesizing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunTrace:
    """States visited by one orchestrator call."""

    states: List[AnswerState] = field(default_factory=lambda: [AnswerState.IDLE])
    error: Optional[Exception] = None

    @property
    def state(self) -> AnswerState:
        return self.states[-1]

    def advance(self, state: AnswerState) -> None:
        self.states.append(state)

    def fail(self, error: Exception) -> None:
        self.error = error
        self.states.append(AnswerState.FAILED)


class AnswerOrchestrator:
    def __init__(
        self,
        *,
        retriever: Retriever,
        embedder: EmbeddingProvider,
        synthesizer: AnswerSynthesizer,
        timeout_seconds: Optional[float] = 30.0,
        context_char_budget: Optional[int] = None,
    ) -> None:
        self._retriever = retriever
        self._embedder = embedder
        self._synthesizer = synthesizer
        self._timeout = timeout_seconds
        self._context_char_budget = context_char_budget

    async def answer_document(
        self,
        collection: CollectionKind,
        document_id: Optional[int],
        owner_id: str,
        question: Optional[str],
        *,
        timeout_seconds: Optional[float] = None,
        run: Optional[RunTrace] = None,
    ) -> Answer:
        """Answer ``question`` from one previously identified document."""

        run = run if run is not None else RunTrace()
        timeout = self._timeout if timeout_seconds is None else timeout_seconds
        with tracer.start_as_current_span("answer.document") as span:
            span.set_attribute("studymate.collection", collection.value)
            try:
                _require_question(question)
                if document_id is None:
                    raise InvalidRequest("Document ID is required.")

                run.advance(AnswerState.EMBEDDING_QUESTION)
                question_vector = await bounded(self._embedder.embed(question), timeout, "Question embedding")

                run.advance(AnswerState.RETRIEVING)
                document = await bounded(
                    self._retriever.fetch_one(collection, document_id, owner_id),
                    timeout,
                    "Document retrieval",
                )

                run.advance(AnswerState.ASSEMBLING)
                context = document_context(document)
                score = similarity(question_vector, document.embedding)

                run.advance(AnswerState.SYNTHESIZING)
                mode = DOCUMENT_MODES[collection]
                text = await bounded(
                    self._synthesizer.synthesize(context, question, mode),
                    timeout,
                    "Answer generation",
                )
            except Exception as exc:
                run.fail(exc)
                span.set_attribute("studymate.outcome", getattr(exc, "kind", type(exc).__name__))
                logger.warning(
                    "document answer failed",
                    extra={"collection": collection.value, "document_id": document_id, "error": str(exc)},
                )
                raise

            run.advance(AnswerState.DONE)
            span.set_attribute("studymate.outcome", "done")
            logger.info(
                "document answer ready",
                extra={"collection": collection.value, "document_id": document_id, "similarity": score},
            )
            return Answer(
                answer=text,
                similarity=score,
                mode=mode,
                sources=[SourceScore(collection=collection, document_id=document.id, similarity=score)],
            )

    async def answer_corpus(
        self,
        owner_id: str,
        question: Optional[str],
        *,
        timeout_seconds: Optional[float] = None,
        run: Optional[RunTrace] = None,
    ) -> Answer:
        """Answer ``question`` from every collection the router selects."""

        run = run if run is not None else RunTrace()
        timeout = self._timeout if timeout_seconds is None else timeout_seconds
        with tracer.start_as_current_span("answer.corpus") as span:
            try:
                _require_question(question)
                plan = plan_for(question)
                span.set_attribute("studymate.collections", [kind.value for kind in plan.kinds])

                run.advance(AnswerState.EMBEDDING_QUESTION)
                question_vector = await bounded(self._embedder.embed(question), timeout, "Question embedding")

                run.advance(AnswerState.RETRIEVING)
                records = await bounded(self._retriever.fetch_all(plan, owner_id), timeout, "Corpus retrieval")
                if not records:
                    raise NoResults("No results found")

                run.advance(AnswerState.ASSEMBLING)
                context = combined_context(records, char_budget=self._context_char_budget)
                sources = sorted(
                    (
                        SourceScore(
                            collection=record.collection,
                            document_id=record.document_id,
                            similarity=similarity(question_vector, record.embedding),
                        )
                        for record in records
                    ),
                    key=lambda source: source.similarity,
                    reverse=True,
                )

                run.advance(AnswerState.SYNTHESIZING)
                text = await bounded(
                    self._synthesizer.synthesize(context, question, AnswerMode.AGGREGATE),
                    timeout,
                    "Answer generation",
                )
            except Exception as exc:
                run.fail(exc)
                span.set_attribute("studymate.outcome", getattr(exc, "kind", type(exc).__name__))
                logger.warning("corpus answer failed", extra={"error": str(exc)})
                raise

            run.advance(AnswerState.DONE)
            span.set_attribute("studymate.outcome", "done")
            logger.info("corpus answer ready", extra={"records": len(records)})
            return Answer(
                answer=text,
                similarity=AGGREGATE_SIMILARITY,
                mode=AnswerMode.AGGREGATE,
                sources=sources,
            )


def _require_question(question: Optional[str]) -> None:
    if not question or not question.strip():
        raise InvalidRequest("Question is required.")
