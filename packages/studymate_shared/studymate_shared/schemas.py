"""Shared Pydantic schemas."""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

Vector = List[float]


class CollectionKind(str, Enum):
    """The three document collections a user can store and query."""

    AUDIO = "audio"
    NOTE = "note"
    PAST_PAPER = "past_paper"


class CollectionMapping(BaseModel):
    """Where a collection keeps its text body and its embedding."""

    model_config = ConfigDict(frozen=True)

    kind: CollectionKind
    table: str
    text_field: str
    vector_field: str


class QueryPlan(BaseModel):
    """Ordered collections (with field mappings) targeted by one question."""

    targets: List[CollectionMapping]

    @property
    def kinds(self) -> List[CollectionKind]:
        return [target.kind for target in self.targets]


class Document(BaseModel):
    """A stored document with its decoded embedding."""

    id: int
    collection: CollectionKind
    owner_id: str
    text: str
    embedding: Vector
    title: Optional[str] = None
    created_at: Optional[datetime] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class RetrievedRecord(BaseModel):
    """A (text, vector) pair read from one collection for one question."""

    document_id: int
    text: str
    embedding: Vector
    collection: CollectionKind


class AnswerMode(str, Enum):
    DOCUMENT = "document"
    PAST_PAPER = "past_paper"
    AGGREGATE = "aggregate"


class SourceScore(BaseModel):
    collection: CollectionKind
    document_id: int
    similarity: float


class Answer(BaseModel):
    """Answer text plus its relevance score.

    ``similarity`` is the cosine between question and document on the
    single-document path and the placeholder ``1.0`` for aggregate answers.
    """

    answer: str
    similarity: float
    mode: AnswerMode
    sources: List[SourceScore] = Field(default_factory=list)
