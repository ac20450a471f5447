"""Shared configuration, schemas and provider clients for StudyMate."""

from .config import Settings, get_settings
from .logging import configure_logging
from .providers import Providers, build_providers
from .schemas import (
    Answer,
    AnswerMode,
    CollectionKind,
    CollectionMapping,
    Document,
    QueryPlan,
    RetrievedRecord,
    SourceScore,
    Vector,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "Providers",
    "build_providers",
    "Answer",
    "AnswerMode",
    "CollectionKind",
    "CollectionMapping",
    "Document",
    "QueryPlan",
    "RetrievedRecord",
    "SourceScore",
    "Vector",
]
