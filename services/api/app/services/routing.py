"""Keyword routing of a question to the collections that should answer it."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Set, Tuple

from studymate_shared import CollectionKind, CollectionMapping, QueryPlan

logger = logging.getLogger(__name__)

# Plans are always executed in this order.
COLLECTION_ORDER: Tuple[CollectionKind, ...] = (
    CollectionKind.PAST_PAPER,
    CollectionKind.AUDIO,
    CollectionKind.NOTE,
)

KEYWORDS: Dict[CollectionKind, Tuple[str, ...]] = {
    CollectionKind.PAST_PAPER: ("paper", "previous"),
    CollectionKind.AUDIO: ("audio",),
    CollectionKind.NOTE: ("question", "notes"),
}

COLLECTION_MAPPINGS: Dict[CollectionKind, CollectionMapping] = {
    CollectionKind.AUDIO: CollectionMapping(
        kind=CollectionKind.AUDIO,
        table="audio",
        text_field="transcription",
        vector_field="embedding",
    ),
    CollectionKind.NOTE: CollectionMapping(
        kind=CollectionKind.NOTE,
        table="notes",
        text_field="text",
        vector_field="vector",
    ),
    CollectionKind.PAST_PAPER: CollectionMapping(
        kind=CollectionKind.PAST_PAPER,
        table="previous_papers",
        text_field="text",
        vector_field="vector",
    ),
}


def route(question: str) -> Set[CollectionKind]:
    """Return the collections whose keywords appear in ``question``.

    Falls back to every collection when nothing matches.
    """

    lowered = question.lower()
    matched = {
        kind
        for kind, keywords in KEYWORDS.items()
        if any(keyword in lowered for keyword in keywords)
    }
    if not matched:
        return set(COLLECTION_ORDER)
    return matched


def build_plan(
    kinds: Set[CollectionKind],
    mappings: Mapping[CollectionKind, CollectionMapping] = COLLECTION_MAPPINGS,
) -> QueryPlan:
    return QueryPlan(targets=[mappings[kind] for kind in COLLECTION_ORDER if kind in kinds])


def plan_for(question: str) -> QueryPlan:
    plan = build_plan(route(question))
    logger.debug("routed question", extra={"collections": [kind.value for kind in plan.kinds]})
    return plan
