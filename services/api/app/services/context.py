"""Context assembly for answer generation."""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from studymate_shared import Document, RetrievedRecord

logger = logging.getLogger(__name__)


def document_context(document: Document) -> str:
    """The full stored text of one document, verbatim."""

    return document.text


def combined_context(records: Sequence[RetrievedRecord], *, char_budget: Optional[int] = None) -> str:
    """Join record texts in retrieval order, one per line.

    No deduplication is done. With ``char_budget`` set, the joined string is
    cut at that many characters whatever collection the text came from.
    """

    context = "\n".join(record.text for record in records)
    if char_budget is not None and len(context) > char_budget:
        logger.info(
            "context truncated",
            extra={"original_chars": len(context), "budget": char_budget},
        )
        context = context[:char_budget]
    return context
