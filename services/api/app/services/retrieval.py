from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping

from studymate_shared import CollectionKind, CollectionMapping, Document, QueryPlan, RetrievedRecord
from studymate_shared.vectors import decode_embedding

from .persistence import DocumentStore
from .routing import COLLECTION_MAPPINGS

logger = logging.getLogger(__name__)

_COMMON_FIELDS = {"id", "owner_id", "title", "created_at"}


class Retriever:
    """Reads owner-scoped documents and normalizes them to one shape.

    This is the only place stored embeddings are decoded; everything
    downstream sees plain float lists.
    """

    def __init__(
        self,
        store: DocumentStore,
        mappings: Mapping[CollectionKind, CollectionMapping] = COLLECTION_MAPPINGS,
    ) -> None:
        self._store = store
        self._mappings = dict(mappings)

    async def fetch_one(self, collection: CollectionKind, document_id: int, owner_id: str) -> Document:
        mapping = self._mappings[collection]
        row = await self._store.find_by_id(collection, document_id, owner_id)
        embedding = decode_embedding(row.get(mapping.vector_field))

        skip = _COMMON_FIELDS | {mapping.text_field, mapping.vector_field}
        metadata: Dict[str, Any] = {key: value for key, value in row.items() if key not in skip}
        return Document(
            id=row["id"],
            collection=collection,
            owner_id=row.get("owner_id", owner_id),
            text=row.get(mapping.text_field) or "",
            embedding=embedding,
            title=row.get("title"),
            created_at=row.get("created_at"),
            metadata=metadata,
        )

    async def fetch_all(self, plan: QueryPlan, owner_id: str) -> List[RetrievedRecord]:
        # One read per collection, concurrently.
        batches = await asyncio.gather(*(self._read_collection(target, owner_id) for target in plan.targets))
        records = [record for batch in batches for record in batch]
        logger.info(
            "retrieval results",
            extra={"count": len(records), "collections": [kind.value for kind in plan.kinds]},
        )
        return records

    async def _read_collection(self, mapping: CollectionMapping, owner_id: str) -> List[RetrievedRecord]:
        rows = await self._store.find_all_by_owner(
            mapping.kind,
            owner_id,
            fields=("id", mapping.text_field, mapping.vector_field),
        )
        return [
            RetrievedRecord(
                document_id=row["id"],
                text=row.get(mapping.text_field) or "",
                embedding=decode_embedding(row.get(mapping.vector_field)),
                collection=mapping.kind,
            )
            for row in rows
        ]
