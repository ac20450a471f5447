"""Routes shared by the audio, notes and past-paper collections."""
from __future__ import annotations

import logging
from typing import List, Type

from fastapi import APIRouter, Depends, Path, Response
from pydantic import BaseModel

from studymate_shared import CollectionKind
from studymate_shared.errors import NotFound, StudyMateError

from ..dependencies import get_document_store, get_object_store, get_orchestrator
from ..errors import to_http_exception, unexpected_error
from ..models import AnswerResponse, AskRequest, DeleteResponse, DocumentSummary, SourceResponse
from ..security import get_owner_id
from ..services.answering import AnswerOrchestrator
from ..services.persistence import DocumentStore
from ..services.routing import COLLECTION_MAPPINGS
from ..services.storage import ObjectStore

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = ("id", "title", "created_at")


def register_document_routes(router: APIRouter, kind: CollectionKind, detail_model: Type[BaseModel]) -> None:
    """Attach list/detail/delete/original/ask routes for one collection."""

    vector_field = COLLECTION_MAPPINGS[kind].vector_field

    @router.get("", response_model=List[DocumentSummary])
    async def list_documents(
        owner_id: str = Depends(get_owner_id),
        store: DocumentStore = Depends(get_document_store),
    ):
        rows = await store.find_all_by_owner(kind, owner_id, fields=SUMMARY_FIELDS)
        return [DocumentSummary(**row) for row in rows]

    @router.get("/{document_id}", response_model=detail_model)
    async def get_document(
        document_id: int = Path(..., description="Document identifier"),
        owner_id: str = Depends(get_owner_id),
        store: DocumentStore = Depends(get_document_store),
    ):
        try:
            row = await store.find_by_id(kind, document_id, owner_id)
        except StudyMateError as exc:
            raise to_http_exception(exc) from exc
        row.pop(vector_field, None)
        return detail_model(**row)

    @router.get("/{document_id}/original")
    async def download_original(
        document_id: int = Path(..., description="Document identifier"),
        owner_id: str = Depends(get_owner_id),
        store: DocumentStore = Depends(get_document_store),
        object_store: ObjectStore = Depends(get_object_store),
    ) -> Response:
        try:
            row = await store.find_by_id(kind, document_id, owner_id)
            if not row.get("object_key"):
                raise NotFound("No stored original for this document")
            body = await object_store.get(row["object_key"])
        except StudyMateError as exc:
            raise to_http_exception(exc) from exc
        return Response(content=body, media_type="application/octet-stream")

    @router.delete("/{document_id}", response_model=DeleteResponse)
    async def delete_document(
        document_id: int = Path(..., description="Document identifier"),
        owner_id: str = Depends(get_owner_id),
        store: DocumentStore = Depends(get_document_store),
    ):
        deleted = await store.delete_by_id(kind, document_id, owner_id)
        if deleted == 0:
            raise to_http_exception(NotFound(f"No {kind.value} found for the provided ID"))
        logger.info("document deleted", extra={"collection": kind.value, "document_id": document_id})
        return DeleteResponse(id=document_id)

    @router.post("/{document_id}/ask", response_model=AnswerResponse)
    async def ask_document(
        payload: AskRequest,
        document_id: int = Path(..., description="Document identifier"),
        owner_id: str = Depends(get_owner_id),
        orchestrator: AnswerOrchestrator = Depends(get_orchestrator),
    ):
        try:
            answer = await orchestrator.answer_document(
                kind,
                document_id,
                owner_id,
                payload.question,
                timeout_seconds=payload.timeout_seconds,
            )
        except StudyMateError as exc:
            raise to_http_exception(exc) from exc
        except Exception as exc:
            raise unexpected_error(exc, f"{kind.value} ask") from exc
        return AnswerResponse(
            answer=answer.answer,
            similarity=answer.similarity,
            sources=[SourceResponse(**source.model_dump()) for source in answer.sources],
        )
