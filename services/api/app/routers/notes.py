from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from studymate_shared import CollectionKind
from studymate_shared.errors import StudyMateError

from ..dependencies import get_ingestion_service
from ..errors import to_http_exception
from ..models import NoteResponse, UploadResponse
from ..security import get_owner_id
from ..services.ingestion import IngestionService
from .documents import register_document_routes

router = APIRouter(prefix="/v1/notes", tags=["notes"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_note(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    exam: Optional[str] = Form(None),
    paper: Optional[str] = Form(None),
    subject: Optional[str] = Form(None),
    topics: Optional[str] = Form(None),
    owner_id: str = Depends(get_owner_id),
    ingestion: IngestionService = Depends(get_ingestion_service),
) -> UploadResponse:
    raw_bytes = await file.read()
    metadata = {
        "title": title,
        "category": category,
        "exam": exam,
        "paper": paper,
        "subject": subject,
        "topics": topics,
    }
    try:
        result = await ingestion.ingest_note(
            owner_id=owner_id,
            raw=raw_bytes,
            filename=file.filename,
            content_type=file.content_type,
            metadata=metadata,
        )
    except StudyMateError as exc:
        raise to_http_exception(exc) from exc
    return UploadResponse(**result)


register_document_routes(router, CollectionKind.NOTE, NoteResponse)
