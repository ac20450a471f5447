from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile, status

from studymate_shared import CollectionKind
from studymate_shared.errors import StudyMateError

from ..dependencies import get_ingestion_service
from ..errors import to_http_exception
from ..models import AudioResponse, UploadResponse
from ..security import get_owner_id
from ..services.ingestion import IngestionService
from .documents import register_document_routes

router = APIRouter(prefix="/v1/audio", tags=["audio"])


@router.post("", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_audio(
    audio: UploadFile = File(...),
    owner_id: str = Depends(get_owner_id),
    ingestion: IngestionService = Depends(get_ingestion_service),
) -> UploadResponse:
    raw_bytes = await audio.read()
    try:
        result = await ingestion.ingest_audio(
            owner_id=owner_id,
            raw=raw_bytes,
            filename=audio.filename,
            content_type=audio.content_type,
        )
    except StudyMateError as exc:
        raise to_http_exception(exc) from exc
    return UploadResponse(**result)


register_document_routes(router, CollectionKind.AUDIO, AudioResponse)
