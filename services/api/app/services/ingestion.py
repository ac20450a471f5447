"""Ingestion of uploads: text extraction, titling, embedding and insertion."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, NamedTuple, Optional

from studymate_shared import CollectionKind
from studymate_shared.errors import ExtractionError, InvalidRequest, StudyMateError
from studymate_shared.providers import EmbeddingProvider, Transcriber
from studymate_shared.vectors import encode_embedding

from ..utils import ensure_audio_upload, resolve_document_handler
from .deadlines import bounded
from .generation import AnswerSynthesizer
from .persistence import DocumentStore
from .routing import COLLECTION_MAPPINGS
from .storage import ObjectStore, build_object_key

logger = logging.getLogger(__name__)

NOTE_METADATA_FIELDS = ("title", "category", "exam", "paper", "subject", "topics")


class Upload(NamedTuple):
    prefix: str
    body: bytes
    filename: Optional[str]
    content_type: Optional[str]


class IngestionService:
    """Turns uploads into stored, embedded documents.

    The file type is checked before anything is sent to a provider, and the
    original is uploaded only after extraction, titling and embedding have
    succeeded. A failed insert removes the upload again.
    """

    def __init__(
        self,
        *,
        store: DocumentStore,
        object_store: ObjectStore,
        embedder: EmbeddingProvider,
        transcriber: Transcriber,
        synthesizer: AnswerSynthesizer,
        timeout_seconds: Optional[float] = 30.0,
    ) -> None:
        self._store = store
        self._object_store = object_store
        self._embedder = embedder
        self._transcriber = transcriber
        self._synthesizer = synthesizer
        self._timeout = timeout_seconds

    async def ingest_audio(
        self,
        *,
        owner_id: str,
        raw: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> Dict[str, Any]:
        ensure_audio_upload(filename, content_type)
        if not raw:
            raise ExtractionError("No audio file uploaded.")

        transcription = await bounded(
            self._transcriber.transcribe(raw, filename or "audio"),
            self._timeout,
            "Transcription",
        )
        if not transcription:
            raise ExtractionError("Error in transcription.")

        title = await bounded(self._synthesizer.generate_title(transcription), self._timeout, "Title generation")
        return await self._store_document(
            CollectionKind.AUDIO,
            owner_id=owner_id,
            text=transcription,
            fields={"title": title, "transcription": transcription},
            original=Upload("audio", raw, filename, content_type),
        )

    async def ingest_note(
        self,
        *,
        owner_id: str,
        raw: bytes,
        filename: Optional[str],
        content_type: Optional[str],
        metadata: Mapping[str, Optional[str]],
    ) -> Dict[str, Any]:
        missing = [name for name in NOTE_METADATA_FIELDS if not (metadata.get(name) or "").strip()]
        if missing:
            raise InvalidRequest(
                "All fields (title, category, exam, paper, subject, topics) are required."
            )
        handler = resolve_document_handler(filename, content_type)
        if not raw:
            raise ExtractionError("No file uploaded.")

        text = (await asyncio.to_thread(handler, raw)).strip()
        fields = {name: metadata[name] for name in NOTE_METADATA_FIELDS}
        fields["text"] = text
        return await self._store_document(
            CollectionKind.NOTE,
            owner_id=owner_id,
            text=text,
            fields=fields,
            original=Upload("notes", raw, filename, content_type),
        )

    async def ingest_paper(
        self,
        *,
        owner_id: str,
        raw: bytes,
        filename: Optional[str],
        content_type: Optional[str],
    ) -> Dict[str, Any]:
        handler = resolve_document_handler(filename, content_type)
        if not raw:
            raise ExtractionError("No file uploaded.")

        text = (await asyncio.to_thread(handler, raw)).strip()
        title = await bounded(self._synthesizer.generate_title(text), self._timeout, "Title generation")
        return await self._store_document(
            CollectionKind.PAST_PAPER,
            owner_id=owner_id,
            text=text,
            fields={"title": title, "text": text},
            original=Upload("papers", raw, filename, content_type),
        )

    async def _store_document(
        self,
        collection: CollectionKind,
        *,
        owner_id: str,
        text: str,
        fields: Dict[str, Any],
        original: Upload,
    ) -> Dict[str, Any]:
        embedding = await bounded(self._embedder.embed(text), self._timeout, "Document embedding")

        # The original is stored only once every provider call has succeeded.
        object_key = build_object_key(original.prefix, original.filename)
        await bounded(
            self._object_store.put(object_key, original.body, original.content_type),
            self._timeout,
            "Object upload",
        )

        row = dict(fields)
        mapping = COLLECTION_MAPPINGS[collection]
        row.update(
            {"owner_id": owner_id, "object_key": object_key, mapping.vector_field: encode_embedding(embedding)}
        )
        try:
            document_id = await self._store.insert(collection, row)
        except Exception:
            await self._discard(object_key)
            raise
        logger.info(
            "document stored",
            extra={"collection": collection.value, "document_id": document_id, "chars": len(text)},
        )
        return {
            "id": document_id,
            "collection": collection,
            "title": fields.get("title"),
            "text": text,
        }

    async def _discard(self, object_key: str) -> None:
        try:
            await bounded(self._object_store.delete(object_key), self._timeout, "Object cleanup")
        except StudyMateError as exc:
            logger.warning("orphaned upload left behind", extra={"key": object_key, "error": str(exc)})
