import io
import json

import pytest
from docx import Document as DocxDocument

from studymate_shared import CollectionKind
from studymate_shared.errors import ExtractionError, InvalidRequest, ProviderError, UnsupportedFileType

from app.services.generation import AnswerSynthesizer
from app.services.ingestion import IngestionService

from conftest import FakeEmbedder, FakeGenerator, FakeObjectStore, FakeTranscriber

PDF_SAMPLE = (
    b"%PDF-1.1\n"
    b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"2 0 obj\n<< /Type /Pages /Kids [3 0 R] /Count 1 >>\nendobj\n"
    b"3 0 obj\n<< /Type /Page /Parent 2 0 R /MediaBox [0 0 300 144] /Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>\nendobj\n"
    b"4 0 obj\n<< /Length 55 >>\nstream\nBT /F1 24 Tf 10 100 Td (Hello PDF) Tj ET\nendstream\nendobj\n"
    b"5 0 obj\n<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>\nendobj\n"
    b"xref\n0 6\n0000000000 65535 f \n0000000010 00000 n \n0000000061 00000 n \n0000000116 00000 n \n0000000203 00000 n \n0000000284 00000 n \n"
    b"trailer\n<< /Size 6 /Root 1 0 R >>\nstartxref\n334\n%%EOF\n"
)

DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

NOTE_METADATA = {
    "title": "Cell division",
    "category": "science",
    "exam": "midterm",
    "paper": "1",
    "subject": "biology",
    "topics": "mitosis",
}


def _docx_bytes(*paragraphs):
    document = DocxDocument()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def _service(store, **overrides):
    parts = {
        "embedder": FakeEmbedder(),
        "transcriber": FakeTranscriber(),
        "object_store": FakeObjectStore(),
        "generator": FakeGenerator(reply="Mitosis Overview"),
    }
    parts.update(overrides)
    service = IngestionService(
        store=store,
        object_store=parts["object_store"],
        embedder=parts["embedder"],
        transcriber=parts["transcriber"],
        synthesizer=AnswerSynthesizer(parts["generator"]),
        timeout_seconds=2.0,
    )
    return service, parts


@pytest.mark.asyncio
async def test_audio_ingestion_transcribes_titles_and_embeds(store):
    service, parts = _service(store)

    result = await service.ingest_audio(owner_id="u", raw=b"RIFF....", filename="lecture 1.wav", content_type="audio/wav")

    assert result["collection"] == CollectionKind.AUDIO
    assert result["title"] == "Mitosis Overview"
    row = store.rows[CollectionKind.AUDIO][0]
    assert row["owner_id"] == "u"
    assert row["transcription"] == "Today we cover the phases of mitosis."
    assert json.loads(row["embedding"]) == [1.0, 0.0, 0.0]
    assert row["object_key"].startswith("audio/") and row["object_key"].endswith("_lecture_1.wav")
    assert parts["object_store"].objects[row["object_key"]] == b"RIFF...."
    assert parts["embedder"].calls == ["Today we cover the phases of mitosis."]


@pytest.mark.asyncio
async def test_empty_transcription_is_an_extraction_error(store):
    service, parts = _service(store, transcriber=FakeTranscriber(transcript=""))

    with pytest.raises(ExtractionError):
        await service.ingest_audio(owner_id="u", raw=b"data", filename="a.mp3", content_type="audio/mpeg")

    assert parts["embedder"].calls == []
    assert store.rows[CollectionKind.AUDIO] == []
    assert parts["object_store"].objects == {}


@pytest.mark.asyncio
async def test_note_ingestion_extracts_docx_and_keeps_metadata(store):
    service, _parts = _service(store)

    result = await service.ingest_note(
        owner_id="u",
        raw=_docx_bytes("Mitosis has four phases", "Prophase comes first"),
        filename="notes.docx",
        content_type=DOCX_TYPE,
        metadata=NOTE_METADATA,
    )

    row = store.rows[CollectionKind.NOTE][0]
    assert result["title"] == "Cell division"
    assert row["text"] == "Mitosis has four phases\n\nProphase comes first"
    assert row["subject"] == "biology"
    assert json.loads(row["vector"]) == [1.0, 0.0, 0.0]


@pytest.mark.asyncio
async def test_note_ingestion_requires_all_metadata(store):
    service, parts = _service(store)
    metadata = dict(NOTE_METADATA, topics="")

    with pytest.raises(InvalidRequest):
        await service.ingest_note(
            owner_id="u", raw=b"%PDF", filename="n.pdf", content_type="application/pdf", metadata=metadata
        )
    assert parts["object_store"].objects == {}


@pytest.mark.asyncio
async def test_paper_ingestion_extracts_pdf_and_generates_title(store):
    service, parts = _service(store)

    result = await service.ingest_paper(owner_id="u", raw=PDF_SAMPLE, filename="2023.pdf", content_type="application/pdf")

    row = store.rows[CollectionKind.PAST_PAPER][0]
    assert "Hello PDF" in row["text"]
    assert row["title"] == "Mitosis Overview"
    assert result["id"] == row["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "filename, content_type",
    [("image.png", "image/png"), ("notes.txt", "text/plain"), ("sheet.csv", None)],
)
async def test_unsupported_documents_are_rejected_before_provider_calls(store, filename, content_type):
    embedder = FakeEmbedder()
    generator = FakeGenerator()
    object_store = FakeObjectStore()
    service, _parts = _service(store, embedder=embedder, generator=generator, object_store=object_store)

    with pytest.raises(UnsupportedFileType):
        await service.ingest_paper(owner_id="u", raw=b"data", filename=filename, content_type=content_type)

    assert embedder.calls == []
    assert generator.calls == []
    assert object_store.objects == {}


@pytest.mark.asyncio
async def test_non_audio_upload_is_rejected_before_transcription(store):
    transcriber = FakeTranscriber()
    service, _parts = _service(store, transcriber=transcriber)

    with pytest.raises(UnsupportedFileType):
        await service.ingest_audio(owner_id="u", raw=b"%PDF", filename="paper.pdf", content_type="application/pdf")

    assert transcriber.calls == []


@pytest.mark.asyncio
async def test_corrupt_pdf_is_an_extraction_error(store):
    embedder = FakeEmbedder()
    object_store = FakeObjectStore()
    service, _parts = _service(store, embedder=embedder, object_store=object_store)

    with pytest.raises(ExtractionError):
        await service.ingest_paper(owner_id="u", raw=b"not really a pdf", filename="x.pdf", content_type="application/pdf")

    assert embedder.calls == []
    assert object_store.objects == {}


class _BrokenEmbedder:
    async def embed(self, text):
        raise ProviderError("embedding service down")


class _RejectingStore:
    async def insert(self, collection, fields):
        raise ProviderError("database unavailable")


@pytest.mark.asyncio
async def test_failed_embedding_uploads_nothing(store):
    service, parts = _service(store, embedder=_BrokenEmbedder())

    with pytest.raises(ProviderError):
        await service.ingest_paper(owner_id="u", raw=PDF_SAMPLE, filename="2023.pdf", content_type="application/pdf")

    assert parts["object_store"].objects == {}
    assert store.rows[CollectionKind.PAST_PAPER] == []


@pytest.mark.asyncio
async def test_failed_insert_removes_the_upload():
    service, parts = _service(_RejectingStore())

    with pytest.raises(ProviderError):
        await service.ingest_audio(owner_id="u", raw=b"RIFF", filename="lecture.wav", content_type="audio/wav")

    assert parts["object_store"].objects == {}
