from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Optional

from docx import Document as DocxDocument
from pypdf import PdfReader

from studymate_shared.errors import ExtractionError, UnsupportedFileType

PDF_CONTENT_TYPE = "application/pdf"
DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

AUDIO_EXTENSIONS = {
    ".mp3",
    ".mp4",
    ".m4a",
    ".mpeg",
    ".mpga",
    ".wav",
    ".webm",
    ".ogg",
    ".flac",
}


def _extract_pdf(raw: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(raw))
    except Exception as exc:  # pypdf raises generic exceptions
        raise ExtractionError("Unable to open PDF file.") from exc

    pages = []
    for page in reader.pages:
        try:
            text = page.extract_text() or ""
        except Exception as exc:  # pragma: no cover
            raise ExtractionError("Unable to extract text from one of the PDF pages.") from exc
        pages.append(text.strip())

    combined = "\n\n".join(filter(None, pages)).strip()
    if not combined:
        raise ExtractionError("The PDF did not contain any extractable text.")
    return combined


def _extract_docx(raw: bytes) -> str:
    try:
        document = DocxDocument(io.BytesIO(raw))
    except Exception as exc:
        raise ExtractionError("Unable to open DOCX file.") from exc

    paragraphs = [paragraph.text.strip() for paragraph in document.paragraphs if paragraph.text.strip()]
    if not paragraphs:
        raise ExtractionError("The DOCX document did not contain any text paragraphs.")
    return "\n\n".join(paragraphs)


HANDLERS_BY_CONTENT_TYPE: dict[str, Callable[[bytes], str]] = {
    PDF_CONTENT_TYPE: _extract_pdf,
    DOCX_CONTENT_TYPE: _extract_docx,
}

HANDLERS_BY_EXTENSION: dict[str, Callable[[bytes], str]] = {
    ".pdf": _extract_pdf,
    ".docx": _extract_docx,
}


def _guess_extension(filename: Optional[str]) -> str:
    if not filename:
        return ""
    return Path(filename).suffix.lower()


def resolve_document_handler(filename: Optional[str], content_type: Optional[str]) -> Callable[[bytes], str]:
    """Return the extractor for an upload or raise :class:`UnsupportedFileType`.

    Called before any upload or provider work so that unusable files are
    rejected for free.
    """

    handler = HANDLERS_BY_CONTENT_TYPE.get((content_type or "").split(";")[0].strip().lower())
    if handler is None:
        handler = HANDLERS_BY_EXTENSION.get(_guess_extension(filename))
    if handler is None:
        raise UnsupportedFileType("Unsupported file type. Please upload a PDF or DOCX document.")
    return handler


def ensure_audio_upload(filename: Optional[str], content_type: Optional[str]) -> None:
    """Raise :class:`UnsupportedFileType` unless the upload looks like audio."""

    if content_type and content_type.lower().startswith("audio/"):
        return
    if _guess_extension(filename) in AUDIO_EXTENSIONS:
        return
    raise UnsupportedFileType("Unsupported file type. Please upload an audio recording.")
