"""Error taxonomy shared by the retrieval core and the API layer.

Every failure the core can report has its own class so callers can tell
"no data" apart from "corrupt data" and "dependency down". ``kind`` is the
stable identifier returned to clients; ``status_code`` is the HTTP status the
API maps it to.
"""
from __future__ import annotations


class StudyMateError(Exception):
    """Base class for all reportable failures."""

    kind = "InternalError"
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.kind)
        self.message = message or self.kind

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class InvalidRequest(StudyMateError):
    """Raised when the caller omitted the question or document id."""

    kind = "InvalidRequest"
    status_code = 400


class NotFound(StudyMateError):
    """Raised when no document matches both the id and the owner."""

    kind = "NotFound"
    status_code = 404


class NoResults(StudyMateError):
    """Raised when the targeted collections hold no documents for the owner."""

    kind = "NoResults"
    status_code = 404


class DimensionMismatch(StudyMateError):
    """Raised when two vectors of different length are compared."""

    kind = "DimensionMismatch"
    status_code = 500


class DegenerateVector(StudyMateError):
    """Raised when a vector has zero norm."""

    kind = "DegenerateVector"
    status_code = 500


class MalformedEmbedding(StudyMateError):
    """Raised when a stored embedding does not decode to a flat numeric sequence."""

    kind = "MalformedEmbedding"
    status_code = 500


class ProviderError(StudyMateError):
    """Raised when an embedding, storage or transcription provider fails."""

    kind = "ProviderError"
    status_code = 502


class ProviderTimeout(StudyMateError):
    """Raised when an external call exceeds its timeout."""

    kind = "ProviderTimeout"
    status_code = 504


class GenerationError(StudyMateError):
    """Raised when the generation provider fails or returns an empty completion."""

    kind = "GenerationError"
    status_code = 502


class ExtractionError(StudyMateError):
    """Raised when an uploaded document cannot be turned into text."""

    kind = "ExtractionError"
    status_code = 400


class UnsupportedFileType(ExtractionError):
    """Raised when the uploaded file type is not supported."""

    kind = "UnsupportedFileType"
    status_code = 415
