"""Utility helpers for the API service."""

from .file_parsing import ensure_audio_upload, resolve_document_handler

__all__ = [
    "ensure_audio_upload",
    "resolve_document_handler",
]
