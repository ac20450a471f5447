import logging

from fastapi import HTTPException, status

from studymate_shared.errors import StudyMateError

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_DETAIL = "An unexpected error occurred while processing your request. Please try again."


def to_http_exception(exc: StudyMateError) -> HTTPException:
    """One error kind, one response: ``{"error": kind, "message": ...}``."""

    return HTTPException(status_code=exc.status_code, detail=exc.to_dict())


def unexpected_error(exc: Exception, operation: str) -> HTTPException:
    logger.error(f"Unexpected error in {operation}: {str(exc)}", exc_info=exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=UNEXPECTED_ERROR_DETAIL)
