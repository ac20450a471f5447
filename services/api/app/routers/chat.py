from fastapi import APIRouter, Depends

from studymate_shared.errors import StudyMateError

from ..dependencies import get_orchestrator
from ..errors import to_http_exception, unexpected_error
from ..models import AnswerResponse, AskRequest, SourceResponse
from ..security import get_owner_id
from ..services.answering import AnswerOrchestrator

router = APIRouter(prefix="/v1/chat", tags=["chat"])


@router.post("", response_model=AnswerResponse)
async def chat(
    payload: AskRequest,
    owner_id: str = Depends(get_owner_id),
    orchestrator: AnswerOrchestrator = Depends(get_orchestrator),
):
    """Answer a question from every collection the question points at."""

    try:
        answer = await orchestrator.answer_corpus(
            owner_id,
            payload.question,
            timeout_seconds=payload.timeout_seconds,
        )
    except StudyMateError as exc:
        raise to_http_exception(exc) from exc
    except Exception as exc:
        raise unexpected_error(exc, "chat") from exc

    return AnswerResponse(
        answer=answer.answer,
        similarity=answer.similarity,
        sources=[SourceResponse(**source.model_dump()) for source in answer.sources],
    )
