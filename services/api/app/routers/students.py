from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status

from studymate_shared.errors import InvalidRequest, NotFound, StudyMateError

from ..dependencies import get_student_store
from ..errors import to_http_exception
from ..models import DeleteResponse, StudentCreatedResponse, StudentCreateRequest, StudentResponse
from ..security import get_owner_id
from ..services.persistence import StudentStore

router = APIRouter(prefix="/v1/students", tags=["students"])
logger = logging.getLogger(__name__)


@router.post("", response_model=StudentCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreateRequest,
    owner_id: str = Depends(get_owner_id),
    students: StudentStore = Depends(get_student_store),
):
    fields = {"name": payload.name, "student_number": payload.student_number, "email": payload.email}
    try:
        if not all((value or "").strip() for value in fields.values()):
            raise InvalidRequest("Please provide name, student number and email.")
        student_id = await students.create(owner_id=owner_id, **fields)
    except StudyMateError as exc:
        raise to_http_exception(exc) from exc
    logger.info("student added", extra={"student_id": student_id})
    return StudentCreatedResponse(id=student_id)


@router.get("", response_model=List[StudentResponse])
async def list_students(
    owner_id: str = Depends(get_owner_id),
    students: StudentStore = Depends(get_student_store),
):
    return [StudentResponse(**row) for row in await students.list_for_owner(owner_id)]


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(
    student_id: int = Path(..., description="Student identifier"),
    owner_id: str = Depends(get_owner_id),
    students: StudentStore = Depends(get_student_store),
):
    try:
        row = await students.get(student_id, owner_id)
    except StudyMateError as exc:
        raise to_http_exception(exc) from exc
    return StudentResponse(**row)


@router.delete("/{student_id}", response_model=DeleteResponse)
async def delete_student(
    student_id: int = Path(..., description="Student identifier"),
    owner_id: str = Depends(get_owner_id),
    students: StudentStore = Depends(get_student_store),
):
    if await students.delete(student_id, owner_id) == 0:
        raise to_http_exception(NotFound("Student not found"))
    return DeleteResponse(id=student_id, message="Student deleted successfully")
