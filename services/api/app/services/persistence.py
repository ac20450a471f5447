from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Type

from tortoise.models import Model

from studymate_shared import CollectionKind
from studymate_shared.errors import InvalidRequest, NotFound

from ..db.models import AudioRecording, Note, PastPaper, Student, User

Row = Dict[str, Any]

COLLECTION_MODELS: Dict[CollectionKind, Type[Model]] = {
    CollectionKind.AUDIO: AudioRecording,
    CollectionKind.NOTE: Note,
    CollectionKind.PAST_PAPER: PastPaper,
}


class DocumentStore(Protocol):
    """Owner-scoped row access for the document collections."""

    async def insert(self, collection: CollectionKind, fields: Mapping[str, Any]) -> int:
        ...

    async def find_by_id(self, collection: CollectionKind, document_id: int, owner_id: str) -> Row:
        ...

    async def find_all_by_owner(
        self,
        collection: CollectionKind,
        owner_id: str,
        fields: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        ...

    async def delete_by_id(self, collection: CollectionKind, document_id: int, owner_id: str) -> int:
        ...


class TortoiseDocumentStore:
    """:class:`DocumentStore` over the Tortoise models.

    Every read and delete filters on ``owner_id``; a valid id belonging to
    another owner behaves exactly like a missing one.
    """

    def __init__(self, models: Mapping[CollectionKind, Type[Model]] = COLLECTION_MODELS) -> None:
        self._models = dict(models)

    def _model(self, collection: CollectionKind) -> Type[Model]:
        return self._models[collection]

    async def insert(self, collection: CollectionKind, fields: Mapping[str, Any]) -> int:
        if not fields.get("owner_id"):
            raise InvalidRequest("Documents must be stored with an owner")
        row = await self._model(collection).create(**fields)
        return row.id

    async def find_by_id(self, collection: CollectionKind, document_id: int, owner_id: str) -> Row:
        rows = await self._model(collection).filter(id=document_id, owner_id=owner_id).values()
        if not rows:
            raise NotFound(f"No {collection.value} found for the provided ID")
        return rows[0]

    async def find_all_by_owner(
        self,
        collection: CollectionKind,
        owner_id: str,
        fields: Optional[Sequence[str]] = None,
    ) -> List[Row]:
        query = self._model(collection).filter(owner_id=owner_id).order_by("id")
        if fields:
            return await query.values(*fields)
        return await query.values()

    async def delete_by_id(self, collection: CollectionKind, document_id: int, owner_id: str) -> int:
        return await self._model(collection).filter(id=document_id, owner_id=owner_id).delete()



class StudentStore:
    """Owner-scoped student profiles."""

    async def create(self, *, owner_id: str, name: str, student_number: str, email: str) -> int:
        if not owner_id:
            raise InvalidRequest("Students must be stored with an owner")
        student = await Student.create(owner_id=owner_id, name=name, student_number=student_number, email=email)
        return student.id

    async def list_for_owner(self, owner_id: str) -> List[Row]:
        return await Student.filter(owner_id=owner_id).order_by("id").values()

    async def get(self, student_id: int, owner_id: str) -> Row:
        rows = await Student.filter(id=student_id, owner_id=owner_id).values()
        if not rows:
            raise NotFound("Student not found")
        return rows[0]

    async def delete(self, student_id: int, owner_id: str) -> int:
        return await Student.filter(id=student_id, owner_id=owner_id).delete()


async def upsert_google_user(*, google_id: str, email: Optional[str], name: Optional[str]) -> User:
    user = await User.get_or_none(google_id=google_id)
    if user is None:
        return await User.create(google_id=google_id, email=email, name=name)
    return user


async def get_user_by_google_id(google_id: str) -> Optional[User]:
    return await User.get_or_none(google_id=google_id)
