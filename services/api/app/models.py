from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from studymate_shared import CollectionKind


class AskRequest(BaseModel):
    question: Optional[str] = Field(None, description="Question to answer from the stored documents")
    timeout_seconds: Optional[float] = Field(None, gt=0, le=300, description="Per-call provider timeout")


class SourceResponse(BaseModel):
    collection: CollectionKind
    document_id: int
    similarity: float


class AnswerResponse(BaseModel):
    answer: str
    similarity: float
    sources: List[SourceResponse] = Field(default_factory=list)


class DocumentSummary(BaseModel):
    id: int
    title: Optional[str] = None
    created_at: Optional[datetime] = None


class AudioResponse(DocumentSummary):
    transcription: str
    object_key: Optional[str] = None


class NoteResponse(DocumentSummary):
    category: str
    exam: str
    paper: str
    subject: str
    topics: str
    text: str
    object_key: Optional[str] = None


class PaperResponse(DocumentSummary):
    text: str
    object_key: Optional[str] = None


class UploadResponse(BaseModel):
    id: int
    collection: CollectionKind
    title: Optional[str] = None
    text: str
    message: str = "File uploaded and processed successfully"


class DeleteResponse(BaseModel):
    id: int
    message: str = "Deleted successfully"


class GoogleAuthRequest(BaseModel):
    token_id: str = Field(..., description="Google ID token from the client sign-in flow")


class UserResponse(BaseModel):
    id: str
    google_id: str
    email: Optional[str]
    name: Optional[str]
    created_at: datetime


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse


class StudentCreateRequest(BaseModel):
    name: Optional[str] = None
    student_number: Optional[str] = Field(None, alias="studentNumber")
    email: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class StudentResponse(BaseModel):
    id: int
    name: str
    student_number: str
    email: str
    created_at: Optional[datetime] = None


class StudentCreatedResponse(BaseModel):
    id: int
    message: str = "Student added successfully"
