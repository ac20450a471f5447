from .models import AudioRecording, Note, PastPaper, Student, User
from .session import close_db, init_db

__all__ = ["AudioRecording", "Note", "PastPaper", "Student", "User", "init_db", "close_db"]
