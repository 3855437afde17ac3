"""
Pydantic models package.
Each module contains models for a specific domain.
"""

from models.file import DriveFile, StoredFile
from models.note import (
    NoteCreate, NoteSummary, NoteData, NoteSave, NoteTags,
    AudioUpload, DocumentUpload, ImageUpload,
)
from models.summary import SummarizeRequest, SummarizeResponse

__all__ = [
    "DriveFile", "StoredFile",
    "NoteCreate", "NoteSummary", "NoteData", "NoteSave", "NoteTags",
    "AudioUpload", "DocumentUpload", "ImageUpload",
    "SummarizeRequest", "SummarizeResponse",
]
