"""
Note model definitions.

A note is not stored as a record anywhere. It is a Drive folder under the
notebook root plus whichever fixed-name files happen to sit inside it:

- summary.txt   plain-text summary
- note.md       markdown body
- sketch.png    hand-drawn sketch
- tags.json     JSON array of strings

plus any number of audio recordings and uploaded documents.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel

from models.file import DriveFile


class NoteCreate(BaseModel):
    """Schema for creating a new note."""
    title: str = "Untitled"


class NoteSummary(BaseModel):
    """A note folder as shown in the note list."""
    id: str
    name: str
    created_time: Optional[datetime] = None
    modified_time: Optional[datetime] = None

    @classmethod
    def from_drive(cls, f: DriveFile) -> "NoteSummary":
        return cls(
            id=f.id,
            name=f.name,
            created_time=f.created_time,
            modified_time=f.modified_time,
        )


class NoteData(BaseModel):
    """
    Full note state assembled from the folder's slot files.

    Missing text slots come back as empty strings. The sketch, when present,
    is inlined as a ``data:image/png;base64,...`` URI so a browser can show
    it without a second request.
    """
    id: str
    summary: str = ""
    note: str = ""
    has_sketch: bool = False
    sketch_file_id: Optional[str] = None
    sketch_base64: Optional[str] = None


class NoteSave(BaseModel):
    """
    Fields to write on save.

    Empty or missing fields are skipped, not cleared: saving an empty
    summary leaves the previously stored summary untouched.
    """
    summary: str = ""
    note: str = ""
    sketch_base64: Optional[str] = None


class NoteTags(BaseModel):
    """Tag list stored in tags.json."""
    tags: List[str] = []


class AudioUpload(BaseModel):
    """A recorded clip sent as base64 from the browser."""
    audio_base64: str
    file_name: Optional[str] = None


class DocumentUpload(BaseModel):
    """A document sent as base64 from the browser."""
    file_name: str
    mime_type: str
    data_base64: str


class ImageUpload(BaseModel):
    """Result of uploading an image for embedding in markdown."""
    id: str
    url: str
