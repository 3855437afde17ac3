"""
Pydantic models for Google Drive file metadata.

Drive's REST API speaks camelCase; aliases map it onto snake_case fields so
the rest of the backend never sees the wire names.
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

FOLDER_MIME = "application/vnd.google-apps.folder"


class DriveFile(BaseModel):
    """A file or folder as returned by the Drive files resource.

    Attributes:
        id: Provider-assigned opaque identifier.
        name: Display name (not unique within a folder).
        mime_type: MIME type; folders use FOLDER_MIME.
        created_time: Creation timestamp.
        modified_time: Last content/metadata change.
        parents: Parent folder ids (Drive allows one per item nowadays).
        trashed: Soft-deleted flag.
    """
    id: str
    name: str = ""
    mime_type: str = Field("", alias="mimeType")
    created_time: Optional[datetime] = Field(None, alias="createdTime")
    modified_time: Optional[datetime] = Field(None, alias="modifiedTime")
    parents: List[str] = []
    trashed: bool = False

    model_config = ConfigDict(populate_by_name=True)


class StoredFile(BaseModel):
    """A file inside a note folder, as returned to API clients."""
    id: str
    name: str
    mime_type: str
    created_time: Optional[datetime] = None

    @classmethod
    def from_drive(cls, f: DriveFile) -> "StoredFile":
        return cls(
            id=f.id,
            name=f.name,
            mime_type=f.mime_type,
            created_time=f.created_time,
        )
