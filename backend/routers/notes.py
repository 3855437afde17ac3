"""
Notes router.
Handles CRUD operations for notes stored as Google Drive folders.

Each note is a folder under the notebook root. Its summary, markdown body,
sketch and tags are fixed-name files inside the folder; audio recordings
and uploaded documents sit alongside them.
"""

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Depends

from config import Settings, get_settings
from drive.notes import NoteRepository, decode_base64
from models.file import StoredFile
from models.note import (
    AudioUpload,
    DocumentUpload,
    NoteCreate,
    NoteData,
    NoteSave,
    NoteSummary,
    NoteTags,
)
from routers.auth import get_access_token
from routers.deps import get_note_repository

logger = logging.getLogger(__name__)
router = APIRouter()


def _check_size(data: bytes, settings: Settings) -> None:
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max size: {settings.max_upload_bytes // (1024*1024)} MB",
        )


@router.post("/root")
async def ensure_root_folder(
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> dict:
    """Make sure the notebook root folder exists."""
    root_id = await repo.ensure_root(token)
    return {"success": True, "id": root_id}


@router.get("", response_model=List[NoteSummary])
async def list_notes(
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> List[NoteSummary]:
    """List the user's notes, newest first."""
    return await repo.list_notes(token)


@router.post("", response_model=NoteSummary)
async def create_note(
    data: NoteCreate,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteSummary:
    """Create a new, empty note."""
    note = await repo.create_note(token, data.title)
    logger.info(f"Created note {note.name!r} ({note.id})")
    return note


@router.get("/{note_id}", response_model=NoteData)
async def get_note(
    note_id: str,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteData:
    """Load summary, body and sketch of a note."""
    return await repo.load_note(token, note_id)


@router.put("/{note_id}")
async def save_note(
    note_id: str,
    data: NoteSave,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> dict:
    """
    Save a note.

    Only non-empty fields are written; an empty summary keeps the stored one.
    """
    await repo.save_note(token, note_id, data)
    return {"success": True}


@router.delete("/{note_id}")
async def delete_note(
    note_id: str,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> dict:
    """Move the note folder, and with it everything inside, to the trash."""
    await repo.delete_note(token, note_id)
    return {"success": True}


@router.get("/{note_id}/name")
async def get_note_name(
    note_id: str,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> dict:
    """Get a note's title (its folder name)."""
    return {"name": await repo.get_note_name(token, note_id)}


# ============================================================
# Tags
# ============================================================

@router.get("/{note_id}/tags", response_model=NoteTags)
async def get_tags(
    note_id: str,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> NoteTags:
    return NoteTags(tags=await repo.load_tags(token, note_id))


@router.put("/{note_id}/tags")
async def save_tags(
    note_id: str,
    data: NoteTags,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> dict:
    """Replace the note's tag list."""
    await repo.save_tags(token, note_id, data.tags)
    return {"success": True}


# ============================================================
# Audio recordings
# ============================================================

@router.get("/{note_id}/audio", response_model=List[StoredFile])
async def list_audio(
    note_id: str,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> List[StoredFile]:
    return await repo.list_audio(token, note_id)


@router.post("/{note_id}/audio", response_model=StoredFile)
async def upload_audio(
    note_id: str,
    data: AudioUpload,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
    settings: Settings = Depends(get_settings),
) -> StoredFile:
    """Store a recording (base64 webm) in the note folder."""
    audio = decode_base64(data.audio_base64)
    _check_size(audio, settings)
    return await repo.upload_audio(token, note_id, audio, data.file_name)


# ============================================================
# Documents
# ============================================================

@router.get("/{note_id}/documents", response_model=List[StoredFile])
async def list_documents(
    note_id: str,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> List[StoredFile]:
    return await repo.list_documents(token, note_id)


@router.post("/{note_id}/documents", response_model=StoredFile)
async def upload_document(
    note_id: str,
    data: DocumentUpload,
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
    settings: Settings = Depends(get_settings),
) -> StoredFile:
    """Store a PDF, Word or text document in the note folder."""
    content = decode_base64(data.data_base64)
    _check_size(content, settings)
    try:
        return await repo.upload_document(
            token, note_id, data.file_name, data.mime_type, content
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
