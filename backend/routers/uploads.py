"""
Image upload router.

Images pasted into the markdown editor are uploaded to the top of the
user's Drive, shared by link, and referenced from the note by URL.
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, UploadFile, File

from config import Settings, get_settings
from drive.notes import NoteRepository
from models.note import ImageUpload
from routers.auth import get_access_token
from routers.deps import get_note_repository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/images", response_model=ImageUpload)
async def upload_image(
    file: UploadFile = File(...),
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
    settings: Settings = Depends(get_settings),
) -> ImageUpload:
    """Upload an image and return a public URL for embedding.

    Args:
        file: The uploaded image (multipart form data).

    Returns:
        ImageUpload with the Drive file id and view URL.

    Raises:
        HTTPException: If the file is not an image or is too large.
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail=f"Unsupported file type: {content_type}")

    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Max size: {settings.max_upload_bytes // (1024*1024)} MB",
        )

    return await repo.upload_image(token, file.filename or "image", content_type, content)
