"""
File access router.

Serves Drive files by id: raw content (for images embedded in notes and
audio playback) and extracted text (for documents about to be summarized).
"""

import logging
from contextlib import AsyncExitStack

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from drive.client import DriveClient
from drive.notes import NoteRepository
from routers.auth import get_access_token
from routers.deps import get_drive_client, get_note_repository

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/{file_id}/text")
async def get_file_text(
    file_id: str,
    mime_type: str = Query("text/plain", description="MIME type recorded for the file"),
    token: str = Depends(get_access_token),
    repo: NoteRepository = Depends(get_note_repository),
) -> dict:
    """Extract plain text from a stored PDF, Word or text document."""
    text = await repo.extract_document_text(token, file_id, mime_type)
    return {"text": text}


@router.get("/{file_id}")
async def get_file(
    file_id: str,
    token: str = Depends(get_access_token),
    client: DriveClient = Depends(get_drive_client),
) -> StreamingResponse:
    """
    Stream a file's content with the content type Drive reports.

    The Drive response stays open until the body has been sent, so the
    exit stack is closed from the body iterator rather than here.
    """
    stack = AsyncExitStack()
    content_type, chunks = await stack.enter_async_context(
        client.download_stream(token, file_id)
    )

    async def _body():
        try:
            async for chunk in chunks:
                yield chunk
        finally:
            await stack.aclose()

    return StreamingResponse(
        _body(),
        media_type=content_type,
        headers={"Cache-Control": "public, max-age=3600"},
    )
