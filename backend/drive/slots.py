"""
Named-slot document store.

Each note folder holds at most one live file per slot name. Writes go
through upsert(): find the file by name, overwrite it in place if it
exists, create it otherwise. Overwriting in place keeps the file id, so
links handed out earlier (e.g. to the sketch) keep working.

upsert() is find-then-write and not atomic. Two writers saving the same
slot at the same moment can both miss the lookup and create duplicates;
the app assumes one editor per note at a time.
"""

import logging
from datetime import datetime
from typing import Iterable, List, NamedTuple, Optional, Union

from drive import query as q
from drive.client import DriveClient
from drive.folders import find_by_name
from extraction.document_text import DOCX_MIME, MSWORD_MIME, PDF_MIME
from models.file import DriveFile

logger = logging.getLogger(__name__)


class Slot(NamedTuple):
    name: str
    mime_type: str


SUMMARY_SLOT = Slot("summary.txt", "text/plain")
NOTE_SLOT = Slot("note.md", "text/markdown")
SKETCH_SLOT = Slot("sketch.png", "image/png")
TAGS_SLOT = Slot("tags.json", "application/json")

SLOT_NAMES = frozenset(s.name for s in (SUMMARY_SLOT, NOTE_SLOT, SKETCH_SLOT, TAGS_SLOT))

AUDIO_MIME = "audio/webm"
AUDIO_PREFIX = "audio/"

TEXT_MIME = "text/plain"

DOCUMENT_MIME_TYPES = (PDF_MIME, MSWORD_MIME, DOCX_MIME, TEXT_MIME)


async def upsert(
    client: DriveClient,
    token: str,
    container_id: str,
    name: str,
    mime_type: str,
    content: Union[str, bytes],
) -> str:
    """
    Write a complete file under ``name``, replacing any existing one.

    Args:
        client: Drive client.
        token: OAuth access token.
        container_id: Note folder id.
        name: Slot or file name.
        mime_type: Content type to store.
        content: Text (stored as UTF-8) or raw bytes.

    Returns:
        The file id (unchanged if the file already existed).
    """
    data = content.encode("utf-8") if isinstance(content, str) else content

    existing_id = await find_by_name(client, token, container_id, name)
    if existing_id:
        await client.update_content(token, existing_id, mime_type, data)
        logger.info(f"Updated {name} in {container_id}")
        return existing_id

    file_id = await client.create_file(token, container_id, name, mime_type, data)
    logger.info(f"Created {name} in {container_id}")
    return file_id


async def read_text(client: DriveClient, token: str, file_id: str) -> str:
    """Download a file and decode it as UTF-8, replacing undecodable bytes."""
    data = await client.download(token, file_id)
    return data.decode("utf-8", errors="replace")


async def read_binary(client: DriveClient, token: str, file_id: str) -> bytes:
    """Download a file unmodified."""
    return await client.download(token, file_id)


async def list_by_mime_prefix(
    client: DriveClient,
    token: str,
    container_id: str,
    prefix: str,
) -> List[DriveFile]:
    """
    List files in a folder whose MIME type starts with ``prefix``.

    Drive only offers ``contains``, which would also match e.g.
    ``video/x-audio/foo``; the result is narrowed to true prefixes here.
    """
    files = await client.list_files(
        token,
        q.and_(q.in_parent(container_id), q.mime_contains(prefix), q.not_trashed()),
    )
    return [f for f in files if f.mime_type.startswith(prefix)]


async def list_by_mime_types(
    client: DriveClient,
    token: str,
    container_id: str,
    mime_types: Iterable[str],
) -> List[DriveFile]:
    """List files in a folder whose MIME type is one of ``mime_types``."""
    allowed = tuple(mime_types)
    files = await client.list_files(
        token,
        q.and_(q.in_parent(container_id), q.mime_in(allowed), q.not_trashed()),
    )
    return [f for f in files if f.mime_type in allowed]


def audio_file_name(now: Optional[datetime] = None) -> str:
    """Timestamped name for a new recording, e.g. recording_20250101_093000.webm"""
    now = now or datetime.now()
    return f"recording_{now.strftime('%Y%m%d_%H%M%S')}.webm"
