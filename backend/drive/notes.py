"""
Note-level operations composed from folders and slots.

A NoteRepository is built per request (see routers.deps) and every method
takes the caller's access token, so nothing about a user survives the
request that served them.

Note lifecycle, observable only through Drive:

    nonexistent --create--> empty folder --save--> folder with slot files
    any live state --delete--> trashed folder (hidden from every listing)
"""

import asyncio
import base64
import binascii
import json
import logging
import re
from datetime import datetime
from typing import List, Optional

from drive import folders, slots
from drive.client import DriveClient
from drive.query import DRIVE_ROOT
from errors import MalformedDataError
from extraction.document_text import extract_text
from models.file import StoredFile
from models.note import ImageUpload, NoteData, NoteSave, NoteSummary

logger = logging.getLogger(__name__)

SKETCH_DATA_URI_PREFIX = "data:image/png;base64,"
_DATA_URI_RE = re.compile(r"^data:[\w/+.-]+;base64,")

PUBLIC_IMAGE_URL = "https://drive.google.com/uc?export=view&id={file_id}"


def decode_base64(data: str) -> bytes:
    """Decode base64, tolerating a leading ``data:...;base64,`` prefix."""
    try:
        return base64.b64decode(_DATA_URI_RE.sub("", data), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedDataError(f"Invalid base64 payload: {e}") from e


def parse_tags(content: bytes) -> List[str]:
    """
    Parse tags.json content.

    Raises:
        MalformedDataError: If the content is not a UTF-8 JSON array.
    """
    try:
        tags = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedDataError(f"not valid JSON: {e}") from e
    if not isinstance(tags, list):
        raise MalformedDataError(f"expected a list, got {type(tags).__name__}")
    return [t if isinstance(t, str) else str(t) for t in tags]


class NoteRepository:
    """
    Notes stored as Drive folders.

    Args:
        client: Drive client shared by all operations.
        root_name: Name of the per-account root folder.
    """

    def __init__(self, client: DriveClient, root_name: str):
        self.client = client
        self.root_name = root_name

    # ============================================================
    # Folders
    # ============================================================

    async def ensure_root(self, token: str) -> str:
        return await folders.ensure_root(self.client, token, self.root_name)

    async def list_notes(self, token: str) -> List[NoteSummary]:
        """All live notes, newest first."""
        root_id = await self.ensure_root(token)
        containers = await folders.list_note_containers(self.client, token, root_id)
        return [NoteSummary.from_drive(f) for f in containers]

    async def create_note(self, token: str, title: str) -> NoteSummary:
        """Create an empty note folder under the root."""
        title = title.strip() or "Untitled"
        root_id = await self.ensure_root(token)
        note_id = await folders.create_note_container(self.client, token, title, root_id)
        return NoteSummary(id=note_id, name=title)

    async def get_note_name(self, token: str, note_id: str) -> str:
        return await folders.get_container_name(self.client, token, note_id)

    async def delete_note(self, token: str, note_id: str) -> None:
        """
        Trash the note folder.

        Children are not touched individually; Drive hides the contents of
        a trashed folder along with it.
        """
        await self.client.set_trashed(token, note_id, True)
        logger.info(f"Trashed note {note_id}")

    # ============================================================
    # Slots
    # ============================================================

    async def _read_optional_text(self, token: str, file_id: Optional[str]) -> str:
        if not file_id:
            return ""
        return await slots.read_text(self.client, token, file_id)

    async def load_note(self, token: str, note_id: str) -> NoteData:
        """
        Assemble the note from its slot files.

        Lookups for summary, body and sketch run concurrently, then the two
        text downloads, then the sketch download if there is one.

        Raises:
            NotFoundError: If the note folder is unknown or trashed.
        """
        # Slot lookups on a trashed or unknown folder just come back empty,
        # which would look like a blank note.
        await self.client.get_metadata(token, note_id)

        summary_id, note_file_id, sketch_id = await asyncio.gather(
            folders.find_by_name(self.client, token, note_id, slots.SUMMARY_SLOT.name),
            folders.find_by_name(self.client, token, note_id, slots.NOTE_SLOT.name),
            folders.find_by_name(self.client, token, note_id, slots.SKETCH_SLOT.name),
        )

        summary_text, note_text = await asyncio.gather(
            self._read_optional_text(token, summary_id),
            self._read_optional_text(token, note_file_id),
        )

        sketch_base64 = None
        if sketch_id:
            sketch = await slots.read_binary(self.client, token, sketch_id)
            sketch_base64 = SKETCH_DATA_URI_PREFIX + base64.b64encode(sketch).decode("ascii")

        return NoteData(
            id=note_id,
            summary=summary_text,
            note=note_text,
            has_sketch=sketch_id is not None,
            sketch_file_id=sketch_id,
            sketch_base64=sketch_base64,
        )

    async def save_note(self, token: str, note_id: str, data: NoteSave) -> None:
        """
        Write the non-empty fields of ``data`` concurrently.

        Empty fields are skipped, never cleared. If one upload fails the
        save fails, and whatever already landed stays written.
        """
        sketch = decode_base64(data.sketch_base64) if data.sketch_base64 else None

        writes = []
        if data.summary:
            writes.append(slots.upsert(
                self.client, token, note_id, *slots.SUMMARY_SLOT, data.summary
            ))
        if data.note:
            writes.append(slots.upsert(
                self.client, token, note_id, *slots.NOTE_SLOT, data.note
            ))
        if sketch is not None:
            writes.append(slots.upsert(
                self.client, token, note_id, *slots.SKETCH_SLOT, sketch
            ))

        if not writes:
            logger.debug(f"Nothing to save for note {note_id}")
            return
        await asyncio.gather(*writes)
        logger.info(f"Saved {len(writes)} slot(s) for note {note_id}")

    async def load_tags(self, token: str, note_id: str) -> List[str]:
        """
        Read tags.json.

        A missing file, bad JSON or anything other than a JSON array all
        yield an empty list.
        """
        file_id = await folders.find_by_name(self.client, token, note_id, slots.TAGS_SLOT.name)
        if not file_id:
            return []
        content = await slots.read_binary(self.client, token, file_id)
        try:
            return parse_tags(content)
        except MalformedDataError as e:
            logger.warning(f"Ignoring tags.json in {note_id}: {e}")
            return []

    async def save_tags(self, token: str, note_id: str, tags: List[str]) -> None:
        """Replace tags.json with ``tags``. No merge with the stored list."""
        await slots.upsert(
            self.client,
            token,
            note_id,
            *slots.TAGS_SLOT,
            json.dumps(tags, ensure_ascii=False),
        )

    # ============================================================
    # Audio and documents
    # ============================================================

    async def upload_audio(
        self,
        token: str,
        note_id: str,
        data: bytes,
        file_name: Optional[str] = None,
    ) -> StoredFile:
        name = file_name or slots.audio_file_name()
        file_id = await slots.upsert(self.client, token, note_id, name, slots.AUDIO_MIME, data)
        return StoredFile(id=file_id, name=name, mime_type=slots.AUDIO_MIME)

    async def list_audio(self, token: str, note_id: str) -> List[StoredFile]:
        files = await slots.list_by_mime_prefix(self.client, token, note_id, slots.AUDIO_PREFIX)
        return [StoredFile.from_drive(f) for f in files]

    async def upload_document(
        self,
        token: str,
        note_id: str,
        file_name: str,
        mime_type: str,
        data: bytes,
    ) -> StoredFile:
        """
        Store an uploaded document in the note folder.

        Raises:
            ValueError: If ``mime_type`` is not an accepted document type.
        """
        if mime_type not in slots.DOCUMENT_MIME_TYPES:
            raise ValueError(f"Unsupported document type: {mime_type}")
        file_id = await slots.upsert(self.client, token, note_id, file_name, mime_type, data)
        return StoredFile(id=file_id, name=file_name, mime_type=mime_type)

    async def list_documents(self, token: str, note_id: str) -> List[StoredFile]:
        """Uploaded documents, newest first. summary.txt is plain text too but is not one."""
        files = await slots.list_by_mime_types(
            self.client, token, note_id, slots.DOCUMENT_MIME_TYPES
        )
        return [StoredFile.from_drive(f) for f in files if f.name not in slots.SLOT_NAMES]

    async def extract_document_text(self, token: str, file_id: str, mime_type: str) -> str:
        data = await slots.read_binary(self.client, token, file_id)
        return extract_text(data, mime_type)

    # ============================================================
    # Images embedded in markdown
    # ============================================================

    async def upload_image(
        self,
        token: str,
        file_name: str,
        mime_type: str,
        data: bytes,
    ) -> ImageUpload:
        """
        Upload an image to the top of the user's Drive and make it public.

        Markdown renderers fetch images without credentials, so the file is
        shared with anyone holding the link.
        """
        name = f"upload_{int(datetime.now().timestamp() * 1000)}_{file_name}"
        file_id = await self.client.create_file(token, DRIVE_ROOT, name, mime_type, data)
        await self.client.share_publicly(token, file_id)
        logger.info(f"Uploaded public image {name} ({file_id})")
        return ImageUpload(id=file_id, url=PUBLIC_IMAGE_URL.format(file_id=file_id))
