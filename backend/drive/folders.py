"""
Folder resolution on top of the Drive client.

Layout in the user's Drive:

    My Drive/
      <root folder>/          one per account, created on first use
        <note title>/         one per note, duplicates allowed
          summary.txt, note.md, ...

Nothing here is cached. Each call asks Drive again, so a root folder that
the user deletes by hand is simply recreated on the next request.
"""

import logging
from typing import List, Optional

from drive import query as q
from drive.client import DriveClient
from models.file import DriveFile

logger = logging.getLogger(__name__)


async def ensure_root(client: DriveClient, token: str, root_name: str) -> str:
    """
    Find or create the notebook root folder.

    If several folders with the root name exist (two first-time requests
    racing each other), the first in Drive's ordering wins, which is the
    newest because listings are ``createdTime desc``. The others are left
    alone.

    Args:
        client: Drive client.
        token: OAuth access token.
        root_name: Well-known root folder name.

    Returns:
        Root folder id.
    """
    matches = await client.list_files(
        token,
        q.and_(
            q.name_equals(root_name),
            q.folder_only(),
            q.in_parent(q.DRIVE_ROOT),
            q.not_trashed(),
        ),
    )
    if matches:
        if len(matches) > 1:
            logger.warning(
                f"Found {len(matches)} root folders named {root_name!r}; using {matches[0].id}"
            )
        return matches[0].id

    logger.info(f"Root folder {root_name!r} not found, creating it")
    return await client.create_folder(token, root_name)


async def create_note_container(
    client: DriveClient,
    token: str,
    title: str,
    root_id: str,
) -> str:
    """Create a note folder under the root. Titles need not be unique."""
    return await client.create_folder(token, title, parent_id=root_id)


async def list_note_containers(client: DriveClient, token: str, root_id: str) -> List[DriveFile]:
    """List note folders directly under the root, newest first."""
    return await client.list_files(
        token,
        q.and_(q.in_parent(root_id), q.folder_only(), q.not_trashed()),
    )


async def find_by_name(
    client: DriveClient,
    token: str,
    container_id: str,
    name: str,
) -> Optional[str]:
    """
    Look up a live file by exact name inside a folder.

    Returns:
        The first match's id, or None. More than one match means something
        bypassed upsert; it is not treated as an error.
    """
    matches = await client.list_files(
        token,
        q.and_(q.in_parent(container_id), q.name_equals(name), q.not_trashed()),
    )
    if not matches:
        return None
    if len(matches) > 1:
        logger.warning(f"{len(matches)} files named {name!r} in {container_id}")
    return matches[0].id


async def get_container_name(client: DriveClient, token: str, container_id: str) -> str:
    """Display name of a folder. Trashed folders raise NotFoundError."""
    folder = await client.get_metadata(token, container_id)
    return folder.name
