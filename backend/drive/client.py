"""
Google Drive REST v3 client.

Thin async wrapper over the handful of ``files`` calls the notebook needs:
list, get (metadata or media), create, update (content or trashed flag) and
one ``permissions`` call for public image links.

The client holds no credentials. Every method takes the caller's OAuth
access token as its first argument, so one instance can serve any number
of users and nothing about a session outlives the call that used it.

Error translation happens here and only here:
    401            -> AuthError
    404            -> NotFoundError
    other >= 400   -> RemoteOperationError
    transport fail -> RemoteOperationError
"""

import json
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional, Tuple

import httpx

from errors import AuthError, NotFoundError, RemoteOperationError
from models.file import DriveFile, FOLDER_MIME

logger = logging.getLogger(__name__)

FILE_FIELDS = "id, name, mimeType, createdTime, modifiedTime, parents, trashed"
LIST_FIELDS = f"nextPageToken, files({FILE_FIELDS})"
PAGE_SIZE = 100


class DriveClient:
    """
    Google Drive API client.

    Args:
        api_url: Base URL for metadata calls (``.../drive/v3``).
        upload_url: Base URL for media uploads (``.../upload/drive/v3``).
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport, used by tests to stand in
            for Google.
    """

    def __init__(
        self,
        api_url: str = "https://www.googleapis.com/drive/v3",
        upload_url: str = "https://www.googleapis.com/upload/drive/v3",
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.upload_url = upload_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _get_headers(self, token: str) -> Dict[str, str]:
        """Build request headers with authentication."""
        if not token:
            raise AuthError()
        return {"Authorization": f"Bearer {token}"}

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    @staticmethod
    def _raise_for_status(response: httpx.Response, what: str) -> None:
        """Translate an HTTP error status into the notebook error taxonomy."""
        status = response.status_code
        if status < 400:
            return
        if status == 401:
            logger.warning(f"Drive rejected token during {what}")
            raise AuthError()
        if status == 404:
            raise NotFoundError(f"{what}: not found")
        logger.error(f"Drive {what} failed with HTTP {status}: {response.text[:200]}")
        raise RemoteOperationError(f"{what} failed (HTTP {status})", status_code=status)

    async def _request(
        self,
        token: str,
        method: str,
        url: str,
        what: str,
        **kwargs,
    ) -> httpx.Response:
        headers = self._get_headers(token)
        headers.update(kwargs.pop("headers", {}))
        try:
            async with self._http() as client:
                response = await client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Drive {what} transport error: {e}")
            raise RemoteOperationError(f"{what} failed: {e}") from e
        self._raise_for_status(response, what)
        return response

    # ============================================================
    # Reads
    # ============================================================

    async def list_files(self, token: str, query: str) -> List[DriveFile]:
        """
        List files matching a Drive query, newest first.

        Follows ``nextPageToken`` until the listing is exhausted. An empty
        result is not an error.

        Args:
            token: OAuth access token.
            query: Drive query string (see drive.query).

        Returns:
            Matching files ordered by creation time, descending.
        """
        files: List[DriveFile] = []
        params = {
            "q": query,
            "fields": LIST_FIELDS,
            "orderBy": "createdTime desc",
            "spaces": "drive",
            "pageSize": PAGE_SIZE,
        }
        while True:
            response = await self._request(
                token, "GET", f"{self.api_url}/files", "list files", params=params
            )
            data = response.json()
            files.extend(DriveFile.model_validate(f) for f in data.get("files", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params = {**params, "pageToken": page_token}
        logger.debug(f"Drive query {query!r} returned {len(files)} file(s)")
        return files

    async def get_metadata(self, token: str, file_id: str) -> DriveFile:
        """
        Fetch a file's metadata.

        Raises:
            NotFoundError: If the id is unknown or the file is in the trash.
        """
        response = await self._request(
            token,
            "GET",
            f"{self.api_url}/files/{file_id}",
            "get file",
            params={"fields": FILE_FIELDS},
        )
        f = DriveFile.model_validate(response.json())
        if f.trashed:
            raise NotFoundError(f"get file: {file_id} is trashed", file_id=file_id)
        return f

    async def download(self, token: str, file_id: str) -> bytes:
        """
        Download a file's raw content (``alt=media``).

        Raises:
            NotFoundError: If the id is unknown or the file is in the trash.
        """
        # alt=media serves trashed files too
        await self.get_metadata(token, file_id)
        response = await self._request(
            token,
            "GET",
            f"{self.api_url}/files/{file_id}",
            "download file",
            params={"alt": "media"},
        )
        return response.content

    @asynccontextmanager
    async def download_stream(
        self, token: str, file_id: str
    ) -> AsyncIterator[Tuple[str, AsyncIterator[bytes]]]:
        """
        Stream a file's content without buffering it.

        Yields:
            ``(content_type, byte_iterator)``. The iterator is only valid
            inside the ``async with`` block.

        Raises:
            NotFoundError: If the id is unknown or the file is in the trash.
        """
        await self.get_metadata(token, file_id)
        headers = self._get_headers(token)
        try:
            async with self._http() as client:
                async with client.stream(
                    "GET",
                    f"{self.api_url}/files/{file_id}",
                    headers=headers,
                    params={"alt": "media"},
                ) as response:
                    if response.status_code >= 400:
                        await response.aread()
                    self._raise_for_status(response, "download file")
                    content_type = response.headers.get("content-type", "application/octet-stream")
                    yield content_type, response.aiter_bytes()
        except httpx.HTTPError as e:
            logger.error(f"Drive download stream error: {e}")
            raise RemoteOperationError(f"download file failed: {e}") from e

    # ============================================================
    # Writes
    # ============================================================

    async def create_folder(self, token: str, name: str, parent_id: Optional[str] = None) -> str:
        """Create a folder, optionally inside ``parent_id``. Returns its id."""
        body: Dict[str, object] = {"name": name, "mimeType": FOLDER_MIME}
        if parent_id:
            body["parents"] = [parent_id]
        response = await self._request(
            token,
            "POST",
            f"{self.api_url}/files",
            "create folder",
            params={"fields": "id"},
            json=body,
        )
        folder_id = response.json()["id"]
        logger.info(f"Created Drive folder {name!r} ({folder_id})")
        return folder_id

    async def create_file(
        self,
        token: str,
        parent_id: str,
        name: str,
        mime_type: str,
        content: bytes,
    ) -> str:
        """
        Create a file with content in one multipart upload.

        Args:
            token: OAuth access token.
            parent_id: Folder to create the file in.
            name: File name.
            mime_type: Content type of ``content``.
            content: File bytes.

        Returns:
            The new file's id.
        """
        metadata = {"name": name, "parents": [parent_id], "mimeType": mime_type}
        boundary = f"notebook-{uuid.uuid4().hex}"
        body = b"".join([
            f"--{boundary}\r\n".encode(),
            b"Content-Type: application/json; charset=UTF-8\r\n\r\n",
            json.dumps(metadata).encode("utf-8"),
            f"\r\n--{boundary}\r\n".encode(),
            f"Content-Type: {mime_type}\r\n\r\n".encode(),
            content,
            f"\r\n--{boundary}--\r\n".encode(),
        ])
        response = await self._request(
            token,
            "POST",
            f"{self.upload_url}/files",
            "create file",
            params={"uploadType": "multipart", "fields": "id"},
            headers={"Content-Type": f"multipart/related; boundary={boundary}"},
            content=body,
        )
        file_id = response.json()["id"]
        logger.debug(f"Created {name!r} ({len(content)} bytes) in {parent_id}")
        return file_id

    async def update_content(self, token: str, file_id: str, mime_type: str, content: bytes) -> None:
        """Replace a file's content in place. The file id does not change."""
        await self._request(
            token,
            "PATCH",
            f"{self.upload_url}/files/{file_id}",
            "update file",
            params={"uploadType": "media"},
            headers={"Content-Type": mime_type},
            content=content,
        )
        logger.debug(f"Replaced content of {file_id} ({len(content)} bytes)")

    async def set_trashed(self, token: str, file_id: str, trashed: bool = True) -> None:
        """Move a file or folder to (or out of) the trash."""
        await self._request(
            token,
            "PATCH",
            f"{self.api_url}/files/{file_id}",
            "trash file",
            json={"trashed": trashed},
        )
        logger.info(f"Set trashed={trashed} on {file_id}")

    async def share_publicly(self, token: str, file_id: str) -> None:
        """Let anyone with the link read the file."""
        await self._request(
            token,
            "POST",
            f"{self.api_url}/files/{file_id}/permissions",
            "share file",
            json={"role": "reader", "type": "anyone"},
        )
