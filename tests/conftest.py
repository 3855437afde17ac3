"""
Shared pytest fixtures for notebook tests.

Provides an in-memory Google Drive behind httpx.MockTransport, so the real
DriveClient request code runs without network access, and a mock LLM
provider for summarization.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import httpx
import pytest

from drive.client import DriveClient
from drive.notes import NoteRepository
from llm.base import LLMProvider, LLMResponse, StreamChunk
from models.file import FOLDER_MIME

TOKEN = "test-token"
ROOT_NAME = "ノート管理"

_EPOCH = datetime(2025, 1, 1, tzinfo=timezone.utc)


# ============================================================
# Drive query evaluation
# ============================================================

def _split_top_level(text: str, sep: str) -> List[str]:
    """Split on ``sep`` outside quoted literals and parentheses."""
    parts, buf = [], []
    depth, in_quote, i = 0, False, 0
    while i < len(text):
        ch = text[i]
        if in_quote:
            buf.append(ch)
            if ch == "\\" and i + 1 < len(text):
                buf.append(text[i + 1])
                i += 2
                continue
            if ch == "'":
                in_quote = False
        elif ch == "'":
            in_quote = True
            buf.append(ch)
        elif ch == "(":
            depth += 1
            buf.append(ch)
        elif ch == ")":
            depth -= 1
            buf.append(ch)
        elif depth == 0 and text.startswith(sep, i):
            parts.append("".join(buf).strip())
            buf = []
            i += len(sep)
            continue
        else:
            buf.append(ch)
        i += 1
    parts.append("".join(buf).strip())
    return parts


_LIT = r"'((?:[^'\\]|\\.)*)'"


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


class FakeDrive:
    """
    Minimal Google Drive v3 emulation.

    Supports exactly the calls DriveClient makes. Trashing a folder hides
    everything below it, like the real service.
    """

    def __init__(self, valid_tokens=(TOKEN,)):
        self.valid_tokens = set(valid_tokens)
        self.files: Dict[str, Dict[str, Any]] = {}
        self.contents: Dict[str, bytes] = {}
        self.permissions: Dict[str, List[dict]] = {}
        self.requests: List[httpx.Request] = []
        self._counter = 0
        self._failures: List[dict] = []

    # ------------------------------------------------------------
    # Test helpers
    # ------------------------------------------------------------

    def add(
        self,
        name: str,
        mime_type: str,
        parent: Optional[str] = "root",
        content: bytes = b"",
    ) -> str:
        """Insert a file or folder directly, bypassing the API."""
        self._counter += 1
        file_id = f"f{self._counter:04d}"
        ts = (_EPOCH + timedelta(seconds=self._counter)).strftime("%Y-%m-%dT%H:%M:%S.000Z")
        self.files[file_id] = {
            "id": file_id,
            "name": name,
            "mimeType": mime_type,
            "parents": [parent] if parent else [],
            "createdTime": ts,
            "modifiedTime": ts,
            "trashed": False,
            "_seq": self._counter,
        }
        if mime_type != FOLDER_MIME:
            self.contents[file_id] = content
        return file_id

    def fail(self, status: int, method: Optional[str] = None, path_contains: str = "") -> None:
        """Make the next matching request fail with ``status``."""
        self._failures.append({"status": status, "method": method, "path": path_contains})

    def is_trashed(self, file_id: str) -> bool:
        f = self.files.get(file_id)
        while f is not None:
            if f["trashed"]:
                return True
            parents = f["parents"]
            f = self.files.get(parents[0]) if parents else None
        return False

    def live_children(self, parent_id: str, name: Optional[str] = None) -> List[dict]:
        return [
            f for fid, f in self.files.items()
            if parent_id in f["parents"]
            and not self.is_trashed(fid)
            and (name is None or f["name"] == name)
        ]

    def count(self, method: str, path_contains: str = "") -> int:
        return sum(
            1 for r in self.requests
            if r.method == method and path_contains in r.url.path
        )

    # ------------------------------------------------------------
    # Query language
    # ------------------------------------------------------------

    def _clause(self, clause: str, file_id: str) -> bool:
        f = self.files[file_id]
        if clause.startswith("(") and clause.endswith(")"):
            return any(self._clause(c, file_id) for c in _split_top_level(clause[1:-1], " or "))
        if m := re.fullmatch(_LIT + r" in parents", clause):
            return _unescape(m.group(1)) in f["parents"]
        if m := re.fullmatch(r"name = " + _LIT, clause):
            return f["name"] == _unescape(m.group(1))
        if m := re.fullmatch(r"mimeType = " + _LIT, clause):
            return f["mimeType"] == _unescape(m.group(1))
        if m := re.fullmatch(r"mimeType contains " + _LIT, clause):
            return _unescape(m.group(1)) in f["mimeType"]
        if m := re.fullmatch(r"trashed = (true|false)", clause):
            return self.is_trashed(file_id) == (m.group(1) == "true")
        raise AssertionError(f"Unsupported query clause: {clause!r}")

    def query(self, q: str) -> List[dict]:
        clauses = _split_top_level(q, " and ")
        matches = [
            f for fid, f in self.files.items()
            if all(self._clause(c, fid) for c in clauses)
        ]
        return sorted(matches, key=lambda f: f["_seq"], reverse=True)

    # ------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------

    @staticmethod
    def _public(f: dict) -> dict:
        return {k: v for k, v in f.items() if not k.startswith("_")}

    @staticmethod
    def _error(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"error": {"code": status, "message": message}})

    def _parse_multipart(self, request: httpx.Request):
        boundary = request.headers["content-type"].split("boundary=")[1]
        sections = request.content.split(f"--{boundary}".encode())
        parts = []
        for section in sections:
            section = section.removeprefix(b"\r\n").removesuffix(b"\r\n")
            if not section or section == b"--":
                continue
            head, _, body = section.partition(b"\r\n\r\n")
            parts.append((head.decode(), body))
        metadata = json.loads(parts[0][1])
        return metadata, parts[1][1]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        for failure in list(self._failures):
            if (failure["method"] in (None, request.method)
                    and failure["path"] in request.url.path):
                self._failures.remove(failure)
                return self._error(failure["status"], "injected failure")

        auth = request.headers.get("authorization", "")
        if auth.removeprefix("Bearer ") not in self.valid_tokens:
            return self._error(401, "Invalid Credentials")

        path = request.url.path
        params = request.url.params
        upload = path.startswith("/upload/")
        segments = path.split("/files", 1)[1].strip("/").split("/") if "/files" in path else []
        file_id = segments[0] if segments and segments[0] else None

        if request.method == "GET" and file_id is None:
            files = self.query(params["q"])
            size = int(params.get("pageSize", 100))
            start = int(params.get("pageToken", 0))
            page = files[start:start + size]
            body = {"files": [self._public(f) for f in page]}
            if start + size < len(files):
                body["nextPageToken"] = str(start + size)
            return httpx.Response(200, json=body)

        if file_id is not None and file_id not in self.files:
            return self._error(404, f"File not found: {file_id}")

        if request.method == "GET":
            f = self.files[file_id]
            if params.get("alt") == "media":
                return httpx.Response(
                    200,
                    content=self.contents.get(file_id, b""),
                    headers={"content-type": f["mimeType"]},
                )
            return httpx.Response(200, json={**self._public(f), "trashed": self.is_trashed(file_id)})

        if request.method == "POST" and file_id is None:
            if upload:
                metadata, content = self._parse_multipart(request)
            else:
                metadata, content = json.loads(request.content), b""
            parents = metadata.get("parents") or ["root"]
            new_id = self.add(metadata["name"], metadata.get("mimeType", ""), parents[0], content)
            return httpx.Response(200, json={"id": new_id})

        if request.method == "POST" and segments[1:] == ["permissions"]:
            self.permissions.setdefault(file_id, []).append(json.loads(request.content))
            return httpx.Response(200, json={"id": "anyoneWithLink"})

        if request.method == "PATCH":
            f = self.files[file_id]
            if upload:
                self.contents[file_id] = request.content
                f["mimeType"] = request.headers.get("content-type", f["mimeType"])
            else:
                body = json.loads(request.content)
                if "trashed" in body:
                    f["trashed"] = body["trashed"]
            return httpx.Response(200, json=self._public(f))

        return self._error(400, f"Unhandled {request.method} {path}")


# ============================================================
# LLM
# ============================================================

class MockLLMProvider(LLMProvider):
    """Records requests and answers with a canned summary."""

    provider_name = "mock"

    def __init__(self, reply: str = "要約結果", error: Optional[Exception] = None):
        super().__init__()
        self.reply = reply
        self.error = error
        self.calls: List[dict] = []

    async def generate(self, parts, model, temperature=None, max_tokens=None, **kwargs):
        self.calls.append({"parts": parts, "model": model, "stream": False})
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply, model=model, provider=self.provider_name)

    async def stream(self, parts, model, temperature=None, max_tokens=None, **kwargs):
        self.calls.append({"parts": parts, "model": model, "stream": True})
        if self.error:
            raise self.error
        for piece in self.reply.split(" "):
            yield StreamChunk(content=piece)
        yield StreamChunk(content="", is_done=True)


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def fake_drive():
    """Fresh, empty in-memory Drive."""
    return FakeDrive()


@pytest.fixture
def drive_client(fake_drive):
    return DriveClient(transport=httpx.MockTransport(fake_drive.handler))


@pytest.fixture
def repo(drive_client):
    return NoteRepository(drive_client, ROOT_NAME)


@pytest.fixture
def mock_llm():
    return MockLLMProvider()
