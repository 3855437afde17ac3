"""
Tests for root and note folder resolution.
"""

import pytest

from conftest import ROOT_NAME, TOKEN
from drive import folders
from models.file import FOLDER_MIME


@pytest.mark.asyncio
async def test_ensure_root_creates_once(fake_drive, drive_client):
    first = await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)
    second = await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)

    assert first == second
    roots = [f for f in fake_drive.files.values() if f["name"] == ROOT_NAME]
    assert len(roots) == 1
    assert roots[0]["mimeType"] == FOLDER_MIME


@pytest.mark.asyncio
async def test_ensure_root_queries_every_time(fake_drive, drive_client):
    await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)
    await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)
    assert fake_drive.count("GET") == 2


@pytest.mark.asyncio
async def test_duplicate_roots_resolve_to_newest(fake_drive, drive_client):
    fake_drive.add(ROOT_NAME, FOLDER_MIME, "root")
    newest = fake_drive.add(ROOT_NAME, FOLDER_MIME, "root")

    assert await folders.ensure_root(drive_client, TOKEN, ROOT_NAME) == newest


@pytest.mark.asyncio
async def test_root_must_sit_at_top_of_drive(fake_drive, drive_client):
    elsewhere = fake_drive.add("Archive", FOLDER_MIME, "root")
    nested = fake_drive.add(ROOT_NAME, FOLDER_MIME, elsewhere)

    root_id = await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)

    assert root_id != nested


@pytest.mark.asyncio
async def test_trashed_root_is_replaced(fake_drive, drive_client):
    old = fake_drive.add(ROOT_NAME, FOLDER_MIME, "root")
    fake_drive.files[old]["trashed"] = True

    assert await folders.ensure_root(drive_client, TOKEN, ROOT_NAME) != old


@pytest.mark.asyncio
async def test_note_containers_allow_duplicate_titles(fake_drive, drive_client):
    root_id = await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)
    a = await folders.create_note_container(drive_client, TOKEN, "Meeting", root_id)
    b = await folders.create_note_container(drive_client, TOKEN, "Meeting", root_id)

    listed = await folders.list_note_containers(drive_client, TOKEN, root_id)

    assert a != b
    assert [f.id for f in listed] == [b, a]


@pytest.mark.asyncio
async def test_list_note_containers_skips_files(fake_drive, drive_client):
    root_id = await folders.ensure_root(drive_client, TOKEN, ROOT_NAME)
    fake_drive.add("stray.txt", "text/plain", root_id)
    note = await folders.create_note_container(drive_client, TOKEN, "Note", root_id)

    listed = await folders.list_note_containers(drive_client, TOKEN, root_id)

    assert [f.id for f in listed] == [note]


@pytest.mark.asyncio
async def test_find_by_name(fake_drive, drive_client):
    folder = fake_drive.add("Note", FOLDER_MIME, "root")
    target = fake_drive.add("note.md", "text/markdown", folder)
    fake_drive.add("note.md", "text/markdown", "root")

    assert await folders.find_by_name(drive_client, TOKEN, folder, "note.md") == target
    assert await folders.find_by_name(drive_client, TOKEN, folder, "summary.txt") is None


@pytest.mark.asyncio
async def test_find_by_name_handles_quotes(fake_drive, drive_client):
    folder = fake_drive.add("Note", FOLDER_MIME, "root")
    target = fake_drive.add("it's.txt", "text/plain", folder)

    assert await folders.find_by_name(drive_client, TOKEN, folder, "it's.txt") == target


@pytest.mark.asyncio
async def test_get_container_name(fake_drive, drive_client):
    folder = fake_drive.add("会議メモ", FOLDER_MIME, "root")
    assert await folders.get_container_name(drive_client, TOKEN, folder) == "会議メモ"
