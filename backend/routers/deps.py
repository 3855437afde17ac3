"""
Request-scoped collaborators.

Each request gets freshly built objects; tests swap them out through
``app.dependency_overrides``.
"""

from fastapi import Depends

from config import Settings, get_settings
from drive.client import DriveClient
from drive.notes import NoteRepository
from llm.gemini_provider import GeminiProvider
from llm.summarizer import Summarizer


def get_drive_client(settings: Settings = Depends(get_settings)) -> DriveClient:
    return DriveClient(
        api_url=settings.drive_api_url,
        upload_url=settings.drive_upload_url,
        timeout=settings.drive_timeout,
    )


def get_note_repository(
    client: DriveClient = Depends(get_drive_client),
    settings: Settings = Depends(get_settings),
) -> NoteRepository:
    return NoteRepository(client, settings.root_folder_name)


def get_summarizer(settings: Settings = Depends(get_settings)) -> Summarizer:
    provider = GeminiProvider(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        timeout=settings.gemini_timeout,
    )
    return Summarizer(provider, settings.gemini_model)
