"""
Google Drive storage package.
Notes are folders; note fields are fixed-name files inside them.
"""

from drive.client import DriveClient
from drive.notes import NoteRepository

__all__ = [
    "DriveClient",
    "NoteRepository",
]
