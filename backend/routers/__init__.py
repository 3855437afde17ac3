"""
API routers package.
Each router handles a specific domain of endpoints.
"""

from routers import auth, deps, notes, files, uploads, summarize

__all__ = [
    "auth",
    "deps",
    "notes",
    "files",
    "uploads",
    "summarize",
]
