"""
Builders for Drive ``files.list`` query strings.

Drive's query language quotes string literals with single quotes and uses
backslash escapes inside them. Every user-controlled value (note titles,
file names) goes through quote() before it reaches a query.

Typical usage:
    q = and_(in_parent(folder_id), name_equals("note.md"), not_trashed())
"""

from models.file import FOLDER_MIME

# Alias Drive accepts for the top of "My Drive"
DRIVE_ROOT = "root"


def quote(value: str) -> str:
    """Quote a string literal for a Drive query."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def in_parent(parent_id: str) -> str:
    return f"{quote(parent_id)} in parents"


def name_equals(name: str) -> str:
    return f"name = {quote(name)}"


def mime_equals(mime_type: str) -> str:
    return f"mimeType = {quote(mime_type)}"


def mime_contains(fragment: str) -> str:
    return f"mimeType contains {quote(fragment)}"


def mime_in(mime_types) -> str:
    """Match any of several exact MIME types."""
    clauses = [mime_equals(m) for m in mime_types]
    if len(clauses) == 1:
        return clauses[0]
    return "(" + " or ".join(clauses) + ")"


def folder_only() -> str:
    return mime_equals(FOLDER_MIME)


def not_trashed() -> str:
    return "trashed = false"


def and_(*clauses: str) -> str:
    return " and ".join(c for c in clauses if c)
