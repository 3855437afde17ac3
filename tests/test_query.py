"""
Tests for Drive query string builders.
"""

from drive import query as q


def test_quote_escapes_quotes_and_backslashes():
    assert q.quote("plain") == "'plain'"
    assert q.quote("it's") == "'it\\'s'"
    assert q.quote("a\\b") == "'a\\\\b'"


def test_clauses():
    assert q.in_parent("abc") == "'abc' in parents"
    assert q.name_equals("note.md") == "name = 'note.md'"
    assert q.mime_contains("audio/") == "mimeType contains 'audio/'"
    assert q.not_trashed() == "trashed = false"
    assert q.folder_only() == "mimeType = 'application/vnd.google-apps.folder'"


def test_mime_in_single_and_many():
    assert q.mime_in(["text/plain"]) == "mimeType = 'text/plain'"
    assert q.mime_in(["a/b", "c/d"]) == "(mimeType = 'a/b' or mimeType = 'c/d')"


def test_and_skips_empty_clauses():
    assert q.and_("x", "", "y") == "x and y"
