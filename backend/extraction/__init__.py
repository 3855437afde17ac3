"""
Text extraction for uploaded documents.
"""

from extraction.document_text import extract_text

__all__ = ["extract_text"]
