"""
Plain-text extraction for uploaded documents.

Routes on the MIME type Drive recorded for the file:

- application/pdf                  -> pypdf, page text joined by blank lines
- Word (.docx, and .doc labelled)  -> python-docx paragraph text
- anything else                    -> bytes decoded as UTF-8

python-docx only reads the OOXML format. A genuine legacy binary .doc
cannot be opened and raises MalformedDataError.
"""

import io
import logging

import docx as python_docx
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from errors import MalformedDataError

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
MSWORD_MIME = "application/msword"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def parse_txt(file_bytes: bytes) -> str:
    """Decode plain text, replacing undecodable bytes."""
    return file_bytes.decode("utf-8", errors="replace")


def parse_pdf(file_bytes: bytes) -> str:
    """Extract text from a PDF file.

    Args:
        file_bytes: Raw PDF bytes.

    Returns:
        Concatenated text from all pages.

    Raises:
        MalformedDataError: If the bytes are not a readable PDF.
    """
    try:
        reader = PdfReader(io.BytesIO(file_bytes))
        pages = []
        for page in reader.pages:
            text = page.extract_text()
            if text:
                pages.append(text)
    except PdfReadError as e:
        raise MalformedDataError(f"Unreadable PDF: {e}") from e
    return "\n\n".join(pages)


def parse_docx(file_bytes: bytes) -> str:
    """Extract text from a Word document.

    Args:
        file_bytes: Raw DOCX bytes.

    Returns:
        Paragraph text, one paragraph per line.

    Raises:
        MalformedDataError: If the bytes are not an OOXML document.
    """
    try:
        doc = python_docx.Document(io.BytesIO(file_bytes))
    except Exception as e:
        # python-docx surfaces zipfile/KeyError/ValueError depending on how
        # the input is broken
        raise MalformedDataError(f"Unreadable Word document: {e}") from e
    return "\n".join(p.text for p in doc.paragraphs)


def extract_text(file_bytes: bytes, mime_type: str) -> str:
    """Extract plain text from document bytes based on their MIME type.

    Args:
        file_bytes: Raw file content.
        mime_type: MIME type recorded for the file.

    Returns:
        Extracted text. Unknown types are decoded as UTF-8.
    """
    if mime_type == PDF_MIME:
        text = parse_pdf(file_bytes)
    elif mime_type in (DOCX_MIME, MSWORD_MIME):
        text = parse_docx(file_bytes)
    else:
        text = parse_txt(file_bytes)
    logger.debug(f"Extracted {len(text)} chars from {len(file_bytes)} bytes ({mime_type})")
    return text
