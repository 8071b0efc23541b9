"""
services/documents.py
────────────────────────────────────────────────────────────────────────
Text extraction for uploaded client documents.

* PDF   → pypdf
* DOCX  → python-docx (paragraphs, then table cells)
* DOC   → rejected: the legacy binary format has no extractor here
* text/* → content already arrives as plain text
"""
from __future__ import annotations

import io
import logging
import zipfile
from enum import Enum

import docx
from docx.opc.exceptions import PackageNotFoundError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from services.errors import ExtractionError
from services.providers.base import ImagePayload

_LOG = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
DOC_MIME = "application/msword"


class DocumentKind(str, Enum):
    image = "image"
    pdf = "pdf"
    docx = "docx"
    legacy_doc = "legacy_doc"
    text = "text"
    unsupported = "unsupported"


def classify(mime_type: str | None) -> DocumentKind:
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return DocumentKind.image
    if mime == PDF_MIME:
        return DocumentKind.pdf
    if mime == DOCX_MIME:
        return DocumentKind.docx
    if mime == DOC_MIME:
        return DocumentKind.legacy_doc
    if mime.startswith("text/"):
        return DocumentKind.text
    return DocumentKind.unsupported


def extract_pdf_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except (PdfReadError, ValueError) as exc:
        raise ExtractionError(f"Failed to extract text from PDF: {exc}") from exc
    return "\n".join(p.strip() for p in pages if p.strip())


def extract_docx_text(data: bytes) -> str:
    try:
        document = docx.Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise ExtractionError(f"Failed to extract text from Word document: {exc}") from exc

    lines = [p.text for p in document.paragraphs if p.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [c.text.strip() for c in row.cells if c.text.strip()]
            if cells:
                lines.append(" | ".join(cells))
    return "\n".join(lines)


def document_text(file_content: str, mime_type: str) -> str:
    """Plain text for a non-image upload, ready to embed in a prompt."""
    kind = classify(mime_type)

    if kind is DocumentKind.text:
        text = file_content
    elif kind is DocumentKind.pdf:
        text = extract_pdf_text(ImagePayload(file_content, mime_type).raw_bytes())
    elif kind is DocumentKind.docx:
        text = extract_docx_text(ImagePayload(file_content, mime_type).raw_bytes())
    elif kind is DocumentKind.legacy_doc:
        raise ExtractionError(
            "Only .docx files are supported. Please convert .doc files to .docx format "
            "or use a text file instead."
        )
    else:
        raise ExtractionError(
            f"Unsupported file type '{mime_type}'. Please upload an image, PDF, .docx or text file."
        )

    if not text.strip():
        raise ExtractionError("No readable text was found in the document.")
    _LOG.debug("extracted %d chars from %s", len(text), kind.value)
    return text
