from __future__ import annotations

import base64
import io

import docx
import pytest
from pypdf import PdfWriter

from services import documents
from services.documents import DocumentKind, classify, document_text
from services.errors import ExtractionError, InputValidationError


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode()


def _docx_bytes() -> bytes:
    doc = docx.Document()
    doc.add_paragraph("History: hypertension since 2019")
    doc.add_paragraph("   ")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Allergy"
    table.rows[0].cells[1].text = "Penicillin"
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def _blank_pdf() -> bytes:
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buf = io.BytesIO()
    writer.write(buf)
    return buf.getvalue()


@pytest.mark.parametrize(
    "mime, kind",
    [
        ("image/png", DocumentKind.image),
        ("application/pdf", DocumentKind.pdf),
        (documents.DOCX_MIME, DocumentKind.docx),
        ("application/msword", DocumentKind.legacy_doc),
        ("text/plain", DocumentKind.text),
        ("TEXT/CSV", DocumentKind.text),
        ("application/zip", DocumentKind.unsupported),
        (None, DocumentKind.unsupported),
    ],
)
def test_classify(mime, kind):
    assert classify(mime) is kind


def test_plain_text_passes_through():
    assert document_text("Allergic to nuts", "text/plain") == "Allergic to nuts"


def test_docx_paragraphs_and_tables():
    text = document_text(_b64(_docx_bytes()), documents.DOCX_MIME)
    assert text.splitlines() == ["History: hypertension since 2019", "Allergy | Penicillin"]


def test_legacy_doc_is_refused():
    with pytest.raises(ExtractionError, match="Only .docx files are supported"):
        document_text(_b64(b"\xd0\xcf\x11\xe0"), "application/msword")


def test_unsupported_type_is_refused():
    with pytest.raises(ExtractionError, match="Unsupported file type"):
        document_text(_b64(b"PK"), "application/zip")


def test_empty_text_is_an_error():
    with pytest.raises(ExtractionError, match="No readable text"):
        document_text("   \n", "text/plain")


def test_pdf_without_text_layer_is_an_error():
    with pytest.raises(ExtractionError, match="No readable text"):
        document_text(_b64(_blank_pdf()), "application/pdf")


def test_corrupt_docx_is_an_extraction_error():
    with pytest.raises(ExtractionError, match="Word document"):
        document_text(_b64(b"definitely not a zip"), documents.DOCX_MIME)


def test_bad_base64_is_a_validation_error():
    with pytest.raises(InputValidationError, match="base64"):
        document_text("%%%not-base64%%%", "application/pdf")


def test_pdf_text_layer_is_extracted(text_pdf_b64):
    assert "Allergies: peanuts and shellfish" in document_text(text_pdf_b64, "application/pdf")
