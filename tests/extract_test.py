"""Text extraction by declared MIME type."""

import io

import docx
import pytest

from screening.errors import ExtractionFailed
from screening.pipeline.extract import DOCX_MIME, PDF_MIME, SUPPORTED_MIME_TYPES, extract_text


def test_pdf_pages_joined_in_order(pdf_bytes):
    data = pdf_bytes(["Jane Doe Python Engineer", "Django PostgreSQL"])
    text = extract_text(data, PDF_MIME)
    assert "Jane Doe Python Engineer" in text
    assert text.index("Jane Doe") < text.index("Django")


def test_docx_paragraphs(docx_bytes):
    data = docx_bytes(["John Smith", "", "Senior Developer at Acme"])
    assert extract_text(data, DOCX_MIME) == "John Smith\nSenior Developer at Acme"


def test_zero_byte_pdf_fails():
    with pytest.raises(ExtractionFailed):
        extract_text(b"", PDF_MIME)


def test_garbage_docx_fails():
    with pytest.raises(ExtractionFailed):
        extract_text(b"this is not a zip archive", DOCX_MIME)


def test_unsupported_type_has_no_fallback(pdf_bytes):
    with pytest.raises(ExtractionFailed, match="Unsupported"):
        extract_text(pdf_bytes(["hello"]), "text/plain")


def test_supported_types():
    assert set(SUPPORTED_MIME_TYPES) == {PDF_MIME, DOCX_MIME}


def test_docx_tables_in_document_order_with_merged_cells_once():
    document = docx.Document()
    document.add_paragraph("Jane Doe")
    table = document.add_table(rows=2, cols=2)
    header = table.cell(0, 0).merge(table.cell(0, 1))
    header.text = "Skills"
    table.cell(1, 0).text = "Python"
    table.cell(1, 1).text = "Django"
    document.add_paragraph("References on request")
    buf = io.BytesIO()
    document.save(buf)

    assert extract_text(buf.getvalue(), DOCX_MIME) == "Jane Doe\nSkills\nPython\nDjango\nReferences on request"
