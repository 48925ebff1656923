"""Stage: extract plain text from raw résumé bytes."""

import io

import docx
from docx.table import Table
from pypdf import PdfReader

from screening.errors import ExtractionFailed

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
SUPPORTED_MIME_TYPES = (PDF_MIME, DOCX_MIME)


def extract_pdf_text(data: bytes) -> str:
    """
    Extract text from a fixed-layout (PDF) document.

    Pages are read in order and joined by newlines. Scanned PDFs (image-only)
    return an empty string.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
    except Exception as e:
        raise ExtractionFailed(f"Failed to extract text from PDF: {e}") from e

    return "\n".join(text_parts).strip()


def _table_lines(table: Table) -> list[str]:
    """Cell text row by row. Merged cells repeat in `row.cells`, so each is read once."""
    seen = set()
    lines = []
    for row in table.rows:
        for cell in row.cells:
            if cell._tc in seen:
                continue
            seen.add(cell._tc)
            lines.append(cell.text)
    return lines


def extract_docx_text(data: bytes) -> str:
    """Extract body text from a flow-layout (DOCX) document, paragraphs and tables in document order."""
    try:
        document = docx.Document(io.BytesIO(data))
        lines = []
        for block in document.iter_inner_content():
            if isinstance(block, Table):
                lines.extend(_table_lines(block))
            else:
                lines.append(block.text)
    except Exception as e:
        raise ExtractionFailed(f"Failed to extract text from DOCX: {e}") from e

    return "\n".join(line for line in lines if line.strip()).strip()


def extract_text(data: bytes, mime_type: str) -> str:
    """
    Convert raw document bytes to plain text by declared MIME type.
    Raises ExtractionFailed for unparseable buffers and unsupported types. No fallback.
    """
    if mime_type == PDF_MIME:
        return extract_pdf_text(data)
    if mime_type == DOCX_MIME:
        return extract_docx_text(data)
    raise ExtractionFailed(f"Unsupported document type: {mime_type}")
