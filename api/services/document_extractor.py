"""PDF text extraction for uploaded course materials."""

import io
import logging

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF-"


def is_pdf(filename: str, content_type: str, content: bytes = b"") -> bool:
    """Check the name or MIME type, and when bytes are given, the PDF header."""
    declared = filename.lower().endswith(".pdf") or content_type == PDF_MIME_TYPE
    if not declared:
        return False
    if content:
        return content.lstrip()[:len(PDF_MAGIC)] == PDF_MAGIC
    return True


def extract_text_from_pdf(file_content: bytes) -> str:
    """Extract text from a PDF file."""
    try:
        reader = PdfReader(io.BytesIO(file_content))

        text_parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)

        return "\n\n".join(text_parts)
    except (PdfReadError, ValueError, KeyError) as e:
        logger.error(f"Failed to extract text from PDF: {e}")
        raise ValueError(f"Could not extract text from PDF: {str(e)}")
