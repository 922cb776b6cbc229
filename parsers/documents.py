import io
import logging
from pathlib import Path

import docx
import fitz  # PyMuPDF
from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)

TEXT_ENCODINGS = ("utf-8", "cp1252")


class UnsupportedDocumentError(ValueError):
    pass


class DocumentExtractionError(RuntimeError):
    pass


def read_pdf(data: bytes) -> str:
    """Extract text from PDF bytes using PyMuPDF, falling back to PyPDF2."""
    text = ""
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            text = "\n".join(page.get_text("text") or "" for page in doc)
        if text.strip():
            logger.info(f"Extracted {len(text)} characters via PyMuPDF")
            return text
    except Exception as e:
        logger.warning(f"PyMuPDF extraction failed: {e}")

    try:
        reader = PdfReader(io.BytesIO(data))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        if text.strip():
            logger.info(f"Extracted {len(text)} characters via PyPDF2 fallback")
            return text
    except Exception as e:
        logger.error(f"PyPDF2 extraction failed: {e}")
        raise DocumentExtractionError("Failed to parse PDF file. Please try another file or format.") from e

    logger.warning("No text extracted from PDF")
    return text


def read_docx(data: bytes) -> str:
    """Paragraph text followed by table cells, one table row per line."""
    try:
        document = docx.Document(io.BytesIO(data))
    except Exception as e:
        logger.error(f"Error reading DOCX: {e}")
        raise DocumentExtractionError(f"Failed to parse DOCX file: {e}") from e

    lines = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append(" ".join(cell.text for cell in row.cells))
    return "\n".join(lines)


def read_txt(data: bytes) -> str:
    for encoding in TEXT_ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    # latin-1 maps every byte, so it always succeeds
    logger.warning("Text is neither UTF-8 nor cp1252, decoding as latin-1")
    return data.decode("latin-1")


READERS = {
    ".pdf": read_pdf,
    ".docx": read_docx,
    ".txt": read_txt,
    ".md": read_txt,
}


def extract_text(filename: str, data: bytes) -> str:
    """Dispatch on file extension and return the document's plain text."""
    extension = Path(filename or "").suffix.lower()
    reader = READERS.get(extension)
    if reader is None:
        raise UnsupportedDocumentError(f"Unsupported file type: {extension or filename}")
    text = reader(data)
    logger.info(f"Extracted {len(text)} characters from {filename}")
    return text.strip()
