import io

import docx
import pytest

from parsers.documents import (
    DocumentExtractionError,
    UnsupportedDocumentError,
    extract_text,
    read_txt,
)


def _docx_bytes():
    document = docx.Document()
    document.add_paragraph("Jane Doe")
    document.add_paragraph("Head of Platform Engineering")
    table = document.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Experience"
    table.rows[0].cells[1].text = "12 years"
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def test_txt_is_stripped():
    assert extract_text("notes.txt", b"  Led a team of 40.\n\n") == "Led a team of 40."


def test_markdown_uses_text_reader():
    assert extract_text("CV.MD", b"# Jane") == "# Jane"


def test_legacy_encodings():
    assert read_txt("Pérez".encode("latin-1")) == "Pérez"
    # 0x80 is the euro sign in cp1252 and a control character in latin-1
    assert read_txt(b"\x80 5000 budget") == "\u20ac 5000 budget"
    # 0x81 is unmapped in cp1252
    assert read_txt(b"A\x81B") == "A\x81B"


def test_docx_paragraphs_and_tables():
    text = extract_text("resume.docx", _docx_bytes())
    assert text.splitlines()[:2] == ["Jane Doe", "Head of Platform Engineering"]
    assert "Experience 12 years" in text


def test_corrupt_docx():
    with pytest.raises(DocumentExtractionError):
        extract_text("resume.docx", b"not a zip file")


@pytest.mark.parametrize("filename", ["photo.png", "resume", None])
def test_unsupported_extension(filename):
    with pytest.raises(UnsupportedDocumentError):
        extract_text(filename, b"data")
