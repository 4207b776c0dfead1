import io
import json

import pdfplumber
import pytest
from docx import Document

from cvats.exceptions import (
    CorruptDocumentError,
    ExtractionError,
    SizeLimitExceededError,
    UnsupportedFormatError,
)
from cvats.parser import detect_format, extract_text, main


def _docx_bytes() -> bytes:
    doc = Document()
    doc.add_paragraph("John Doe")
    doc.add_paragraph("Experience")
    doc.add_paragraph("Automated releases with Jenkins")
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Docker"
    table.rows[0].cells[1].text = "5 years"
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _pdf_bytes(*pages) -> bytes:
    """Minimal uncompressed PDF with one Helvetica text line per entry of each page."""
    objects = [
        "<< /Type /Catalog /Pages 2 0 R >>",
        None,
        "<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    kids = []
    for lines in pages:
        stream = "BT /F1 12 Tf 14 TL 72 720 Td " + " ".join(f"({line}) Tj T*" for line in lines) + " ET"
        kids.append(f"{len(objects) + 1} 0 R")
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Contents {len(objects) + 2} 0 R /Resources << /Font << /F1 3 0 R >> >> >>"
        )
        objects.append(f"<< /Length {len(stream)} >>\nstream\n{stream}\nendstream")
    objects[1] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {len(kids)} >>"

    out = b"%PDF-1.4\n"
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n{body}\nendobj\n".encode("latin-1")
    xref = len(out)
    out += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode("latin-1")
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode("latin-1")
    out += f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\nstartxref\n{xref}\n%%EOF\n".encode("latin-1")
    return out


@pytest.mark.parametrize("hint, expected", [
    ("resume.pdf", "pdf"),
    ("My CV.DOCX", "docx"),
    ("notes.txt", "txt"),
    ("pdf", "pdf"),
    (".docx", "docx"),
    ("application/pdf", "pdf"),
    ("application/vnd.openxmlformats-officedocument.wordprocessingml.document", "docx"),
    ("text/plain", "txt"),
])
def test_detect_format(hint, expected):
    assert detect_format(hint) == expected


@pytest.mark.parametrize("hint", ["resume.doc", "photo.png", "", "application/zip"])
def test_unsupported_formats(hint):
    with pytest.raises(UnsupportedFormatError):
        detect_format(hint)


def test_extract_docx_paragraphs_and_tables():
    text = extract_text(_docx_bytes(), "resume.docx")

    assert "John Doe\nExperience\nAutomated releases with Jenkins" in text
    assert "| Docker | 5 years |" in text


def test_extract_txt():
    text = extract_text("Experience\nSkills: Docker, Kubernetes\n".encode("utf-8"), "resume.txt")
    assert text == "Experience\nSkills: Docker, Kubernetes\n"


def test_extract_txt_strips_bom_and_bad_bytes():
    assert extract_text(b"\xef\xbb\xbfSkills\xff", "cv.txt") == "Skills"


def test_corrupt_docx():
    with pytest.raises(CorruptDocumentError, match="Failed to parse DOCX") as exc_info:
        extract_text(b"definitely not a zip archive", "resume.docx")
    assert exc_info.value.__cause__ is not None


def test_corrupt_pdf():
    with pytest.raises(CorruptDocumentError, match="Failed to parse PDF"):
        extract_text(b"this is not a pdf", "resume.pdf")


def test_size_limit():
    with pytest.raises(SizeLimitExceededError) as exc_info:
        extract_text(b"x" * 11, "resume.txt", max_bytes=10)
    assert exc_info.value.size == 11
    assert exc_info.value.limit == 10


def test_size_is_checked_before_format():
    with pytest.raises(SizeLimitExceededError):
        extract_text(b"x" * 11, "resume.exe", max_bytes=10)


def test_errors_share_a_base_class():
    for error in (UnsupportedFormatError, CorruptDocumentError, SizeLimitExceededError):
        assert issubclass(error, ExtractionError)


def test_extract_pdf():
    text = extract_text(_pdf_bytes(["Experience", "Automated deployments with Docker"]), "resume.pdf")

    for word in ("Experience", "Automated", "deployments", "Docker"):
        assert word in text


def test_extract_pdf_joins_pages_in_order():
    text = extract_text(_pdf_bytes(["Experience"], ["Education"]), "resume.pdf")

    assert "\n" in text
    assert text.index("Experience") < text.index("Education")


def test_extract_pdf_falls_back_to_pypdf2(monkeypatch):
    def broken_open(*args, **kwargs):
        raise ValueError("pdfplumber unavailable")

    monkeypatch.setattr(pdfplumber, "open", broken_open)
    text = extract_text(_pdf_bytes(["Skills", "Kubernetes Terraform"]), "resume.pdf")

    assert "Skills" in text
    assert "Kubernetes" in text


def test_cli_prints_length_and_analysis(tmp_path, capsys):
    content = "Experience\nAutomated deployments with docker\n"
    path = tmp_path / "resume.txt"
    path.write_text(content, encoding="utf-8")

    assert main([str(path), "general"]) == 0

    first_line, rest = capsys.readouterr().out.split("\n", 1)
    assert first_line == f"Extracted {len(content)} characters from {path}"
    result = json.loads(rest)
    assert result["maxScore"] == 100
    assert "readability" in result["feedback"]


def test_cli_usage(capsys):
    assert main([]) == 1
    assert capsys.readouterr().out.startswith("Usage: python -m cvats.parser")
