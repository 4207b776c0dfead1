import io
import os
import sys
import json
import logging
from typing import List, Optional

import pdfplumber
from PyPDF2 import PdfReader
from docx import Document

from .ats import RubricEvaluator
from .config import MAX_UPLOAD_BYTES, configure_logging, load_rubric
from .exceptions import CorruptDocumentError, SizeLimitExceededError, UnsupportedFormatError
from .rubric import get_rubric

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("pdf", "docx", "txt")

MIME_TYPES = {
    "application/pdf": "pdf",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "text/plain": "txt",
}


def detect_format(format_hint: str) -> str:
    """
    Resolve a format hint to one of SUPPORTED_FORMATS.
    The hint may be a file name ("cv.pdf"), an extension ("docx", ".docx") or a MIME type.
    """
    hint = (format_hint or "").strip().lower()
    if hint in MIME_TYPES:
        return MIME_TYPES[hint]

    ext = os.path.splitext(hint)[1] or hint
    ext = ext.lstrip(".")
    if ext not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(
            f"Unsupported file type: '{format_hint}'. Only PDF, DOCX and TXT files are allowed."
        )
    return ext


def extract_text(data: bytes, format_hint: str, max_bytes: int = MAX_UPLOAD_BYTES) -> str:
    """
    Extract plain text from an uploaded document held in memory.
    The size limit is checked before the format, so oversized uploads are never parsed.
    PDF pages are read with pdfplumber; PyPDF2 takes over when pdfplumber fails or finds no text.
    """
    if len(data) > max_bytes:
        raise SizeLimitExceededError(len(data), max_bytes)

    fmt = detect_format(format_hint)
    if fmt == "pdf":
        return _extract_pdf(data)
    elif fmt == "docx":
        return _extract_docx(data)
    else:
        return data.decode("utf-8-sig", errors="ignore")


def _extract_pdf(data: bytes) -> str:
    try:
        pages = []
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                pages.append(page.extract_text() or "")
        text = "\n".join(pages)
        if text.strip():
            return text
    except Exception as e:
        logger.warning(f"pdfplumber failed, falling back to PyPDF2: {e}")

    try:
        reader = PdfReader(io.BytesIO(data))
        pages = list(reader.pages)
    except Exception as e:
        raise CorruptDocumentError(f"Failed to parse PDF: {e}") from e

    texts = []
    for number, page in enumerate(pages, start=1):
        try:
            texts.append(page.extract_text() or "")
        except Exception as e:
            logger.warning(f"Skipping unreadable PDF page {number}: {e}")
    return "\n".join(texts)


def _extract_docx(data: bytes) -> str:
    try:
        doc = Document(io.BytesIO(data))
    except Exception as e:
        raise CorruptDocumentError(f"Failed to parse DOCX: {e}") from e

    lines = [p.text for p in doc.paragraphs]
    # Table rows are kept as pipe-delimited lines so formatting checks can see them
    for table in doc.tables:
        for row in table.rows:
            lines.append("| " + " | ".join(cell.text.strip() for cell in row.cells) + " |")
    return "\n".join(lines)


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print("Usage: python -m cvats.parser <resume_file> [preset]")
        return 1

    file_path = args[0]
    rubric = get_rubric(args[1]) if len(args) > 1 else load_rubric()
    with open(file_path, "rb") as f:
        raw_text = extract_text(f.read(), file_path)
    print(f"Extracted {len(raw_text)} characters from {file_path}")

    result = RubricEvaluator(rubric).analyze(raw_text)
    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(main())
