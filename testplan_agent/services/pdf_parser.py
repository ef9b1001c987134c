"""PDF text extraction and template outline parsing"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pdfplumber

from .errors import InvalidInputError
from .log_service import log_service

SECTION_PATTERN = re.compile(r"^(?:\d+[.)]\s*|#{1,3}\s+|[A-Z][A-Z\s]{2,}:?\s*$)")


@dataclass
class PdfText:
    text: str
    pages: int


def extract_text_from_pdf(file_path: Path) -> PdfText:
    """Extract the text layer of every page (blocking, run in an executor)"""
    try:
        with pdfplumber.open(file_path) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        log_service.error(f"PDF extraction failed for {Path(file_path).name}: {e!r}")
        raise InvalidInputError(
            "Could not read PDF. The file may be corrupted or password-protected."
        ) from e

    return PdfText(text="\n".join(pages), pages=len(pages))


def parse_sections(text: str) -> List[str]:
    """
    Best-effort outline of a template.

    A line counts as a section header when it is numbered (``1.``, ``2)``),
    a markdown heading (``#`` to ``###``), or an all-caps label such as
    ``TEST STRATEGY:``.
    """
    sections = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed and SECTION_PATTERN.match(trimmed):
            sections.append(trimmed)
    return sections
