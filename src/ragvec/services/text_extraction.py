import asyncio
from collections.abc import Callable
from pathlib import Path

import pdfplumber
from docx import Document

from ragvec.core.exceptions import ExtractionError


def extract_pages_from_pdf(file_path: Path) -> list[str]:
    try:
        with pdfplumber.open(file_path) as pdf:
            return [(page.extract_text() or "").strip() for page in pdf.pages]
    except Exception as e:
        raise ExtractionError(f"PDF extraction failed: {e}") from e


def extract_pages_from_docx(file_path: Path) -> list[str]:
    try:
        doc = Document(str(file_path))
        return ["\n\n".join(para.text for para in doc.paragraphs if para.text.strip())]
    except Exception as e:
        raise ExtractionError(f"DOCX extraction failed: {e}") from e


def extract_pages_from_txt(file_path: Path) -> list[str]:
    try:
        return [file_path.read_text(encoding="utf-8")]
    except UnicodeDecodeError:
        return [file_path.read_text(encoding="latin-1")]
    except Exception as e:
        raise ExtractionError(f"TXT extraction failed: {e}") from e


EXTRACTORS: dict[str, Callable[[Path], list[str]]] = {
    ".pdf": extract_pages_from_pdf,
    ".docx": extract_pages_from_docx,
    ".txt": extract_pages_from_txt,
}


def extract_pages(file_path: Path) -> list[str]:
    """Extract text page by page. Formats without pages yield a single entry."""
    suffix = file_path.suffix.lower()
    extractor = EXTRACTORS.get(suffix)
    if not extractor:
        raise ExtractionError(f"Unsupported file type: {suffix}")
    return extractor(file_path)


async def extract_pages_async(file_path: Path) -> list[str]:
    return await asyncio.to_thread(extract_pages, file_path)
