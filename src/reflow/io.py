"""
I/O utilities for the reconstruction pipeline.

Handles:
- PDF opening and per-page text fragment extraction (PyMuPDF)
- Input validation (type, size)
- JSON serialization
- Output naming and directory management
"""

import json
import logging
import re
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import List, Union, Optional, Any, Iterable

import fitz  # PyMuPDF
import numpy as np

from .models import PageText, TextFragment

logger = logging.getLogger(__name__)

MAX_PDF_SIZE_MB = 200


class ExtractionFailed(RuntimeError):
    """The PDF could not be read, so no fragments could be obtained."""


# ============================================================================
# PDF Text Extraction
# ============================================================================

def open_pdf(pdf_path: Union[str, Path]) -> fitz.Document:
    """
    Open a PDF document.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        An open fitz.Document

    Raises:
        FileNotFoundError: If the file does not exist
        ExtractionFailed: If PyMuPDF cannot open the file or it is encrypted
    """
    pdf_path = Path(pdf_path)
    if not pdf_path.exists():
        raise FileNotFoundError(f"PDF file not found: {pdf_path}")

    try:
        doc = fitz.open(str(pdf_path))
    except Exception as e:
        raise ExtractionFailed(f"Failed to open PDF '{pdf_path}': {e}") from e

    if not doc.is_pdf:
        doc.close()
        raise ExtractionFailed(f"Not a PDF document: {pdf_path}")

    if doc.needs_pass:
        doc.close()
        raise ExtractionFailed(f"PDF is password protected: {pdf_path}")

    return doc


def extract_page_fragments(page: fitz.Page) -> List[TextFragment]:
    """
    Extract positioned text fragments from one page.

    One fragment per span. PyMuPDF reports coordinates with y growing
    downward; fragments use PDF user space (y grows upward), so the
    baseline is flipped against the page height.
    """
    page_height = page.rect.height
    text_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)

    fragments = []
    for block in text_dict.get("blocks", []):
        # Skip image blocks
        if block.get("type") != 0:
            continue

        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text.strip():
                    continue

                x0, y0, x1, y1 = span.get("bbox", (0, 0, 0, 0))
                origin = span.get("origin", (x0, y1))
                fragments.append(TextFragment(
                    text=text,
                    x=float(origin[0]),
                    y=float(page_height - origin[1]),
                    width=float(x1 - x0),
                    height=float(span.get("size", y1 - y0)),
                    font_name=span.get("font", ""),
                    flags=int(span.get("flags", 0)),
                ))

    return fragments


def load_pdf_pages(
    pdf_path: Union[str, Path],
    page_numbers: Optional[Iterable[int]] = None
) -> List[PageText]:
    """
    Extract text fragments for the pages of a PDF.

    Args:
        pdf_path: Path to the PDF file
        page_numbers: 1-indexed pages to extract (None = all)

    Returns:
        List of PageText in page order

    Raises:
        FileNotFoundError: If the PDF file doesn't exist
        ExtractionFailed: If the document or one of its pages cannot be read
    """
    doc = open_pdf(pdf_path)
    try:
        total = doc.page_count
        numbers = list(page_numbers) if page_numbers is not None else list(range(1, total + 1))

        pages = []
        for number in numbers:
            if number < 1 or number > total:
                raise ExtractionFailed(
                    f"Page {number} out of range (document has {total} pages)"
                )
            try:
                page = doc.load_page(number - 1)
                fragments = extract_page_fragments(page)
            except Exception as e:
                raise ExtractionFailed(f"Failed to read page {number}: {e}") from e

            rect = page.rect
            pages.append(PageText(
                page_number=number,
                width=rect.width,
                height=rect.height,
                fragments=fragments
            ))
            logger.debug(f"Page {number}: {len(fragments)} fragments")

        logger.info(f"Extracted text from {len(pages)} page(s) of {pdf_path}")
        return pages
    finally:
        doc.close()


def get_pdf_page_count(pdf_path: Union[str, Path]) -> int:
    """Get the number of pages in a PDF file."""
    doc = open_pdf(pdf_path)
    try:
        return doc.page_count
    finally:
        doc.close()


# ============================================================================
# Input Validation
# ============================================================================

def format_bytes(num_bytes: int, decimals: int = 2) -> str:
    """Format a byte count as a human-readable size."""
    if num_bytes <= 0:
        return "0 Bytes"

    units = ["Bytes", "KB", "MB", "GB"]
    i = 0
    while num_bytes >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(num_bytes / (1024 ** i), max(decimals, 0))
    return f"{value:g} {units[i]}"


def validate_file_size(
    path: Union[str, Path],
    max_size_mb: float = MAX_PDF_SIZE_MB
) -> int:
    """
    Check a file against a size limit.

    Returns:
        The file size in bytes

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is larger than the limit
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    size = path.stat().st_size
    limit = int(max_size_mb * 1024 * 1024)
    if size > limit:
        raise ValueError(
            f"{path.name} is too large ({format_bytes(size)}). "
            f"Maximum PDF size is {format_bytes(limit)}."
        )
    return size


def detect_input_type(input_path: Union[str, Path]) -> str:
    """
    Detect the type of an input file.

    Returns:
        One of: 'pdf', 'unknown'
    """
    input_path = Path(input_path)
    if not input_path.is_file():
        return 'unknown'
    if input_path.suffix.lower() == '.pdf':
        return 'pdf'
    return 'unknown'


# ============================================================================
# JSON Serialization
# ============================================================================

class EnhancedJSONEncoder(json.JSONEncoder):
    """JSON encoder that handles numpy scalars, enums and dataclasses."""

    def default(self, obj):
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, Enum):
            return obj.value
        if hasattr(obj, 'to_dict'):
            return obj.to_dict()
        if hasattr(obj, '__dataclass_fields__'):
            return asdict(obj)
        if isinstance(obj, Path):
            return str(obj)
        return super().default(obj)


def save_json(
    data: Any,
    output_path: Union[str, Path],
    indent: int = 2,
    ensure_ascii: bool = False
) -> Path:
    """
    Save data to a JSON file.

    Args:
        data: Data to serialize (dict, list, dataclass, etc.)
        output_path: Path to save the JSON file
        indent: Indentation level for pretty printing
        ensure_ascii: If True, escape non-ASCII characters

    Returns:
        Path to the saved file
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=indent, ensure_ascii=ensure_ascii, cls=EnhancedJSONEncoder)

    logger.debug(f"Saved JSON: {output_path}")
    return output_path


def load_json(json_path: Union[str, Path]) -> Any:
    """Load data from a JSON file."""
    json_path = Path(json_path)
    if not json_path.exists():
        raise FileNotFoundError(f"JSON file not found: {json_path}")

    with open(json_path, 'r', encoding='utf-8') as f:
        return json.load(f)


# ============================================================================
# Output Naming / Directory Management
# ============================================================================

_RE_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


def sanitize_filename(filename: str) -> str:
    """Strip path separators and other characters unsafe in file names."""
    if not filename:
        return "output"

    name = _RE_UNSAFE_CHARS.sub("", filename)
    name = name.strip(". \t")
    name = name.replace("..", "")
    return name[:255] or "output"


def unique_output_path(path: Union[str, Path]) -> Path:
    """
    Return ``path`` or, if taken, the first free ``name-N.ext`` beside it.
    """
    path = Path(path)
    if not path.exists():
        return path

    counter = 1
    while True:
        candidate = path.with_name(f"{path.stem}-{counter}{path.suffix}")
        if not candidate.exists():
            return candidate
        counter += 1


def ensure_dir(path: Union[str, Path]) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path
