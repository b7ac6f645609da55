"""
Page reconstruction engine and its PDF/DOCX collaborators.
"""

from .models import (
    Alignment, Line, PageBreak, PageText, Paragraph, Role, StyledRun, TextFragment
)
from .fragments import MalformedFragment, intake_fragments, validate_fragment
from .fonts import FONT_FAMILIES, FontNormalizer, normalize_font_name
from .lines import LineClusterer
from .paragraphs import ParagraphSegmenter
from .classifier import RoleClassifier, infer_alignment
from .runs import RunAssembler
from .assembler import DocumentAssembler, Document, PageResult, NO_TEXT_MESSAGE
from .io import ExtractionFailed, load_pdf_pages, save_json
from .export import MarkdownExporter, DocxExporter, DocumentExporter

__all__ = [
    # Models
    "Alignment", "Line", "PageBreak", "PageText", "Paragraph", "Role",
    "StyledRun", "TextFragment",
    # Intake
    "MalformedFragment", "intake_fragments", "validate_fragment",
    # Fonts
    "FONT_FAMILIES", "FontNormalizer", "normalize_font_name",
    # Stages
    "LineClusterer", "ParagraphSegmenter", "RoleClassifier", "infer_alignment",
    "RunAssembler",
    # Assembly
    "DocumentAssembler", "Document", "PageResult", "NO_TEXT_MESSAGE",
    # IO
    "ExtractionFailed", "load_pdf_pages", "save_json",
    # Export
    "MarkdownExporter", "DocxExporter", "DocumentExporter",
]
