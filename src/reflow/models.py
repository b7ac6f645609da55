"""
Data model for page reconstruction.

Provides:
- TextFragment (positioned text run from the PDF extractor)
- Line, Paragraph, StyledRun (derived per page)
- Role / Alignment enumerations
- PageText (one page of extractor output) and PageBreak markers
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any


# ============================================================================
# Font flag bits (as reported by the PDF extractor)
# ============================================================================

FLAG_ITALIC = 1 << 1
FLAG_MONOSPACED = 1 << 3
FLAG_BOLD = 1 << 4


# ============================================================================
# Enums
# ============================================================================

class Role(Enum):
    """Semantic role of a reconstructed paragraph."""
    HEADING1 = "heading1"
    HEADING2 = "heading2"
    BODY = "body"
    CAPTION = "caption"
    LIST_ITEM = "list_item"


class Alignment(Enum):
    """Horizontal alignment of a paragraph."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ============================================================================
# Input
# ============================================================================

@dataclass(frozen=True)
class TextFragment:
    """One positioned run of text as extracted from a page.

    Coordinates are PDF user space: ``y`` is the baseline and grows upward,
    so larger ``y`` means closer to the top of the page.
    """
    text: str
    x: float
    y: float
    width: float
    height: float
    font_name: str = ""
    flags: int = 0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def is_bold(self) -> bool:
        name = (self.font_name or "").lower()
        return "bold" in name or bool(self.flags & FLAG_BOLD)

    @property
    def is_italic(self) -> bool:
        name = (self.font_name or "").lower()
        return "italic" in name or bool(self.flags & FLAG_ITALIC)

    @property
    def is_monospaced(self) -> bool:
        return bool(self.flags & FLAG_MONOSPACED)


@dataclass
class PageText:
    """Text fragments of one page plus its geometry."""
    page_number: int
    width: float
    height: float
    fragments: List[TextFragment] = field(default_factory=list)


# ============================================================================
# Derived entities
# ============================================================================

@dataclass
class Line:
    """Fragments sharing an approximate baseline, ordered left to right."""
    y: float
    fragments: List[TextFragment] = field(default_factory=list)
    font_size: float = 0.0

    def add(self, fragment: TextFragment):
        self.fragments.append(fragment)
        self.font_size = max(self.font_size, fragment.height)


@dataclass
class StyledRun:
    """A maximal span of paragraph text sharing one style."""
    text: str
    bold: bool = False
    italic: bool = False
    monospace: bool = False
    font_family: str = "Calibri"
    size_points: int = 22

    @property
    def style_key(self) -> tuple:
        return (self.bold, self.italic, self.monospace, self.font_family, self.size_points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "bold": self.bold,
            "italic": self.italic,
            "monospace": self.monospace,
            "font_family": self.font_family,
            "size_points": self.size_points,
        }


@dataclass
class Paragraph:
    """One or more lines merged into a classified, styled paragraph."""
    lines: List[Line] = field(default_factory=list)
    role: Role = Role.BODY
    alignment: Alignment = Alignment.LEFT
    runs: List[StyledRun] = field(default_factory=list)
    page_number: int = 1

    @property
    def font_size(self) -> float:
        """Representative font size: that of the first line."""
        return self.lines[0].font_size if self.lines else 0.0

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "paragraph",
            "page_number": self.page_number,
            "role": self.role.value,
            "alignment": self.alignment.value,
            "font_size": round(self.font_size, 2),
            "line_count": len(self.lines),
            "text": self.text,
            "runs": [r.to_dict() for r in self.runs],
        }


@dataclass(frozen=True)
class PageBreak:
    """Marker separating the paragraphs of two consecutive pages."""
    page_number: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "page_break", "page_number": self.page_number}
