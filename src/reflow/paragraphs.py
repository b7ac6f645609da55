"""
Paragraph segmentation: merges consecutive lines into paragraph candidates.
"""

import logging
from typing import List, Optional

from .models import Line
from .runs import SPACE_GAP, line_text

logger = logging.getLogger(__name__)

GAP_RATIO = 1.5
FONT_SIZE_DELTA = 3.0
SHORT_LINE_CHARS = 50


class ParagraphSegmenter:
    """
    Groups top-to-bottom lines into paragraphs.

    A line starts a new paragraph when the vertical gap to the previous
    line exceeds ``gap_ratio`` times its own font size, when the font size
    jumps by more than ``font_size_delta``, or when the previous line is
    shorter than ``short_line_chars`` (headings and other standalone lines
    never absorb the text that follows them).

    With ``merge_lines=False`` every line becomes its own paragraph.
    """

    def __init__(
        self,
        gap_ratio: float = GAP_RATIO,
        font_size_delta: float = FONT_SIZE_DELTA,
        short_line_chars: int = SHORT_LINE_CHARS,
        space_gap: float = SPACE_GAP,
        merge_lines: bool = True
    ):
        self.gap_ratio = gap_ratio
        self.font_size_delta = font_size_delta
        self.short_line_chars = short_line_chars
        self.space_gap = space_gap
        self.merge_lines = merge_lines

    def starts_paragraph(self, line: Line, prev: Optional[Line]) -> bool:
        """Whether ``line`` opens a new paragraph after ``prev``."""
        if prev is None or not self.merge_lines:
            return True

        gap = prev.y - line.y
        if gap > self.gap_ratio * line.font_size:
            return True

        if abs(line.font_size - prev.font_size) > self.font_size_delta:
            return True

        return len(line_text(prev, self.space_gap)) < self.short_line_chars

    def segment(self, lines: List[Line]) -> List[List[Line]]:
        paragraphs: List[List[Line]] = []
        current: List[Line] = []
        prev = None

        for line in lines:
            if self.starts_paragraph(line, prev) and current:
                paragraphs.append(current)
                current = []
            current.append(line)
            prev = line

        if current:
            paragraphs.append(current)

        logger.debug(f"Segmented {len(lines)} lines into {len(paragraphs)} paragraphs")
        return paragraphs
