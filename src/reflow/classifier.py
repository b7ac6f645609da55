"""
Role and alignment classification for paragraph candidates.
"""

import re
from typing import List, Tuple

from .models import Alignment, Line, Role, TextFragment
from .runs import SPACE_GAP, line_text

HEADING1_SIZE = 18.0
HEADING2_SIZE = 14.0
CAPTION_SIZE = 10.0
CENTER_BAND = (0.35, 0.65)

RE_BULLET = re.compile(r"^\s*[•●○◦▪▸►‣∙·*\-–—]\s+")


def infer_alignment(
    fragments: List[TextFragment],
    page_width: float,
    center_band: Tuple[float, float] = CENTER_BAND
) -> Alignment:
    """
    Alignment from the mean x of a line's fragments.

    Mean strictly inside the center band is CENTER, at or beyond its right
    edge RIGHT, anything else LEFT.
    """
    if not fragments or not page_width or page_width <= 0:
        return Alignment.LEFT

    mean_x = sum(f.x for f in fragments) / len(fragments)
    low, high = center_band

    if mean_x >= page_width * high:
        return Alignment.RIGHT
    if mean_x > page_width * low:
        return Alignment.CENTER
    return Alignment.LEFT


def looks_like_list_item(text: str) -> bool:
    return bool(RE_BULLET.match(text))


class RoleClassifier:
    """Assigns a Role and Alignment to a paragraph candidate."""

    def __init__(
        self,
        heading1_size: float = HEADING1_SIZE,
        heading2_size: float = HEADING2_SIZE,
        caption_size: float = CAPTION_SIZE,
        center_band: Tuple[float, float] = CENTER_BAND,
        space_gap: float = SPACE_GAP
    ):
        self.heading1_size = heading1_size
        self.heading2_size = heading2_size
        self.caption_size = caption_size
        self.center_band = center_band
        self.space_gap = space_gap

    def classify(self, lines: List[Line], page_width: float) -> Tuple[Role, Alignment]:
        """
        Classify one paragraph.

        Args:
            lines: The paragraph's lines, top to bottom
            page_width: Page width in the fragments' units

        Returns:
            Tuple of (role, alignment)
        """
        if not lines:
            return Role.BODY, Alignment.LEFT

        alignment = infer_alignment(lines[0].fragments, page_width, self.center_band)
        centered = alignment == Alignment.CENTER
        bold = any(f.is_bold for line in lines for f in line.fragments)
        font_size = lines[0].font_size

        if font_size > self.heading1_size and (centered or bold):
            return Role.HEADING1, alignment
        if font_size > self.heading2_size and (bold or centered):
            return Role.HEADING2, alignment
        if font_size < self.caption_size:
            return Role.CAPTION, alignment

        text = " ".join(line_text(line, self.space_gap) for line in lines)
        if looks_like_list_item(text):
            return Role.LIST_ITEM, alignment

        return Role.BODY, alignment
