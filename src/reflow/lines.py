"""
Line clustering: groups fragments sharing a baseline into ordered lines.
"""

import logging
import math
from typing import Iterable, List, Tuple

from .models import Line, TextFragment

logger = logging.getLogger(__name__)

LINE_MERGE_THRESHOLD = 1.5


def baseline_units(value: float, precision: int = 1) -> int:
    """Round half-up to ``precision`` decimals, as an integer count of ``10 ** -precision``."""
    return int(math.floor(value * 10 ** precision + 0.5))


def canonical_order(fragments: Iterable[TextFragment]) -> List[TextFragment]:
    """Top-to-bottom, left-to-right order with full tie-breaking."""
    return sorted(
        fragments,
        key=lambda f: (-f.y, f.x, f.text, f.font_name, f.height, f.width, f.flags)
    )


class LineClusterer:
    """
    Clusters fragments into lines by vertical proximity.

    Each line is anchored at the rounded baseline of its first fragment;
    a fragment joins the first line whose anchor lies strictly within
    ``threshold`` of its own rounded baseline. Baselines are compared as
    integers in units of ``10 ** -precision``.
    """

    def __init__(self, threshold: float = LINE_MERGE_THRESHOLD, precision: int = 1):
        self.threshold = threshold
        self.precision = precision

    def cluster(self, fragments: Iterable[TextFragment]) -> List[Line]:
        """
        Build the lines of one page.

        Args:
            fragments: Non-blank fragments, in any order

        Returns:
            Lines sorted top of page first, fragments sorted by x
        """
        factor = 10 ** self.precision
        limit = baseline_units(self.threshold, self.precision)
        anchors: List[Tuple[int, Line]] = []

        for fragment in canonical_order(fragments):
            key = baseline_units(fragment.y, self.precision)

            line = None
            for anchor, candidate in anchors:
                if abs(anchor - key) < limit:
                    line = candidate
                    break
            if line is None:
                line = Line(y=key / factor, font_size=fragment.height)
                anchors.append((key, line))
            line.add(fragment)

        lines = [line for _, line in anchors]
        for line in lines:
            line.fragments.sort(key=lambda f: f.x)
        lines.sort(key=lambda l: -l.y)

        logger.debug(f"Clustered fragments into {len(lines)} lines")
        return lines
