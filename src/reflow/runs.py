"""
Run assembly: turns a paragraph's fragments into contiguous styled runs.
"""

import math
from typing import List, Optional

from .fonts import FontNormalizer, is_monospace_family
from .models import Line, StyledRun, TextFragment

SPACE_GAP = 2.0
SIZE_SCALE = 2.0


def needs_space(prev: TextFragment, nxt: TextFragment, space_gap: float = SPACE_GAP) -> bool:
    """True when the horizontal gap between two same-line fragments reads as a word break."""
    gap = nxt.x - prev.right
    return gap > max(space_gap, 0.0)


def line_text(line: Line, space_gap: float = SPACE_GAP) -> str:
    """Assembled text of a line with inferred spaces, stripped."""
    parts = []
    prev = None
    for fragment in line.fragments:
        if prev is not None and needs_space(prev, fragment, space_gap):
            parts.append(" ")
        parts.append(fragment.text)
        prev = fragment
    return "".join(parts).strip()


def _append_space(parts: List[str], next_text: str):
    if parts and not parts[-1][-1:].isspace() and not next_text[:1].isspace():
        parts.append(" ")


class RunAssembler:
    """
    Coalesces adjacent fragments with identical style into StyledRuns.

    Style is (bold, italic, monospace, font family, size in half-points).
    Inferred spaces are attached to the run in progress.
    """

    def __init__(
        self,
        space_gap: float = SPACE_GAP,
        size_scale: float = SIZE_SCALE,
        font_normalizer: Optional[FontNormalizer] = None
    ):
        self.space_gap = space_gap
        self.size_scale = size_scale
        self.fonts = font_normalizer or FontNormalizer()

    def style_of(self, fragment: TextFragment) -> StyledRun:
        """An empty run carrying the fragment's style."""
        family = self.fonts.normalize(fragment.font_name)
        return StyledRun(
            text="",
            bold=fragment.is_bold,
            italic=fragment.is_italic,
            monospace=fragment.is_monospaced or is_monospace_family(family),
            font_family=family,
            size_points=int(math.floor(fragment.height * self.size_scale + 0.5)),
        )

    def assemble(self, lines: List[Line]) -> List[StyledRun]:
        runs: List[StyledRun] = []
        parts: List[str] = []
        current: Optional[StyledRun] = None

        for line_index, line in enumerate(lines):
            prev = None
            for fragment in line.fragments:
                if prev is not None:
                    if needs_space(prev, fragment, self.space_gap):
                        _append_space(parts, fragment.text)
                elif line_index > 0:
                    _append_space(parts, fragment.text)

                style = self.style_of(fragment)
                if current is None or style.style_key != current.style_key:
                    if current is not None:
                        current.text = "".join(parts)
                        runs.append(current)
                    current = style
                    parts = []

                parts.append(fragment.text)
                prev = fragment

        if current is not None:
            current.text = "".join(parts)
            runs.append(current)

        return self._trim(runs)

    @staticmethod
    def _trim(runs: List[StyledRun]) -> List[StyledRun]:
        if runs:
            runs[0].text = runs[0].text.lstrip()
            runs[-1].text = runs[-1].text.rstrip()
        return [r for r in runs if r.text]
