"""
Fragment intake: drops blank fragments and rejects malformed ones.
"""

import logging
import math
from numbers import Real
from typing import Iterable, List, Tuple

from .models import TextFragment

logger = logging.getLogger(__name__)


class MalformedFragment(ValueError):
    """A fragment violates the input contract (non-finite geometry, bad text)."""

    def __init__(self, fragment, reason: str):
        self.fragment = fragment
        self.reason = reason
        super().__init__(f"Malformed fragment {fragment!r}: {reason}")


def is_blank(fragment: TextFragment) -> bool:
    """True for fragments with no visible text."""
    text = fragment.text
    return not isinstance(text, str) or not text.strip()


def validate_fragment(fragment: TextFragment) -> TextFragment:
    """
    Check a fragment against the input contract.

    Raises:
        MalformedFragment: If the text is not a string or any of the
            position/size fields is not a finite number
    """
    if not isinstance(fragment.text, str):
        raise MalformedFragment(fragment, "text is not a string")

    for name in ("x", "y", "width", "height"):
        value = getattr(fragment, name)
        if isinstance(value, bool) or not isinstance(value, Real):
            raise MalformedFragment(fragment, f"{name} is not a number")
        if not math.isfinite(value):
            raise MalformedFragment(fragment, f"{name} is not finite")

    return fragment


def intake_fragments(
    fragments: Iterable[TextFragment]
) -> Tuple[List[TextFragment], List[MalformedFragment]]:
    """
    Filter one page's fragments before clustering.

    Blank fragments are discarded silently; malformed ones are dropped
    individually and returned so the caller can report them.

    Returns:
        Tuple of (usable fragments, rejected fragment errors)
    """
    kept = []
    rejected = []

    for fragment in fragments:
        try:
            validate_fragment(fragment)
        except MalformedFragment as e:
            logger.warning(f"Dropping fragment: {e.reason} ({fragment.text!r})")
            rejected.append(e)
            continue

        if is_blank(fragment):
            continue
        kept.append(fragment)

    return kept, rejected
