"""
Font normalization: maps embedded PDF font names onto portable families.
"""

import re
from typing import List, Tuple

DEFAULT_FAMILY = "Calibri"
SERIF_FAMILY = "Times New Roman"
MONOSPACE_FAMILY = "Courier New"
DINGBAT_FAMILY = "Wingdings"

# Substring (lowercase) -> family, first match wins
FONT_TABLE: List[Tuple[str, str]] = [
    ("helvetica", DEFAULT_FAMILY),
    ("calibri", DEFAULT_FAMILY),
    ("arial", "Arial"),
    ("times", SERIF_FAMILY),
    ("courier", MONOSPACE_FAMILY),
    ("zapfdingbats", DINGBAT_FAMILY),
    ("symbol", DINGBAT_FAMILY),
    ("georgia", "Georgia"),
    ("verdana", "Verdana"),
    ("comic", "Comic Sans MS"),
    ("trebuchet", "Trebuchet MS"),
]

FONT_FAMILIES = frozenset(family for _, family in FONT_TABLE) | {
    DEFAULT_FAMILY, SERIF_FAMILY, MONOSPACE_FAMILY, DINGBAT_FAMILY
}

_RE_SUBSET_PREFIX = re.compile(r"^[A-Za-z]{6}\+")
_RE_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


def strip_font_name(font_name: str) -> str:
    """Remove a subset tag (``ABCDEF+``) and every non-alphanumeric character."""
    name = _RE_SUBSET_PREFIX.sub("", font_name)
    if "+" in name:
        name = name.split("+")[-1]
    return _RE_NON_ALNUM.sub("", name)


class FontNormalizer:
    """
    Total, deterministic mapping from raw font names to FONT_FAMILIES.

    Lookups are memoized per instance; a page typically repeats a handful
    of font names many times.
    """

    def __init__(self, default_family: str = DEFAULT_FAMILY):
        if default_family not in FONT_FAMILIES:
            default_family = DEFAULT_FAMILY
        self.default_family = default_family
        self._cache = {}

    def normalize(self, font_name) -> str:
        if not isinstance(font_name, str) or not font_name:
            return self.default_family

        family = self._cache.get(font_name)
        if family is None:
            family = self._lookup(font_name)
            self._cache[font_name] = family
        return family

    def _lookup(self, font_name: str) -> str:
        family = self._match(font_name.lower())
        if family:
            return family

        cleaned = strip_font_name(font_name).lower()
        if not cleaned:
            return self.default_family

        family = self._match(cleaned)
        if family:
            return family

        # Generic hints for unlisted faces
        if "mono" in cleaned:
            return MONOSPACE_FAMILY
        if "serif" in cleaned and "sans" not in cleaned:
            return SERIF_FAMILY

        return self.default_family

    @staticmethod
    def _match(name: str):
        for key, family in FONT_TABLE:
            if key in name:
                return family
        return None


_default_normalizer = FontNormalizer()


def normalize_font_name(font_name) -> str:
    """Module-level shortcut using the default family."""
    return _default_normalizer.normalize(font_name)


def is_monospace_family(family: str) -> bool:
    return family == MONOSPACE_FAMILY
