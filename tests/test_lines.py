"""
Tests for fragment intake and line clustering.
"""

import itertools
import math
import random

import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reflow.models import TextFragment
from reflow.fragments import MalformedFragment, intake_fragments, validate_fragment
from reflow.lines import LineClusterer, baseline_units


def frag(text, x, y, width=20.0, height=12.0, font="Helvetica", flags=0):
    return TextFragment(text=text, x=x, y=y, width=width, height=height,
                        font_name=font, flags=flags)


def line_texts(lines):
    return [[f.text for f in line.fragments] for line in lines]


class TestTextFragment:
    """Tests for style flags derived from font names."""

    def test_bold_from_font_name(self):
        """Test bold detection from the font name."""
        assert frag("a", 0, 0, font="Arial-BoldMT").is_bold
        assert not frag("a", 0, 0, font="ArialMT").is_bold

    def test_italic_from_font_name(self):
        """Test italic detection from the font name."""
        assert frag("a", 0, 0, font="Times-BoldItalic").is_italic
        assert not frag("a", 0, 0, font="Times-Bold").is_italic

    def test_flags(self):
        """Test style detection from font flags."""
        f = frag("a", 0, 0, font="F1", flags=(1 << 4) | (1 << 1) | (1 << 3))
        assert f.is_bold and f.is_italic and f.is_monospaced

    def test_empty_font_name(self):
        """Test fragments without a font name."""
        f = frag("a", 0, 0, font="")
        assert not f.is_bold and not f.is_italic


class TestIntake:
    """Tests for fragment intake."""

    def test_blank_fragments_dropped(self):
        """Test that blank fragments are discarded."""
        kept, rejected = intake_fragments([
            frag("Hello", 0, 100), frag("", 30, 100), frag("   ", 60, 100), frag("\t\n", 90, 100)
        ])
        assert [f.text for f in kept] == ["Hello"]
        assert rejected == []

    @pytest.mark.parametrize("field_name", ["x", "y", "width", "height"])
    def test_non_finite_geometry_rejected(self, field_name):
        """Test rejection of non-finite coordinates."""
        values = dict(text="bad", x=1.0, y=1.0, width=1.0, height=1.0)
        for bad in (math.nan, math.inf, -math.inf):
            values[field_name] = bad
            with pytest.raises(MalformedFragment):
                validate_fragment(TextFragment(**values))

    def test_malformed_fragment_dropped_alone(self):
        """Test that only the malformed fragment is dropped."""
        good = frag("Good", 0, 100)
        kept, rejected = intake_fragments([good, frag("Bad", math.nan, 100)])
        assert kept == [good]
        assert len(rejected) == 1
        assert "x" in rejected[0].reason

    def test_non_string_text_rejected(self):
        """Test rejection of non-string text."""
        kept, rejected = intake_fragments([TextFragment(None, 0, 0, 1, 1)])
        assert kept == []
        assert len(rejected) == 1

    def test_malformed_is_value_error(self):
        """Test the MalformedFragment base class."""
        assert issubclass(MalformedFragment, ValueError)


class TestRounding:
    """Tests for half-up baseline rounding."""

    @pytest.mark.parametrize("value, units", [
        (699.84, 6998), (0.25, 3), (-0.04, 0), (10.0, 100), (128.2, 1282),
    ])
    def test_baseline_units(self, value, units):
        """Test rounding baselines to tenths."""
        assert baseline_units(value) == units


class TestLineClusterer:
    """Tests for LineClusterer."""

    def test_fragments_within_threshold_share_line(self):
        """Test grouping of close baselines."""
        lines = LineClusterer().cluster([
            frag("fox", 300, 700.2), frag("The", 200, 700), frag("quick", 250, 699.8)
        ])
        assert len(lines) == 1
        assert line_texts(lines) == [["The", "quick", "fox"]]
        assert lines[0].y == 700.2

    @pytest.mark.parametrize("dy, same", [
        (0.0, True), (0.5, True), (1.4, True), (1.5, False), (2.0, False), (10.0, False)
    ])
    def test_threshold(self, dy, same):
        """Test the clustering threshold in both orders."""
        a = frag("a", 0, 100.0)
        b = frag("b", 50, 100.0 + dy)
        for order in ([a, b], [b, a]):
            lines = LineClusterer().cluster(order)
            assert (len(lines) == 1) == same

    def test_lines_sorted_top_first(self):
        """Test line ordering."""
        lines = LineClusterer().cluster([
            frag("bottom", 0, 100), frag("top", 0, 700), frag("middle", 0, 400)
        ])
        assert line_texts(lines) == [["top"], ["middle"], ["bottom"]]

    def test_font_size_is_max_height(self):
        """Test line font size."""
        lines = LineClusterer().cluster([
            frag("small", 0, 500, height=9), frag("big", 40, 500.5, height=14)
        ])
        assert lines[0].font_size == 14

    def test_empty_page(self):
        """Test clustering no fragments."""
        assert LineClusterer().cluster([]) == []

    def test_permutation_invariant(self):
        """Test clustering under every input order."""
        fragments = [
            frag("a", 10, 100.0), frag("b", 40, 101.2), frag("c", 70, 102.4),
            frag("d", 10, 80.0), frag("e", 40, 79.1),
        ]
        expected = line_texts(LineClusterer().cluster(fragments))
        for perm in itertools.permutations(fragments):
            assert line_texts(LineClusterer().cluster(list(perm))) == expected

    def test_anchors_never_within_threshold(self):
        """Test line anchor separation on random input."""
        rng = random.Random(7)
        fragments = [
            frag(f"w{i}", rng.uniform(0, 500), rng.uniform(0, 800))
            for i in range(300)
        ]
        clusterer = LineClusterer()
        anchors = [line.y for line in clusterer.cluster(fragments)]
        limit = baseline_units(clusterer.threshold)
        for a, b in itertools.combinations(anchors, 2):
            assert abs(baseline_units(a) - baseline_units(b)) >= limit

    @pytest.mark.parametrize("low, high", [
        (126.7, 128.2), (254.9, 256.4), (0.8, 2.3), (999.1, 1000.6),
    ])
    def test_exact_threshold_gap_splits(self, low, high):
        """Test that baselines exactly 1.5 apart never share a line."""
        for order in ([frag("a", 0, low), frag("b", 50, high)],
                      [frag("b", 50, high), frag("a", 0, low)]):
            lines = LineClusterer().cluster(order)
            assert len(lines) == 2
            assert [line.y for line in lines] == [high, low]

    def test_gap_below_threshold_merges(self):
        """Test that a 1.4 gap between awkward floats still merges."""
        lines = LineClusterer().cluster([frag("a", 0, 126.7), frag("b", 50, 128.1)])
        assert len(lines) == 1
        assert lines[0].y == 128.1

    def test_custom_threshold(self):
        """Test a custom threshold."""
        lines = LineClusterer(threshold=5.0).cluster([frag("a", 0, 100), frag("b", 30, 104)])
        assert len(lines) == 1
