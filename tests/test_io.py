"""
Tests for PDF extraction and file utilities.
"""

import pytest
import sys
import tempfile
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


@pytest.fixture
def temp_dir():
    """Create a temporary working directory."""
    with tempfile.TemporaryDirectory(prefix="pdf_reflow_test_") as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_pdf(temp_dir):
    """A two-page A4 PDF: heading and body text, then a blank page."""
    import fitz

    path = temp_dir / "sample.pdf"
    doc = fitz.open()
    page = doc.new_page(width=595, height=842)
    page.insert_text((72, 72), "Heading", fontsize=24, fontname="hebo")
    page.insert_text((72, 100), "Hello World", fontsize=12, fontname="helv")
    doc.new_page(width=595, height=842)
    doc.save(str(path))
    doc.close()
    return path


class TestPdfExtraction:
    """Tests for fragment extraction with PyMuPDF."""

    def test_page_count(self, sample_pdf):
        """Test page counting."""
        from reflow.io import get_pdf_page_count

        assert get_pdf_page_count(sample_pdf) == 2

    def test_load_all_pages(self, sample_pdf):
        """Test loading every page."""
        from reflow.io import load_pdf_pages

        pages = load_pdf_pages(sample_pdf)

        assert [p.page_number for p in pages] == [1, 2]
        assert pages[0].width == pytest.approx(595)
        assert pages[0].height == pytest.approx(842)
        assert pages[1].fragments == []

    def test_fragments_in_user_space(self, sample_pdf):
        """Test coordinates and styles of extracted fragments."""
        from reflow.io import load_pdf_pages

        page = load_pdf_pages(sample_pdf, [1])[0]
        by_text = {f.text.strip(): f for f in page.fragments}

        assert set(by_text) == {"Heading", "Hello World"}
        assert by_text["Heading"].y == pytest.approx(770, abs=0.5)
        assert by_text["Hello World"].y == pytest.approx(742, abs=0.5)
        assert by_text["Hello World"].x == pytest.approx(72, abs=0.5)
        assert by_text["Heading"].height == pytest.approx(24)
        assert by_text["Heading"].is_bold
        assert not by_text["Hello World"].is_bold
        assert by_text["Hello World"].width > 0

    def test_reconstruct_extracted_page(self, sample_pdf):
        """Test reconstruction of an extracted page."""
        from reflow.assembler import DocumentAssembler
        from reflow.io import load_pdf_pages
        from reflow.models import Role

        document = DocumentAssembler().process_document(load_pdf_pages(sample_pdf))
        paragraphs = document.paragraphs

        assert [p.role for p in paragraphs] == [Role.HEADING1, Role.BODY]
        assert paragraphs[0].text == "Heading"
        assert paragraphs[1].text == "Hello World"
        assert document.metrics.pages_without_text == 1

    def test_page_selection(self, sample_pdf):
        """Test loading selected pages."""
        from reflow.io import load_pdf_pages

        pages = load_pdf_pages(sample_pdf, [2])
        assert [p.page_number for p in pages] == [2]

    def test_page_out_of_range(self, sample_pdf):
        """Test requesting a page beyond the document."""
        from reflow.io import ExtractionFailed, load_pdf_pages

        with pytest.raises(ExtractionFailed):
            load_pdf_pages(sample_pdf, [3])

    def test_missing_file(self, temp_dir):
        """Test loading a missing file."""
        from reflow.io import load_pdf_pages

        with pytest.raises(FileNotFoundError):
            load_pdf_pages(temp_dir / "missing.pdf")

    def test_corrupt_file(self, temp_dir):
        """Test loading a corrupt file."""
        from reflow.io import ExtractionFailed, load_pdf_pages

        path = temp_dir / "broken.pdf"
        path.write_bytes(b"this is not a pdf at all")

        with pytest.raises(ExtractionFailed):
            load_pdf_pages(path)


class TestInputValidation:
    """Tests for input checks."""

    @pytest.mark.parametrize("num_bytes,expected", [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
    ])
    def test_format_bytes(self, num_bytes, expected):
        """Test human-readable sizes."""
        from reflow.io import format_bytes

        assert format_bytes(num_bytes) == expected

    def test_file_size_within_limit(self, temp_dir):
        """Test a file under the size limit."""
        from reflow.io import validate_file_size

        path = temp_dir / "small.pdf"
        path.write_bytes(b"x" * 100)
        assert validate_file_size(path, max_size_mb=1) == 100

    def test_file_size_over_limit(self, temp_dir):
        """Test a file over the size limit."""
        from reflow.io import validate_file_size

        path = temp_dir / "big.pdf"
        path.write_bytes(b"x" * 2048)
        with pytest.raises(ValueError, match="too large"):
            validate_file_size(path, max_size_mb=0.001)

    def test_detect_input_type(self, sample_pdf, temp_dir):
        """Test input type detection."""
        from reflow.io import detect_input_type

        other = temp_dir / "notes.txt"
        other.write_text("hello")

        assert detect_input_type(sample_pdf) == "pdf"
        assert detect_input_type(other) == "unknown"
        assert detect_input_type(temp_dir / "missing.pdf") == "unknown"


class TestOutputNaming:
    """Tests for output file naming."""

    @pytest.mark.parametrize("name,expected", [
        ("report", "report"),
        ("../../etc/passwd", "etcpasswd"),
        ('a<b>c:"d"|e?f*', "abcdef"),
        ("", "output"),
        ("...", "output"),
    ])
    def test_sanitize_filename(self, name, expected):
        """Test file name sanitizing."""
        from reflow.io import sanitize_filename

        assert sanitize_filename(name) == expected

    def test_unique_output_path(self, temp_dir):
        """Test numbered output names."""
        from reflow.io import unique_output_path

        target = temp_dir / "doc.docx"
        assert unique_output_path(target) == target

        target.write_bytes(b"")
        assert unique_output_path(target).name == "doc-1.docx"

        (temp_dir / "doc-1.docx").write_bytes(b"")
        assert unique_output_path(target).name == "doc-2.docx"

    def test_json_roundtrip(self, temp_dir):
        """Test saving and loading JSON."""
        from reflow.io import load_json, save_json
        from reflow.models import Role

        path = save_json({"role": Role.HEADING1, "size": 12.5}, temp_dir / "out" / "data.json")
        assert load_json(path) == {"role": "heading1", "size": 12.5}
