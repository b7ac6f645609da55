"""
Export module for reconstructed documents.

Provides:
- DOCX export (using python-docx)
- Markdown export
- JSON export
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Dict, Any, Optional, List, Union

from .assembler import Document, NO_TEXT_MESSAGE
from .classifier import RE_BULLET
from .io import save_json, sanitize_filename, unique_output_path
from .models import Alignment, PageBreak, Paragraph, Role, StyledRun

logger = logging.getLogger(__name__)

# Paragraph spacing per role in twips (1/20 pt): (before, after, line)
DEFAULT_ROLE_SPACING: Dict[str, tuple] = {
    Role.HEADING1.value: (360, 180, 360),
    Role.HEADING2.value: (240, 120, 360),
    Role.BODY.value: (60, 60, 360),
    Role.CAPTION.value: (60, 40, 360),
    Role.LIST_ITEM.value: (40, 40, 240),
}

LARGE_BODY_SIZE = 14.0
LARGE_BODY_SPACE_BEFORE = 120


# ============================================================================
# Markdown Exporter
# ============================================================================

class MarkdownExporter:
    """Export document to Markdown format."""

    def __init__(self, include_page_breaks: bool = True):
        self.include_page_breaks = include_page_breaks

    def export(
        self,
        document: Document,
        output_path: Union[str, Path]
    ) -> Path:
        """
        Export document to Markdown file.

        Args:
            document: Reconstructed document
            output_path: Output file path

        Returns:
            Path to the generated Markdown file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        markdown = self.render(document)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(markdown)

        logger.info(f"Exported Markdown to: {output_path}")
        return output_path

    def render(self, document: Document) -> str:
        """Generate Markdown from the document's element sequence."""
        if not document.has_text:
            return f"*{NO_TEXT_MESSAGE}*\n"

        lines = []
        for element in document.elements:
            if isinstance(element, PageBreak):
                if self.include_page_breaks:
                    lines.append("---")
                    lines.append("")
                continue

            md = self._paragraph_to_markdown(element)
            if md:
                lines.append(md)
                lines.append("")

        return "\n".join(lines)

    def _paragraph_to_markdown(self, paragraph: Paragraph) -> str:
        if paragraph.role == Role.HEADING1:
            return f"# {paragraph.text}"

        if paragraph.role == Role.HEADING2:
            return f"## {paragraph.text}"

        if paragraph.role == Role.CAPTION:
            return f"*{paragraph.text}*"

        runs = paragraph.runs
        if paragraph.role == Role.LIST_ITEM and runs:
            # bullet glyph is replaced by the Markdown marker
            first = replace(runs[0], text=RE_BULLET.sub("", runs[0].text, count=1))
            runs = [first] + runs[1:]

        text = "".join(self._format_run(run) for run in runs)
        if paragraph.role == Role.LIST_ITEM:
            return "- " + text.lstrip()
        return text

    @staticmethod
    def _format_run(run: StyledRun) -> str:
        core = run.text.strip()
        if not core:
            return run.text

        lead = run.text[:len(run.text) - len(run.text.lstrip())]
        trail = run.text[len(run.text.rstrip()):]

        if run.monospace:
            core = f"`{core}`"
        if run.bold and run.italic:
            core = f"***{core}***"
        elif run.bold:
            core = f"**{core}**"
        elif run.italic:
            core = f"*{core}*"

        return f"{lead}{core}{trail}"


# ============================================================================
# DOCX Exporter
# ============================================================================

class DocxExporter:
    """Export document to DOCX format using python-docx."""

    def __init__(
        self,
        template_path: Optional[str] = None,
        margin_inches: float = 1.0,
        role_spacing: Optional[Dict[str, tuple]] = None
    ):
        self.template_path = template_path
        self.margin_inches = margin_inches
        self.role_spacing = role_spacing or DEFAULT_ROLE_SPACING

    def export(
        self,
        document: Document,
        output_path: Union[str, Path]
    ) -> Path:
        """
        Export document to DOCX file.

        Args:
            document: Reconstructed document
            output_path: Output file path

        Returns:
            Path to the generated DOCX file
        """
        doc = self.build(document)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        doc.save(str(output_path))
        logger.info(f"Exported DOCX to: {output_path}")

        return output_path

    def build(self, document: Document):
        """Build an in-memory python-docx Document."""
        try:
            from docx import Document as DocxDocument
            from docx.shared import Inches
        except ImportError:
            raise ImportError(
                "python-docx is required for DOCX export. "
                "Install with: pip install python-docx"
            )

        # Create document from template or blank
        if self.template_path and Path(self.template_path).exists():
            doc = DocxDocument(self.template_path)
        else:
            doc = DocxDocument()

        for section in doc.sections:
            section.top_margin = Inches(self.margin_inches)
            section.bottom_margin = Inches(self.margin_inches)
            section.left_margin = Inches(self.margin_inches)
            section.right_margin = Inches(self.margin_inches)

        if not document.has_text:
            p = doc.add_paragraph()
            p.add_run(NO_TEXT_MESSAGE).italic = True
            return doc

        for element in document.elements:
            if isinstance(element, PageBreak):
                doc.add_page_break()
            else:
                self._add_paragraph(doc, element)

        return doc

    def _add_paragraph(self, doc: Any, paragraph: Paragraph):
        """Add one reconstructed paragraph to the DOCX document."""
        from docx.enum.text import WD_ALIGN_PARAGRAPH
        from docx.shared import Pt

        if paragraph.role == Role.HEADING1:
            p = doc.add_heading("", level=1)
        elif paragraph.role == Role.HEADING2:
            p = doc.add_heading("", level=2)
        else:
            p = doc.add_paragraph()

        p.alignment = {
            Alignment.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
            Alignment.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
            Alignment.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
        }[paragraph.alignment]

        before, after, line = self.role_spacing.get(
            paragraph.role.value, DEFAULT_ROLE_SPACING[Role.BODY.value]
        )
        if paragraph.role == Role.BODY and paragraph.font_size > LARGE_BODY_SIZE:
            before = LARGE_BODY_SPACE_BEFORE

        fmt = p.paragraph_format
        fmt.space_before = Pt(before / 20)
        fmt.space_after = Pt(after / 20)
        fmt.line_spacing = line / 240

        for styled in paragraph.runs:
            run = p.add_run(styled.text)
            run.bold = styled.bold or paragraph.role == Role.HEADING1
            run.italic = styled.italic or paragraph.role == Role.CAPTION
            run.font.name = styled.font_family
            if styled.size_points > 0:
                run.font.size = Pt(styled.size_points / 2)


# ============================================================================
# Multi-format Exporter
# ============================================================================

class DocumentExporter:
    """Convenience class for exporting to multiple formats."""

    FORMATS = ("json", "markdown", "docx")

    def __init__(
        self,
        output_dir: Union[str, Path],
        base_name: str = "document",
        overwrite: bool = False,
        export_config=None
    ):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.base_name = sanitize_filename(base_name)
        self.overwrite = overwrite

        if export_config is not None:
            self.markdown_exporter = MarkdownExporter(
                include_page_breaks=export_config.markdown_page_breaks
            )
            self.docx_exporter = DocxExporter(
                template_path=export_config.docx_template,
                margin_inches=export_config.margin_inches,
                role_spacing=export_config.role_spacing
            )
        else:
            self.markdown_exporter = MarkdownExporter()
            self.docx_exporter = DocxExporter()

    def _target(self, suffix: str) -> Path:
        path = self.output_dir / f"{self.base_name}{suffix}"
        return path if self.overwrite else unique_output_path(path)

    def export(
        self,
        document: Document,
        formats: Optional[List[str]] = None
    ) -> Dict[str, Path]:
        """
        Export document to multiple formats.

        Args:
            document: Reconstructed document
            formats: Subset of ('json', 'markdown', 'docx') or ['all']

        Returns:
            Dict mapping format to output path
        """
        if formats is None:
            formats = ["docx"]
        if "all" in formats:
            formats = list(self.FORMATS)

        results = {}

        if "json" in formats:
            results["json"] = save_json(document.to_dict(), self._target(".json"))

        if "markdown" in formats:
            results["markdown"] = self.markdown_exporter.export(document, self._target(".md"))

        if "docx" in formats:
            results["docx"] = self.docx_exporter.export(document, self._target(".docx"))

        return results
