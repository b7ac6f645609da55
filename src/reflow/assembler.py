"""
Document assembler module for page reconstruction.

Provides:
- Document data model (Document, PageResult)
- Per-page pipeline orchestration (intake -> lines -> paragraphs -> runs)
- Ordered multi-page join with page-break markers
- Metrics calculation
"""

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Dict, Any, Union, Iterable

import numpy as np

from .classifier import RoleClassifier
from .fonts import FontNormalizer
from .fragments import MalformedFragment, intake_fragments
from .lines import LineClusterer
from .models import PageBreak, PageText, Paragraph, Role
from .paragraphs import ParagraphSegmenter
from .runs import RunAssembler

logger = logging.getLogger(__name__)

NO_TEXT_MESSAGE = (
    "No text content found. This may be a scanned image-based PDF. "
    "Consider using OCR for better quality conversion."
)

Element = Union[Paragraph, PageBreak]


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class PageResult:
    """Reconstruction output for one page."""
    page_number: int
    width: float
    height: float
    paragraphs: List[Paragraph] = field(default_factory=list)
    rejected: List[MalformedFragment] = field(default_factory=list)
    fragment_count: int = 0
    line_count: int = 0

    @property
    def has_text(self) -> bool:
        return bool(self.paragraphs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page_number": self.page_number,
            "width": self.width,
            "height": self.height,
            "fragment_count": self.fragment_count,
            "line_count": self.line_count,
            "rejected_fragments": [e.reason for e in self.rejected],
            "paragraphs": [p.to_dict() for p in self.paragraphs],
        }


@dataclass
class DocumentMetrics:
    """Metrics about a reconstruction run."""
    pages_processed: int = 0
    pages_without_text: int = 0
    fragments_total: int = 0
    fragments_rejected: int = 0
    lines_total: int = 0
    paragraphs_total: int = 0
    runs_total: int = 0
    role_counts: Dict[str, int] = field(default_factory=dict)
    mean_font_size: float = 0.0
    processing_time_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pages_processed": self.pages_processed,
            "pages_without_text": self.pages_without_text,
            "fragments": {
                "total": self.fragments_total,
                "rejected": self.fragments_rejected,
            },
            "lines_total": self.lines_total,
            "paragraphs_total": self.paragraphs_total,
            "runs_total": self.runs_total,
            "roles": dict(self.role_counts),
            "mean_font_size": round(self.mean_font_size, 2),
            "processing_time_seconds": round(self.processing_time_seconds, 2)
        }


@dataclass
class Document:
    """Complete reconstructed document."""
    task_id: str
    source_file: str
    pages: List[PageResult] = field(default_factory=list)
    metrics: Optional[DocumentMetrics] = None
    created_at: str = ""
    schema_version: str = "1.0"

    def __post_init__(self):
        if not self.task_id:
            self.task_id = str(uuid.uuid4())
        if not self.created_at:
            self.created_at = datetime.now().isoformat()

    @property
    def elements(self) -> List[Element]:
        """Paragraphs of every page in order, with a PageBreak before each page after the first."""
        out: List[Element] = []
        for index, page in enumerate(self.pages):
            if index > 0:
                out.append(PageBreak(page_number=page.page_number))
            out.extend(page.paragraphs)
        return out

    @property
    def paragraphs(self) -> List[Paragraph]:
        return [p for page in self.pages for p in page.paragraphs]

    @property
    def has_text(self) -> bool:
        return any(page.has_text for page in self.pages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task_id": self.task_id,
            "schema_version": self.schema_version,
            "source_file": self.source_file,
            "created_at": self.created_at,
            "has_text": self.has_text,
            "pages": [p.to_dict() for p in self.pages],
            "elements": [e.to_dict() for e in self.elements],
            "metrics": self.metrics.to_dict() if self.metrics else {},
        }


# ============================================================================
# Document Assembler
# ============================================================================

class DocumentAssembler:
    """
    Orchestrates page reconstruction.

    Coordinates:
    - Fragment intake
    - Line clustering
    - Paragraph segmentation
    - Role/alignment classification
    - Run assembly

    Stages of one page always run in order. Pages are independent, so
    with ``workers > 1`` they are processed on a thread pool and joined
    back in input order.
    """

    def __init__(
        self,
        clusterer: Optional[LineClusterer] = None,
        segmenter: Optional[ParagraphSegmenter] = None,
        classifier: Optional[RoleClassifier] = None,
        run_assembler: Optional[RunAssembler] = None,
        workers: int = 1
    ):
        self.clusterer = clusterer or LineClusterer()
        self.segmenter = segmenter or ParagraphSegmenter()
        self.classifier = classifier or RoleClassifier()
        self.run_assembler = run_assembler or RunAssembler()
        self.workers = max(1, int(workers))

    @classmethod
    def from_config(cls, config) -> "DocumentAssembler":
        """Build an assembler from a ``config.PipelineConfig``."""
        space_gap = config.runs.space_gap
        return cls(
            clusterer=LineClusterer(
                threshold=config.cluster.line_threshold,
                precision=config.cluster.y_precision
            ),
            segmenter=ParagraphSegmenter(
                gap_ratio=config.segment.gap_ratio,
                font_size_delta=config.segment.font_size_delta,
                short_line_chars=config.segment.short_line_chars,
                space_gap=space_gap,
                merge_lines=config.segment.merge_lines
            ),
            classifier=RoleClassifier(
                heading1_size=config.classifier.heading1_size,
                heading2_size=config.classifier.heading2_size,
                caption_size=config.classifier.caption_size,
                center_band=tuple(config.classifier.center_band),
                space_gap=space_gap
            ),
            run_assembler=RunAssembler(
                space_gap=space_gap,
                size_scale=config.runs.size_scale,
                font_normalizer=FontNormalizer(config.runs.default_family)
            ),
            workers=config.workers
        )

    def process_page(self, page: PageText) -> PageResult:
        """
        Reconstruct the paragraphs of a single page.

        Args:
            page: Fragments and geometry of the page

        Returns:
            PageResult with classified, styled paragraphs
        """
        fragments, rejected = intake_fragments(page.fragments)
        lines = self.clusterer.cluster(fragments)

        paragraphs = []
        for group in self.segmenter.segment(lines):
            role, alignment = self.classifier.classify(group, page.width)
            runs = self.run_assembler.assemble(group)
            if not runs:
                continue
            paragraphs.append(Paragraph(
                lines=group,
                role=role,
                alignment=alignment,
                runs=runs,
                page_number=page.page_number
            ))

        logger.debug(
            f"Page {page.page_number}: {len(fragments)} fragments, "
            f"{len(lines)} lines, {len(paragraphs)} paragraphs"
        )

        return PageResult(
            page_number=page.page_number,
            width=page.width,
            height=page.height,
            paragraphs=paragraphs,
            rejected=rejected,
            fragment_count=len(fragments),
            line_count=len(lines)
        )

    def process_pages(self, pages: Iterable[PageText]) -> List[PageResult]:
        """Process pages, preserving input order."""
        pages = list(pages)
        if self.workers == 1 or len(pages) < 2:
            return [self.process_page(p) for p in pages]

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            return list(pool.map(self.process_page, pages))

    def process_document(
        self,
        pages: Iterable[PageText],
        source_file: str = "",
        task_id: Optional[str] = None
    ) -> Document:
        """
        Reconstruct a whole document.

        Args:
            pages: Per-page fragments, in page order
            source_file: Name of the source PDF (metadata only)
            task_id: Optional task ID

        Returns:
            Document with ordered pages and metrics
        """
        start_time = time.time()
        pages = list(pages)
        logger.info(f"Reconstructing {len(pages)} page(s)")

        results = self.process_pages(pages)

        document = Document(
            task_id=task_id or "",
            source_file=source_file,
            pages=results
        )
        document.metrics = self._calculate_metrics(results, time.time() - start_time)

        if not document.has_text:
            logger.warning("No extractable text found; likely a scanned/image document")

        logger.info(
            f"Reconstructed {document.metrics.paragraphs_total} paragraphs "
            f"in {document.metrics.processing_time_seconds:.2f}s"
        )
        return document

    def _calculate_metrics(
        self,
        pages: List[PageResult],
        elapsed: float
    ) -> DocumentMetrics:
        """Calculate document-level metrics."""
        metrics = DocumentMetrics()
        metrics.pages_processed = len(pages)
        metrics.processing_time_seconds = elapsed
        metrics.role_counts = {role.value: 0 for role in Role}

        font_sizes = []
        for page in pages:
            if not page.has_text:
                metrics.pages_without_text += 1
            metrics.fragments_total += page.fragment_count + len(page.rejected)
            metrics.fragments_rejected += len(page.rejected)
            metrics.lines_total += page.line_count

            for paragraph in page.paragraphs:
                metrics.paragraphs_total += 1
                metrics.runs_total += len(paragraph.runs)
                metrics.role_counts[paragraph.role.value] += 1
                font_sizes.append(paragraph.font_size)

        if font_sizes:
            metrics.mean_font_size = float(np.mean(font_sizes))

        return metrics
