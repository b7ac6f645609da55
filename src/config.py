"""
Configuration and constants for the page reconstruction pipeline.

This module provides:
- Global logging setup
- Per-stage thresholds (line clustering, segmentation, classification, runs)
- Export settings
- Environment overrides
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Dict, Tuple
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("pdf_reflow")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class ClusterConfig:
    """Line clustering configuration."""
    line_threshold: float = 1.5  # max baseline distance within one line
    y_precision: int = 1  # decimals kept when rounding baselines


@dataclass
class SegmentConfig:
    """Paragraph segmentation configuration."""
    gap_ratio: float = 1.5  # gap > ratio * font size starts a paragraph
    font_size_delta: float = 3.0
    short_line_chars: int = 50
    # False = every line is its own paragraph
    merge_lines: bool = True


@dataclass
class ClassifierConfig:
    """Role and alignment classification configuration."""
    heading1_size: float = 18.0
    heading2_size: float = 14.0
    caption_size: float = 10.0
    center_band: Tuple[float, float] = (0.35, 0.65)


@dataclass
class RunConfig:
    """Run assembly configuration."""
    space_gap: float = 2.0  # horizontal gap that reads as a word break
    size_scale: float = 2.0  # font size -> half-points
    default_family: str = "Calibri"


@dataclass
class ExportConfig:
    """Export configuration."""
    # DOCX settings
    docx_template: Optional[str] = None
    margin_inches: float = 1.0
    # role -> (space before, space after, line spacing) in twips; None = exporter defaults
    role_spacing: Optional[Dict[str, Tuple[int, int, int]]] = None
    # Markdown settings
    markdown_page_breaks: bool = True


@dataclass
class PipelineConfig:
    """Main pipeline configuration."""
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    segment: SegmentConfig = field(default_factory=SegmentConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    runs: RunConfig = field(default_factory=RunConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Global settings
    workers: int = 1  # pages processed in parallel
    debug_mode: bool = False
    max_pages: Optional[int] = None  # None = process all pages
    max_file_size_mb: float = 200.0


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> PipelineConfig:
    """Get the default pipeline configuration with environment overrides."""
    config = PipelineConfig()

    if os.environ.get("PDF_REFLOW_DEBUG", "").lower() == "true":
        config.debug_mode = True

    if os.environ.get("PDF_REFLOW_MERGE_LINES", "").lower() == "false":
        config.segment.merge_lines = False

    workers = os.environ.get("PDF_REFLOW_WORKERS")
    if workers:
        try:
            config.workers = max(1, int(workers))
        except ValueError:
            logger.warning(f"Ignoring invalid PDF_REFLOW_WORKERS={workers!r}")

    return config
