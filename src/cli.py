#!/usr/bin/env python
"""
Command-line interface for the PDF reconstruction pipeline.

Usage:
    python src/cli.py --input <pdf> --output <output_dir> [options]

Examples:
    # Convert a PDF to DOCX
    python src/cli.py --input document.pdf --output ./output

    # All formats, pages 1-5, four pages at a time
    python src/cli.py --input document.pdf --output ./output --format all --pages 1-5 --workers 4
"""

import sys
from pathlib import Path

# Add src directory to path for imports when running as script
_src_dir = Path(__file__).parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

import argparse
import logging
import time
from typing import List

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("pdf_reflow")

__version__ = "1.0.0"


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="PDF Reflow - Rebuild headings, paragraphs and styled runs from PDF text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert a PDF to Word:
    python -m src.cli --input document.pdf --output ./output

  Export every format:
    python -m src.cli --input document.pdf --output ./output --format all

  Process only specific pages:
    python -m src.cli --input document.pdf --output ./output --pages 1-5,7
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input PDF file"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        default=["docx"],
        choices=["json", "markdown", "docx", "all"],
        help="Output format(s) (default: docx)"
    )

    parser.add_argument(
        "--pages",
        type=str,
        default=None,
        help="Page range to process, e.g., '1-5' or '1,3,5' (default: all)"
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of pages reconstructed in parallel (default: 1)"
    )

    parser.add_argument(
        "--no-merge-lines",
        action="store_true",
        help="Emit every line as its own paragraph"
    )

    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite existing output files instead of numbering new ones"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (re-raise errors with tracebacks)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def parse_page_range(page_str: str, max_pages: int) -> List[int]:
    """
    Parse a page range string ("1-5,7,9-12") to sorted page numbers.

    Raises:
        ValueError: If any part is malformed or outside 1..max_pages,
            or nothing is selected
    """
    pages = set()

    for part in page_str.split(","):
        part = part.strip()
        if not part:
            continue

        if "-" in part:
            start_str, _, end_str = part.partition("-")
            try:
                start, end = int(start_str), int(end_str)
            except ValueError:
                raise ValueError(f"Invalid range: {part}. Pages must be between 1 and {max_pages}.")
            if start < 1 or end > max_pages or start > end:
                raise ValueError(f"Invalid range: {part}. Pages must be between 1 and {max_pages}.")
            pages.update(range(start, end + 1))
        else:
            try:
                page = int(part)
            except ValueError:
                raise ValueError(f"Invalid page number: {part}. Pages must be between 1 and {max_pages}.")
            if page < 1 or page > max_pages:
                raise ValueError(f"Invalid page number: {part}. Pages must be between 1 and {max_pages}.")
            pages.add(page)

    if not pages:
        raise ValueError(f"No pages selected by '{page_str}'. Pages must be between 1 and {max_pages}.")

    return sorted(pages)


def check_dependencies() -> bool:
    """Check if required dependencies are available."""
    missing = []

    try:
        import fitz
    except ImportError:
        missing.append("pymupdf")

    try:
        import docx
    except ImportError:
        missing.append("python-docx")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    if missing:
        logger.error("Missing required dependencies:")
        for dep in missing:
            logger.error(f"  - {dep}")
        logger.error("\nInstall with: pip install -e .")
        return False

    return True


def run_pipeline(args) -> int:
    """Run the PDF reconstruction pipeline."""
    from reflow.io import (
        ExtractionFailed, detect_input_type, ensure_dir, get_pdf_page_count,
        load_pdf_pages, validate_file_size
    )
    from reflow.assembler import DocumentAssembler
    from reflow.export import DocumentExporter
    from config import get_config

    start_time = time.time()
    config = get_config()

    if args.workers is not None:
        config.workers = max(1, args.workers)
    if args.no_merge_lines:
        config.segment.merge_lines = False
    if args.debug:
        config.debug_mode = True

    input_path = Path(args.input)
    if detect_input_type(input_path) != "pdf":
        logger.error(f"Unsupported input (expected a PDF file): {input_path}")
        return 1

    try:
        validate_file_size(input_path, config.max_file_size_mb)
    except ValueError as e:
        logger.error(str(e))
        return 1

    output_dir = Path(args.output)
    ensure_dir(output_dir)

    # Extract fragments
    try:
        page_numbers = None
        if args.pages:
            page_numbers = parse_page_range(args.pages, get_pdf_page_count(input_path))
            logger.info(f"Processing pages: {page_numbers}")
        pages = load_pdf_pages(input_path, page_numbers)
    except ValueError as e:
        logger.error(str(e))
        return 1
    except ExtractionFailed as e:
        logger.error(f"Extraction failed: {e}")
        if config.debug_mode:
            raise
        return 1

    if config.max_pages is not None:
        pages = pages[:config.max_pages]

    # Reconstruct
    assembler = DocumentAssembler.from_config(config)
    document = assembler.process_document(pages, source_file=str(input_path))

    # Export
    exporter = DocumentExporter(
        output_dir,
        input_path.stem,
        overwrite=args.overwrite,
        export_config=config.export
    )
    export_results = exporter.export(document, args.format)

    for fmt, path in export_results.items():
        logger.info(f"Exported {fmt}: {path}")

    # Print summary
    elapsed = time.time() - start_time
    metrics = document.metrics

    if not args.quiet:
        print("\n" + "="*60)
        print("PDF RECONSTRUCTION COMPLETE")
        print("="*60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Pages processed: {metrics.pages_processed} "
              f"(without text: {metrics.pages_without_text})")
        print(f"Processing time: {elapsed:.2f}s")
        print()
        print("Structure:")
        print(f"  Lines: {metrics.lines_total}")
        print(f"  Paragraphs: {metrics.paragraphs_total}")
        for role, count in metrics.role_counts.items():
            print(f"    {role}: {count}")
        print(f"  Runs: {metrics.runs_total}")
        print(f"  Fragments dropped: {metrics.fragments_rejected} "
              f"of {metrics.fragments_total}")
        print("="*60)

    return 0


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    # Check dependencies
    if not check_dependencies():
        sys.exit(1)

    # Run pipeline
    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
