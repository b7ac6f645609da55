"""
PDF Reflow
==========

Rebuilds document structure from the positioned text of PDF pages and
re-serializes it as DOCX, Markdown or JSON.

Main components:
- Fragment intake (PyMuPDF text extraction, validation)
- Line clustering and paragraph segmentation
- Heading/body/caption/list classification and alignment inference
- Styled run assembly with portable font families
- Multi-format export
"""

__version__ = "1.0.0"
__author__ = "PDF Reflow Team"
