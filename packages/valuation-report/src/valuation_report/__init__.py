"""
Valuation Report
================

Paginated PDF rendering of a ``ValuationReport``.

Public API:
- ``PageLayout``: pure top-down text flow and pagination (millimetres)
- ``build_report_layout(wizard, report, confidence)``: the report's page plan
- ``generate_valuation_pdf(wizard, report, confidence, output)``: render to file or stream
"""

from valuation_report.layout import Page, PageLayout, PlacedLine
from valuation_report.pdf import (
    DISCLAIMER,
    build_report_layout,
    format_number,
    generate_valuation_pdf,
    render_layout,
    report_filename,
)

__all__ = [
    "DISCLAIMER",
    "Page",
    "PageLayout",
    "PlacedLine",
    "build_report_layout",
    "format_number",
    "generate_valuation_pdf",
    "render_layout",
    "report_filename",
]
