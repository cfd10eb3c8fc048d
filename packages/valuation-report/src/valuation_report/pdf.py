"""
Valuation report PDF.

``build_report_layout`` decides what goes on which page; ``render_layout``
draws the result with the ReportLab canvas; ``generate_valuation_pdf`` ties
the two together and takes care of naming the output file.
"""

import datetime
import logging
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Optional, Union

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from valuation_client.models.report import ValuationReport
from valuation_client.models.wizard import WizardData
from valuation_client.transforms import WizardLike, as_wizard
from valuation_report.layout import PageLayout

logger = logging.getLogger(__name__)

DISCLAIMER = (
    "This report was generated using AI analysis and should be used for informational purposes only."
)

Output = Union[str, Path, BinaryIO, None]


def format_number(value: float) -> str:
    """Print whole numbers without a trailing ``.0``: 9.0 -> "9", 9.5 -> "9.5"."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_date(day: datetime.date) -> str:
    return f"{day.month}/{day.day}/{day.year}"


def report_filename(wizard: WizardData) -> str:
    name = (wizard.business_name or "startup").replace("/", "-").replace("\\", "-")
    return f"{name}-valuation-report.pdf"


def build_report_layout(
    wizard: WizardLike,
    report: ValuationReport,
    confidence: int,
    generated_on: Optional[datetime.date] = None,
) -> PageLayout:
    wizard = as_wizard(wizard)
    generated_on = generated_on or datetime.date.today()
    layout = PageLayout()

    # Header
    layout.add_text(f"{wizard.business_name or 'Startup'} Valuation Report", 20, True)
    layout.add_text(f"Generated on: {format_date(generated_on)}", 10)
    layout.skip(10)

    # Executive Summary
    layout.add_text("EXECUTIVE SUMMARY", 16, True)
    layout.add_text(f"Confidence Level: {confidence}%")

    final_range = report.final_valuation.final_range
    if final_range is not None:
        layout.add_text(
            f"Valuation Range: ${format_number(final_range.lower)}M - ${format_number(final_range.upper)}M",
            14,
            True,
        )

    layout.add_text(f"Business Stage: {report.business_summary.stage_assessment or 'N/A'}")
    layout.skip(10)

    # Business Summary
    layout.add_text("BUSINESS ANALYSIS", 16, True)
    if report.business_summary.summary:
        layout.add_text(report.business_summary.summary)
    layout.skip(5)

    if report.business_summary.key_strengths:
        layout.add_text("Key Strengths:", 12, True)
        for strength in report.business_summary.key_strengths:
            layout.add_text(f"• {strength}")
        layout.skip(5)

    # Valuation Methods
    layout.add_text("VALUATION METHODS", 16, True)
    for index, calc in enumerate(report.calculations, start=1):
        layout.add_text(f"{index}. {calc.method}", 12, True)
        layout.add_text(
            f"Range: ${format_number(calc.valuation_range.lower)}M - ${format_number(calc.valuation_range.upper)}M"
        )
        layout.add_text(f"Explanation: {calc.explanation}")
        if calc.narrative:
            layout.add_text(f"Analysis: {calc.narrative}")
        layout.skip(5)

    if report.strategic_context:
        layout.add_text("STRATEGIC CONTEXT", 16, True)
        layout.add_text(report.strategic_context)
        layout.skip(5)

    competitors = report.competitor_analysis
    if competitors is not None:
        layout.add_text("COMPETITIVE LANDSCAPE", 16, True)
        if competitors.competitors:
            layout.add_text("Key Competitors:", 12, True)
            for competitor in competitors.competitors:
                layout.add_text(f"• {competitor}")
        if competitors.commentary:
            layout.add_text("Market Position:", 12, True)
            layout.add_text(competitors.commentary)
        layout.skip(5)

    if report.final_valuation.recommendations:
        layout.add_text("RECOMMENDATIONS", 16, True)
        for recommendation in report.final_valuation.recommendations:
            layout.add_text(f"• {recommendation}")

    layout.add_footer(DISCLAIMER)
    return layout


def render_layout(layout: PageLayout, target: Union[str, BinaryIO], title: str = "") -> None:
    page_height = layout.page_height * mm
    pdf = canvas.Canvas(target, pagesize=(layout.page_width * mm, page_height))
    if title:
        pdf.setTitle(title)

    for page in layout.pages:
        for line in page.lines:
            pdf.setFont(line.font_name, line.font_size)
            pdf.drawString(line.x * mm, page_height - line.y * mm, line.text)
        pdf.showPage()

    pdf.save()


def generate_valuation_pdf(
    wizard: WizardLike,
    report: ValuationReport,
    confidence: int,
    output: Output = None,
    generated_on: Optional[datetime.date] = None,
) -> Union[Path, BinaryIO]:
    """
    Render the valuation report.

    ``output`` may be a directory (the file is named after the business and
    its path returned), a writable binary stream (returned after writing), or
    ``None`` for a fresh in-memory ``BytesIO`` positioned at the start.
    """
    wizard = as_wizard(wizard)
    layout = build_report_layout(wizard, report, confidence, generated_on)
    title = f"{wizard.business_name or 'Startup'} Valuation Report"

    if output is None:
        buffer = BytesIO()
        render_layout(layout, buffer, title)
        buffer.seek(0)
        return buffer

    if isinstance(output, (str, Path)):
        directory = Path(output)
        if directory.exists() and not directory.is_dir():
            raise ValueError(f"Output path {directory} exists and is not a directory")
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / report_filename(wizard)
        render_layout(layout, str(path), title)
        logger.info(f"Wrote {len(layout.pages)}-page valuation report to {path}")
        return path

    render_layout(layout, output, title)
    return output
