"""
Page Layout
===========

Top-down text flow over fixed-size pages, in millimetres.

Positions are measured from the top-left corner (the way the report is
designed) and only converted to PDF points, whose origin is bottom-left,
when rendering. Keeping layout separate from rendering means pagination can
be inspected and tested without parsing a PDF.

Flow rules for ``add_text``:

- text is wrapped to ``page_width - 2 * margin`` with real font metrics
- each wrapped line takes ``font_size * 0.5`` mm, and a block is followed
  by a 5 mm gap
- a block that does not fit below the cursor moves to a new page; a block
  taller than a whole page is split line by line across pages
"""

from dataclasses import dataclass, field
from typing import List

from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
DEFAULT_MARGIN_MM = 20.0
LINE_HEIGHT_FACTOR = 0.5
BLOCK_GAP_MM = 5.0
FOOTER_OFFSET_MM = 10.0

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"


@dataclass
class PlacedLine:
    text: str
    x: float
    y: float
    font_name: str
    font_size: float


@dataclass
class Page:
    lines: List[PlacedLine] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(line.text for line in self.lines)


class PageLayout:
    def __init__(
        self,
        page_width: float = A4_WIDTH_MM,
        page_height: float = A4_HEIGHT_MM,
        margin: float = DEFAULT_MARGIN_MM,
    ):
        if page_width <= 2 * margin or page_height <= 2 * margin:
            raise ValueError(f"Margin {margin}mm leaves no room on a {page_width}x{page_height}mm page")

        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.pages: List[Page] = [Page()]
        self.y = margin

    @property
    def wrap_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def bottom(self) -> float:
        return self.page_height - self.margin

    @property
    def current_page(self) -> Page:
        return self.pages[-1]

    def wrap(self, text: str, font_size: float = 12, bold: bool = False) -> List[str]:
        """Wrap ``text`` to the printable width; explicit newlines and blank lines are kept."""
        font_name = FONT_BOLD if bold else FONT_REGULAR
        lines = []
        for segment in text.split("\n"):
            lines.extend(simpleSplit(segment, font_name, font_size, self.wrap_width * mm) or [""])
        return lines

    def new_page(self) -> None:
        self.pages.append(Page())
        self.y = self.margin

    def skip(self, amount: float) -> None:
        self.y += amount

    def add_text(self, text: str, font_size: float = 12, bold: bool = False) -> None:
        font_name = FONT_BOLD if bold else FONT_REGULAR
        lines = self.wrap(text, font_size, bold)
        line_height = font_size * LINE_HEIGHT_FACTOR
        block_height = len(lines) * line_height

        if self.y + block_height > self.bottom and self.y > self.margin:
            self.new_page()

        for line in lines:
            if self.y + line_height > self.bottom and self.current_page.lines:
                self.new_page()
            self.current_page.lines.append(PlacedLine(line, self.margin, self.y, font_name, font_size))
            self.y += line_height

        self.y += BLOCK_GAP_MM

    def add_footer(self, text: str, font_size: float = 8) -> None:
        """Stamp ``text`` at the foot of every page laid out so far."""
        y = self.page_height - FOOTER_OFFSET_MM
        for page in self.pages:
            page.lines.append(PlacedLine(text, self.margin, y, FONT_REGULAR, font_size))
