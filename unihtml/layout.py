"""Page Layout

Minimal layout primitives used to embed converted pages into a larger
document:

- Margins / DrawContext: the cursor on the output canvas, in points with the
  origin at the top-left of the page
- Block: a converted page sized from its media box
- PlacedBlock: a block positioned on an output page, optionally trimmed
- compose_pages: draws placed blocks onto blank PDF pages

Coordinates are flipped to the PDF bottom-left origin only when composing.
"""
from dataclasses import dataclass, field, replace
from typing import List, Sequence, Tuple

from pypdf import PageObject, PdfWriter, Transformation


@dataclass(frozen=True)
class Margins:
    """Page margins in points."""

    left: float = 0.0
    right: float = 0.0
    top: float = 0.0
    bottom: float = 0.0


@dataclass(frozen=True)
class DrawContext:
    """Drawing cursor on the output canvas.

    Attributes:
        page: 1-based output page number
        x, y: Cursor position from the top-left corner of the page
        width, height: Drawing area available from the cursor
        page_width, page_height: Output page size
        margins: Output page margins
    """

    page: int = 1
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    page_width: float = 0.0
    page_height: float = 0.0
    margins: Margins = field(default_factory=Margins)

    @classmethod
    def for_page(cls, page_width: float, page_height: float, margins: Margins = Margins()) -> "DrawContext":
        """Cursor at the top-left margin of the first page."""
        return cls(
            page=1,
            x=margins.left,
            y=margins.top,
            width=page_width - margins.left - margins.right,
            height=page_height - margins.top - margins.bottom,
            page_width=page_width,
            page_height=page_height,
            margins=margins,
        )

    def new_page(self) -> "DrawContext":
        return replace(
            self,
            page=self.page + 1,
            x=self.margins.left,
            y=self.margins.top,
            height=self.page_height - self.margins.top - self.margins.bottom,
        )

    def advance(self, dy: float) -> "DrawContext":
        """Move the cursor down by dy points (up when negative)."""
        return replace(self, y=self.y + dy, height=self.height - dy)


@dataclass(frozen=True)
class Block:
    """A converted PDF page used as a drawable block."""

    page: PageObject
    width: float
    height: float

    @classmethod
    def from_page(cls, page: PageObject) -> "Block":
        box = page.mediabox
        return cls(page=page, width=float(box.width), height=float(box.height))

    def generate_page_blocks(self, ctx: DrawContext) -> Tuple[List["PlacedBlock"], DrawContext]:
        """
        Place the block at the cursor.

        Moves to a new page first when the block does not fit below a cursor
        that is not already at the top margin.

        Returns:
            Tuple of (placed blocks, context after the block)
        """
        bottom_limit = ctx.page_height - ctx.margins.bottom
        if ctx.y + self.height > bottom_limit and ctx.y > ctx.margins.top:
            ctx = ctx.new_page()
        placed = PlacedBlock(block=self, page=ctx.page, x=ctx.x, y=ctx.y)
        return [placed], ctx.advance(self.height)


@dataclass(frozen=True)
class PlacedBlock:
    """A block positioned on an output page.

    Attributes:
        block: The drawn page
        page: 1-based output page number
        x, y: Top-left corner from the top-left of the output page
        trim: Points cropped off the bottom of the block
    """

    block: Block
    page: int
    x: float
    y: float
    trim: float = 0.0

    @property
    def visible_height(self) -> float:
        return max(self.block.height - self.trim, 0.0)

    def trimmed(self, trim: float) -> "PlacedBlock":
        return replace(self, trim=max(trim, 0.0))


def compose_pages(placed_blocks: Sequence[PlacedBlock], page_width: float, page_height: float) -> PdfWriter:
    """
    Draw placed blocks onto blank output pages.

    Args:
        placed_blocks: Blocks from generate_page_blocks calls
        page_width: Output page width in points
        page_height: Output page height in points

    Returns:
        PdfWriter holding one page per referenced output page number
    """
    writer = PdfWriter()
    page_count = max((placed.page for placed in placed_blocks), default=0)
    canvases = [writer.add_blank_page(width=page_width, height=page_height) for _ in range(page_count)]

    for placed in placed_blocks:
        source = placed.block.page
        box = source.mediabox
        if placed.trim:
            # Raise the bottom edge so the trimmed band is not shown
            bottom = float(box.bottom) + min(placed.trim, placed.block.height)
            source.cropbox.lower_left = (float(box.left), bottom)
            source.trimbox.lower_left = (float(box.left), bottom)

        # Top-left origin to PDF bottom-left origin
        tx = placed.x - float(box.left)
        ty = (page_height - placed.y) - float(box.top)
        canvases[placed.page - 1].merge_transformed_page(
            source, Transformation().translate(tx, ty)
        )
    return writer
