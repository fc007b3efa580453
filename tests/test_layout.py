"""Tests for layout primitives and page composition."""

import io

import pytest
from pypdf import PdfReader

from unihtml.layout import Block, DrawContext, Margins, PlacedBlock, compose_pages


def read_pages(pdf_bytes: bytes):
    return list(PdfReader(io.BytesIO(pdf_bytes)).pages)


@pytest.fixture
def ctx() -> DrawContext:
    return DrawContext.for_page(600, 800, Margins(left=10, right=10, top=20, bottom=20))


class TestDrawContext:
    """Tests for DrawContext."""

    def test_for_page(self, ctx) -> None:
        assert (ctx.page, ctx.x, ctx.y) == (1, 10, 20)
        assert ctx.width == 580
        assert ctx.height == 760

    def test_new_page_resets_cursor(self, ctx) -> None:
        moved = ctx.advance(300).new_page()
        assert (moved.page, moved.x, moved.y, moved.height) == (2, 10, 20, 760)

    def test_advance(self, ctx) -> None:
        moved = ctx.advance(100)
        assert moved.y == 120
        assert moved.height == 660


class TestBlock:
    """Tests for Block placement."""

    def test_from_page_uses_media_box(self, pdf_factory) -> None:
        page = read_pages(pdf_factory([(200, 300)]))[0]
        block = Block.from_page(page)
        assert (block.width, block.height) == (200, 300)

    def test_blocks_flow_down_then_break(self, pdf_factory, ctx) -> None:
        pages = read_pages(pdf_factory([(200, 300)] * 3))
        placed = []
        for page in pages:
            blocks, ctx = Block.from_page(page).generate_page_blocks(ctx)
            placed.extend(blocks)

        assert [(b.page, b.y) for b in placed] == [(1, 20), (1, 320), (2, 20)]
        assert ctx.page == 2
        assert ctx.y == 320

    def test_oversized_block_at_top_stays_on_page(self, pdf_factory, ctx) -> None:
        page = read_pages(pdf_factory([(200, 1000)]))[0]
        blocks, after = Block.from_page(page).generate_page_blocks(ctx)
        assert blocks[0].page == 1
        assert after.y == 1020


class TestPlacedBlock:
    """Tests for PlacedBlock trimming."""

    def test_visible_height(self, pdf_factory) -> None:
        block = Block.from_page(read_pages(pdf_factory([(200, 300)]))[0])
        placed = PlacedBlock(block=block, page=1, x=0, y=0).trimmed(120)
        assert placed.visible_height == 180

    def test_negative_trim_is_clamped(self, pdf_factory) -> None:
        block = Block.from_page(read_pages(pdf_factory([(200, 300)]))[0])
        assert PlacedBlock(block=block, page=1, x=0, y=0).trimmed(-5).trim == 0


class TestComposePages:
    """Tests for compose_pages."""

    def test_one_output_page_per_page_number(self, pdf_factory, ctx) -> None:
        pages = read_pages(pdf_factory([(200, 300)] * 3))
        placed = []
        for page in pages:
            blocks, ctx = Block.from_page(page).generate_page_blocks(ctx)
            placed.extend(blocks)

        writer = compose_pages(placed, 600, 800)

        assert len(writer.pages) == 2
        assert float(writer.pages[0].mediabox.width) == 600
        assert float(writer.pages[0].mediabox.height) == 800

    def test_trimmed_block_is_cropped(self, pdf_factory) -> None:
        page = read_pages(pdf_factory([(200, 300)]))[0]
        placed = PlacedBlock(block=Block.from_page(page), page=1, x=10, y=20).trimmed(100)

        compose_pages([placed], 600, 800)

        assert float(page.cropbox.bottom) == 100
        assert float(page.cropbox.top) == 300

    def test_no_blocks(self) -> None:
        assert len(compose_pages([], 600, 800).pages) == 0

    def test_output_is_writable(self, pdf_factory, ctx) -> None:
        page = read_pages(pdf_factory([(200, 300)]))[0]
        blocks, _ = Block.from_page(page).generate_page_blocks(ctx)
        buffer = io.BytesIO()
        compose_pages(blocks, 600, 800).write(buffer)
        assert len(read_pages(buffer.getvalue())) == 1
