"""Tests for blank bottom detection on rendered pages."""

import io
from unittest.mock import patch

import pytest
from PIL import Image
from pypdf import PdfReader

from unihtml.exceptions import RasterizationError
from unihtml.trim import detect_trim_fraction, render_page


def white_page(width: int = 10, height: int = 100, color=(255, 255, 255)) -> Image.Image:
    return Image.new("RGB", (width, height), color)


class TestDetectTrimFraction:
    """Tests for detect_trim_fraction."""

    def test_blank_page_is_fully_trimmable(self) -> None:
        assert detect_trim_fraction(white_page()) == 1.0

    def test_content_row_sets_fraction(self) -> None:
        image = white_page()
        image.putpixel((5, 40), (0, 0, 0))
        assert detect_trim_fraction(image) == pytest.approx(0.6)

    def test_lowest_content_row_wins(self) -> None:
        image = white_page()
        image.putpixel((1, 10), (0, 0, 0))
        image.putpixel((8, 75), (0, 0, 0))
        assert detect_trim_fraction(image) == pytest.approx(0.25)

    def test_content_on_bottom_row(self) -> None:
        image = white_page()
        image.putpixel((5, 99), (0, 0, 0))
        assert detect_trim_fraction(image) == pytest.approx(0.01)

    def test_near_white_counts_as_content_on_white(self) -> None:
        image = white_page()
        image.putpixel((3, 50), (254, 255, 255))
        assert detect_trim_fraction(image) == pytest.approx(0.5)

    def test_small_difference_ignored_on_colored_background(self) -> None:
        image = white_page(color=(200, 200, 200))
        image.putpixel((3, 50), (204, 204, 204))
        assert detect_trim_fraction(image) == 1.0

    def test_large_difference_detected_on_colored_background(self) -> None:
        image = white_page(color=(200, 200, 200))
        image.putpixel((3, 20), (0, 0, 0))
        assert detect_trim_fraction(image) == pytest.approx(0.8)

    def test_difference_just_below_tolerance_is_ignored(self) -> None:
        image = white_page(color=(200, 200, 200))
        image.putpixel((3, 50), (207, 200, 200))
        assert detect_trim_fraction(image) == 1.0

    def test_difference_just_above_tolerance_is_detected(self) -> None:
        image = white_page(color=(200, 200, 200))
        image.putpixel((3, 50), (208, 200, 200))
        assert detect_trim_fraction(image) == pytest.approx(0.5)

    def test_grayscale_image_is_converted(self) -> None:
        image = Image.new("L", (10, 100), 255)
        image.putpixel((5, 40), 0)
        assert detect_trim_fraction(image) == pytest.approx(0.6)


class TestRenderPage:
    """Tests for render_page error handling."""

    def test_missing_poppler_becomes_rasterization_error(self, two_page_pdf) -> None:
        page = PdfReader(io.BytesIO(two_page_pdf)).pages[0]
        with patch("unihtml.trim.convert_from_bytes", side_effect=OSError("pdftoppm not found")):
            with pytest.raises(RasterizationError):
                render_page(page)

    def test_returns_first_image(self, two_page_pdf) -> None:
        page = PdfReader(io.BytesIO(two_page_pdf)).pages[0]
        image = white_page()
        with patch("unihtml.trim.convert_from_bytes", return_value=[image]) as convert:
            assert render_page(page, dpi=50) is image
        assert convert.call_args.kwargs["dpi"] == 50
        assert convert.call_args.args[0].startswith(b"%PDF")
