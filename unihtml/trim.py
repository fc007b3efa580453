"""Last Page Trimming

Renders a PDF page to an image and measures how much of its bottom is blank,
so the page can be cropped when it is embedded into a larger layout.

The detection is a heuristic: it assumes the bottom background is uniform and
that content differs from it. A decorative bottom band matching the
background color is treated as blank.
"""
import io
import logging

import numpy as np
from pdf2image import convert_from_bytes
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from PIL import Image
from pypdf import PageObject, PdfWriter

from .config import RASTER_DPI, TRIM_COLOR_TOLERANCE
from .exceptions import RasterizationError

logger = logging.getLogger(__name__)

MAX_CHANNEL_VALUE = 255


def render_page(page: PageObject, dpi: int = RASTER_DPI) -> Image.Image:
    """
    Rasterize a single PDF page.

    Args:
        page: Page handle read from the conversion result
        dpi: Rendering resolution

    Returns:
        PIL image of the page

    Raises:
        RasterizationError: If poppler is missing or the page cannot be rendered
    """
    writer = PdfWriter()
    writer.add_page(page)
    buffer = io.BytesIO()
    writer.write(buffer)

    try:
        images = convert_from_bytes(buffer.getvalue(), dpi=dpi, first_page=1, last_page=1)
    except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError, OSError) as e:
        raise RasterizationError(f"failed to render page: {e}") from e
    if not images:
        raise RasterizationError("failed to render page: no image produced")
    logger.debug("Rendered page at %d dpi: %dx%d px", dpi, images[0].width, images[0].height)
    return images[0]


def detect_trim_fraction(image: Image.Image, tolerance: float = TRIM_COLOR_TOLERANCE) -> float:
    """
    Measure the blank fraction at the bottom of a rendered page.

    The bottom-left pixel is the background reference. On a pure white
    background any different pixel is content; otherwise a pixel is content
    when one of its channels differs from the reference by more than
    ``tolerance`` of the channel range. Rows are scanned from the bottom up
    and the scan stops at the first row holding content.

    Args:
        image: Rendered page
        tolerance: Relative per-channel difference for non-white backgrounds

    Returns:
        (height - content_row) / height, where content_row is the lowest row
        with content counted from the top; 1.0 when the page has no content

    Examples:
        >>> img = Image.new("RGB", (10, 100), "white")
        >>> img.putpixel((5, 40), (0, 0, 0))
        >>> detect_trim_fraction(img)
        0.6
    """
    pixels = np.asarray(image.convert("RGB"), dtype=np.int32)
    height = pixels.shape[0]
    if height == 0:
        return 0.0

    reference = pixels[-1, 0]
    if np.all(reference == MAX_CHANNEL_VALUE):
        row_has_content = np.any(pixels != reference, axis=(1, 2))
    else:
        difference = np.abs(pixels - reference) / MAX_CHANNEL_VALUE
        row_has_content = np.any(difference > tolerance, axis=(1, 2))

    content_rows = np.flatnonzero(row_has_content)
    if content_rows.size == 0:
        return 1.0
    return float(height - content_rows[-1]) / height
