"""HTML Document

Converts HTML content into PDF pages through the conversion server and
either writes them to a file or lays them out as blocks of a larger
document.

Positioning:
- relative (default): the document flows at the drawing cursor and takes the
  available area as its paper size, with 1mm server-side margins
- absolute: enabled by explicit margins, page size, paper dimensions or
  position; unset margins default to 10mm
"""
import io
import logging
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Tuple

from PIL import Image
from pypdf import PageObject, PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from .client import ClientOptions, UniHTMLClient
from .config import (
    ABSOLUTE_MARGIN_MM,
    EXPORT_TIMEOUT_SECONDS,
    EXTRACT_TIMEOUT_SECONDS,
    HEALTH_CHECK_TIMEOUT_SECONDS,
    PAGE_BREAK_RATIO,
    RELATIVE_MARGIN_MM,
)
from .content import Content
from .exceptions import (
    ArtifactParseError,
    ContentNotDefinedError,
    InvalidPageSizeError,
    NotConnectedError,
)
from .layout import Block, DrawContext, PlacedBlock
from .query import BySelector, build_html_query
from .selector import ByType
from .sizes import Length, Orientation, PageSize
from .trim import detect_trim_fraction, render_page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageMargins:
    """Document margins; None means not set."""

    left: Optional[Length] = None
    right: Optional[Length] = None
    top: Optional[Length] = None
    bottom: Optional[Length] = None


def connect(target: str, timeout: float = HEALTH_CHECK_TIMEOUT_SECONDS) -> UniHTMLClient:
    """
    Create a client for the target and check that the server is up.

    Args:
        target: Bare host, "host:port" or full URL of the conversion server
        timeout: Health check deadline in seconds

    Returns:
        Connected client handle

    Raises:
        InvalidConfigurationError: If the target is malformed
        UniHTMLError: If the health check fails
    """
    return _connect(ClientOptions.parse(target), timeout)


def connect_options(
    hostname: str = "",
    port: int = 0,
    secure: bool = False,
    prefix: str = "",
    timeout: float = HEALTH_CHECK_TIMEOUT_SECONDS,
) -> UniHTMLClient:
    """Create a client from explicit options and check that the server is up."""
    options = ClientOptions(hostname=hostname, port=port, https=secure, prefix=prefix)
    return _connect(options, timeout)


def _connect(options: ClientOptions, timeout: float) -> UniHTMLClient:
    client = UniHTMLClient(options)
    try:
        client.health_check(timeout=timeout)
    except Exception:
        client.close()
        raise
    return client


class Document:
    """HTML document converted into PDF pages by the conversion server.

    Example:
        >>> client = connect("localhost:8080")
        >>> doc = Document.from_path("index.html")
        >>> doc.set_page_size(PageSize.A4)
        >>> doc.write_to_file(client, "out.pdf")
    """

    def __init__(
        self,
        content: Optional[Content] = None,
        rasterizer: Callable[[PageObject], Image.Image] = render_page,
    ):
        """
        Initialize the document.

        Args:
            content: Content to convert
            rasterizer: Renders a page to an image for last page trimming
        """
        self.content = content
        self.rasterizer = rasterizer

        self._margins = PageMargins()
        self._absolute = False
        self._pos_x = 0.0
        self._pos_y = 0.0
        self._page_size = PageSize.UNDEFINED
        self._page_width: Optional[Length] = None
        self._page_height: Optional[Length] = None
        self._orientation = Orientation.PORTRAIT
        self._trim_last = False
        self._wait_time = 0.0
        self._wait_ready: List[BySelector] = []
        self._wait_visible: List[BySelector] = []
        self._timeout: Optional[float] = None

    @classmethod
    def from_path(cls, path: str, **kwargs) -> "Document":
        """Document from an http(s) URL, a directory or an HTML file path."""
        return cls(Content.from_path(path), **kwargs)

    @classmethod
    def from_string(cls, html: str, **kwargs) -> "Document":
        return cls(Content.from_string(html), **kwargs)

    @property
    def is_absolute(self) -> bool:
        return self._absolute

    @property
    def margins(self) -> PageMargins:
        return self._margins

    # Setters

    def set_margins(self, left: float, right: float, top: float, bottom: float) -> None:
        """Set all margins in points and switch to absolute positioning."""
        self._margins = PageMargins(
            left=Length.pt(left),
            right=Length.pt(right),
            top=Length.pt(top),
            bottom=Length.pt(bottom),
        )
        self._absolute = True

    def set_margin_left(self, margin: Length) -> None:
        self._margins = replace(self._margins, left=margin)

    def set_margin_right(self, margin: Length) -> None:
        self._margins = replace(self._margins, right=margin)

    def set_margin_top(self, margin: Length) -> None:
        self._margins = replace(self._margins, top=margin)

    def set_margin_bottom(self, margin: Length) -> None:
        self._margins = replace(self._margins, bottom=margin)

    def set_page_size(self, page_size: PageSize) -> None:
        """
        Set a named paper size and switch to absolute positioning.

        Raises:
            InvalidPageSizeError: If page_size is not a PageSize
        """
        if not PageSize.is_valid(page_size):
            raise InvalidPageSizeError()
        self._page_size = page_size
        self._absolute = True

    def set_page_width(self, width: Length) -> None:
        self._page_width = width
        self._absolute = True

    def set_page_height(self, height: Length) -> None:
        self._page_height = height
        self._absolute = True

    def set_landscape_orientation(self) -> None:
        self._orientation = Orientation.LANDSCAPE

    def set_pos(self, x: float, y: float) -> None:
        """Place the document at (x, y) points from the top-left of the page."""
        self._absolute = True
        self._pos_x, self._pos_y = x, y

    def set_timeout_duration(self, seconds: float) -> None:
        self._timeout = seconds

    def wait_time(self, seconds: float) -> None:
        self._wait_time = seconds

    def trim_last_page_content(self) -> None:
        """Crop the blank bottom of the last page when laid out as blocks."""
        self._trim_last = True

    def wait_ready(self, selector: str, by: ByType = ByType.SEARCH) -> None:
        self._wait_ready.append(BySelector(selector, by))

    def wait_visible(self, selector: str, by: ByType = ByType.SEARCH) -> None:
        self._wait_visible.append(BySelector(selector, by))

    # Export

    def write_to_file(self, client: Optional[UniHTMLClient], output_path: str) -> None:
        """
        Convert the document and write the pages unmodified to a PDF file.

        Args:
            client: Connected client handle
            output_path: Destination file path

        Raises:
            NotConnectedError: If client is None
            ContentNotDefinedError: If the document has no content
            UniHTMLError: If the conversion fails
        """
        self._validate(client)
        deadline = self._deadline(EXPORT_TIMEOUT_SECONDS + self._wait_time)
        pages = self._extract(client, self._page_width, self._page_height, self._resolved_margins(), deadline)

        writer = PdfWriter()
        for page in pages:
            writer.add_page(page)
        with open(output_path, "wb") as f:
            writer.write(f)
        logger.info("Wrote %d page(s) to %s", len(pages), output_path)

    def get_pdf_pages(self, client: Optional[UniHTMLClient], timeout: Optional[float] = None) -> List[PageObject]:
        """
        Convert the document and return its pages.

        Args:
            client: Connected client handle
            timeout: Optional caller deadline in seconds

        Returns:
            Pages of the converted PDF in order
        """
        self._validate(client)
        deadline = self._deadline(EXTRACT_TIMEOUT_SECONDS, timeout)
        return self._extract(client, self._page_width, self._page_height, self._resolved_margins(), deadline)

    def generate_page_blocks(
        self, client: Optional[UniHTMLClient], ctx: DrawContext
    ) -> Tuple[List[PlacedBlock], DrawContext]:
        """
        Lay out the converted pages as blocks starting at the drawing cursor.

        Args:
            client: Connected client handle
            ctx: Drawing cursor

        Returns:
            Tuple of (placed blocks, cursor after the document)
        """
        self._validate(client)
        margins = self._resolved_margins()
        width, height = self._page_width, self._page_height

        if self._absolute:
            ctx = replace(ctx, x=self._pos_x, y=self._pos_y)
        else:
            width, height = Length.pt(ctx.width), Length.pt(ctx.height)
            # The server adds its own left margin
            ctx = replace(ctx, x=ctx.x - margins.left.points().value)

        pages = self._extract(client, width, height, margins, self._deadline(EXTRACT_TIMEOUT_SECONDS))

        blocks: List[PlacedBlock] = []
        last = len(pages) - 1
        for i, page in enumerate(pages):
            block = Block.from_page(page)
            trim_height = 0.0
            if self._trim_last and i == last:
                trim_height = self._trim_height(page)

            page_blocks, ctx = block.generate_page_blocks(ctx)
            if trim_height:
                page_blocks[-1] = page_blocks[-1].trimmed(trim_height)
                ctx = ctx.advance(-trim_height)

            if i != last and ctx.y > (ctx.page_height - ctx.margins.bottom) * PAGE_BREAK_RATIO:
                ctx = ctx.new_page()
            blocks.extend(page_blocks)
        return blocks, ctx

    # Internal

    def _validate(self, client: Optional[UniHTMLClient]) -> None:
        if client is None:
            raise NotConnectedError()
        if self.content is None:
            raise ContentNotDefinedError()

    def _deadline(self, fallback: float, caller_timeout: Optional[float] = None) -> float:
        timeout = self._timeout if self._timeout is not None else fallback
        if caller_timeout is not None:
            timeout = min(timeout, caller_timeout)
        return timeout

    def _resolved_margins(self) -> PageMargins:
        if not self._absolute:
            margin = Length.mm(RELATIVE_MARGIN_MM)
            return PageMargins(margin, margin, margin, margin)

        default = Length.mm(ABSOLUTE_MARGIN_MM)
        m = self._margins
        return PageMargins(
            left=m.left if m.left is not None else default,
            right=m.right if m.right is not None else default,
            top=m.top if m.top is not None else default,
            bottom=m.bottom if m.bottom is not None else default,
        )

    def _extract(
        self,
        client: UniHTMLClient,
        width: Optional[Length],
        height: Optional[Length],
        margins: PageMargins,
        timeout: float,
    ) -> List[PageObject]:
        builder = (
            build_html_query()
            .set_content(self.content)
            .page_size(self._page_size)
            .paper_width(width)
            .paper_height(height)
            .orientation(self._orientation)
            .margin_left(margins.left)
            .margin_right(margins.right)
            .margin_top(margins.top)
            .margin_bottom(margins.bottom)
            .timeout_duration(self._timeout or 0.0)
            .wait_time(self._wait_time)
        )
        for by_selector in self._wait_ready:
            builder.wait_ready(by_selector.selector, by_selector.by)
        for by_selector in self._wait_visible:
            builder.wait_visible(by_selector.selector, by_selector.by)
        query = builder.query()

        response = client.convert_html(query, timeout=timeout)
        try:
            reader = PdfReader(io.BytesIO(response.data))
            pages = list(reader.pages)
        except PyPdfError as e:
            raise ArtifactParseError(f"failed to read converted PDF {response.id}: {e}") from e
        logger.debug("Response %s holds %d page(s)", response.id, len(pages))
        return pages

    def _trim_height(self, page: PageObject) -> float:
        image = self.rasterizer(page)
        start = time.perf_counter()
        fraction = detect_trim_fraction(image)
        logger.debug("Trimming last document page taken: %.3fs", time.perf_counter() - start)

        trim_height = float(page.mediabox.height) * fraction
        if self._margins.bottom is not None:
            trim_height -= self._margins.bottom.points().value
        trim_height = max(trim_height, 0.0)
        logger.debug("Cropping document's page %.2f points off bottom of media box", trim_height)
        return trim_height
