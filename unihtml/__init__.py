"""UniHTML Client Package

This package converts HTML content into PDF through a UniHTML conversion
server:

Core Classes:
- Document: HTML document exported to a file, pages or layout blocks
- UniHTMLClient: HTTP client of the conversion server (from client.py)
- QueryBuilder: Fluent builder of conversion queries
- Content: Inline HTML, HTML file, zipped directory or web URL

Units:
- Length, PageSize, Orientation: paper geometry (from sizes.py)

Helper Functions:
- connect / connect_options: Create a client and check server health
- build_html_query: Start a new QueryBuilder
- detect_trim_fraction: Blank bottom fraction of a rendered page
"""

# Import core classes
from .client import ClientOptions, UniHTMLClient
from .content import Content, ContentMethod
from .document import Document, PageMargins, connect, connect_options
from .layout import Block, DrawContext, Margins, PlacedBlock, compose_pages
from .query import BySelector, PageParameters, Query, QueryBuilder, RenderParameters, build_html_query
from .response import PDFResponse
from .selector import ByType
from .sizes import Length, LengthFlag, Orientation, PageSize, Unit
from .trim import detect_trim_fraction, render_page
from .exceptions import UniHTMLError

# Expose public API
__all__ = [
    # Document and connection
    'Document',
    'PageMargins',
    'connect',
    'connect_options',

    # Client
    'ClientOptions',
    'UniHTMLClient',
    'PDFResponse',

    # Query model
    'Content',
    'ContentMethod',
    'Query',
    'QueryBuilder',
    'PageParameters',
    'RenderParameters',
    'BySelector',
    'ByType',
    'build_html_query',

    # Units
    'Length',
    'LengthFlag',
    'Orientation',
    'PageSize',
    'Unit',

    # Layout
    'Block',
    'DrawContext',
    'Margins',
    'PlacedBlock',
    'compose_pages',

    # Trimming
    'detect_trim_fraction',
    'render_page',

    # Errors
    'UniHTMLError',
]
