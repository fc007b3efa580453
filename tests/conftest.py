"""Pytest configuration and shared fixtures.

This module contains fixtures that build small PDF documents with
ReportLab and fake HTTP responses for the client tests.
"""

import io
from typing import Iterable, Optional, Tuple
from unittest.mock import MagicMock

import pytest
import requests
from reportlab.pdfgen import canvas
from requests.structures import CaseInsensitiveDict

from unihtml.response import PDFResponse


def build_pdf(page_sizes: Iterable[Tuple[float, float]]) -> bytes:
    """Create a PDF with one page per (width, height) in points."""
    page_sizes = list(page_sizes)
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=page_sizes[0])
    for number, size in enumerate(page_sizes, start=1):
        c.setPageSize(size)
        c.drawString(10, size[1] - 20, f"Page {number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


class FakeRaw:
    """Stand-in for the urllib3 response body stream."""

    def __init__(self, body: bytes):
        self.body = body
        self.decode_content_calls = []

    def read(self, decode_content: bool = True) -> bytes:
        self.decode_content_calls.append(decode_content)
        return self.body

    def close(self) -> None:
        pass


def make_response(status: int, body: bytes = b"", headers: Optional[dict] = None) -> requests.Response:
    """Create a requests.Response with a raw wire body."""
    response = requests.Response()
    response.status_code = status
    response.headers = CaseInsensitiveDict(headers or {})
    response.raw = FakeRaw(body)
    return response


class StubClient:
    """Conversion client returning fixed PDF bytes and recording calls."""

    def __init__(self, data: bytes, job_id: str = "job-1"):
        self.data = data
        self.job_id = job_id
        self.calls = []

    def convert_html(self, query, timeout=None):
        self.calls.append((query, timeout))
        return PDFResponse(id=self.job_id, data=self.data)

    @property
    def last_query(self):
        return self.calls[-1][0]

    @property
    def last_timeout(self):
        return self.calls[-1][1]


@pytest.fixture
def pdf_factory():
    """Factory building PDF bytes from a list of page sizes."""
    return build_pdf


@pytest.fixture
def two_page_pdf() -> bytes:
    """A two page PDF of 200x300 point pages."""
    return build_pdf([(200, 300), (200, 300)])


@pytest.fixture
def mock_session() -> MagicMock:
    """Create a mock requests session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture(autouse=True)
def clear_unihtml_env(monkeypatch):
    """Remove UNIHTML_* variables so tests see a clean environment."""
    for name in ("UNIHTML_CONNECT", "UNIHTML_HOST", "UNIHTML_PORT", "UNIHTML_HTTPS", "UNIHTML_PREFIX"):
        monkeypatch.delenv(name, raising=False)
