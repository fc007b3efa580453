"""Conversion Content

The content submitted for conversion is one of a closed set of variants,
all represented by the same immutable value:

- inline HTML string ("html", text/html)
- single HTML file ("html", text/html)
- recursively zipped directory ("dir", application/zip)
- remote web page URL ("web", text/plain), fetched by the server itself
"""
import io
import logging
import os
import zipfile
from dataclasses import dataclass
from enum import Enum
from urllib.parse import urlparse

from .exceptions import ContentReadError, InvalidURLError

logger = logging.getLogger(__name__)


class ContentMethod(str, Enum):
    """Submission method understood by the conversion server."""

    HTML = "html"
    DIR = "dir"
    WEB = "web"

    @classmethod
    def is_valid(cls, method: str) -> bool:
        return method in cls._value2member_map_


CONTENT_TYPE_HTML = "text/html"
CONTENT_TYPE_ZIP = "application/zip"
CONTENT_TYPE_URL = "text/plain"


@dataclass(frozen=True)
class Content:
    """Raw bytes, content type tag and submission method of a conversion input."""

    data: bytes
    content_type: str
    method: str

    @classmethod
    def from_string(cls, html: str) -> "Content":
        return cls(html.encode("utf-8"), CONTENT_TYPE_HTML, ContentMethod.HTML.value)

    @classmethod
    def from_file(cls, path: str) -> "Content":
        """
        Read a whole HTML file.

        Raises:
            ContentReadError: If the file cannot be opened or read
        """
        try:
            with open(path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise ContentReadError(path, e.strerror or str(e)) from e
        return cls(data, CONTENT_TYPE_HTML, ContentMethod.HTML.value)

    @classmethod
    def from_directory(cls, path: str) -> "Content":
        """
        Zip a directory tree in memory.

        Every regular file is stored at its path relative to ``path`` using
        forward slashes. Entries are written depth-first in sorted listing
        order so the archive is reproducible.

        Raises:
            ContentReadError: If any directory or file cannot be read
        """
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            _zip_path(archive, path, "")
        logger.debug("Zipped directory %s (%d bytes)", path, buffer.getbuffer().nbytes)
        return cls(buffer.getvalue(), CONTENT_TYPE_ZIP, ContentMethod.DIR.value)

    @classmethod
    def from_url(cls, url: str) -> "Content":
        """
        Reference a web page the server fetches and renders.

        Raises:
            InvalidURLError: If the string does not parse as a URL
        """
        try:
            urlparse(url)
        except ValueError as e:
            raise InvalidURLError(url, str(e)) from e
        return cls(url.encode("utf-8"), CONTENT_TYPE_URL, ContentMethod.WEB.value)

    @classmethod
    def from_path(cls, path: str) -> "Content":
        """Pick the variant for an http(s) URL, a directory or a file path."""
        try:
            scheme = urlparse(path).scheme
        except ValueError as e:
            raise InvalidURLError(path, str(e)) from e
        if scheme in ("http", "https"):
            return cls.from_url(path)
        if os.path.isdir(path):
            return cls.from_directory(path)
        return cls.from_file(path)


def _zip_path(archive: zipfile.ZipFile, dir_path: str, base_path: str) -> None:
    try:
        entries = sorted(os.scandir(dir_path), key=lambda entry: entry.name)
    except OSError as e:
        raise ContentReadError(dir_path, e.strerror or str(e)) from e

    for entry in entries:
        zip_name = base_path + entry.name
        try:
            if entry.is_dir():
                _zip_path(archive, entry.path, zip_name + "/")
                continue
            with open(entry.path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise ContentReadError(entry.path, e.strerror or str(e)) from e
        archive.writestr(zip_name, data)
