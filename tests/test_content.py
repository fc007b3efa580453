"""Tests for conversion content variants."""

import io
import zipfile

import pytest

from unihtml.content import (
    CONTENT_TYPE_HTML,
    CONTENT_TYPE_URL,
    CONTENT_TYPE_ZIP,
    Content,
    ContentMethod,
)
from unihtml.exceptions import ContentReadError, InvalidURLError


class TestStringAndFileContent:
    """Tests for inline and file HTML content."""

    def test_from_string(self) -> None:
        content = Content.from_string("<h1>Hi</h1>")
        assert content.data == b"<h1>Hi</h1>"
        assert content.content_type == CONTENT_TYPE_HTML
        assert content.method == ContentMethod.HTML

    def test_from_file(self, tmp_path) -> None:
        path = tmp_path / "index.html"
        path.write_bytes(b"<p>file</p>")
        content = Content.from_file(str(path))
        assert content.data == b"<p>file</p>"
        assert content.method == "html"

    def test_from_missing_file(self, tmp_path) -> None:
        with pytest.raises(ContentReadError) as exc_info:
            Content.from_file(str(tmp_path / "missing.html"))
        assert "missing.html" in str(exc_info.value)

    def test_content_is_immutable(self) -> None:
        content = Content.from_string("x")
        with pytest.raises(AttributeError):
            content.data = b"y"


class TestDirectoryContent:
    """Tests for zipped directory content."""

    def test_archive_holds_relative_posix_names(self, tmp_path) -> None:
        (tmp_path / "index.html").write_text("<html></html>")
        (tmp_path / "css").mkdir()
        (tmp_path / "css" / "style.css").write_text("body {}")
        (tmp_path / "css" / "nested").mkdir()
        (tmp_path / "css" / "nested" / "a.css").write_text("p {}")

        content = Content.from_directory(str(tmp_path))

        assert content.content_type == CONTENT_TYPE_ZIP
        assert content.method == ContentMethod.DIR
        with zipfile.ZipFile(io.BytesIO(content.data)) as archive:
            assert archive.namelist() == ["css/nested/a.css", "css/style.css", "index.html"]
            assert archive.read("css/style.css") == b"body {}"

    def test_directories_have_no_entries(self, tmp_path) -> None:
        (tmp_path / "empty").mkdir()
        (tmp_path / "index.html").write_text("x")
        content = Content.from_directory(str(tmp_path))
        with zipfile.ZipFile(io.BytesIO(content.data)) as archive:
            assert archive.namelist() == ["index.html"]

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(ContentReadError):
            Content.from_directory(str(tmp_path / "nope"))


class TestURLContent:
    """Tests for web page content."""

    def test_from_url(self) -> None:
        content = Content.from_url("https://example.com/page")
        assert content.data == b"https://example.com/page"
        assert content.content_type == CONTENT_TYPE_URL
        assert content.method == ContentMethod.WEB

    def test_from_invalid_url(self) -> None:
        with pytest.raises(InvalidURLError):
            Content.from_url("http://[::1")


class TestFromPath:
    """Tests for variant selection from a path."""

    def test_url(self) -> None:
        assert Content.from_path("http://example.com").method == ContentMethod.WEB

    def test_directory(self, tmp_path) -> None:
        (tmp_path / "index.html").write_text("x")
        assert Content.from_path(str(tmp_path)).method == ContentMethod.DIR

    def test_file(self, tmp_path) -> None:
        path = tmp_path / "page.html"
        path.write_text("x")
        assert Content.from_path(str(path)).method == ContentMethod.HTML

    def test_nested_tree_entries_match_files(self, tmp_path) -> None:
        (tmp_path / "a" / "c").mkdir(parents=True)
        (tmp_path / "a" / "b.txt").write_bytes(b"bee")
        (tmp_path / "a" / "c" / "d.txt").write_bytes(b"dee")

        content = Content.from_directory(str(tmp_path))

        with zipfile.ZipFile(io.BytesIO(content.data)) as archive:
            assert sorted(archive.namelist()) == ["a/b.txt", "a/c/d.txt"]
            assert archive.read("a/b.txt") == b"bee"
            assert archive.read("a/c/d.txt") == b"dee"
