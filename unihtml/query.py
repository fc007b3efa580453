"""Conversion Query Model

The query is the unit of work submitted to the conversion server: content,
page parameters, render parameters and an optional timeout override.

Queries are assembled with QueryBuilder, which keeps a mutable draft and the
first error encountered. Once an error is recorded every further setter is a
no-op, and finalizing with query() raises it. A successfully built Query is
immutable.
"""
import base64
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from .config import MAX_WAIT_TIME_SECONDS
from .content import Content, ContentMethod
from .exceptions import (
    ContentTypeAlreadyDeclaredError,
    EmptyContentTypeError,
    InvalidPageSizeError,
    InvalidSelectorError,
    MissingDataError,
    NegativeDimensionError,
    UndefinedMethodError,
    UniHTMLError,
    WaitTimeExceededError,
)
from .selector import ByType
from .sizes import Length, Orientation, PageSize


def _wire_length(length: Optional[Length]) -> Optional[str]:
    return length.to_wire() if length is not None else None


@dataclass(frozen=True)
class BySelector:
    """A wait condition: a selector string and its lookup strategy."""

    selector: str
    by: ByType = ByType.SEARCH

    def validate(self) -> None:
        if not self.selector:
            raise InvalidSelectorError("provided empty selector")
        if not ByType.is_valid(self.by):
            raise InvalidSelectorError(f"invalid by selector: {self.by!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {"selector": self.selector, "by": int(self.by)}


@dataclass(frozen=True)
class PageParameters:
    """Paper geometry of the generated PDF. Unset values use the server default."""

    paper_width: Optional[Length] = None
    paper_height: Optional[Length] = None
    page_size: Optional[PageSize] = None
    orientation: Orientation = Orientation.PORTRAIT
    margin_top: Optional[Length] = None
    margin_bottom: Optional[Length] = None
    margin_left: Optional[Length] = None
    margin_right: Optional[Length] = None

    def validate(self) -> None:
        """
        Check that no dimension is negative and the page size is enumerated.

        Raises:
            NegativeDimensionError: Naming the first negative dimension
            InvalidPageSizeError: If page_size is not a PageSize
        """
        dimensions = (
            ("PaperWidth", self.paper_width),
            ("PaperHeight", self.paper_height),
            ("MarginTop", self.margin_top),
            ("MarginBottom", self.margin_bottom),
            ("MarginLeft", self.margin_left),
            ("MarginRight", self.margin_right),
        )
        for name, length in dimensions:
            if length is not None and length.millimeters().value < 0:
                raise NegativeDimensionError(name)
        if self.page_size is not None and not PageSize.is_valid(self.page_size):
            raise InvalidPageSizeError()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "paperWidth": _wire_length(self.paper_width),
            "paperHeight": _wire_length(self.paper_height),
            "pageSize": str(self.page_size) if self.page_size is not None else None,
            "orientation": self.orientation.value,
            "marginTop": _wire_length(self.margin_top),
            "marginBottom": _wire_length(self.margin_bottom),
            "marginLeft": _wire_length(self.margin_left),
            "marginRight": _wire_length(self.margin_right),
        }


@dataclass(frozen=True)
class RenderParameters:
    """Browser rendering parameters: minimum load time and wait conditions."""

    wait_time: float = 0.0
    wait_ready: Tuple[BySelector, ...] = ()
    wait_visible: Tuple[BySelector, ...] = ()

    def validate(self) -> None:
        if self.wait_time > MAX_WAIT_TIME_SECONDS:
            raise WaitTimeExceededError(self.wait_time, MAX_WAIT_TIME_SECONDS)
        for label, selectors in (("ready", self.wait_ready), ("visible", self.wait_visible)):
            for by_selector in selectors:
                try:
                    by_selector.validate()
                except InvalidSelectorError as e:
                    raise InvalidSelectorError(
                        f"one of wait {label} selector is not valid: {e}"
                    ) from e

    def to_dict(self) -> Dict[str, Any]:
        # The server decodes durations as integer nanoseconds
        return {
            "waitTime": int(round(self.wait_time * 1e9)),
            "waitReady": [s.to_dict() for s in self.wait_ready],
            "waitVisible": [s.to_dict() for s in self.wait_visible],
        }


@dataclass(frozen=True)
class Query:
    """Content plus parameters for a single conversion call.

    Attributes:
        content: Raw bytes for "html" and "dir" methods
        content_type: MIME type of content
        url: Page address for the "web" method
        method: One of ContentMethod values
        page_parameters: Paper geometry
        render_parameters: Browser wait settings
        timeout_duration: Server-side timeout override in seconds, 0 for none
    """

    content: bytes = b""
    content_type: str = ""
    url: str = ""
    method: str = ""
    page_parameters: PageParameters = field(default_factory=PageParameters)
    render_parameters: RenderParameters = field(default_factory=RenderParameters)
    timeout_duration: float = 0.0

    def validate(self) -> None:
        """
        Validate content for the method, then page and render parameters.

        Only the first problem found is raised.
        """
        if self.method == ContentMethod.WEB:
            if not self.url:
                raise MissingDataError()
        elif self.method in (ContentMethod.DIR, ContentMethod.HTML):
            if not self.content:
                raise MissingDataError()
            if not self.content_type:
                raise EmptyContentTypeError()
        else:
            raise UndefinedMethodError(self.method)

        self.page_parameters.validate()
        self.render_parameters.validate()

    def to_request_body(self) -> Dict[str, Any]:
        """Serialize the query into the JSON body of a conversion request."""
        body: Dict[str, Any] = {
            "content": "",
            "contentType": "",
            "contentURL": "",
            "method": self.method,
            "expiresAt": 0,
        }
        if self.method == ContentMethod.WEB:
            body["contentURL"] = self.url
        elif self.method in (ContentMethod.DIR, ContentMethod.HTML):
            body["contentType"] = self.content_type
            body["content"] = base64.b64encode(self.content).decode("ascii")
        if self.timeout_duration:
            body["timeoutDuration"] = int(round(self.timeout_duration * 1000))
        body.update(self.page_parameters.to_dict())
        body.update(self.render_parameters.to_dict())
        return body

    def to_query_params(self) -> Dict[str, str]:
        """Encode page and render parameters as kebab-case query string values."""
        page = self.page_parameters
        params: Dict[str, str] = {}
        if page.page_size is not None:
            params["page-size"] = str(page.page_size)
        for key, length in (
            ("paper-height", page.paper_height),
            ("paper-width", page.paper_width),
            ("margin-top", page.margin_top),
            ("margin-bottom", page.margin_bottom),
            ("margin-right", page.margin_right),
            ("margin-left", page.margin_left),
        ):
            if length is not None:
                params[key] = str(length)
        if page.orientation is Orientation.LANDSCAPE:
            params["orientation"] = str(page.orientation)
        if self.render_parameters.wait_time:
            params["minimum-load-time"] = str(int(round(self.render_parameters.wait_time * 1000)))
        return params


class QueryBuilder:
    """Fluent, error-accumulating Query builder.

    Example:
        >>> query = (QueryBuilder()
        ...          .set_content(Content.from_string("<html></html>"))
        ...          .page_size(PageSize.A4)
        ...          .portrait()
        ...          .query())
    """

    def __init__(self):
        self._content = b""
        self._content_type = ""
        self._url = ""
        self._method = ""
        self._page: Dict[str, Any] = {}
        self._wait_time = 0.0
        self._wait_ready = []
        self._wait_visible = []
        self._timeout_duration = 0.0
        self._err: Optional[UniHTMLError] = None

    @property
    def err(self) -> Optional[UniHTMLError]:
        """The first error recorded while building, if any."""
        return self._err

    def _set_page(self, name: str, value: Any) -> "QueryBuilder":
        if self._err is None:
            self._page[name] = value
        return self

    def set_content(self, content: Content) -> "QueryBuilder":
        """Attach content; declaring content twice records an error."""
        if self._err is not None:
            return self

        if content.method in (ContentMethod.DIR, ContentMethod.HTML):
            if self._content_type:
                self._err = ContentTypeAlreadyDeclaredError()
                return self
            if not content.content_type:
                self._err = EmptyContentTypeError()
                return self
            self._content = content.data
        elif content.method == ContentMethod.WEB:
            if self._content_type:
                self._err = ContentTypeAlreadyDeclaredError()
                return self
            self._url = content.data.decode("utf-8")
        else:
            self._err = UndefinedMethodError(content.method)
            return self

        self._content_type = content.content_type
        self._method = ContentMethod(content.method).value
        return self

    def page_size(self, page_size: PageSize) -> "QueryBuilder":
        if page_size is PageSize.UNDEFINED:
            return self
        return self._set_page("page_size", page_size)

    def paper_width(self, paper_width: Optional[Length]) -> "QueryBuilder":
        return self._set_page("paper_width", paper_width)

    def paper_height(self, paper_height: Optional[Length]) -> "QueryBuilder":
        return self._set_page("paper_height", paper_height)

    def orientation(self, orientation: Orientation) -> "QueryBuilder":
        return self._set_page("orientation", orientation)

    def portrait(self) -> "QueryBuilder":
        return self.orientation(Orientation.PORTRAIT)

    def landscape(self) -> "QueryBuilder":
        return self.orientation(Orientation.LANDSCAPE)

    def margin_top(self, margin: Optional[Length]) -> "QueryBuilder":
        return self._set_page("margin_top", margin)

    def margin_bottom(self, margin: Optional[Length]) -> "QueryBuilder":
        return self._set_page("margin_bottom", margin)

    def margin_left(self, margin: Optional[Length]) -> "QueryBuilder":
        return self._set_page("margin_left", margin)

    def margin_right(self, margin: Optional[Length]) -> "QueryBuilder":
        return self._set_page("margin_right", margin)

    def wait_time(self, seconds: float) -> "QueryBuilder":
        """Minimum time the browser waits before capturing the page."""
        if self._err is None:
            self._wait_time = seconds
        return self

    def wait_ready(self, selector: str, by: ByType = ByType.SEARCH) -> "QueryBuilder":
        """Wait until the element matching the selector is loaded."""
        if self._err is None:
            self._wait_ready.append(BySelector(selector, by))
        return self

    def wait_visible(self, selector: str, by: ByType = ByType.SEARCH) -> "QueryBuilder":
        """Wait until the element matching the selector is visible."""
        if self._err is None:
            self._wait_visible.append(BySelector(selector, by))
        return self

    def timeout_duration(self, seconds: float) -> "QueryBuilder":
        """Server-side timeout; also replaces the client default for this call."""
        if self._err is None:
            self._timeout_duration = seconds
        return self

    def _draft(self) -> Query:
        return Query(
            content=self._content,
            content_type=self._content_type,
            url=self._url,
            method=self._method,
            page_parameters=PageParameters(**self._page),
            render_parameters=RenderParameters(
                wait_time=self._wait_time,
                wait_ready=tuple(self._wait_ready),
                wait_visible=tuple(self._wait_visible),
            ),
            timeout_duration=self._timeout_duration,
        )

    def validate(self) -> None:
        """Raise the recorded error, or the first validation error of the draft."""
        if self._err is not None:
            raise self._err
        self._draft().validate()

    def query(self) -> Query:
        """
        Finalize the builder.

        Returns:
            The validated, immutable Query

        Raises:
            ValidationError: The recorded builder error or a validation failure
        """
        if self._err is not None:
            raise self._err
        query = self._draft()
        query.validate()
        return query


def build_html_query() -> QueryBuilder:
    """Start a new query builder."""
    return QueryBuilder()
