"""Custom Exception Hierarchy

Exception hierarchy for the UniHTML client providing granular exception types
for configuration, validation, transport, protocol and server-reported failures.
"""
from typing import Optional


class UniHTMLError(Exception):
    """Base exception for all UniHTML client errors.

    This is the root of the exception hierarchy. Catching this exception
    will catch all custom exceptions raised by the package.
    """
    pass


# Configuration Errors
class InvalidConfigurationError(UniHTMLError):
    """Raised when the server connection target or port is invalid."""
    pass


class NotConnectedError(UniHTMLError):
    """Raised when a document export is attempted without a client handle."""

    def __init__(self):
        super().__init__("UniHTML client not connected")


# Validation Errors
class ValidationError(UniHTMLError):
    """Raised when content, page or render parameters are invalid."""
    pass


class InvalidFormatError(ValidationError):
    """Raised when a length literal has an unknown unit or a non-numeric value."""

    def __init__(self, text: str, reason: str = "invalid length input"):
        self.text = text
        super().__init__(f"{reason}: '{text}'")


class UnknownPageSizeError(ValidationError):
    """Raised when a page size name does not belong to the enumeration."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} does not belong to PageSize values")


class InvalidPageSizeError(ValidationError):
    """Raised when a page size is set but is not an enumerated size."""

    def __init__(self):
        super().__init__("invalid page size")


class MissingDataError(ValidationError):
    """Raised when a query has no content bytes or no URL for its method."""

    def __init__(self):
        super().__init__("missing input data")


class EmptyContentTypeError(ValidationError):
    """Raised when file or directory content declares no content type."""

    def __init__(self):
        super().__init__("invalid content type")


class ContentTypeAlreadyDeclaredError(ValidationError):
    """Raised when content is set twice on the same query builder."""

    def __init__(self):
        super().__init__("content type is already declared")


class UndefinedMethodError(ValidationError):
    """Raised when a content method is not one of html, dir or web."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"undefined content query method: {method}")


class NegativeDimensionError(ValidationError):
    """Raised when a paper dimension or margin is negative."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"negative value for {field}")


class InvalidSelectorError(ValidationError):
    """Raised when a wait condition has an empty selector or unknown lookup strategy."""
    pass


class WaitTimeExceededError(ValidationError):
    """Raised when the minimum load time exceeds the server maximum."""

    def __init__(self, wait_time: float, max_wait_time: float):
        self.wait_time = wait_time
        self.max_wait_time = max_wait_time
        super().__init__(
            f"too long minimum load time {wait_time:.1f}s. "
            f"Maximum is {max_wait_time / 60:.0f} minutes"
        )


class InvalidURLError(ValidationError):
    """Raised when web content is not a parsable URL."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"invalid content URL '{url}': {reason}")


class ContentNotDefinedError(ValidationError):
    """Raised when a document has no content to convert."""

    def __init__(self):
        super().__init__("html document content not defined")


# Content Errors
class ContentReadError(UniHTMLError):
    """Raised when reading a file or directory for content fails."""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"reading '{path}' failed: {reason}")


# Transport Errors
class TransportError(UniHTMLError):
    """Raised on connection failure or deadline expiry before a response arrives."""
    pass


# Protocol Errors
class ProtocolError(UniHTMLError):
    """Base class for malformed or undecodable server responses."""
    pass


class UnsupportedContentEncodingError(ProtocolError):
    """Raised when the response declares an encoding the client cannot decode."""

    def __init__(self, encoding: str):
        self.encoding = encoding
        super().__init__(f"unsupported Content-Encoding: {encoding} header")


class ResponseDecodeError(ProtocolError):
    """Raised when a compressed response body cannot be decompressed."""
    pass


# Remote Errors
class RemoteError(UniHTMLError):
    """Base class for errors reported by the server through the HTTP status.

    Attributes:
        status_code: HTTP status returned by the server
        detail: Decoded response body, treated as diagnostic text
    """

    kind = "remote error"

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail or ""
        message = f"{self.kind} (HTTP {status_code})"
        if self.detail:
            message = f"{message}: {self.detail}"
        super().__init__(message)


class NotFoundError(RemoteError):
    """Raised on HTTP 404."""
    kind = "not found"


class BadRequestError(RemoteError):
    """Raised on HTTP 400."""
    kind = "bad request"


class UnauthorizedError(RemoteError):
    """Raised on HTTP 401."""
    kind = "unauthorized"


class TimedOutError(RemoteError):
    """Raised on HTTP 408, when the server gave up rendering in time."""
    kind = "request timed out"


class NotImplementedServerError(RemoteError):
    """Raised on HTTP 501 and on unexpected health check statuses."""
    kind = "not implemented"


class InternalServerError(RemoteError):
    """Raised on HTTP 500 and on any unmapped conversion failure status."""
    kind = "internal server error"


class BadGatewayError(RemoteError):
    """Raised on HTTP 502 from the health endpoint."""
    kind = "bad gateway"


# Artifact Errors
class ArtifactParseError(UniHTMLError):
    """Raised when the returned bytes cannot be read as a PDF document."""
    pass


class RasterizationError(UniHTMLError):
    """Raised when the last page cannot be rendered for blank-space trimming."""
    pass
