"""UniHTML HTTP Client

Handles communication with the UniHTML conversion server.

Logging Guidelines:
- Logs method + host + path at DEBUG, never request bodies
- Logs status code and job id at DEBUG

Error Strategy:
- No retries: every transport, protocol or status error is raised at once
- Status codes map to RemoteError subclasses carrying the decoded body
- An unknown Content-Encoding is a ProtocolError regardless of status
- A conversion deadline bounds the whole call, body read included; a
  non-positive deadline fails before anything is sent
"""
import gzip
import json
import logging
import os
import socket
import threading
import time
import zlib
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from urllib.parse import urlparse

import requests
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from .config import (
    ACCEPT_ENCODING,
    CONNECT_TIMEOUT_SECONDS,
    CONVERT_PATH,
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_TIMEOUT_SECONDS,
    ENV_CONNECT,
    ENV_HOST,
    ENV_HTTPS,
    ENV_PORT,
    ENV_PREFIX,
    HEALTH_PATH,
    JOB_ID_HEADER,
)
from .exceptions import (
    BadGatewayError,
    BadRequestError,
    InternalServerError,
    InvalidConfigurationError,
    NotFoundError,
    NotImplementedServerError,
    ResponseDecodeError,
    TimedOutError,
    TransportError,
    UnauthorizedError,
    UnsupportedContentEncodingError,
)
from .query import Query
from .response import PDFResponse

logger = logging.getLogger(__name__)

_HEALTH_ERRORS = {
    404: NotFoundError,
    500: InternalServerError,
    502: BadGatewayError,
}

_CONVERT_ERRORS = {
    400: BadRequestError,
    401: UnauthorizedError,
    404: NotFoundError,
    408: TimedOutError,
    501: NotImplementedServerError,
}

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientOptions:
    """Connection settings of the conversion server.

    Attributes:
        hostname: Server host, 127.0.0.1 when empty
        port: Server port, 8080 when not positive
        https: Use TLS
        prefix: Optional public API path prefix, e.g. "/unihtml"
    """

    hostname: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    https: bool = False
    prefix: str = ""

    def __post_init__(self):
        """Apply defaults for empty host and non-positive port."""
        if not self.hostname:
            object.__setattr__(self, "hostname", DEFAULT_HOST)
        if self.port <= 0:
            object.__setattr__(self, "port", DEFAULT_PORT)
        object.__setattr__(self, "prefix", self.prefix.rstrip("/"))

    @property
    def addr(self) -> str:
        """Base address: scheme://host:port[prefix]."""
        scheme = "https" if self.https else "http"
        return f"{scheme}://{self.hostname}:{self.port}{self.prefix}"

    @classmethod
    def parse(cls, target: str) -> "ClientOptions":
        """
        Parse a connection target.

        Args:
            target: Bare host, "host:port" or full URL; plain HTTP is assumed
                    when the scheme is missing

        Returns:
            ClientOptions for the target

        Raises:
            InvalidConfigurationError: If the URL or its port is malformed
        """
        if "://" not in target:
            target = "http://" + target
        try:
            parsed = urlparse(target)
            port = parsed.port
        except ValueError as e:
            raise InvalidConfigurationError(f"provided invalid unihtml-server url: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise InvalidConfigurationError(f"provided invalid unihtml-server url: {target}")
        return cls(
            hostname=parsed.hostname,
            port=port or 0,
            https=parsed.scheme == "https",
            prefix=parsed.path,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ClientOptions":
        """
        Read connection settings from environment variables.

        UNIHTML_CONNECT takes precedence; otherwise UNIHTML_HOST, UNIHTML_PORT,
        UNIHTML_HTTPS and UNIHTML_PREFIX are combined.

        Raises:
            InvalidConfigurationError: If the port is not an integer
        """
        env = os.environ if environ is None else environ
        target = env.get(ENV_CONNECT)
        if target:
            return cls.parse(target)

        port_text = env.get(ENV_PORT, "")
        try:
            port = int(port_text) if port_text else DEFAULT_PORT
        except ValueError as e:
            raise InvalidConfigurationError(f"parsing port failed: {port_text!r}") from e
        return cls(
            hostname=env.get(ENV_HOST, DEFAULT_HOST),
            port=port,
            https=env.get(ENV_HTTPS, "").lower() in _TRUTHY,
            prefix=env.get(ENV_PREFIX, ""),
        )


def decode_body(data: bytes, encoding: str) -> bytes:
    """
    Decompress a response body according to its Content-Encoding.

    Args:
        data: Body bytes as received on the wire
        encoding: Content-Encoding header value, empty for none

    Returns:
        Decompressed bytes

    Raises:
        UnsupportedContentEncodingError: If the encoding is not gzip or deflate
        ResponseDecodeError: If the body is not valid for its encoding
    """
    encoding = encoding.strip().lower()
    if not encoding:
        return data
    if encoding == "gzip":
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise ResponseDecodeError(f"invalid gzip response body: {e}") from e
    if encoding == "deflate":
        # Servers send both zlib-wrapped and raw deflate streams
        try:
            return zlib.decompress(data)
        except zlib.error:
            pass
        try:
            return zlib.decompress(data, -zlib.MAX_WBITS)
        except zlib.error as e:
            raise ResponseDecodeError(f"invalid deflate response body: {e}") from e
    raise UnsupportedContentEncodingError(encoding)


def _shutdown_socket(sock: socket.socket) -> None:
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError as e:
        logger.debug("Socket already closed at deadline: %s", e)


def _start_watchdog(response: requests.Response, remaining: float) -> Optional[threading.Timer]:
    """Shut the response socket down once the remaining time runs out."""
    connection = getattr(response.raw, "connection", None)
    sock = getattr(connection, "sock", None)
    if sock is None:
        return None
    watchdog = threading.Timer(remaining, _shutdown_socket, args=(sock,))
    watchdog.daemon = True
    watchdog.start()
    return watchdog


def _read_raw_body(response: requests.Response, deadline: float) -> bytes:
    """Read the undecoded body, failing once the monotonic deadline passes."""
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise TransportError("deadline exceeded before reading response body")
    watchdog = _start_watchdog(response, remaining)
    try:
        raw = response.raw.read(decode_content=False)
    finally:
        if watchdog is not None:
            watchdog.cancel()
    if time.monotonic() >= deadline:
        raise TransportError("deadline exceeded while reading response body")
    return raw


class UniHTMLClient:
    """HTTP client of the UniHTML conversion server.

    The client is an explicit handle: create one per server and pass it to
    every call site. Its options are immutable and its session pools
    connections, so one client may serve independent calls.

    Attributes:
        options: Connection settings
        default_timeout: Deadline in seconds for calls without an override
        session: Underlying requests session
    """

    def __init__(
        self,
        options: Optional[ClientOptions] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.

        Args:
            options: Connection settings; defaults to 127.0.0.1:8080
            session: Optional preconfigured requests session
        """
        self.options = options or ClientOptions()
        self.default_timeout = DEFAULT_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        logger.info("Client Addr: %s", self.options.addr)

    def __enter__(self) -> "UniHTMLClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()

    def _timeouts(self, call_timeout: float, caller_timeout: Optional[float]) -> Tuple[float, float]:
        # Whichever deadline fires first wins
        timeout = call_timeout if caller_timeout is None else min(call_timeout, caller_timeout)
        if timeout <= 0:
            raise TransportError("deadline exceeded")
        return min(CONNECT_TIMEOUT_SECONDS, timeout), timeout

    def health_check(self, timeout: Optional[float] = None) -> None:
        """
        Check that the server is up.

        Args:
            timeout: Optional caller deadline in seconds

        Raises:
            TransportError: If the server cannot be reached in time
            NotFoundError: On HTTP 404
            InternalServerError: On HTTP 500
            BadGatewayError: On HTTP 502
            NotImplementedServerError: On any other non-200 status
        """
        url = f"{self.options.addr}{HEALTH_PATH}"
        logger.debug("Request - GET - %s", url)
        try:
            response = self.session.get(url, timeout=self._timeouts(self.default_timeout, timeout))
        except requests.Timeout as e:
            raise TransportError(f"health check timed out: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"health check failed: {e}") from e

        with response:
            status = response.status_code
        logger.debug("[%d] GET %s", status, url)
        if status == 200:
            return
        raise _HEALTH_ERRORS.get(status, NotImplementedServerError)(status)

    def _build_request(self, query: Query) -> Tuple[str, bytes, dict]:
        url = f"{self.options.addr}{CONVERT_PATH}"
        body = json.dumps(query.to_request_body()).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Accept-Encoding": ACCEPT_ENCODING,
        }
        return url, body, headers

    def convert_html(self, query: Query, timeout: Optional[float] = None) -> PDFResponse:
        """
        Convert the query content into a PDF.

        Args:
            query: Validated query
            timeout: Optional caller deadline in seconds. The query's timeout
                     override (or the client default) still applies; the
                     shorter of the two wins.

        Returns:
            PDFResponse with the job id and decompressed PDF bytes

        Raises:
            ValidationError: If the query is invalid
            TransportError: On connection failure or deadline expiry
            ProtocolError: If the body cannot be decoded
            RemoteError: For any non-201 status, with the server message
        """
        query.validate()
        url, body, headers = self._build_request(query)

        call_timeout = query.timeout_duration or self.default_timeout
        timeouts = self._timeouts(call_timeout, timeout)
        deadline = time.monotonic() + timeouts[1]
        logger.debug("Request - POST - %s, Headers: %s", url, headers)

        try:
            response = self.session.post(
                url, data=body, headers=headers, timeout=timeouts, stream=True
            )
        except requests.Timeout as e:
            raise TransportError(f"conversion request timed out after {timeouts[1]:.1f}s") from e
        except requests.RequestException as e:
            raise TransportError(f"conversion request failed: {e}") from e

        with response:
            status = response.status_code
            error_class = None
            if status != 201:
                error_class = _CONVERT_ERRORS.get(status, InternalServerError)

            encoding = response.headers.get("Content-Encoding", "")
            try:
                raw = _read_raw_body(response, deadline)
            except (Urllib3HTTPError, OSError) as e:
                if time.monotonic() >= deadline:
                    raise TransportError("deadline exceeded while reading response body") from e
                if error_class is not None:
                    raise error_class(status) from e
                raise TransportError(f"reading response body failed: {e}") from e
            job_id = response.headers.get(JOB_ID_HEADER, "")

        logger.debug("[%d] POST %s", status, url)

        if error_class is not None:
            try:
                data = decode_body(raw, encoding)
            except ResponseDecodeError:
                data = raw
            raise error_class(status, data.decode("utf-8", errors="replace").strip())

        data = decode_body(raw, encoding)
        logger.debug("Response ID %s (%d bytes)", job_id, len(data))
        return PDFResponse(id=job_id, data=data)
