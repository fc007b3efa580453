"""UniHTML Command Line

Commands:
    unihtml generate INPUT OUTPUT   Convert an HTML file or directory to PDF
    unihtml health                  Check that the conversion server is up

Connection settings default to the UNIHTML_* environment variables, which
may also be placed in a .env file in the working directory.
"""
import argparse
import logging
import os
import sys
import time
from typing import List, Optional

from dotenv import load_dotenv

from .client import ClientOptions, UniHTMLClient
from .config import (
    CLI_MARGIN_MM,
    CLI_PAPER_HEIGHT_INCHES,
    CLI_PAPER_WIDTH_INCHES,
    CLI_TIMEOUT_SECONDS,
)
from .content import Content
from .exceptions import UniHTMLError
from .query import build_html_query
from .sizes import Length, LengthFlag, Orientation, PageSize

logger = logging.getLogger(__name__)


def _length_flag(text: str) -> LengthFlag:
    try:
        return LengthFlag.from_string(text)
    except UniHTMLError as e:
        raise argparse.ArgumentTypeError(str(e))


def _page_size(text: str) -> PageSize:
    try:
        return PageSize.from_name(text)
    except UniHTMLError as e:
        raise argparse.ArgumentTypeError(str(e))


def _orientation(text: str) -> Orientation:
    try:
        return Orientation.parse(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_connection_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-p", "--port", type=int, help="Port of the unihtml server")
    parser.add_argument("--host", help="Host name of the unihtml server")
    parser.add_argument("-s", "--https", action="store_true", default=None,
                        help="Use HTTPS in server communication")
    parser.add_argument("-x", "--prefix", help="Public api prefix used by the unihtml server")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unihtml", description="UniHTML conversion client")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose information of the client")
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate",
        help="Generate a PDF from an HTML file or a directory with HTML files",
        epilog="example: unihtml generate input.html output.pdf --orientation portrait",
    )
    generate.add_argument("input", help="HTML file or directory")
    generate.add_argument("output", help="Output PDF path")
    _add_connection_arguments(generate)
    generate.add_argument("--paper-width", type=_length_flag,
                          default=LengthFlag(Length.inch(CLI_PAPER_WIDTH_INCHES).millimeters()),
                          help="Paper width, e.g. 210mm, 8.5in or 'undefined'")
    generate.add_argument("--paper-height", type=_length_flag,
                          default=LengthFlag(Length.inch(CLI_PAPER_HEIGHT_INCHES).millimeters()),
                          help="Paper height, e.g. 297mm, 11in or 'undefined'")
    generate.add_argument("--page-size", type=_page_size, default=PageSize.UNDEFINED,
                          help="Named page size, e.g. A4 or Letter")
    generate.add_argument("--orientation", type=_orientation, default=Orientation.PORTRAIT,
                          help="portrait or landscape")
    for side in ("top", "bottom", "left", "right"):
        generate.add_argument(f"--margin-{side}", type=_length_flag,
                              default=LengthFlag(Length.mm(CLI_MARGIN_MM)),
                              help=f"Margin {side}, e.g. 10mm")
    generate.add_argument("--timeout", type=float, default=CLI_TIMEOUT_SECONDS,
                          help="Conversion deadline in seconds")

    health = subparsers.add_parser("health", help="Check the unihtml server health")
    _add_connection_arguments(health)
    return parser


def setup_logging(debug: bool = False, verbose: bool = False) -> None:
    level = logging.DEBUG if debug or verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def client_options(args: argparse.Namespace) -> ClientOptions:
    """Environment settings overridden by any connection flag given."""
    options = ClientOptions.from_env()
    return ClientOptions(
        hostname=args.host if args.host is not None else options.hostname,
        port=args.port if args.port is not None else options.port,
        https=args.https if args.https is not None else options.https,
        prefix=args.prefix if args.prefix is not None else options.prefix,
    )


def run_generate(args: argparse.Namespace) -> None:
    start = time.perf_counter()
    if not os.path.isdir(args.input):
        if not os.path.exists(args.input):
            raise UniHTMLError(f"input does not exist: {args.input}")
        if os.path.splitext(args.input)[1] != ".html":
            raise UniHTMLError(f"currently only HTML files are supported. Input: {args.input}")
        content = Content.from_file(args.input)
    else:
        content = Content.from_directory(args.input)

    query = (
        build_html_query()
        .paper_width(args.paper_width.length)
        .paper_height(args.paper_height.length)
        .page_size(args.page_size)
        .margin_top(args.margin_top.length)
        .margin_bottom(args.margin_bottom.length)
        .margin_left(args.margin_left.length)
        .margin_right(args.margin_right.length)
        .orientation(args.orientation)
        .set_content(content)
        .query()
    )

    with UniHTMLClient(client_options(args)) as client:
        response = client.convert_html(query, timeout=args.timeout)
    logger.debug("Executing generate query taken: %.3fs", time.perf_counter() - start)

    response.write_to(args.output)
    logger.info("Wrote %d bytes (job %s) to %s", response.size, response.id, args.output)


def run_health(args: argparse.Namespace) -> None:
    with UniHTMLClient(client_options(args)) as client:
        client.health_check()
    print(f"unihtml server at {client.options.addr} is healthy")


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug, verbose=args.verbose)

    commands = {"generate": run_generate, "health": run_health}
    try:
        commands[args.command](args)
    except (UniHTMLError, OSError) as e:
        print(f"Err: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
