"""Configuration Constants

Constants for the UniHTML conversion client and document assembler.
"""

# Server Connection
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080
DEFAULT_TIMEOUT_SECONDS = 30.0  # Client-wide, per-call override replaces it
CONNECT_TIMEOUT_SECONDS = 5.0
HEALTH_CHECK_TIMEOUT_SECONDS = 5.0
CLI_TIMEOUT_SECONDS = 10.0

# Wire Protocol
HEALTH_PATH = "/health"
CONVERT_PATH = "/v1/pdf"
ACCEPT_ENCODING = "deflate, gzip;q=1.0, *;q=0.5"
JOB_ID_HEADER = "X-Job-ID"

# Query Limits
MAX_WAIT_TIME_SECONDS = 180.0  # 3 minutes

# Document Defaults (millimeters)
RELATIVE_MARGIN_MM = 1.0
ABSOLUTE_MARGIN_MM = 10.0

# Document Export Deadlines (seconds)
EXTRACT_TIMEOUT_SECONDS = 15.0
EXPORT_TIMEOUT_SECONDS = 20.0  # Configured wait time is added on top

# Pagination
PAGE_BREAK_RATIO = 0.95  # Fraction of usable page height before a forced break

# Last Page Trimming
TRIM_COLOR_TOLERANCE = 0.03  # Per-channel relative difference for non-white backgrounds
RASTER_DPI = 72

# Environment Variables
ENV_CONNECT = "UNIHTML_CONNECT"
ENV_HOST = "UNIHTML_HOST"
ENV_PORT = "UNIHTML_PORT"
ENV_HTTPS = "UNIHTML_HTTPS"
ENV_PREFIX = "UNIHTML_PREFIX"

# Command Line Defaults
CLI_PAPER_WIDTH_INCHES = 8.5
CLI_PAPER_HEIGHT_INCHES = 11.0
CLI_MARGIN_MM = 10.0
