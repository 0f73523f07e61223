r"""Default values and constants shared across the package.

The negative status codes are reserved for failures synthesized on the
client side. They never collide with real HTTP status codes, which are
always >= 0.
"""

from __future__ import annotations

__all__ = [
    "BINDING_ERROR_STATUS",
    "CONTENT_TYPE_HEADER",
    "DEFAULT_METHOD",
    "DEFAULT_TIMEOUT",
    "FORM_URLENCODED_CONTENT_TYPE",
    "JSON_CONTENT_TYPE",
    "MESSAGE_ABORTED",
    "MESSAGE_ERROR",
    "MESSAGE_NOT_SUPPORTED",
    "MESSAGE_TIMEOUT",
    "RESPONSE_TYPE",
    "STATUS_ABORTED",
    "STATUS_ERROR",
    "STATUS_NOT_SUPPORTED",
    "STATUS_TIMEOUT",
    "TEXT_CONTENT_TYPE",
    "UPLOAD_CHUNK_SIZE",
]

# HTTP method used when the options do not specify one
DEFAULT_METHOD = "GET"

# Timeout in seconds for a whole exchange, 0 means no timeout
DEFAULT_TIMEOUT = 0.0

# Request header names are stored lower-cased
CONTENT_TYPE_HEADER = "content-type"
JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain;charset=UTF-8"
FORM_URLENCODED_CONTENT_TYPE = "application/x-www-form-urlencoded"

# The response is always read as raw bytes
RESPONSE_TYPE = "bytes"

# Size of the slices a request body is streamed in, used for upload progress
UPLOAD_CHUNK_SIZE = 64 * 1024

# Client-side synthesized status codes
STATUS_NOT_SUPPORTED = -1
STATUS_ERROR = -2
STATUS_TIMEOUT = -3
STATUS_ABORTED = -4

MESSAGE_NOT_SUPPORTED = "HttpClient is not supported by this environment."
MESSAGE_ERROR = "An error occurred while sending the request."
MESSAGE_TIMEOUT = "Your request has timed out."
MESSAGE_ABORTED = "Your request has been aborted."

# Status carried by every parameter binding error
BINDING_ERROR_STATUS = 400
