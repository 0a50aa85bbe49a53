"""Error taxonomy shared by the fetcher, the resolver and the tool router.

Every exception carries an :class:`ErrorKind` tag set where the failure
happens. The router renders user-facing messages from the tag alone.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    TRANSIENT_NETWORK_FAILURE = "transient_network_failure"
    EXHAUSTED_RETRIES = "exhausted_retries"
    UPSTREAM_ERROR = "upstream_error"
    INVALID_INPUT = "invalid_input"
    UNKNOWN_TOOL = "unknown_tool"


class SilverCareError(Exception):
    """Base class for all errors raised by the orchestration layer"""

    kind: ErrorKind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class Unauthorized(SilverCareError):
    """Upstream answered 401. Never retried."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, url: str):
        super().__init__("Authentication is required or has expired. Check the API key.")
        self.url = url


class TransientNetworkFailure(SilverCareError):
    """A single attempt got no HTTP response (timeout, DNS, refused connection)."""

    kind = ErrorKind.TRANSIENT_NETWORK_FAILURE

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"No response from {url}: {cause.__class__.__name__}")
        self.url = url
        self.cause = cause


class ExhaustedRetries(SilverCareError):
    kind = ErrorKind.EXHAUSTED_RETRIES

    def __init__(self, url: str, attempts: int, last_failure: Optional[TransientNetworkFailure] = None):
        super().__init__(f"The upstream service did not respond after {attempts} attempts.")
        self.url = url
        self.attempts = attempts
        self.last_failure = last_failure


class UpstreamError(SilverCareError):
    """Upstream returned a definitive non-2xx status (other than 401) or a malformed body."""

    kind = ErrorKind.UPSTREAM_ERROR

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InvalidInput(SilverCareError):
    kind = ErrorKind.INVALID_INPUT


class UnknownTool(SilverCareError):
    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name
