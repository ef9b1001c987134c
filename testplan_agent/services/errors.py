"""Error taxonomy shared by services and routes"""

from typing import Optional


class AppError(Exception):
    """Base class for failures reported to API callers"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(AppError):
    """Malformed input rejected before any side effect"""

    status_code = 400


class NotConfiguredError(AppError):
    """Required settings are missing"""

    status_code = 400


class UpstreamAuthError(AppError):
    """Upstream service rejected the stored credentials"""

    status_code = 401


class NotFoundError(AppError):
    """Missing ticket, template, or test plan"""

    status_code = 404


class UpstreamAPIError(AppError):
    """Any other upstream failure (non-2xx response or unreachable host)"""

    status_code = 502

    def __init__(
        self, message: str, upstream_status: Optional[int] = None, body: str = ""
    ):
        super().__init__(message)
        self.upstream_status = upstream_status
        self.body = body


# Raised while picking fields out of a JSON body of the wrong shape
PAYLOAD_ERRORS = (AttributeError, IndexError, KeyError, TypeError)
