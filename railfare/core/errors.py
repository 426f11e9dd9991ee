"""
Error kinds raised by the journey query pipeline.

Everything except ValidationError is answered with HTTP 500; the exception
handlers in railfare.main do the mapping.
"""

from typing import Optional


class RailfareError(Exception):
    """Base class for all pipeline errors"""
    status_code: int = 500


class ValidationError(RailfareError):
    """Missing or unparseable query parameters"""
    status_code = 400


class NotFoundError(RailfareError):
    """Station mask matched nothing"""


class SessionError(RailfareError):
    """Booking session token absent from the response"""


class MalformedResponseError(RailfareError):
    """Remote payload lacks the expected envelope or fields"""


class ConsistencyError(RailfareError):
    """Connections and prices no longer line up"""


class RemoteServiceError(RailfareError):
    """Non-success HTTP status (or transport failure) from a remote dependency"""

    def __init__(self, method: str, url: str, status: Optional[int], body: str = ""):
        self.method = method
        self.url = url
        self.status = status
        self.body = body
        if status is None:
            message = f"{method} {url} failed: {body}"
        else:
            message = f"{method} {url} -> {status}: {body}"
        super().__init__(message)
