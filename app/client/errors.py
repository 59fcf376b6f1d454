from typing import Optional


class MessagingError(Exception):
    """Base class for failures caught at the fetch/send boundary."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TokenAcquisitionFailure(MessagingError):
    """The identity provider could not hand out a bearer token."""


class TransportFailure(MessagingError):
    """Server unreachable, non-2xx status or an unreadable body."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class ApplicationRejection(MessagingError):
    """The server answered with ``success: false``; message is shown verbatim."""
