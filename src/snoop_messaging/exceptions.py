"""Exceptions for snoop-messaging."""

from __future__ import annotations


class SnoopError(Exception):
    """Root exception for the snoop-messaging package."""


class MessageDecodingError(SnoopError):
    """Raised when a raw message does not have a decodable shape.

    Never escapes ``MessageDecoder.decode``; the decoder drops the message instead.
    """


class InfrastructureError(SnoopError):
    """Base class for broker and administrative API failures."""


class MessagingError(InfrastructureError):
    """Base class for all messaging-related infrastructure errors."""


class MessagingConnectionError(MessagingError):
    """Raised when connectivity to the broker or its management API fails."""


class ManagementApiError(MessagingError):
    """Raised when the management API answers with an error or an unusable body."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message)
