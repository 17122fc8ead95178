"""
Exceptions raised by the CelebChat core.

Every failure of a chat exchange maps onto one of these types. The
ChatManager catches them at the exchange boundary and turns them into a
system message, so none of them ever reaches a view handler.
"""

from __future__ import annotations


class CelebChatError(Exception):
    """Base class for CelebChat errors."""


class MissingCredential(CelebChatError):
    """Raised when a send is attempted without a stored API key."""

    def __init__(self, message: str = "Please set your Google Gemini API Key in settings first.") -> None:
        super().__init__(message)


class ConcurrentExchangeRejected(CelebChatError):
    """
    Raised when an exchange is requested while another one is in flight.

    The ChatManager itself drops such requests silently; the type exists for
    callers that drive a Session directly and want an exception instead.
    """

    def __init__(self, message: str = "An exchange is already in progress.") -> None:
        super().__init__(message)


class TransportFailure(CelebChatError):
    """
    Raised when the network call does not complete or returns a
    non-success status.

    The status code, when there is one, is kept for logging only; callers
    treat every status the same way.
    """

    def __init__(self, message: str = "API request failed", status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class ExchangeCancelled(TransportFailure):
    """Raised when the in-flight request is cancelled by the user."""

    def __init__(self, message: str = "Request cancelled") -> None:
        super().__init__(message)


class MalformedResponse(CelebChatError):
    """
    Raised when the model output cannot be parsed into an InteractionResult.

    `raw` holds the text that failed to parse.
    """

    def __init__(self, reason: str, raw: str = "") -> None:
        self.reason = reason
        self.raw = raw
        super().__init__(f"Malformed response: {reason}")
