from typing import Optional


class ChosicError(RuntimeError):
    """Raised when live data cannot be obtained from chosic.com."""


class DeliveryError(ChosicError):
    """Every relay failed or answered with a non-success status."""

    def __init__(self, message: str = "all relays failed", last_error: Optional[BaseException] = None):
        super().__init__(message)
        self.last_error = last_error


class ResponseFormatError(ChosicError):
    """Success status but the content is unusable (HTML error page, empty playlist)."""


class ParseError(ChosicError):
    """Payload could not be decoded."""
