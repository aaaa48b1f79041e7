"""Error taxonomy shared by the client, the session and the surfaces."""

from __future__ import annotations


class TranslatorError(Exception):
    """Base class for every error raised by this package."""


class NetworkError(TranslatorError):
    """The translation request failed or returned a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(TranslatorError):
    """The endpoint answered with a payload of an unexpected shape."""


class RateLimitExceeded(TranslatorError):
    """The local quota denied the call before the network was contacted."""

    def __init__(self, message: str = "Too many requests. Please wait a moment.", retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UnsupportedInput(TranslatorError):
    """Input that cannot be turned into translatable text (e.g. a non-text upload)."""
