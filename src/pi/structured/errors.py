"""Errors raised by structured streaming."""

from __future__ import annotations


class StreamingError(Exception):
    """Base class for terminal structured-streaming failures."""


class SizeExceededError(StreamingError):
    """The accumulated response would grow past the buffer ceiling."""

    def __init__(self, limit: int, attempted_size: int) -> None:
        self.limit = limit
        self.attempted_size = attempted_size
        super().__init__(f"Response would exceed maximum size of {limit} characters ({attempted_size} requested)")


class ConversionFailedError(StreamingError):
    """The final response could not be decoded after earlier partials succeeded."""

    def __init__(self, error: BaseException | None) -> None:
        self.error = error
        detail = str(error) if error is not None else "unknown error"
        super().__init__(f"Failed to convert final response to target type: {detail}")


class NoContentError(StreamingError):
    """The stream completed without producing any partial value."""

    def __init__(self) -> None:
        super().__init__("Stream completed without producing content")


class ContentValidationError(ValueError):
    """A structured content tree does not match a JSON Schema."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__("; ".join(errors))
