"""Typed failures raised by the conversion pipeline."""

from __future__ import annotations


class ConversionError(RuntimeError):
    status_code: int = 500

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class InvalidInputError(ConversionError):
    """Missing, oversize or otherwise malformed upload or parameters."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__("INVALID_INPUT", message)


class UnreadablePdfError(ConversionError):
    """The document cannot be parsed, is encrypted or has no pages."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__("UNREADABLE_PDF", message)


class ResourceUnavailableError(ConversionError):
    """Workspace or rendering capability could not be obtained."""

    def __init__(self, message: str) -> None:
        super().__init__("RESOURCE_UNAVAILABLE", message)


class NoOutputError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__("NO_OUTPUT", message)


class ArchiveFailureError(ConversionError):
    def __init__(self, message: str) -> None:
        super().__init__("ARCHIVE_FAILURE", message)


__all__ = [
    "ArchiveFailureError",
    "ConversionError",
    "InvalidInputError",
    "NoOutputError",
    "ResourceUnavailableError",
    "UnreadablePdfError",
]
