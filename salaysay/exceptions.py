"""Exceptions raised by the intake stages.

Only failures that abort a file's pipeline are exceptions. Empty OCR
output, translation failures and unmatched patterns degrade silently.
"""


class IntakeError(Exception):
    """Base exception for all intake-related errors."""


class ConversionError(IntakeError):
    """Raised when an uploaded image cannot be decoded for conversion."""


class ExtractionError(IntakeError):
    """Raised when PDF bytes cannot be parsed for text extraction."""


class UnsupportedUploadError(IntakeError):
    """Raised when an upload's MIME type or size is not accepted."""


class InvalidTransitionError(IntakeError):
    """Raised when a pipeline is driven through a transition it does not allow."""
