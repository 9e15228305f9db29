"""Run-level exceptions.

Node-level faults never use these: they are converted into ``Failure``
results at the extractor boundary. Only faults that abort a whole
conversion (the document cannot be opened, the caller cancelled) surface
as exceptions.
"""
from __future__ import annotations

from typing import Optional


class ConversionError(Exception):
    """Base exception for a conversion that could not complete."""

    code = "CONVERSION_ERROR"

    def __init__(self, message: str, original: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.original = original


class DocumentOpenError(ConversionError):
    """Raised when the engine cannot open or parse the input document."""

    code = "DOCUMENT_OPEN_ERROR"


class ConversionCancelledError(ConversionError):
    """Raised between slides when the deadline passed or the run was cancelled."""

    code = "CONVERSION_CANCELLED"


class SchemaVersionError(ValueError):
    """Raised when a universal schema document carries an unsupported version."""
