"""Base error definitions for nanoreader packages."""

from typing import Any, Dict


class NanoReaderError(Exception):
    """Base exception for all nanoreader errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class FileProcessingError(NanoReaderError):
    """Base exception for file processing errors."""
    pass


class CorruptedFileError(FileProcessingError):
    """File is corrupted or malformed."""
    pass


class UnsupportedFormatError(FileProcessingError):
    """File format is not supported."""
    pass
