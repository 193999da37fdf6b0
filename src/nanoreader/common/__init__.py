"""Common utilities for nanoreader packages."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import (
    NanoReaderError, FileProcessingError, CorruptedFileError, UnsupportedFormatError
)
from .path_utils import normalize_path, relative_to_root

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'NanoReaderError',
    'FileProcessingError',
    'CorruptedFileError',
    'UnsupportedFormatError',
    'normalize_path',
    'relative_to_root',
]
