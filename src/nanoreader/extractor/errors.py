"""Extraction-specific errors.

Errors are grouped by how far a failure reaches:

- run-level (``RunAbortedError``): nothing is extracted for the input pair
- archive-level (``InnerArchiveError``): only the current PAR archive is dropped
- entry-level (``EntryError``): the entry is skipped or written as-is
"""

from nanoreader.common import CorruptedFileError, NanoReaderError, UnsupportedFormatError


class ArchiveError(NanoReaderError):
    """Archive processing failed."""
    pass


class RunAbortedError(ArchiveError):
    """Failure that aborts the whole extraction run."""
    pass


class MissingInputError(RunAbortedError):
    """A required input file is missing."""
    pass


class CorruptHeaderError(RunAbortedError, CorruptedFileError):
    """Metadata store header is truncated or has the wrong magic."""
    pass


class StructuralMismatchError(RunAbortedError, CorruptedFileError):
    """Entry table and data offset table disagree with the header count."""
    pass


class InnerArchiveError(ArchiveError, CorruptedFileError):
    """PAR archive cannot be parsed; the archive is skipped."""
    pass


class TruncatedArchiveError(InnerArchiveError):
    """PAR buffer is too short for its header or offset table."""
    pass


class BadMagicError(InnerArchiveError, UnsupportedFormatError):
    """PAR buffer does not start with the PAR magic."""
    pass


class EntryCountError(InnerArchiveError):
    """PAR entry count is zero, negative or above the ceiling."""
    pass


class MissingNameTableError(InnerArchiveError):
    """Multi-entry PAR buffer ends right after its offset table."""
    pass


class NegativeSizeError(InnerArchiveError):
    """Offsets cannot be arranged into a consistent layout."""
    pass


class NestingTooDeepError(InnerArchiveError):
    """PAR archives are nested beyond the configured depth."""
    pass


class EntryError(ArchiveError):
    """A single entry cannot be extracted; the entry is skipped."""
    pass


class EmptyNameError(EntryError):
    """Entry name resolved to an empty string."""
    pass


class UnsafePathError(EntryError):
    """Entry name would be written outside the output directory."""
    pass


class InvalidEntryError(EntryError):
    """Entry record carries a negative size or offset."""
    pass


class EntryOutOfBoundsError(EntryError):
    """Entry data lies outside its containing buffer."""
    pass


class DecompressionError(EntryError):
    """Gzip payload could not be decompressed."""
    pass
