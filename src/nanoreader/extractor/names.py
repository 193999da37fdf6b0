"""Entry name resolution and sanitization."""

import unicodedata
from pathlib import Path, PurePosixPath
from typing import BinaryIO

from .errors import EmptyNameError, UnsafePathError


# Characters rejected in file names by at least one major platform
INVALID_FILENAME_CHARS = frozenset('<>:"/\\|?*')
PLACEHOLDER = '_'

_READ_CHUNK = 256


def read_cstring(stream: BinaryIO, offset: int) -> str:
    """Read a NUL-terminated name at ``offset``.

    Bytes map one-to-one onto characters (Latin-1). A name running into the
    end of the stream without a terminator is returned as read.

    Args:
        stream: Seekable binary stream
        offset: Absolute offset of the first character

    Returns:
        Decoded name, possibly empty
    """
    if offset < 0:
        return ""

    stream.seek(offset)
    buf = bytearray()
    while True:
        chunk = stream.read(_READ_CHUNK)
        if not chunk:
            break
        end = chunk.find(b'\x00')
        if end >= 0:
            buf += chunk[:end]
            break
        buf += chunk
    return buf.decode('latin-1')


def decode_fixed_name(raw: bytes) -> str:
    """Decode a fixed-width, NUL-padded ASCII name slot.

    Only trailing padding is removed; embedded NULs and non-ASCII bytes are
    left for ``sanitize_name`` to replace.
    """
    return raw.rstrip(b'\x00').decode('ascii', errors='replace')


def _is_illegal(ch: str) -> bool:
    return (
        ch in INVALID_FILENAME_CHARS
        or ch == '\ufffd'
        or unicodedata.category(ch) == 'Cc'
    )


def sanitize_name(name: str) -> str:
    """Replace characters that cannot appear in a file name with ``_``.

    Length and character positions are preserved.

    Args:
        name: Raw name from an archive

    Returns:
        Sanitized name
    """
    return ''.join(PLACEHOLDER if _is_illegal(ch) else ch for ch in name)


def resolve_output_path(root: Path, name: str) -> Path:
    """Map an archive-relative name onto a path below ``root``.

    Both ``/`` and ``\\`` are accepted as separators.

    Raises:
        EmptyNameError: Name has no usable path component
        UnsafePathError: Name is absolute or climbs out of ``root``
    """
    parts = PurePosixPath(name.replace('\\', '/')).parts
    if not parts:
        raise EmptyNameError("Empty entry name", name=name)
    # "/", ".." or a drive letter ("C:")
    if parts[0] == '/' or '..' in parts or parts[0][1:2] == ':':
        raise UnsafePathError(f"Entry name escapes output directory: {name!r}", name=name)

    parts = [part for part in parts if part != '.']
    if not parts:
        raise EmptyNameError("Entry name has no file component", name=name)
    return Path(root).joinpath(*parts)
