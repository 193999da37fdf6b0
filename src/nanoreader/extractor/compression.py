"""Gzip detection and decompression for extracted payloads."""

import gzip
import logging
import zlib
from dataclasses import dataclass
from pathlib import PurePosixPath

from .errors import DecompressionError

logger = logging.getLogger(__name__)

GZIP_MAGIC = b'\x1f\x8b'
GZIP_SUFFIX = '.gz'


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of running a payload through ``decode``."""
    data: bytes
    name: str
    was_compressed: bool
    still_compressed: bool


def is_compressed(raw: bytes) -> bool:
    """Return True when ``raw`` starts with the gzip magic."""
    return raw[:2] == GZIP_MAGIC


def decompress(raw: bytes) -> bytes:
    """Decompress a complete gzip stream.

    Raises:
        DecompressionError: Stream is corrupt, truncated or not gzip at all
    """
    try:
        return gzip.decompress(raw)
    except (OSError, EOFError, zlib.error) as e:
        raise DecompressionError(
            f"Decompression failed: {e}",
            compressed_size=len(raw),
        ) from e


def decompressed_name(candidate_name: str) -> str:
    """Pick the output name for successfully decompressed data.

    ``data.pr.gz`` becomes ``data.pr``; a name with no extension left under
    the ``.gz`` (``data.gz``) is kept so it does not collapse to a bare stem.
    """
    if not candidate_name.lower().endswith(GZIP_SUFFIX):
        return candidate_name

    stripped = candidate_name[:-len(GZIP_SUFFIX)]
    # Only the last path component counts ("v1.0/data.gz" keeps its name)
    if '.' in PurePosixPath(stripped.replace('\\', '/')).name:
        return stripped
    return candidate_name


def decode(raw: bytes, candidate_name: str) -> DecodeResult:
    """Decompress ``raw`` if it is gzip and choose the name to write it under.

    A failed decompression is logged and the original bytes are returned
    unchanged with ``still_compressed=True`` so nothing is lost.

    Args:
        raw: Payload as stored in the archive
        candidate_name: Name the payload would be written under

    Returns:
        DecodeResult with the bytes and name to write
    """
    if not is_compressed(raw):
        return DecodeResult(raw, candidate_name, was_compressed=False, still_compressed=False)

    logger.debug(f"Detected gzip compression for {candidate_name}")

    try:
        data = decompress(raw)
    except DecompressionError as e:
        logger.error(
            f"Decompression failed for {candidate_name}, keeping compressed data: {e.__cause__}",
            extra={"extra_fields": {"entry_name": candidate_name, **e.context}},
        )
        return DecodeResult(raw, candidate_name, was_compressed=True, still_compressed=True)

    return DecodeResult(
        data,
        decompressed_name(candidate_name),
        was_compressed=True,
        still_compressed=False,
    )
