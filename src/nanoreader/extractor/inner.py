"""PAR sub-archive parsing and recursive extraction."""

import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from .compression import decode
from .errors import (
    BadMagicError,
    EmptyNameError,
    EntryCountError,
    EntryError,
    EntryOutOfBoundsError,
    InnerArchiveError,
    MissingNameTableError,
    NegativeSizeError,
    NestingTooDeepError,
    TruncatedArchiveError,
    UnsafePathError,
)
from .layout import (
    INNER_HEADER,
    INNER_MAGIC,
    INNER_MAX_ENTRIES,
    INNER_NAME_SIZE,
    InnerHeader,
    align,
    is_inner_archive,
)
from .manifest import ManifestSection
from .names import decode_fixed_name, sanitize_name

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 64


@dataclass
class InnerArchive:
    """Parsed PAR tables, indexed by original entry index."""
    header: InnerHeader
    offsets: List[int]
    names: List[str]
    sizes: List[int]
    name_table_offset: Optional[int]  # None when names were synthesized
    length: int

    @property
    def entry_count(self) -> int:
        return self.header.entry_count


def reconstruct_sizes(offsets: List[int], total_length: int) -> List[int]:
    """Derive entry sizes from offsets alone.

    Offsets are sorted (keeping their original index); each entry runs up to
    the next offset in sorted order, the last one up to ``total_length``.
    Negative offsets are treated as unused and keep size 0.

    Args:
        offsets: Entry offsets in original order
        total_length: Length of the buffer holding the entries

    Returns:
        Sizes in original order

    Raises:
        NegativeSizeError: An offset lies beyond ``total_length``
    """
    sizes = [0] * len(offsets)
    ordered = sorted(enumerate(offsets), key=lambda pair: pair[1])

    for position, (original_index, offset) in enumerate(ordered):
        if offset < 0:
            continue

        if position < len(ordered) - 1:
            size = ordered[position + 1][1] - offset
        else:
            size = total_length - offset

        if size < 0:
            raise NegativeSizeError(
                f"Calculated a negative size ({size}) for entry #{original_index + 1}",
                index=original_index,
                offset=offset,
                size=size,
                total=total_length,
            )

        sizes[original_index] = size

    return sizes


def parse_inner_archive(buffer: bytes) -> InnerArchive:
    """Parse the header, offset table and name table of a PAR buffer.

    Raises:
        InnerArchiveError: The buffer cannot be parsed as a PAR archive
    """
    length = len(buffer)
    if length < INNER_HEADER.size:
        raise TruncatedArchiveError(
            f"PAR data is too small to be valid ({length} bytes)", length=length
        )

    header = InnerHeader(*INNER_HEADER.unpack_from(buffer, 0))
    if header.magic != INNER_MAGIC:
        raise BadMagicError(
            f"Invalid PAR magic: 0x{header.magic & 0xFFFFFFFF:X}", magic=header.magic
        )

    count = header.entry_count
    if count <= 0 or count > INNER_MAX_ENTRIES:
        raise EntryCountError(
            f"Invalid or unreasonable entry count ({count})", entry_count=count
        )

    table_end = INNER_HEADER.size + 4 * count
    if table_end > length:
        raise TruncatedArchiveError(
            f"Insufficient data for offset table ({count} entries, {length} bytes)",
            entry_count=count,
            length=length,
        )
    offsets = list(struct.unpack_from(f'<{count}i', buffer, INNER_HEADER.size))

    name_table_offset: Optional[int] = align(table_end)
    if name_table_offset >= length and count > 1:
        raise MissingNameTableError(
            "No name table found, data ends after offset table",
            entry_count=count,
            name_table_offset=name_table_offset,
            length=length,
        )

    if name_table_offset + INNER_NAME_SIZE * count <= length:
        names = [
            decode_fixed_name(buffer[start:start + INNER_NAME_SIZE])
            for start in range(name_table_offset, name_table_offset + INNER_NAME_SIZE * count, INNER_NAME_SIZE)
        ]
        logger.debug(f"Name table located at offset 0x{name_table_offset:X}")
    else:
        logger.warning(f"Insufficient data for name table, generating generic names for {count} entries")
        names = [f"entry_{i}" for i in range(count)]
        name_table_offset = None

    try:
        sizes = reconstruct_sizes(offsets, length)
    except NegativeSizeError as e:
        e.context["entry_name"] = names[e.context["index"]]
        raise

    return InnerArchive(
        header=header,
        offsets=offsets,
        names=names,
        sizes=sizes,
        name_table_offset=name_table_offset,
        length=length,
    )


class InnerArchiveReader:
    """Extracts PAR archives, descending into PAR archives found inside them."""

    def __init__(self, output_root: Path, max_depth: int = DEFAULT_MAX_DEPTH):
        """Initialize the reader.

        Args:
            output_root: Root of the extraction tree (for log context)
            max_depth: Deepest nesting level that is still extracted
        """
        self.output_root = Path(output_root)
        self.max_depth = max_depth

    def extract(
        self,
        buffer: bytes,
        archive_path: Path,
        section: ManifestSection,
        depth: int = 1,
    ) -> int:
        """Extract every entry of the PAR archive in ``buffer``.

        Entries are written to a directory named after ``archive_path``
        without its extension. A failure to parse the archive is logged and
        nothing is written; a failure on one entry skips that entry only.

        Args:
            buffer: Complete PAR archive
            archive_path: Path the archive itself was written to
            section: Manifest section whose counter continues across nesting
            depth: Nesting level of this archive (1 for a top-level PAR)

        Returns:
            Number of entries written from this archive, not counting
            entries of nested archives
        """
        archive_path = Path(archive_path)

        try:
            if depth > self.max_depth:
                raise NestingTooDeepError(
                    f"PAR nesting depth {depth} exceeds limit {self.max_depth}",
                    depth=depth,
                )
            archive = parse_inner_archive(buffer)
        except InnerArchiveError as e:
            logger.error(
                f"Skipping PAR archive {archive_path}: {e.message}",
                extra={"extra_fields": {"archive": str(archive_path), **e.context}},
            )
            return 0

        logger.info(f"Extracting PAR archive {archive_path} ({archive.entry_count} entries, depth {depth})")

        target_dir = archive_path.parent / archive_path.stem
        written = 0

        for index in range(archive.entry_count):
            try:
                output_path, data = self._extract_entry(buffer, archive, index, target_dir, section)
            except EntryError as e:
                logger.log(
                    logging.WARNING if isinstance(e, EmptyNameError) else logging.ERROR,
                    f"Skipping entry #{index + 1} of {archive_path}: {e.message}",
                    extra={"extra_fields": {"archive": str(archive_path), "entry": index + 1, **e.context}},
                )
                continue
            except OSError as e:
                logger.error(f"Failed to write entry #{index + 1} of {archive_path}: {e}")
                continue

            written += 1

            if is_inner_archive(data):
                logger.info(f"Detected nested PAR in {output_path}")
                self.extract(data, output_path, section, depth + 1)

        return written

    def _extract_entry(
        self,
        buffer: bytes,
        archive: InnerArchive,
        index: int,
        target_dir: Path,
        section: ManifestSection,
    ) -> tuple[Path, bytes]:
        """Slice, decode and write one entry; returns where and what was written."""
        original_name = archive.names[index]
        name = sanitize_name(original_name)
        if name != original_name:
            logger.info(f"Sanitized filename from {original_name!r} to {name!r}")

        if not name:
            raise EmptyNameError("Empty entry name")
        if name in ('.', '..'):
            raise UnsafePathError(f"Entry name {name!r} is not a file name", name=name)

        offset = archive.offsets[index]
        size = archive.sizes[index]
        if offset < 0 or offset + size > archive.length:
            raise EntryOutOfBoundsError(
                f"Data chunk of {name!r} is out of bounds: "
                f"offset=0x{offset & 0xFFFFFFFF:X}, size={size}, total={archive.length}",
                name=name,
                offset=offset,
                size=size,
                total=archive.length,
            )

        result = decode(buffer[offset:offset + size], name)

        output_path = target_dir / result.name
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.data)

        entry = section.add(output_path, result.still_compressed)
        logger.info(f"Extracted sub file [{section.name} #{entry.index}]: {entry.path}")

        return output_path, result.data
