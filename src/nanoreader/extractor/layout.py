"""On-disk layouts of the PA container and the PAR sub-archive.

PA is split over two files. The metadata store (``pa.bin``) starts with a
32-byte header::

    0x00  i32  magic                 0x00414150 ("PAA\\0")
    0x04  i32  reserved
    0x08  i32  entry_count
    0x0C  i32  name_table_offset     entry table position
    0x10  i32  data_offset_table_offset
    0x14  i32  unknown
    0x18  i64  reserved

followed, at ``name_table_offset``, by ``entry_count`` 16-byte entries
(name offset, size, two unknown words) and, at ``data_offset_table_offset``,
by ``entry_count`` i32 payload offsets into the data store (``pa.arc``).
Names are NUL-terminated strings elsewhere in the metadata store.

PAR is self-contained in one buffer::

    0x00  i32  magic                 0x00524150 ("PAR\\0")
    0x04  i32  unknown
    0x08  i32  entry_count
    0x0C  i32  unknown
    0x10  i32  offsets[entry_count]
    align 16
          char names[entry_count][32]

PAR stores no sizes; see ``inner.reconstruct_sizes``.

All integers are little-endian and signed.
"""

import struct
from dataclasses import dataclass
from typing import BinaryIO, List, Tuple

from .errors import CorruptHeaderError, StructuralMismatchError

OUTER_MAGIC = 0x00414150
INNER_MAGIC = 0x00524150
INNER_SIGNATURE = struct.pack('<i', INNER_MAGIC)

OUTER_HEADER = struct.Struct('<iiiiiiq')
OUTER_ENTRY = struct.Struct('<iiii')
INT32 = struct.Struct('<i')
INNER_HEADER = struct.Struct('<iiii')

INNER_MAX_ENTRIES = 10240
INNER_NAME_SIZE = 32
INNER_NAME_ALIGNMENT = 16


@dataclass(frozen=True)
class OuterHeader:
    """Header of the PA metadata store."""
    magic: int
    reserved: int
    entry_count: int
    name_table_offset: int
    data_offset_table_offset: int
    unknown: int
    reserved2: int


@dataclass(frozen=True)
class OuterEntry:
    """One record of the PA entry table."""
    name_offset: int
    size: int
    unknown1: int
    unknown2: int


@dataclass(frozen=True)
class InnerHeader:
    """Header of a PAR buffer."""
    magic: int
    unknown1: int
    entry_count: int
    unknown2: int


def is_inner_archive(data: bytes) -> bool:
    """Return True when ``data`` starts with the PAR signature."""
    return len(data) >= 4 and data[:4] == INNER_SIGNATURE


def align(position: int, alignment: int = INNER_NAME_ALIGNMENT) -> int:
    """Round ``position`` up to the next multiple of ``alignment``."""
    return (position + alignment - 1) & ~(alignment - 1)


def read_outer_header(stream: BinaryIO) -> OuterHeader:
    """Read and validate the metadata store header.

    Raises:
        CorruptHeaderError: Header is truncated or the magic is wrong
    """
    stream.seek(0)
    raw = stream.read(OUTER_HEADER.size)
    if len(raw) < OUTER_HEADER.size:
        raise CorruptHeaderError(
            f"Metadata store too small for header ({len(raw)} bytes)",
            length=len(raw),
        )

    header = OuterHeader(*OUTER_HEADER.unpack(raw))
    if header.magic != OUTER_MAGIC:
        raise CorruptHeaderError(
            f"Invalid magic number in metadata store: 0x{header.magic & 0xFFFFFFFF:X}",
            magic=header.magic,
        )
    return header


def _read_records(stream: BinaryIO, offset: int, count: int, record: struct.Struct) -> List[tuple]:
    """Read up to ``count`` complete records; stops early at end of stream."""
    if count <= 0 or offset < 0:
        return []
    stream.seek(offset)
    raw = stream.read(count * record.size)
    complete = len(raw) // record.size
    return [record.unpack_from(raw, i * record.size) for i in range(complete)]


def read_outer_tables(stream: BinaryIO, header: OuterHeader) -> Tuple[List[OuterEntry], List[int]]:
    """Read the entry table and the parallel data offset table.

    Raises:
        StructuralMismatchError: Either table holds fewer records than the
            header announces
    """
    entries = [
        OuterEntry(*fields)
        for fields in _read_records(stream, header.name_table_offset, header.entry_count, OUTER_ENTRY)
    ]
    if len(entries) != header.entry_count:
        raise StructuralMismatchError(
            f"Entry table holds {len(entries)} record(s), header announces {header.entry_count}",
            expected=header.entry_count,
            actual=len(entries),
            table_offset=header.name_table_offset,
        )

    data_offsets = [
        fields[0]
        for fields in _read_records(stream, header.data_offset_table_offset, header.entry_count, INT32)
    ]
    if len(data_offsets) != len(entries):
        raise StructuralMismatchError(
            f"Offset table count ({len(data_offsets)}) does not match entry table count ({len(entries)})",
            expected=len(entries),
            actual=len(data_offsets),
            table_offset=header.data_offset_table_offset,
        )

    return entries, data_offsets
