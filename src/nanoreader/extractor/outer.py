"""PA container extraction (metadata store + data store)."""

import logging
from pathlib import Path
from typing import BinaryIO, List, Optional

from .compression import decode
from .errors import EmptyNameError, EntryError, InvalidEntryError
from .inner import InnerArchiveReader
from .layout import OuterEntry, is_inner_archive, read_outer_header, read_outer_tables
from .manifest import ExtractedEntry, ManifestSection
from .names import read_cstring, resolve_output_path

logger = logging.getLogger(__name__)


class OuterArchiveReader:
    """Extracts the entries of a PA container and the PAR archives among them."""

    def __init__(self, output_root: Path, inner_reader: Optional[InnerArchiveReader] = None):
        """Initialize the reader.

        Args:
            output_root: Directory to extract to (created on first write)
            inner_reader: Reader used for PAR archives found among the entries
        """
        self.output_root = Path(output_root)
        self.inner_reader = inner_reader or InnerArchiveReader(self.output_root)

    def extract(self, metadata: BinaryIO, data: BinaryIO, section: ManifestSection) -> List[ExtractedEntry]:
        """Extract every entry of the container.

        Header and both tables are validated before anything is written, so a
        run-level failure leaves the output directory untouched.

        Args:
            metadata: Metadata store (pa.bin), seekable
            data: Data store (pa.arc), seekable
            section: Manifest section for the container's entries

        Returns:
            Entries written, in table order

        Raises:
            CorruptHeaderError: Header is truncated or has the wrong magic
            StructuralMismatchError: Tables do not match the header count
        """
        header = read_outer_header(metadata)
        logger.info(
            f"Magic verified: 0x{header.magic:X}, {header.entry_count} entries, "
            f"entry table at 0x{header.name_table_offset:X}, "
            f"offset table at 0x{header.data_offset_table_offset:X}"
        )
        logger.debug(f"Unknown header field: 0x{header.unknown & 0xFFFFFFFF:X}")

        entries, data_offsets = read_outer_tables(metadata, header)

        if not self.output_root.exists():
            self.output_root.mkdir(parents=True)
            logger.info(f"Created output folder: {self.output_root}")

        extracted: List[ExtractedEntry] = []
        for index, (entry, data_offset) in enumerate(zip(entries, data_offsets)):
            try:
                extracted.append(self._extract_entry(metadata, data, index, entry, data_offset, section))
            except EntryError as e:
                logger.warning(
                    f"Skipping entry {index + 1}: {e.message}",
                    extra={"extra_fields": {"entry": index + 1, "data_offset": data_offset,
                                            "size": entry.size, **e.context}},
                )
            except OSError as e:
                logger.error(f"Failed to write entry {index + 1}: {e}")

        logger.info(f"Extracted {len(extracted)}/{len(entries)} entries")
        return extracted

    def extract_nested(self, extracted: List[ExtractedEntry], section: ManifestSection) -> int:
        """Re-read written entries and extract those that are PAR archives.

        Args:
            extracted: Entries returned by ``extract``
            section: Manifest section for PAR contents

        Returns:
            Number of PAR archives found
        """
        found = 0
        for entry in extracted:
            try:
                data = entry.output_path.read_bytes()
            except OSError as e:
                logger.error(f"Failed to read file for PAR check {entry.output_path}: {e}")
                continue

            if not is_inner_archive(data):
                continue

            found += 1
            logger.info(f"Detected PAR archive in {entry.output_path}, extracting subfiles")
            self.inner_reader.extract(data, entry.output_path, section, depth=1)

        return found

    def _extract_entry(
        self,
        metadata: BinaryIO,
        data: BinaryIO,
        index: int,
        entry: OuterEntry,
        data_offset: int,
        section: ManifestSection,
    ) -> ExtractedEntry:
        """Read, decode and write one entry."""
        logger.debug(
            f"Processing entry {index + 1}: name offset 0x{entry.name_offset:X}, size {entry.size}, "
            f"data offset 0x{data_offset:X}, unknown 0x{entry.unknown1 & 0xFFFFFFFF:X}/"
            f"0x{entry.unknown2 & 0xFFFFFFFF:X}"
        )

        name = read_cstring(metadata, entry.name_offset)
        if not name:
            raise EmptyNameError(f"Empty file name for entry {index + 1}", name_offset=entry.name_offset)

        # Validate the name before touching the data store
        resolve_output_path(self.output_root, name)

        if entry.size < 0 or data_offset < 0:
            raise InvalidEntryError(f"Invalid size or data offset for {name}", name=name)

        data.seek(data_offset)
        raw = data.read(entry.size)
        if len(raw) != entry.size:
            logger.warning(
                f"Read data size mismatch for {name}. Expected: {entry.size}, Read: {len(raw)}",
                extra={"extra_fields": {"entry": index + 1, "data_offset": data_offset,
                                        "expected": entry.size, "actual": len(raw)}},
            )

        result = decode(raw, name)

        output_path = resolve_output_path(self.output_root, result.name)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(result.data)

        extracted = section.add(output_path, result.still_compressed)
        logger.info(f"Extracted file [{section.name} #{extracted.index}]: {extracted.path}")
        return extracted
