"""Manifest of extracted files, grouped by archive kind."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from nanoreader.common import relative_to_root

logger = logging.getLogger(__name__)

OUTER_SECTION = "outer"
INNER_SECTION = "inner"


@dataclass(frozen=True)
class ExtractedEntry:
    """A file written to disk by the extractor."""
    index: int  # 1-based sequence number within its section
    output_path: Path
    path: str  # Relative to the output root, forward slashes
    is_compressed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {"path": self.path, "is_compressed": self.is_compressed}


@dataclass
class ManifestSection:
    """Ordered entries of one section plus the running sequence counter.

    One section object is threaded through every recursive PAR extraction
    so numbering continues across nesting depth.
    """
    name: str
    root: Path
    entries: Dict[int, ExtractedEntry] = field(default_factory=dict)
    next_index: int = 1

    def add(self, output_path: Path, is_compressed: bool) -> ExtractedEntry:
        """Record a written file under the next sequence number."""
        entry = ExtractedEntry(
            index=self.next_index,
            output_path=Path(output_path),
            path=relative_to_root(output_path, self.root),
            is_compressed=is_compressed,
        )
        self.entries[entry.index] = entry
        self.next_index += 1
        return entry

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {str(index): entry.to_dict() for index, entry in self.entries.items()}


class Manifest:
    """Structured report of one extraction run."""

    def __init__(self, root: Path, section_names: Optional[List[str]] = None) -> None:
        self.root = Path(root)
        names = section_names or [OUTER_SECTION, INNER_SECTION]
        self.sections: Dict[str, ManifestSection] = {
            name: ManifestSection(name=name, root=self.root) for name in names
        }

    @property
    def outer(self) -> ManifestSection:
        return self.sections[OUTER_SECTION]

    @property
    def inner(self) -> ManifestSection:
        return self.sections[INNER_SECTION]

    def is_empty(self) -> bool:
        return all(len(section) == 0 for section in self.sections.values())

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        """Return the JSON-ready manifest ``{section: {index: entry}}``."""
        return {name: section.to_dict() for name, section in self.sections.items()}

    def save(self, manifest_file: Path) -> None:
        """Write the manifest as indented JSON."""
        manifest_file = Path(manifest_file)
        manifest_file.parent.mkdir(parents=True, exist_ok=True)

        with open(manifest_file, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

        logger.info(f"Generated manifest file: {manifest_file}")
