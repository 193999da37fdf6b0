"""High-level extraction run for one PA metadata/data store pair."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from nanoreader.common import LogContext

from .errors import MissingInputError, RunAbortedError
from .inner import DEFAULT_MAX_DEPTH, InnerArchiveReader
from .manifest import ExtractedEntry, Manifest
from .outer import OuterArchiveReader

logger = logging.getLogger(__name__)


@dataclass
class ExtractionResult:
    """Outcome of one extraction run."""
    manifest: Manifest
    extracted: List[ExtractedEntry] = field(default_factory=list)
    error: Optional[Exception] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def check_inputs(metadata_file: Path, data_file: Path) -> None:
    """Fail fast when an input file is missing.

    Raises:
        MissingInputError: Either file does not exist
    """
    for label, path in (("metadata", metadata_file), ("data", data_file)):
        if not Path(path).is_file():
            raise MissingInputError(f"{path} file is missing", kind=label, path=str(path))


class NanoExtractor:
    """Extracts a PA container and every PAR archive nested inside it."""

    def __init__(
        self,
        metadata_file: Path,
        data_file: Path,
        output_dir: Path,
        max_nesting_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """Initialize the extractor.

        Args:
            metadata_file: Path to the metadata store (pa.bin)
            data_file: Path to the data store (pa.arc)
            output_dir: Directory to extract to
            max_nesting_depth: Deepest PAR nesting level that is extracted
        """
        self.metadata_file = Path(metadata_file)
        self.data_file = Path(data_file)
        self.output_dir = Path(output_dir)
        self.outer_reader = OuterArchiveReader(
            self.output_dir,
            InnerArchiveReader(self.output_dir, max_depth=max_nesting_depth),
        )

    def run(self) -> ExtractionResult:
        """Run the extraction.

        Never raises: run-level failures are logged and returned in
        ``ExtractionResult.error`` together with an empty manifest.

        Returns:
            ExtractionResult with the manifest of everything written
        """
        manifest = Manifest(self.output_dir)

        with LogContext(logger, metadata_file=str(self.metadata_file), data_file=str(self.data_file)):
            logger.info("Starting extraction process")
            try:
                check_inputs(self.metadata_file, self.data_file)

                with open(self.metadata_file, 'rb') as metadata, open(self.data_file, 'rb') as data:
                    extracted = self.outer_reader.extract(metadata, data, manifest.outer)

                archives = self.outer_reader.extract_nested(extracted, manifest.inner)

            except RunAbortedError as e:
                logger.error(
                    f"Extraction aborted: {e.message}",
                    extra={"extra_fields": dict(e.context)},
                )
                return ExtractionResult(manifest=Manifest(self.output_dir), error=e)
            except Exception as e:
                logger.exception(f"Extraction failed: {e}")
                return ExtractionResult(manifest=manifest, error=e)

            logger.info(
                f"Extraction completed: {len(manifest.outer)} file(s), "
                f"{archives} PAR archive(s), {len(manifest.inner)} sub file(s)"
            )
            return ExtractionResult(manifest=manifest, extracted=extracted)
