"""CLI command for extracting PA archives."""

import logging
import argparse
from datetime import datetime
from pathlib import Path
import sys
from typing import List, Optional

from .extractor import NanoExtractor
from .config import NanoReaderConfig
from nanoreader.common import setup_logging, ConfigLoader

APP_NAME = "nanoreader"

USAGE_HINT = "Usage: run with -x flag for extraction (e.g., nanoreader -x)"


def debug_log_path(now: Optional[datetime] = None) -> Path:
    """Name of the per-run debug log, e.g. Debug_2024-05-01_13-45-10.txt."""
    timestamp = (now or datetime.now()).strftime("%Y-%m-%d_%H-%M-%S")
    return Path(f"Debug_{timestamp}.txt")


def extract_command(
    config: NanoReaderConfig,
    metadata_override: Optional[Path] = None,
    data_override: Optional[Path] = None,
    output_dir_override: Optional[Path] = None,
    manifest_override: Optional[Path] = None,
) -> int:
    """Extract a PA archive pair and write the manifest.

    Args:
        config: Configuration object
        metadata_override: Optional override for the metadata store path
        data_override: Optional override for the data store path
        output_dir_override: Optional override for the output directory
        manifest_override: Optional override for the manifest path

    Returns:
        Exit code (0 for success)
    """
    logger = logging.getLogger(__package__ or __name__)

    metadata_file = metadata_override or Path(config.extraction.metadata_file)
    data_file = data_override or Path(config.extraction.data_file)
    output_dir = output_dir_override or Path(config.extraction.output_dir)
    manifest_file = manifest_override or Path(config.extraction.manifest_file)

    logger.info(f"Metadata store: {metadata_file}")
    logger.info(f"Data store: {data_file}")
    logger.info(f"Output directory: {output_dir}")

    extractor = NanoExtractor(
        metadata_file=metadata_file,
        data_file=data_file,
        output_dir=output_dir,
        max_nesting_depth=config.extraction.max_nesting_depth,
    )
    result = extractor.run()

    if not result.succeeded:
        logger.error(f"Extraction failed: {result.error}")
        return 1

    try:
        result.manifest.save(manifest_file)
    except OSError as e:
        logger.error(f"Failed to write manifest {manifest_file}: {e}")
        return 1

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Extract PA game archives and nested PAR archives"
    )
    parser.add_argument(
        "-x", "--extract",
        action="store_true",
        help="Run the extraction"
    )
    parser.add_argument(
        "--metadata",
        type=Path,
        help="Metadata store, pa.bin (overrides config)"
    )
    parser.add_argument(
        "--data",
        type=Path,
        help="Data store, pa.arc (overrides config)"
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        help="Directory to extract to (overrides config)"
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        help="Manifest JSON path (overrides config)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the extract command."""
    args = build_parser().parse_args(argv)

    if not args.extract:
        print(USAGE_HINT)
        return 0

    loader = ConfigLoader(app_name=APP_NAME, config_class=NanoReaderConfig)
    config = loader.load(defaults_path=args.config)

    log_file = None
    if config.logging.file:
        log_file = Path(config.logging.file)
    elif config.extraction.write_debug_log:
        log_file = debug_log_path()

    setup_logging(
        level=config.logging.level,
        format=config.logging.format,
        log_file=log_file,
        file_format=config.logging.file_format,
    )

    return extract_command(
        config=config,
        metadata_override=args.metadata,
        data_override=args.data,
        output_dir_override=args.output_dir,
        manifest_override=args.manifest,
    )


if __name__ == "__main__":
    sys.exit(main())
