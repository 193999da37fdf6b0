"""PA container and PAR sub-archive extraction."""

from .compression import DecodeResult, decode
from .extractor import ExtractionResult, NanoExtractor, check_inputs
from .inner import InnerArchive, InnerArchiveReader, parse_inner_archive, reconstruct_sizes
from .manifest import ExtractedEntry, Manifest, ManifestSection
from .outer import OuterArchiveReader

__all__ = [
    'DecodeResult',
    'decode',
    'ExtractionResult',
    'NanoExtractor',
    'check_inputs',
    'InnerArchive',
    'InnerArchiveReader',
    'parse_inner_archive',
    'reconstruct_sizes',
    'ExtractedEntry',
    'Manifest',
    'ManifestSection',
    'OuterArchiveReader',
]
