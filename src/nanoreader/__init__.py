"""Extractor for PA game-data archives and nested PAR sub-archives."""

__version__ = "0.1.0"
