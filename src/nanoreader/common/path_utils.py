"""Path utilities for consistent path handling across packages."""

import unicodedata
from pathlib import Path


def normalize_path(path: Path | str) -> str:
    """
    Normalize a path for consistent storage and comparison.

    Applies:
    - Unicode NFC normalization (canonical composition)
    - Forward slash conversion for cross-platform consistency

    Manifest paths go through this so a manifest written on Windows can be
    compared with one written on Linux.

    Args:
        path: Path object or string to normalize

    Returns:
        Normalized path string with forward slashes and NFC Unicode normalization

    Examples:
        >>> normalize_path(Path("sound/bgm.bin"))
        'sound/bgm.bin'
        >>> normalize_path(r"pa\\chara\\model.par")
        'pa/chara/model.par'
    """
    path_str = str(path)

    normalized = unicodedata.normalize('NFC', path_str)

    normalized = normalized.replace('\\', '/')

    return normalized


def relative_to_root(path: Path, root: Path) -> str:
    """
    Express an output path relative to an output root, normalized.

    Falls back to the normalized full path when ``path`` is not under ``root``.

    Args:
        path: File path on disk
        root: Output root directory

    Returns:
        Normalized relative path string
    """
    try:
        relative = Path(path).resolve().relative_to(Path(root).resolve())
    except ValueError:
        return normalize_path(path)
    return normalize_path(relative)
