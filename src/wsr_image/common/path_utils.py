"""Path utilities for consistent path handling across packages."""

import re
import unicodedata
from pathlib import Path, PurePosixPath, PureWindowsPath

# Drive-qualified (C:foo) or UNC (\\server) prefixes
_WINDOWS_ROOT = re.compile(r'^(?:[A-Za-z]:|\\\\|//)')


def normalize_path(path: Path | str) -> str:
    """
    Normalize a path for display and comparison.

    Applies Unicode NFC normalization and converts backslashes to forward
    slashes.

    Examples:
        >>> normalize_path(Path("café/résumé.jpg"))
        'café/résumé.jpg'
        >>> normalize_path(r"C:\\out\\pic1.jpg")
        'C:/out/pic1.jpg'
    """
    normalized = unicodedata.normalize('NFC', str(path))
    return normalized.replace('\\', '/')


def is_safe_relative_name(name: str) -> bool:
    """Check that a name can be joined below a directory without escaping it.

    Rejects empty names, absolute paths (POSIX or Windows), drive-qualified
    names and any name containing a ``..`` segment, whichever separator is
    used.

    Args:
        name: Relative file name, possibly with subdirectories

    Returns:
        True if the name stays below the directory it is joined to
    """
    if not name or '\x00' in name:
        return False
    if _WINDOWS_ROOT.match(name):
        return False
    if PurePosixPath(name).is_absolute() or PureWindowsPath(name).is_absolute():
        return False
    if name.startswith(('/', '\\')):
        return False

    parts = re.split(r'[\\/]', name)
    return '..' not in parts


def is_within_directory(base_dir: Path, candidate: Path) -> bool:
    """Check that ``candidate`` resolves to a location inside ``base_dir``.

    Symlinks are resolved on both sides.
    """
    base = base_dir.resolve()
    target = candidate.resolve()
    return target == base or base in target.parents
