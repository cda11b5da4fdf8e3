"""Human-readable formatting helpers."""

_UNITS = ("KB", "MB", "GB", "TB", "PB", "EB")


def format_size(size_bytes: int) -> str:
    """Format a byte count with decimal (1000-based) units.

    The unit is picked from the exact value, before rounding, so 999_999
    bytes shows as "1000.0 KB" rather than "1.0 MB".

    Args:
        size_bytes: Number of bytes

    Returns:
        Formatted string (e.g., "5 B", "1.5 KB", "2.3 MB")
    """
    if size_bytes < 1000:
        return f"{size_bytes} B"

    value = size_bytes / 1000
    index = 0
    while value >= 1000 and index < len(_UNITS) - 1:
        value /= 1000
        index += 1

    return f"{value:.1f} {_UNITS[index]}"
