"""Extraction-specific errors."""

from wsr_image.common import WsrImageError


class ScanError(WsrImageError):
    """Input scanning failed."""
    pass


class InputReadError(ScanError):
    """Input file could not be opened or read."""
    pass


class DecodeError(WsrImageError):
    """A single extracted image could not be materialized."""
    pass


class InvalidEncodingError(DecodeError):
    """Image payload is not valid base64."""
    pass


class OutputWriteError(DecodeError):
    """Output file could not be created or written."""
    pass


class UnsafeImageNameError(DecodeError):
    """Image name would place the output outside the output directory."""
    pass


class VerificationError(DecodeError):
    """Written file does not match the decoded image."""
    pass


def classify_error(exception: Exception) -> str:
    """
    Classify an exception into an error category.

    Args:
        exception: The exception to classify

    Returns:
        Error category string: 'encoding', 'unsafe_name', 'verification',
        'permission', 'io', 'input', or 'unknown'
    """
    if isinstance(exception, InvalidEncodingError):
        return 'encoding'
    elif isinstance(exception, UnsafeImageNameError):
        return 'unsafe_name'
    elif isinstance(exception, VerificationError):
        return 'verification'
    elif isinstance(exception, OutputWriteError):
        if isinstance(exception.__cause__, PermissionError):
            return 'permission'
        return 'io'
    elif isinstance(exception, InputReadError):
        return 'input'
    elif isinstance(exception, PermissionError):
        return 'permission'
    elif isinstance(exception, OSError):
        return 'io'
    else:
        return 'unknown'
