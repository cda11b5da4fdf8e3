"""Common utilities for wsr-image packages."""

from .config import ConfigLoader
from .logging import setup_logging, LogContext
from .logging_config import LoggingConfig
from .errors import WsrImageError, ConfigurationError
from .path_utils import normalize_path, is_safe_relative_name, is_within_directory
from .checksums import compute_crc32, compute_crc32_bytes
from .formatting import format_size

__all__ = [
    'ConfigLoader',
    'LoggingConfig',
    'setup_logging',
    'LogContext',
    'WsrImageError',
    'ConfigurationError',
    'normalize_path',
    'is_safe_relative_name',
    'is_within_directory',
    'compute_crc32',
    'compute_crc32_bytes',
    'format_size',
]
