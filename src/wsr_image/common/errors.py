"""Base error definitions for wsr_image packages."""

from typing import Any, Dict


class WsrImageError(Exception):
    """Base exception for all wsr_image errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context


class ConfigurationError(WsrImageError):
    """Configuration file is unreadable or invalid."""
    pass
