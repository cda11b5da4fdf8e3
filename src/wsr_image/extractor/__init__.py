"""Base64 JPEG extraction from MHTML web archives."""

from .config import ExtractionConfig, WsrImageConfig
from .decoder import MaterializeResult, materialize
from .runner import ExtractionSummary, ImageExtractor
from .scanner import (
    ExtractedImage,
    ScanDiagnostic,
    ScanPhase,
    ScanState,
    ScanStats,
    extract,
    extract_file,
    iter_images,
    step,
)

__all__ = [
    'ExtractionConfig',
    'WsrImageConfig',
    'MaterializeResult',
    'materialize',
    'ExtractionSummary',
    'ImageExtractor',
    'ExtractedImage',
    'ScanDiagnostic',
    'ScanPhase',
    'ScanState',
    'ScanStats',
    'extract',
    'extract_file',
    'iter_images',
    'step',
]
