"""High-level extraction run: scan an archive, then materialize every image."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional

from wsr_image.common import LogContext
from .decoder import MaterializeResult, materialize
from .errors import DecodeError, classify_error
from .scanner import ScanDiagnostic, ScanStats, extract_file

logger = logging.getLogger(__name__)


@dataclass
class FailedImage:
    """An image that was found but could not be materialized."""
    name: str
    category: str
    message: str


@dataclass
class ExtractionSummary:
    """Per-run results."""
    input_path: Path
    output_dir: Path
    preview: bool
    stats: ScanStats = field(default_factory=ScanStats)
    diagnostics: List[ScanDiagnostic] = field(default_factory=list)
    results: List[MaterializeResult] = field(default_factory=list)
    failures: List[FailedImage] = field(default_factory=list)

    @property
    def total_bytes(self) -> int:
        return sum(r.size for r in self.results)

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def failures_by_category(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for failure in self.failures:
            counts[failure.category] = counts.get(failure.category, 0) + 1
        return counts

    def to_dict(self) -> dict:
        return {
            "input_path": str(self.input_path),
            "output_dir": str(self.output_dir),
            "preview": self.preview,
            "lines_read": self.stats.lines_read,
            "parts_started": self.stats.parts_started,
            "images_found": self.stats.images_found,
            "parts_skipped": self.stats.parts_skipped,
            "parts_truncated": self.stats.parts_truncated,
            "images_written": 0 if self.preview else len(self.results),
            "images_previewed": len(self.results) if self.preview else 0,
            "images_failed": len(self.failures),
            "failures_by_category": self.failures_by_category(),
            "total_bytes": self.total_bytes,
        }


class ImageExtractor:
    """Extracts base64 JPEG parts from one archive into an output directory."""

    def __init__(
        self,
        input_path: Path,
        output_dir: Path,
        preview: bool = False,
        verify_written_files: bool = False,
        encoding: str = "utf-8",
        encoding_errors: str = "replace",
    ):
        """Initialize image extractor.

        Args:
            input_path: MHTML archive to scan
            output_dir: Directory to write images to (must exist unless previewing)
            preview: Report what would be written without writing
            verify_written_files: Re-read written files and compare CRC32
            encoding: Text encoding of the archive
            encoding_errors: Decoding error handler for the archive
        """
        self.input_path = Path(input_path)
        self.output_dir = Path(output_dir)
        self.preview = preview
        self.verify_written_files = verify_written_files
        self.encoding = encoding
        self.encoding_errors = encoding_errors

    def run(
        self,
        progress_callback: Optional[Callable[[int, int, str], None]] = None
    ) -> ExtractionSummary:
        """Scan the archive and materialize every image found.

        Per-image failures are recorded in the summary and do not stop the
        run.

        Args:
            progress_callback: Optional callback(current, total, image_name),
                current is 1-based; a final call with current > total marks
                completion

        Returns:
            ExtractionSummary for the run

        Raises:
            InputReadError: If the archive cannot be read
        """
        summary = ExtractionSummary(
            input_path=self.input_path,
            output_dir=self.output_dir,
            preview=self.preview,
        )

        with LogContext(logger, input_file=str(self.input_path)):
            images = extract_file(
                self.input_path,
                encoding=self.encoding,
                errors=self.encoding_errors,
                on_diagnostic=summary.diagnostics.append,
                stats=summary.stats,
            )

            total = len(images)
            for i, image in enumerate(images, start=1):
                if progress_callback:
                    progress_callback(i, total, image.name)

                try:
                    result = materialize(
                        image,
                        self.output_dir,
                        preview=self.preview,
                        verify=self.verify_written_files,
                    )
                except DecodeError as e:
                    category = classify_error(e)
                    logger.error(f"Failed to materialize {image.name!r} ({category}): {e}")
                    summary.failures.append(FailedImage(image.name, category, str(e)))
                    continue

                summary.results.append(result)

            if progress_callback:
                progress_callback(total + 1, total, "Complete")

        logger.info(
            f"Extraction complete: {len(summary.results)} succeeded, "
            f"{len(summary.failures)} failed, {summary.stats.parts_skipped} part(s) skipped"
        )
        return summary
