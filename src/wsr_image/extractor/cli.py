"""CLI command for extracting JPEG images from an MHTML archive."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import WsrImageConfig
from .errors import InputReadError
from .runner import ImageExtractor
from .summary import format_preview_lines, format_summary_human_readable
from wsr_image.common import ConfigLoader, ConfigurationError, setup_logging

# Application name derived from the top-level package name
_package = __package__ or "wsr_image.extractor"
APP_NAME = _package.split('.')[0].replace('_', '-')


class UsageErrorParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors on stderr with exit code 1."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def progress_callback(logger: logging.Logger, current: int, total: int, name: str) -> None:
    """Log materialization progress.

    Args:
        logger: Logger instance
        current: Current image number (1-based)
        total: Total number of images
        name: Name of current image
    """
    if current > total:
        logger.info(f"Processing complete: {total} image(s)")
    else:
        percent = (current / total) * 100 if total > 0 else 0
        logger.debug(f"Processing image {current}/{total} ({percent:.1f}%): {name}")


def extract_command(
    config: WsrImageConfig,
    input_path: Path,
    output_dir: Path,
    preview_override: Optional[bool] = None,
    verify_override: Optional[bool] = None
) -> int:
    """Extract images from one archive.

    Args:
        config: Configuration object
        input_path: MHTML archive to scan
        output_dir: Directory to write images to
        preview_override: Optional override for preview mode
        verify_override: Optional override for written-file verification

    Returns:
        Exit code (0 for success, 1 if the run or any image failed)
    """
    logger_name = __package__ or __name__
    logger = logging.getLogger(logger_name)

    preview = preview_override if preview_override is not None else config.extraction.preview
    verify = verify_override if verify_override is not None else config.extraction.verify_written_files

    logger.info(
        f"Run options: {{'input_path': {str(input_path)!r}, 'output_dir': {str(output_dir)!r}, "
        f"'preview': {preview}, 'verify': {verify}}}"
    )

    if not input_path.is_file():
        logger.error(f"Input file does not exist: {input_path}")
        return 1

    if not preview and not output_dir.is_dir():
        logger.error(f"Output directory does not exist: {output_dir}")
        return 1

    extractor = ImageExtractor(
        input_path=input_path,
        output_dir=output_dir,
        preview=preview,
        verify_written_files=verify,
        encoding=config.extraction.encoding,
        encoding_errors=config.extraction.encoding_errors,
    )

    try:
        summary = extractor.run(
            progress_callback=lambda c, t, n: progress_callback(logger, c, t, n)
        )
    except InputReadError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.exception(f"Extraction failed: {e}")
        return 1

    if preview and summary.results:
        print(format_preview_lines(summary))
    print(format_summary_human_readable(summary))

    if not summary.stats.images_found:
        logger.warning("No base64 JPEG images found")

    return 0 if summary.succeeded else 1


def build_parser() -> argparse.ArgumentParser:
    parser = UsageErrorParser(
        prog=APP_NAME,
        description="Extract base64-encoded JPEG images from an MHTML web archive"
    )
    parser.add_argument(
        "input_path",
        type=Path,
        help="MHTML archive to scan (e.g. a Steps Recorder .mht file)"
    )
    parser.add_argument(
        "output_dir",
        type=Path,
        help="Directory to write images to"
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Report what would be written, with sizes, without writing anything"
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Re-read each written file and compare size and CRC32"
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config file (defaults.toml)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level (overrides config)"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the extract command."""
    args = build_parser().parse_args(argv)

    loader = ConfigLoader(app_name=APP_NAME, config_class=WsrImageConfig)
    try:
        config = loader.load(defaults_path=args.config)
    except ConfigurationError as e:
        print(f"{APP_NAME}: {e}", file=sys.stderr)
        return 1

    setup_logging(
        level=args.log_level or config.logging.level,
        format=config.logging.format,
        log_file=config.logging.file_path,
        max_file_size_mb=config.logging.max_file_size_mb,
        backup_count=config.logging.backup_count,
    )

    return extract_command(
        config=config,
        input_path=args.input_path,
        output_dir=args.output_dir,
        preview_override=True if args.preview else None,
        verify_override=True if args.verify else None,
    )


if __name__ == "__main__":
    sys.exit(main())
