"""Decode extracted images and write them to the output directory."""

import base64
import binascii
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from wsr_image.common import (
    compute_crc32,
    compute_crc32_bytes,
    format_size,
    is_safe_relative_name,
    is_within_directory,
)
from .errors import (
    InvalidEncodingError,
    OutputWriteError,
    UnsafeImageNameError,
    VerificationError,
)
from .scanner import ExtractedImage

logger = logging.getLogger(__name__)

# Mode a plain open(path, "wb") would give; mkstemp always creates 0600
_UMASK = os.umask(0)
os.umask(_UMASK)
NEW_FILE_MODE = 0o666 & ~_UMASK


@dataclass(frozen=True)
class MaterializeResult:
    """Outcome of a successful write or preview."""
    image_name: str
    path: Path
    size: int  # Decoded byte count
    preview: bool
    crc32: Optional[int] = None

    def __str__(self) -> str:
        action = "would write" if self.preview else "wrote"
        return f"{action} {self.path} ({format_size(self.size)})"


def decode_payload(data: bytes, name: str = "") -> bytes:
    """Decode standard padded base64, rejecting non-alphabet characters.

    Raises:
        InvalidEncodingError: If ``data`` is not valid base64
    """
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidEncodingError(
            f"Invalid base64 data for {name or 'image'}: {e}",
            image_name=name,
            encoded_size=len(data),
        ) from e


def resolve_output_path(output_root: Path, name: str) -> Path:
    """Join an image name below the output root.

    Raises:
        UnsafeImageNameError: If the name is empty, absolute, contains a
            ``..`` segment, or resolves to ``output_root`` itself or a
            location outside it
    """
    if not is_safe_relative_name(name):
        raise UnsafeImageNameError(f"Refusing unsafe image name: {name!r}", image_name=name)

    target = output_root / name
    if not is_within_directory(output_root, target):
        raise UnsafeImageNameError(
            f"Image name {name!r} resolves outside {output_root}", image_name=name
        )
    if target.resolve() == output_root.resolve():
        raise UnsafeImageNameError(
            f"Image name {name!r} does not name a file below {output_root}", image_name=name
        )
    return target


def _write_atomically(target: Path, data: bytes) -> None:
    """Write to a temporary sibling file, then replace the target."""
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".partial", dir=target.parent)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(temp_name, NEW_FILE_MODE)
        os.replace(temp_name, target)
    except BaseException:
        try:
            os.unlink(temp_name)
        except FileNotFoundError:
            pass
        raise


def _verify_written_file(target: Path, expected_size: int, expected_crc32: int) -> None:
    try:
        actual_size = target.stat().st_size
        actual_crc32 = compute_crc32(target)
    except OSError as e:
        raise VerificationError(f"Cannot re-read {target}: {e}", path=str(target)) from e

    if actual_size != expected_size:
        raise VerificationError(
            f"Size mismatch for {target}: expected {expected_size}, got {actual_size}",
            path=str(target),
        )
    if actual_crc32 != expected_crc32:
        raise VerificationError(
            f"CRC32 mismatch for {target}: "
            f"expected {expected_crc32:08X}, got {actual_crc32:08X}",
            path=str(target),
        )


def materialize(
    image: ExtractedImage,
    output_root: Path,
    preview: bool = False,
    verify: bool = False,
) -> MaterializeResult:
    """Decode one image and write it, or report what would be written.

    Args:
        image: Extracted image with base64 payload
        output_root: Directory the image name is joined to
        preview: If True, nothing is written
        verify: Re-read the written file and compare size and CRC32

    Returns:
        MaterializeResult with output path and decoded size

    Raises:
        UnsafeImageNameError: If the image name escapes ``output_root``
        InvalidEncodingError: If the payload is not valid base64
        OutputWriteError: If the output file cannot be created or written
        VerificationError: If verification is enabled and fails
    """
    output_root = Path(output_root)
    target = resolve_output_path(output_root, image.name)
    decoded = decode_payload(image.data, image.name)
    crc32 = compute_crc32_bytes(decoded)

    if preview:
        result = MaterializeResult(image.name, target, len(decoded), preview=True, crc32=crc32)
        logger.info(f"Preview: {result}")
        return result

    try:
        _write_atomically(target, decoded)
    except OSError as e:
        raise OutputWriteError(
            f"Couldn't write {target}: {e}", path=str(target), image_name=image.name
        ) from e

    if verify:
        _verify_written_file(target, len(decoded), crc32)
        logger.debug(f"Verified {target} (crc32={crc32:08X})")

    result = MaterializeResult(image.name, target, len(decoded), preview=False, crc32=crc32)
    logger.info(f"Successfully wrote {target} ({format_size(len(decoded))})")
    return result
