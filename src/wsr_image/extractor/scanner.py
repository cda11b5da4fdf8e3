"""Line-oriented scanner for base64 JPEG parts in MHTML archives.

A part is recognized by this exact sequence of lines::

    Content-Type: image/jpeg
    Content-Transfer-Encoding: base64
    Content-Location: <name>
    <empty line>
    <base64 payload lines ...>
    <empty line>

Any deviation in the header sequence drops the part being parsed and the
scan resumes looking for the next ``Content-Type: image/jpeg`` line.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from .errors import InputReadError

logger = logging.getLogger(__name__)

CONTENT_TYPE_JPEG_LINE = "Content-Type: image/jpeg"
BASE64_ENCODING_LINE = "Content-Transfer-Encoding: base64"
IMAGE_NAME_PREFIX = "Content-Location: "


class ScanPhase(Enum):
    """Position of the scanner within a single part."""
    LOOKING_FOR_IMAGE_PART = "looking_for_image_part"
    VERIFYING_BASE64_ENCODING = "verifying_base64_encoding"
    LOOKING_FOR_IMAGE_NAME = "looking_for_image_name"
    AWAITING_PAYLOAD_START = "awaiting_payload_start"
    READING_PAYLOAD = "reading_payload"


class DiagnosticKind(Enum):
    """Reasons a part is dropped."""
    NON_BASE64_ENTRY = "non_base64_entry"
    MISSING_IMAGE_NAME = "missing_image_name"
    EXPECTED_EMPTY_LINE = "expected_empty_line"


_DIAGNOSTIC_MESSAGES = {
    DiagnosticKind.NON_BASE64_ENTRY: "Skipping non-base64 image entry",
    DiagnosticKind.MISSING_IMAGE_NAME: "Missing image name",
    DiagnosticKind.EXPECTED_EMPTY_LINE: "Expected empty line before image data",
}


@dataclass
class ScanState:
    """Working record for the part currently being parsed."""
    name: str = ""
    payload: bytearray = field(default_factory=bytearray)
    phase: ScanPhase = ScanPhase.LOOKING_FOR_IMAGE_PART


@dataclass(frozen=True)
class ExtractedImage:
    """A completed part: image name plus its still-encoded payload."""
    name: str
    data: bytes
    line_number: int = 0  # Line of the terminating blank line

    def __str__(self) -> str:
        return f"{self.name} ({len(self.data)} encoded bytes)"


@dataclass(frozen=True)
class ScanDiagnostic:
    """A part dropped because a header line did not match."""
    kind: DiagnosticKind
    line_number: int
    line: str

    @property
    def message(self) -> str:
        return _DIAGNOSTIC_MESSAGES[self.kind]

    def __str__(self) -> str:
        return f"{self.message} (line {self.line_number}): {self.line!r}"


@dataclass(frozen=True)
class StepResult:
    """Outcome of feeding one line to the state machine."""
    state: ScanState
    image: Optional[ExtractedImage] = None
    diagnostic: Optional[ScanDiagnostic] = None


@dataclass
class ScanStats:
    """Counters collected during a scan."""
    lines_read: int = 0
    parts_started: int = 0
    images_found: int = 0
    parts_skipped: int = 0
    parts_truncated: int = 0


def strip_line_terminator(line: str) -> str:
    """Remove one trailing ``\\n`` and then one trailing ``\\r``.

    Other trailing whitespace is significant and kept.
    """
    if line.endswith("\n"):
        line = line[:-1]
    if line.endswith("\r"):
        line = line[:-1]
    return line


def _reset(kind: DiagnosticKind, line_number: int, line: str) -> StepResult:
    return StepResult(
        state=ScanState(),
        diagnostic=ScanDiagnostic(kind=kind, line_number=line_number, line=line),
    )


def step(state: ScanState, line: str, line_number: int = 0) -> StepResult:
    """Advance the state machine by one line.

    ``line`` must already have its terminator removed. Resets and emissions
    return a fresh ``ScanState``; while reading payload the line is appended
    to ``state.payload`` and the same state is returned, so callers must
    always continue with ``result.state``.

    Args:
        state: Current scan state
        line: Input line without line terminator
        line_number: 1-based line number, used in diagnostics

    Returns:
        StepResult with the next state, and an emitted image or diagnostic
    """
    phase = state.phase

    if phase is ScanPhase.LOOKING_FOR_IMAGE_PART:
        if line == CONTENT_TYPE_JPEG_LINE:
            return StepResult(state=ScanState(phase=ScanPhase.VERIFYING_BASE64_ENCODING))
        return StepResult(state=state)

    if phase is ScanPhase.VERIFYING_BASE64_ENCODING:
        if line == BASE64_ENCODING_LINE:
            return StepResult(state=ScanState(phase=ScanPhase.LOOKING_FOR_IMAGE_NAME))
        return _reset(DiagnosticKind.NON_BASE64_ENTRY, line_number, line)

    if phase is ScanPhase.LOOKING_FOR_IMAGE_NAME:
        if line.startswith(IMAGE_NAME_PREFIX):
            return StepResult(state=ScanState(
                name=line[len(IMAGE_NAME_PREFIX):],
                phase=ScanPhase.AWAITING_PAYLOAD_START,
            ))
        return _reset(DiagnosticKind.MISSING_IMAGE_NAME, line_number, line)

    if phase is ScanPhase.AWAITING_PAYLOAD_START:
        if not line:
            return StepResult(state=ScanState(name=state.name, phase=ScanPhase.READING_PAYLOAD))
        return _reset(DiagnosticKind.EXPECTED_EMPTY_LINE, line_number, line)

    # READING_PAYLOAD
    if not line:
        image = ExtractedImage(name=state.name, data=bytes(state.payload), line_number=line_number)
        return StepResult(state=ScanState(), image=image)

    state.payload.extend(line.encode("utf-8", errors="surrogateescape"))
    return StepResult(state=state)


def iter_images(
    lines: Iterable[str],
    on_diagnostic: Optional[Callable[[ScanDiagnostic], None]] = None,
    stats: Optional[ScanStats] = None,
) -> Iterator[ExtractedImage]:
    """Yield images in the order their terminating blank line is read.

    Args:
        lines: Line source (open text file, list of strings, ...); line
            terminators are stripped here
        on_diagnostic: Optional callback for every dropped part
        stats: Optional counters to fill in while scanning

    Yields:
        Completed images, payload still base64-encoded
    """
    if stats is None:
        stats = ScanStats()

    state = ScanState()
    line_number = 0

    for line_number, raw_line in enumerate(lines, start=1):
        previous_phase = state.phase
        result = step(state, strip_line_terminator(raw_line), line_number)
        state = result.state

        if (previous_phase is ScanPhase.LOOKING_FOR_IMAGE_PART
                and state.phase is ScanPhase.VERIFYING_BASE64_ENCODING):
            stats.parts_started += 1

        if result.diagnostic is not None:
            stats.parts_skipped += 1
            logger.warning(str(result.diagnostic))
            if on_diagnostic:
                on_diagnostic(result.diagnostic)

        if result.image is not None:
            stats.images_found += 1
            logger.debug(f"Found image: {result.image} at line {line_number}")
            yield result.image

    stats.lines_read = line_number

    if state.phase is not ScanPhase.LOOKING_FOR_IMAGE_PART:
        stats.parts_truncated += 1
        logger.debug(
            f"Input ended inside an image part, discarding it: "
            f"{{'phase': {state.phase.value!r}, 'name': {state.name!r}}}"
        )


def extract(
    lines: Iterable[str],
    on_diagnostic: Optional[Callable[[ScanDiagnostic], None]] = None,
    stats: Optional[ScanStats] = None,
) -> List[ExtractedImage]:
    """Scan a whole line source and return every completed image."""
    return list(iter_images(lines, on_diagnostic=on_diagnostic, stats=stats))


def extract_file(
    file_path: Path,
    encoding: str = "utf-8",
    errors: str = "replace",
    on_diagnostic: Optional[Callable[[ScanDiagnostic], None]] = None,
    stats: Optional[ScanStats] = None,
) -> List[ExtractedImage]:
    """Scan an archive file and return every completed image.

    Lines are split on ``\\n`` only; a ``\\r`` before it is dropped by the
    scanner.

    Args:
        file_path: Path to the MHTML archive
        encoding: Text encoding of the archive
        errors: Decoding error handler (strict, replace, surrogateescape)
        on_diagnostic: Optional callback for every dropped part
        stats: Optional counters to fill in while scanning

    Returns:
        Completed images in file order

    Raises:
        InputReadError: If the file cannot be opened or read
    """
    file_path = Path(file_path)
    logger.info(f"Scanning {file_path}")

    try:
        with open(file_path, "r", encoding=encoding, errors=errors, newline="\n") as f:
            images = extract(f, on_diagnostic=on_diagnostic, stats=stats)
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(f"Cannot read input file {file_path}: {e}", path=str(file_path)) from e

    logger.info(f"Found {len(images)} image(s) in {file_path}")
    return images
