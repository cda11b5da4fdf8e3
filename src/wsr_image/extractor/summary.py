"""Human-readable report for an extraction run."""

from wsr_image.common import format_size, normalize_path
from .runner import ExtractionSummary


def format_preview_lines(summary: ExtractionSummary) -> str:
    """One block per image that would be written."""
    blocks = []
    for result in summary.results:
        blocks.append(
            f"    would write {normalize_path(result.path)}\n"
            f"    size: {format_size(result.size)}\n"
        )
    return "\n".join(blocks)


def format_summary_human_readable(summary: ExtractionSummary) -> str:
    """
    Format summary as human-readable text.

    Args:
        summary: Summary returned by ImageExtractor.run()

    Returns:
        Formatted text report
    """
    data = summary.to_dict()
    lines = []

    lines.append("=" * 70)
    lines.append("PREVIEW REPORT" if summary.preview else "EXTRACTION REPORT")
    lines.append("=" * 70)
    lines.append(f"Input:  {normalize_path(summary.input_path)}")
    lines.append(f"Output: {normalize_path(summary.output_dir)}")
    lines.append("")

    lines.append("SCAN")
    lines.append("-" * 70)
    lines.append(f"Lines read:            {data['lines_read']:>8,}")
    lines.append(f"Image parts started:   {data['parts_started']:>8,}")
    lines.append(f"Images found:          {data['images_found']:>8,}")
    lines.append(f"Parts skipped:         {data['parts_skipped']:>8,}")
    lines.append(f"Parts truncated:       {data['parts_truncated']:>8,}")
    lines.append("")

    lines.append("OUTPUT")
    lines.append("-" * 70)
    if summary.preview:
        lines.append(f"Images previewed:      {data['images_previewed']:>8,}")
    else:
        lines.append(f"Images written:        {data['images_written']:>8,}")
    lines.append(f"Images failed:         {data['images_failed']:>8,}")
    lines.append(f"Total size:            {format_size(data['total_bytes']):>8}")

    if summary.failures:
        lines.append("")
        lines.append("FAILURES")
        lines.append("-" * 70)
        for failure in summary.failures:
            lines.append(f"[{failure.category}] {failure.name}: {failure.message}")

    lines.append("=" * 70)
    return "\n".join(lines)
