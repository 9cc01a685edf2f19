"""Code health metrics computed from scan findings."""

from .lines import split_lines
from .models import Finding, Metrics


def health_percentage(clean_lines: int, total_lines: int) -> int:
    """Share of clean lines as an integer percentage, rounded half up.

    Text with no lines is treated as fully healthy.
    """
    if total_lines <= 0:
        return 100
    # floor(x + 0.5) on the exact fraction, without float error
    return (clean_lines * 200 + total_lines) // (total_lines * 2)


def metrics(text: str, findings: list[Finding]) -> Metrics:
    """Compute line-count metrics and the health percentage for scanned text."""
    total_lines = len(split_lines(text))
    vulnerable_lines = len({
        f.line_number for f in findings if 1 <= f.line_number <= total_lines
    })
    clean_lines = max(0, total_lines - vulnerable_lines)

    return Metrics(
        total_lines=total_lines,
        vulnerable_lines=vulnerable_lines,
        clean_lines=clean_lines,
        code_health_percentage=health_percentage(clean_lines, total_lines),
    )
