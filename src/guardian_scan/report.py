"""
Scan result assembly and export payloads.

Wraps the scanner and health calculator output with a scan identifier and a
timestamp, and builds the JSON export and history entries consumed by the UI.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from . import __version__
from .health import metrics
from .models import CodeMetrics, Finding, ScanResult, ScanSummary
from .scanner import detect

TOOL_NAME = "Guardian Code Scan"

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset({".js", ".py", ".ts", ".jsx", ".tsx"})

_UNSAFE_FILE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9]")


def build_scan_result(text: str, file_name: str) -> ScanResult:
    """Scan text and wrap findings and metrics into a ScanResult."""
    findings = detect(text, file_name)
    code_metrics = metrics(text, findings)

    return ScanResult(
        id=str(uuid.uuid4()),
        timestamp=datetime.now(timezone.utc),
        file_name=file_name,
        vulnerabilities=findings,
        summary=ScanSummary(total=len(findings)),
        total_lines=code_metrics.total_lines,
        code_metrics=CodeMetrics(
            clean_lines=code_metrics.clean_lines,
            vulnerable_lines=code_metrics.vulnerable_lines,
            code_health_percentage=code_metrics.code_health_percentage,
        ),
    )


def summarize(result: ScanResult) -> str:
    """One-line history summary for a scan result."""
    total = result.summary.total
    detail = (
        "Found various security issues in the code"
        if total > 0
        else "No security issues detected in the code"
    )
    return f"{total} vulnerabilities: {detail}"


def category_breakdown(findings: list[Finding]) -> dict[str, int]:
    """Count findings per category, in the order categories first appear."""
    counts: dict[str, int] = {}
    for finding in findings:
        counts[finding.category] = counts.get(finding.category, 0) + 1
    return counts


def build_json_export(result: ScanResult, exported_at: datetime | None = None) -> dict[str, Any]:
    """
    Build the JSON export payload for a scan result.

    The result is serialized with its wire field names and an ``exportInfo``
    block describing when and by what it was exported.
    """
    exported_at = exported_at or datetime.now(timezone.utc)
    payload = result.model_dump(mode="json", by_alias=True)
    payload["exportInfo"] = {
        "exportedAt": exported_at.isoformat(),
        "toolName": TOOL_NAME,
        "version": __version__,
        "format": "JSON",
    }
    return payload


def export_file_name(result: ScanResult, extension: str = "json") -> str:
    """Download name for an exported report."""
    safe_name = _UNSAFE_FILE_NAME_CHARS.sub("_", result.file_name)
    return f"guardian-scan-report-{safe_name}-{result.id}.{extension}"


def is_supported_file(name: str) -> bool:
    """Whether a file name has one of the source extensions the UI accepts."""
    return Path(name).suffix.lower() in SUPPORTED_EXTENSIONS
