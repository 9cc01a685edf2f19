#!/usr/bin/env python3
"""
Sandbox entrypoint for Guardian Code Scan.

Input (stdin JSON):
{
  "code": "eval(userInput);",
  "file_name": "app.js"          // optional, defaults to GUARDIAN_DEFAULT_FILE_NAME
}

or, for uploaded files:
{
  "files": [
    {"path": "/tmp/uploads/0_app.js", "original_name": "app.js"}
  ]
}

Output (stdout JSON): a scan result, or {"results": [...], "errors": [...]}
for a files batch. Errors are reported as {"error": "..."} with exit code 1.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn

sys.path.insert(0, str(Path(__file__).parent / "src"))

from guardian_scan.config import Settings, load_settings
from guardian_scan.report import build_scan_result, category_breakdown, is_supported_file, summarize

logger = logging.getLogger(__name__)


def _fail(payload: dict[str, Any]) -> NoReturn:
    print(json.dumps(payload))
    sys.exit(1)


def read_file_safe(file_path: str) -> tuple[str, str | None]:
    """Read file content with friendly errors."""
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as handle:
            return handle.read(), None
    except FileNotFoundError:
        return "", f"File not found: {file_path}"
    except PermissionError:
        return "", f"Permission denied: {file_path}"
    except OSError as exc:
        return "", f"Failed to read file: {file_path} ({exc})"


def _scan_payload(code: str, file_name: str) -> dict[str, Any]:
    result = build_scan_result(code, file_name)
    logger.info(f"{file_name}: {summarize(result)}")
    payload = result.model_dump(mode="json", by_alias=True)
    payload["categories"] = category_breakdown(result.vulnerabilities)
    return payload


def scan_files(files: list[dict[str, Any]], settings: Settings) -> dict[str, Any]:
    """Scan a batch of uploaded files, collecting per-file errors."""
    results: list[dict[str, Any]] = []
    errors: list[dict[str, str]] = []

    for entry in files:
        path = entry.get("path")
        name = entry.get("original_name") or (Path(path).name if path else "")
        if not path:
            errors.append({"file": name, "error": "Missing 'path'"})
            continue
        if not is_supported_file(name):
            errors.append({"file": name, "error": "Unsupported file type"})
            continue

        code, error = read_file_safe(path)
        if error:
            errors.append({"file": name, "error": error})
            continue
        if len(code.encode("utf-8")) > settings.max_code_bytes:
            errors.append({"file": name, "error": f"File exceeds {settings.max_code_bytes} bytes"})
            continue

        results.append(_scan_payload(code, name))

    return {"results": results, "errors": errors}


def main() -> None:
    try:
        input_data = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        _fail({"error": f"Invalid JSON input: {e}"})

    if not isinstance(input_data, dict):
        _fail({"error": "Input must be a JSON object"})

    try:
        settings = load_settings()
    except ValueError as e:
        _fail({"error": f"Invalid configuration: {e}"})

    logging.basicConfig(level=settings.log_level, stream=sys.stderr)

    files = input_data.get("files")
    code = input_data.get("code")

    if files is None and code is None:
        _fail(
            {
                "error": "Missing required input. Provide either 'code' or 'files'.",
                "examples": {
                    "code": {"code": "eval(userInput);", "file_name": "app.js"},
                    "files": {"files": [{"path": "/tmp/uploads/0_app.js", "original_name": "app.js"}]},
                },
            }
        )

    try:
        if files is not None:
            if not isinstance(files, list):
                _fail({"error": "'files' must be a list"})
            output = scan_files(files, settings)
        else:
            if not isinstance(code, str):
                _fail({"error": "'code' must be a string"})
            if len(code.encode("utf-8")) > settings.max_code_bytes:
                _fail({"error": f"Code exceeds {settings.max_code_bytes} bytes"})
            file_name = input_data.get("file_name") or settings.default_file_name
            output = _scan_payload(code, file_name)
        print(json.dumps(output))
    except Exception as e:
        print(json.dumps({"error": str(e)}))
        sys.exit(1)


if __name__ == "__main__":
    main()
