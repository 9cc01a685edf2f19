"""FastAPI application for Guardian Code Scan."""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import load_settings
from .models import RuleInfo, ScanRequest, ScanResult
from .report import build_json_export, build_scan_result, export_file_name, summarize
from .rules import load_rules

settings = load_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Guardian Code Scan",
    description="Detects insecure coding patterns line by line and reports a code health score",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.allowed_origins),
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/rules", response_model=list[RuleInfo])
async def rules() -> list[RuleInfo]:
    """List the detection rules in catalog order."""
    return [
        RuleInfo(
            id=rule.id,
            type=rule.vulnerability_type,
            category=rule.category,
            description=rule.description,
            explanation=rule.explanation,
            mitigation=rule.mitigation,
            safe_code=rule.safe_code,
            pattern=rule.matcher.pattern,
        )
        for rule in load_rules()
    ]


async def _run_scan(request: ScanRequest) -> ScanResult:
    size = len(request.code.encode("utf-8"))
    if size > settings.max_code_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Code is {size} bytes; the limit is {settings.max_code_bytes}",
        )

    file_name = request.file_name or settings.default_file_name
    logger.info(f"Scanning {file_name} ({size} bytes)")

    try:
        result = await run_in_threadpool(build_scan_result, request.code, file_name)
    except Exception as e:
        logger.error(f"Scan failed for {file_name}: {e}")
        raise HTTPException(status_code=500, detail=f"Scan failed: {str(e)}")

    logger.info(summarize(result))
    return result


@app.post("/scan", response_model=ScanResult)
async def scan(request: ScanRequest) -> ScanResult:
    """
    Scan source text for insecure coding patterns.

    - **code**: Source text to scan
    - **fileName**: Optional file name, used only for reporting
    """
    return await _run_scan(request)


@app.post("/export")
async def export(request: ScanRequest) -> JSONResponse:
    """Scan source text and return the JSON export payload as a download."""
    result = await _run_scan(request)
    payload: dict[str, Any] = build_json_export(result)
    return JSONResponse(
        content=payload,
        headers={"Content-Disposition": f'attachment; filename="{export_file_name(result)}"'},
    )
