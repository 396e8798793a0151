"""
PDFMaster — FastAPI Backend

Endpoints:
  POST /v1/merge          — PDFs → one merged PDF
  POST /v1/split          — PDF + page → single-page PDF
  POST /v1/extract        — PDF + page list → PDF of those pages, in order
  POST /v1/compress       — PDF → re-serialised PDF + size report
  POST /v1/images-to-pdf  — Image(s) → PDF, one page per image
  POST /v1/pdf-to-text    — PDF → extracted text (optional OCR)
  GET  /v1/tools          — List available tools
  GET  /v1/tools/{id}     — One tool entry
  GET  /health            — Health check
  GET  /                  — Landing page
"""

import base64
import os
import time
import uuid

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from app.core.config import settings
from app.errors import FileTooLargeError, PDFMasterError, TooManyFilesError
from app.models.operations import (
    CompressOperation,
    ExtractOperation,
    ImagesToPdfOperation,
    MergeOperation,
    Operation,
    PdfToTextOperation,
    SplitOperation,
)
from app.models.upload import UploadedFile
from app.ocr.extract import TesseractRecognizer
from app.pipeline.orchestrator import JobOrchestrator, JobOutput
from app.tools.registry import get_tool, list_tools
from app.utils.logging import logger

VERSION = "1.0.0"

app = FastAPI(
    title="PDFMaster API",
    description="Merge, split, compress and convert PDFs and images.",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[
        "X-PDFMaster-Job",
        "X-Pipeline-Duration-Ms",
        "X-Request-Id",
        "X-Original-Size",
        "X-Compressed-Size",
        "X-Compression-Ratio",
        "X-Images-Processed",
        "X-Placeholder-Pages",
    ],
)


@app.on_event("startup")
async def _startup_banner():
    logger.info("")
    logger.info("╔══════════════════════════════════════════════════╗")
    logger.info("║            PDFMaster  ·  API Server v1           ║")
    logger.info("╠══════════════════════════════════════════════════╣")
    for tool in list_tools():
        logger.info("║  POST %-20s → %-21s║", tool.endpoint, tool.name)
    logger.info("╠══════════════════════════════════════════════════╣")
    logger.info("║  Page size  : %-35s║", settings.layout.page_size)
    logger.info("║  Max upload : %-35s║", f"{settings.limits.max_file_bytes // (1024 * 1024)} MB/file")
    logger.info("╚══════════════════════════════════════════════════╝")
    logger.info("")


# ──────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────

async def _read_uploads(files: list[UploadFile]) -> list[UploadedFile]:
    """Read uploads into immutable values, enforcing the configured limits."""
    limits = settings.limits
    if len(files) > limits.max_files:
        raise TooManyFilesError(len(files), limits.max_files)

    uploads: list[UploadedFile] = []
    total = 0
    for f in files:
        content = await f.read()
        name = f.filename or f"upload-{len(uploads) + 1}"
        if len(content) > limits.max_file_bytes:
            raise FileTooLargeError(
                name, len(content) / (1024 * 1024), limits.max_file_bytes / (1024 * 1024)
            )
        total += len(content)
        if total > limits.max_request_bytes:
            raise FileTooLargeError(
                "request total", total / (1024 * 1024), limits.max_request_bytes / (1024 * 1024)
            )
        uploads.append(
            UploadedFile(name=name, mime_type=f.content_type or "", data=content)
        )
    return uploads


async def _run_job(operation: Operation, files: list[UploadFile]) -> tuple[JobOutput, str, float]:
    request_id = uuid.uuid4().hex[:12]
    start = time.perf_counter()
    logger.info(
        "[%s] POST %s — %d file(s)", request_id, operation.kind, len(files),
    )

    try:
        uploads = await _read_uploads(files)
        orchestrator = JobOrchestrator(
            operation,
            uploads,
            recognizer=TesseractRecognizer(lang=settings.ocr.lang),
            ocr_dpi=settings.ocr.dpi,
        )
        output = await orchestrator.run()
    except PDFMasterError as exc:
        logger.warning("[%s] %s error: %s — %s", request_id, operation.kind, exc.code, exc.message)
        raise HTTPException(status_code=exc.status_code, detail=exc.to_dict())
    except Exception:
        logger.exception("[%s] %s failed", request_id, operation.kind)
        raise HTTPException(
            status_code=500,
            detail={"error_code": "INTERNAL_ERROR", "message": "Internal server error"},
        )

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        "[%s] Complete — %d bytes in %.0f ms", request_id, len(output.content), elapsed_ms
    )
    return output, request_id, elapsed_ms


def _pdf_response(output: JobOutput, request_id: str, elapsed_ms: float, **extra: str) -> Response:
    # Job metadata is base64 for header safety
    job_json = output.result.model_dump_json()
    job_b64 = base64.b64encode(job_json.encode()).decode("ascii")

    headers = {
        "Content-Disposition": f'attachment; filename="{output.filename}"',
        "X-Pipeline-Duration-Ms": f"{elapsed_ms:.0f}",
        "X-Request-Id": request_id,
        "X-PDFMaster-Job": job_b64,
    }
    headers.update(extra)
    return Response(content=output.content, media_type="application/pdf", headers=headers)


# ──────────────────────────────────────────────────────────
# Endpoints
# ──────────────────────────────────────────────────────────

@app.get("/health")
async def health():
    return {"status": "ok", "service": "pdfmaster-api", "version": VERSION}


@app.get("/v1/tools")
async def get_tools():
    """List the operations this service performs."""
    return [t.model_dump() for t in list_tools()]


@app.get("/v1/tools/{tool_id}")
async def get_tool_entry(tool_id: str):
    tool = get_tool(tool_id)
    if tool is None:
        raise HTTPException(
            status_code=404,
            detail={"error_code": "UNKNOWN_TOOL", "message": f"No tool named {tool_id!r}"},
        )
    return tool.model_dump()


@app.post("/v1/merge", response_class=Response)
async def merge_pdf(files: list[UploadFile] = File([], description="PDFs to merge, in order")):
    """Merge the uploaded PDFs in upload order into one document."""
    output, request_id, elapsed_ms = await _run_job(MergeOperation(), files)
    return _pdf_response(output, request_id, elapsed_ms)


@app.post("/v1/split", response_class=Response)
async def split_pdf(
    file: UploadFile = File(..., description="PDF to split"),
    page: int = Form(0, description="Zero-based page number"),
):
    """Extract a single page into its own PDF."""
    output, request_id, elapsed_ms = await _run_job(SplitOperation(page=page), [file])
    return _pdf_response(output, request_id, elapsed_ms)


@app.post("/v1/extract", response_class=Response)
async def extract_pdf_pages(
    file: UploadFile = File(..., description="Source PDF"),
    pages: list[int] = Form([], description="Zero-based page numbers, in output order"),
):
    """Build a PDF from the listed pages, in the listed order."""
    output, request_id, elapsed_ms = await _run_job(ExtractOperation(indices=pages), [file])
    return _pdf_response(output, request_id, elapsed_ms)


@app.post("/v1/compress", response_class=Response)
async def compress_pdf(file: UploadFile = File(..., description="PDF to compress")):
    """
    Re-serialise a PDF. The size report is returned in headers; the ratio
    is negative when the output is larger than the input.
    """
    output, request_id, elapsed_ms = await _run_job(CompressOperation(), [file])
    report = output.result.compression
    return _pdf_response(
        output, request_id, elapsed_ms,
        **{
            "X-Original-Size": str(report.original_size),
            "X-Compressed-Size": str(report.output_size),
            "X-Compression-Ratio": f"{report.ratio:.1f}",
        },
    )


@app.post("/v1/images-to-pdf", response_class=Response)
async def images_to_pdf(
    files: list[UploadFile] = File([], description="One or more images"),
    page_size: str = Form(settings.layout.page_size),
    margin: float = Form(settings.layout.margin),
):
    """
    Convert uploaded images into a single PDF, one page per image.
    Images that cannot be embedded become placeholder pages.
    """
    operation = ImagesToPdfOperation(page_size=page_size, margin=margin)
    output, request_id, elapsed_ms = await _run_job(operation, files)
    placeholders = sum(1 for o in output.result.images if not o.embedded)
    return _pdf_response(
        output, request_id, elapsed_ms,
        **{
            "X-Images-Processed": str(len(output.result.images)),
            "X-Placeholder-Pages": str(placeholders),
        },
    )


@app.post("/v1/pdf-to-text")
async def pdf_to_text(
    file: UploadFile = File(..., description="PDF to extract text from"),
    ocr: bool = Form(False, description="OCR pages without a text layer"),
):
    """Extract the text of every page. Returns JSON."""
    output, request_id, _ = await _run_job(PdfToTextOperation(ocr=ocr), [file])
    return {**output.payload, "request_id": request_id, "job_id": output.result.job_id}


# ──────────────────────────────────────────────────────────
# Landing page (mounted LAST so it doesn't override API routes)
# ──────────────────────────────────────────────────────────

_docs_candidates = [
    os.path.normpath(os.path.join(os.path.dirname(__file__), "..", "..", "docs")),  # Local
    os.path.normpath(os.path.join(os.path.dirname(__file__), "..", "docs")),        # Docker
    os.path.join(os.getcwd(), "docs"),                                             # Root-relative
]

_docs_dir = next((c for c in _docs_candidates if os.path.isdir(c)), None)

if _docs_dir:
    logger.info("  Frontend found at: %s", _docs_dir)
    app.mount("/", StaticFiles(directory=_docs_dir, html=True), name="landing")
else:
    logger.warning("  Frontend not found. Root will return 404.")
