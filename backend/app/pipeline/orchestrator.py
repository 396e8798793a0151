"""
PDFMaster — Job Orchestrator.

Runs one operation as a state machine:

  RECEIVED → VALIDATED → DECODED → COMPOSED → ENCODED → DELIVERED

Each step is timed, logged, and recorded in the JobResult. The work itself
runs in a worker thread; if the awaiting request is cancelled, the worker
stops at its next checkpoint and nothing is returned.
"""

from __future__ import annotations

import hashlib
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Generator, Sequence

import anyio

from app.errors import EmptyInputError, PDFMasterError
from app.models.document import DocumentModel
from app.models.job import (
    ArtifactMetadata,
    CompressionReport,
    JobResult,
    JobState,
    StepTiming,
)
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
from app.ocr.extract import TesseractRecognizer, TextExtractor
from app.pdf.codec import PillowRasterCodec
from app.pdf.compose import extract_pages, merge_documents, split_page
from app.pdf.image_to_pdf import ImageEmbedder
from app.pdf.interfaces import DocumentSerializer, RasterCodec, RasterRenderer, TextRecognizer
from app.pdf.layout import resolve_page_size
from app.pdf.render import PyMuPDFRenderer
from app.pdf.serializer import PyMuPDFSerializer
from app.pipeline.cancel import CancellationToken, checkpoint
from app.utils.logging import logger, step_timer


@dataclass
class JobOutput:
    result: JobResult
    filename: str = ""
    content: bytes = b""
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_document(self) -> bool:
        return bool(self.content)


class JobOrchestrator:
    """
    State-machine orchestrator for a single request.

    Capabilities are injected so tests can substitute fakes; defaults are
    the pymupdf / Pillow / pytesseract implementations.
    """

    def __init__(
        self,
        operation: Operation,
        files: Sequence[UploadedFile],
        serializer: DocumentSerializer | None = None,
        codec: RasterCodec | None = None,
        renderer: RasterRenderer | None = None,
        recognizer: TextRecognizer | None = None,
        ocr_dpi: int = 200,
    ):
        self.job_id = uuid.uuid4().hex[:12]
        self.operation = operation
        self.files = list(files)
        self.serializer = serializer or PyMuPDFSerializer()
        self.codec = codec or PillowRasterCodec()
        self.renderer = renderer or PyMuPDFRenderer(self.serializer)
        self.recognizer = recognizer or TesseractRecognizer()
        self.ocr_dpi = ocr_dpi
        self.state = JobState.RECEIVED
        self.token = CancellationToken()
        self.timings: list[StepTiming] = []
        self.warnings: list[str] = []
        self.result = JobResult(job_id=self.job_id, operation=operation.kind)

    @contextmanager
    def _step(self, name: str, detail: str = "") -> Generator[None, None, None]:
        error = ""
        try:
            with step_timer(f"[{self.job_id}] {name}") as clock:
                try:
                    yield
                except Exception as exc:
                    error = exc.message if isinstance(exc, PDFMasterError) else type(exc).__name__
                    raise
        finally:
            # clock.elapsed_ms is only set once step_timer has exited
            self.timings.append(
                StepTiming(
                    step=name,
                    duration_ms=int(clock.elapsed_ms),
                    status="failed" if clock.failed else "ok",
                    detail=error or detail,
                )
            )

    async def run(self) -> JobOutput:
        """Execute the operation in a worker thread. Returns a complete JobOutput."""
        try:
            return await anyio.to_thread.run_sync(self._run, abandon_on_cancel=True)
        except anyio.get_cancelled_exc_class():
            self.token.cancel()
            self.state = JobState.FAILED
            logger.warning("[%s] Request cancelled — worker will stop", self.job_id)
            raise

    def _run(self) -> JobOutput:
        logger.info("=" * 60)
        logger.info(
            "[%s] %s starting — %d file(s)", self.job_id, self.operation.kind, len(self.files)
        )
        logger.info("=" * 60)
        start = time.perf_counter()

        try:
            output = self._dispatch()
            self.state = JobState.DELIVERED
        except Exception:
            self.state = JobState.FAILED
            raise

        total_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            "[%s] %s complete — %d bytes, %dms",
            self.job_id, self.operation.kind, len(output.content), total_ms,
        )
        return output

    def _dispatch(self) -> JobOutput:
        op = self.operation
        with self._step("validate"):
            if not self.files:
                what = "images" if isinstance(op, ImagesToPdfOperation) else "files"
                raise EmptyInputError(what)
            self.result.input_hashes = [hashlib.sha256(f.data).hexdigest() for f in self.files]
            self.state = JobState.VALIDATED

        if isinstance(op, ImagesToPdfOperation):
            return self._images_to_pdf(op)

        single = not isinstance(op, MergeOperation)
        if single and len(self.files) > 1:
            self.warnings.append(
                f"{op.kind} uses one file; ignored {len(self.files) - 1} extra upload(s)"
            )
        sources = self._decode(self.files[:1] if single else self.files)

        if isinstance(op, PdfToTextOperation):
            return self._pdf_to_text(op, sources[0])

        with self._step("compose"):
            if isinstance(op, MergeOperation):
                composed = merge_documents(sources, self.token)
                filename = "merged-document.pdf"
            elif isinstance(op, SplitOperation):
                composed = split_page(sources[0], op.page, self.token)
                filename = f"page-{op.page + 1}.pdf"
            elif isinstance(op, ExtractOperation):
                composed = extract_pages(sources[0], op.indices, self.token)
                filename = "extracted-pages.pdf"
            elif isinstance(op, CompressOperation):
                composed = sources[0]
                filename = "compressed-document.pdf"
            else:
                raise TypeError(f"Unhandled operation {type(op).__name__}")
            self.state = JobState.COMPOSED

        content = self._encode(composed, filename)
        if isinstance(op, CompressOperation):
            self.result.compression = CompressionReport.from_sizes(
                self.files[0].byte_length, len(content)
            )
            logger.info(
                "  Compression: %d → %d bytes (%.1f%%)",
                self.result.compression.original_size,
                self.result.compression.output_size,
                self.result.compression.ratio,
            )
        return self._finish(filename, content)

    def _decode(self, files: Sequence[UploadedFile]) -> list[DocumentModel]:
        with self._step("decode", detail=f"{len(files)} file(s)"):
            docs = []
            for f in files:
                checkpoint(self.token)
                docs.append(self.serializer.decode(f.data, f.name))
            self.state = JobState.DECODED
        return docs

    def _encode(self, document: DocumentModel, filename: str) -> bytes:
        with self._step("encode", detail=f"{document.page_count} pages"):
            checkpoint(self.token)
            content = self.serializer.encode(document)
            self.state = JobState.ENCODED
        self.result.artifact = ArtifactMetadata(
            filename=filename,
            size_bytes=len(content),
            pages=document.page_count,
            content_hash=hashlib.sha256(content).hexdigest(),
        )
        return content

    def _images_to_pdf(self, op: ImagesToPdfOperation) -> JobOutput:
        with self._step("compose", detail=f"{len(self.files)} image(s)"):
            page_size = resolve_page_size(op.page_size)
            embedder = ImageEmbedder(self.serializer, self.codec)
            report = embedder.embed_images(self.files, page_size, op.margin, self.token)
            self.result.images = report.outcomes
            if report.placeholder_count:
                self.warnings.append(
                    f"{report.placeholder_count} image(s) could not be embedded; "
                    "placeholder pages were used"
                )
            self.state = JobState.COMPOSED

        filename = "images-converted.pdf"
        content = self._encode(report.document, filename)
        return self._finish(filename, content)

    def _pdf_to_text(self, op: PdfToTextOperation, document: DocumentModel) -> JobOutput:
        with self._step("extract_text", detail="ocr" if op.ocr else ""):
            extractor = TextExtractor(self.renderer, self.recognizer, dpi=self.ocr_dpi)
            extraction = extractor.extract(document, ocr=op.ocr, token=self.token)
            self.state = JobState.COMPOSED

        upload = self.files[0]
        payload = {
            "success": True,
            "text": extraction.text,
            "pages": document.page_count,
            "filename": upload.name,
            "method": extraction.method,
            "confidence": round(extraction.overall_confidence, 3),
            "page_texts": [
                {"page": p.index, "text": p.text, "method": p.method} for p in extraction.pages
            ],
        }
        self.result.timings = self.timings
        self.result.warnings = self.warnings
        return JobOutput(result=self.result, payload=payload)

    def _finish(self, filename: str, content: bytes) -> JobOutput:
        self.result.timings = self.timings
        self.result.warnings = self.warnings
        return JobOutput(result=self.result, filename=filename, content=content)
