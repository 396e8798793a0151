"""
PDFMaster — Text extraction.

Reads each page's text layer through the renderer. When OCR is requested,
pages without a text layer are rendered and passed to the recognizer
(pytesseract), which returns per-line confidence scores.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field

import pytesseract
from PIL import Image, ImageFilter

from app.models.document import DocumentModel
from app.pdf.interfaces import RasterRenderer, RecognizedText, TextRecognizer
from app.pipeline.cancel import CancellationToken, checkpoint
from app.utils.logging import logger, step_timer

# Pages with less text than this are treated as scanned.
MIN_TEXT_LAYER_CHARS = 20


@dataclass
class OCRLine:
    text: str
    confidence: float  # 0.0 to 1.0
    line_num: int = 0
    block_num: int = 0


@dataclass
class PageText:
    index: int
    text: str
    method: str  # pymupdf | tesseract | none
    confidence: float = 1.0


@dataclass
class TextExtraction:
    pages: list[PageText] = field(default_factory=list)
    method: str = "none"  # pymupdf | tesseract | mixed | none

    @property
    def text(self) -> str:
        return "\n\n".join(p.text for p in self.pages if p.text)

    @property
    def overall_confidence(self) -> float:
        scored = [p.confidence for p in self.pages if p.text]
        return sum(scored) / len(scored) if scored else 0.0


def _preprocess_image(image_bytes: bytes) -> Image.Image:
    """Convert to grayscale and sharpen for better OCR accuracy."""
    with Image.open(io.BytesIO(image_bytes)) as img:
        gray = img.convert("L") if img.mode != "L" else img.copy()

    return gray.filter(ImageFilter.SHARPEN)


def _group_lines(data: dict) -> list[OCRLine]:
    """Fold tesseract word boxes into lines with averaged confidence."""
    lines: list[OCRLine] = []
    current: tuple[int, int] | None = None
    words: list[str] = []
    confs: list[float] = []

    def flush() -> None:
        if words and current is not None:
            lines.append(OCRLine(
                text=" ".join(words),
                confidence=sum(confs) / len(confs) / 100.0,
                line_num=current[1],
                block_num=current[0],
            ))

    for i in range(len(data["text"])):
        text = data["text"][i].strip()
        conf = float(data["conf"][i])
        if not text or conf < 0:
            continue

        key = (data["block_num"][i], data["line_num"][i])
        if key != current:
            flush()
            words, confs = [], []
            current = key
        words.append(text)
        confs.append(conf)

    flush()
    return lines


class TesseractRecognizer:
    """TextRecognizer backed by pytesseract."""

    def __init__(self, lang: str = "eng"):
        self.lang = lang

    def recognize(self, png: bytes) -> RecognizedText:
        img = _preprocess_image(png)
        try:
            data = pytesseract.image_to_data(
                img, lang=self.lang, output_type=pytesseract.Output.DICT
            )
        except pytesseract.TesseractNotFoundError:
            logger.warning("tesseract binary not found — OCR unavailable")
            return RecognizedText(available=False)

        lines = _group_lines(data)
        overall = sum(line.confidence for line in lines) / len(lines) if lines else 0.0
        logger.info(
            "  OCR: %d lines extracted, overall confidence %.0f%%",
            len(lines), overall * 100,
        )
        return RecognizedText(text="\n".join(line.text for line in lines), confidence=overall)


class TextExtractor:
    def __init__(
        self,
        renderer: RasterRenderer,
        recognizer: TextRecognizer | None = None,
        dpi: int = 200,
    ):
        self.renderer = renderer
        self.recognizer = recognizer
        self.dpi = dpi

    def extract(
        self,
        document: DocumentModel,
        ocr: bool = False,
        token: CancellationToken | None = None,
    ) -> TextExtraction:
        with step_timer("Extract text"):
            pages: list[PageText] = []
            for index, page in enumerate(document.pages):
                checkpoint(token)
                text = self.renderer.text(page).strip()
                if len(text) >= MIN_TEXT_LAYER_CHARS or not (ocr and self.recognizer):
                    pages.append(PageText(index, text, "pymupdf" if text else "none"))
                    continue

                result = self.recognizer.recognize(self.renderer.render(page, self.dpi))
                if result.available and result.text:
                    pages.append(PageText(index, result.text, "tesseract", result.confidence))
                else:
                    pages.append(PageText(index, text, "pymupdf" if text else "none"))

            methods = {p.method for p in pages if p.method != "none"}
            if not methods:
                method = "none"
            elif len(methods) == 1:
                method = methods.pop()
            else:
                method = "mixed"

            logger.info("  Text extraction: %d pages, method=%s", len(pages), method)
            return TextExtraction(pages=pages, method=method)
