"""Capability protocols the composition pipeline is built against."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from app.models.document import DocumentModel, EmbeddedImage, ImageEncoding, Page


class DocumentSerializer(Protocol):
    """Encode/decode documents and accept raster bytes for embedding."""

    def decode(self, data: bytes, name: str = "document.pdf") -> DocumentModel:
        """Parse PDF bytes. Raises MalformedDocumentError."""

    def encode(self, document: DocumentModel) -> bytes:
        """Write a document to PDF bytes. Raises EncodingFailureError."""

    def embed_image(self, data: bytes, encoding: ImageEncoding) -> EmbeddedImage:
        """Accept ``data`` as an image of ``encoding``. Raises ImageEmbedError."""


class RasterCodec(Protocol):
    """Detect and convert raster image encodings."""

    def sniff(self, data: bytes) -> str | None:
        """Return the detected encoding name (``png``, ``jpeg``, ...) or None."""

    def transcode(self, data: bytes, encoding: ImageEncoding, name: str = "image") -> bytes:
        """Re-encode ``data``. Raises RasterCodecError."""


class RasterRenderer(Protocol):
    """Render pages to pixels and read their text layer."""

    def render(self, page: Page, dpi: int = 200) -> bytes:
        """Return the page as PNG bytes."""

    def text(self, page: Page) -> str:
        """Return the text layer of the page."""


@dataclass
class RecognizedText:
    text: str = ""
    confidence: float = 0.0  # 0.0 to 1.0
    available: bool = True


class TextRecognizer(Protocol):
    def recognize(self, png: bytes) -> RecognizedText:
        """Recognize text in a rendered page image."""
