"""
PDFMaster — PyMuPDF document serializer.

Decoding keeps each page as a reference into the original (immutable) PDF
bytes; encoding copies those pages into a fresh document with
``insert_pdf`` and draws any additional operations on top. Uses pymupdf
(fitz) for parsing and writing.
"""

from __future__ import annotations

import fitz

from app.errors import (
    EncodingFailureError,
    ImageEmbedError,
    MalformedDocumentError,
    PDFMasterError,
)
from app.models.document import (
    DocumentModel,
    DrawOp,
    EmbeddedImage,
    ImageEncoding,
    ImportedPage,
    Page,
    PlacedImage,
    TextRun,
)
from app.utils.logging import logger

INFO_KEYS = ("title", "author", "subject", "keywords", "creator", "producer")

IMAGE_SIGNATURES: dict[str, tuple[bytes, ...]] = {
    "png": (b"\x89PNG\r\n\x1a\n",),
    "jpeg": (b"\xff\xd8\xff",),
}


def open_pdf(data: bytes) -> fitz.Document:
    """Open PDF bytes, unlocking documents protected only by an empty password."""
    doc = fitz.open(stream=data, filetype="pdf")
    if doc.needs_pass and not doc.authenticate(""):
        doc.close()
        raise PermissionError("document is password protected")
    return doc


class PyMuPDFSerializer:
    """DocumentSerializer backed by pymupdf."""

    def __init__(self, garbage: int = 3, deflate: bool = True):
        self.garbage = garbage
        self.deflate = deflate

    def decode(self, data: bytes, name: str = "document.pdf") -> DocumentModel:
        if not data:
            raise MalformedDocumentError(name, "file is empty")
        try:
            doc = open_pdf(data)
        except Exception as exc:
            logger.warning("  Could not open %s: %s", name, exc)
            raise MalformedDocumentError(name, str(exc)) from exc

        try:
            if doc.page_count == 0:
                raise MalformedDocumentError(name, "document has no pages")
            metadata = {
                key: value
                for key, value in (doc.metadata or {}).items()
                if key in INFO_KEYS and value
            }
            pages = [
                Page(fpage.rect.width, fpage.rect.height, [ImportedPage(data, i)])
                for i, fpage in enumerate(doc)
            ]
        except PDFMasterError:
            raise
        except Exception as exc:
            raise MalformedDocumentError(name, str(exc)) from exc
        finally:
            doc.close()

        logger.info("  Decoded %s: %d pages (%d bytes)", name, len(pages), len(data))
        return DocumentModel(pages, metadata)

    def encode(self, document: DocumentModel) -> bytes:
        if document.page_count == 0:
            raise EncodingFailureError("document has no pages")

        out = fitz.open()
        sources: dict[bytes, fitz.Document] = {}
        try:
            for page in document.pages:
                imported = page.imported
                if imported is not None:
                    src = sources.get(imported.source)
                    if src is None:
                        src = sources[imported.source] = open_pdf(imported.source)
                    out.insert_pdf(src, from_page=imported.index, to_page=imported.index)
                    target = out[out.page_count - 1]
                    ops = page.content[1:]
                else:
                    target = out.new_page(width=page.width, height=page.height)
                    ops = page.content
                for op in ops:
                    _draw(target, op)

            if document.metadata:
                out.set_metadata(
                    {k: v for k, v in document.metadata.items() if k in INFO_KEYS}
                )
            pdf_bytes = out.tobytes(garbage=self.garbage, deflate=self.deflate)
        except Exception as exc:
            logger.error("  Encoding failed: %s", exc)
            raise EncodingFailureError(str(exc)) from exc
        finally:
            for src in sources.values():
                src.close()
            out.close()

        logger.info("  Encoded %d pages (%d bytes)", document.page_count, len(pdf_bytes))
        return pdf_bytes

    def embed_image(self, data: bytes, encoding: ImageEncoding) -> EmbeddedImage:
        signatures = IMAGE_SIGNATURES.get(encoding)
        if signatures is None:
            raise ImageEmbedError(encoding, "unsupported encoding")
        if not data.startswith(signatures):
            raise ImageEmbedError(encoding, "data does not start with a valid signature")
        try:
            pix = fitz.Pixmap(data)
        except Exception as exc:
            raise ImageEmbedError(encoding, str(exc)) from exc
        return EmbeddedImage(
            data=data,
            encoding=encoding,
            pixel_width=pix.width,
            pixel_height=pix.height,
        )


def _draw(target: fitz.Page, op: DrawOp) -> None:
    if isinstance(op, TextRun):
        target.insert_text(
            fitz.Point(op.x, op.y),
            op.text,
            fontsize=op.font_size,
            color=op.color,
        )
    elif isinstance(op, PlacedImage):
        rect = fitz.Rect(op.x, op.y, op.x + op.width, op.y + op.height)
        target.insert_image(rect, stream=op.image.data)
    else:
        raise TypeError(f"Cannot draw {type(op).__name__} on an existing page")
