"""PDFMaster — Page rendering and text-layer access via pymupdf."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator

import fitz

from app.models.document import DocumentModel, Page
from app.pdf.interfaces import DocumentSerializer
from app.pdf.serializer import PyMuPDFSerializer, open_pdf


class PyMuPDFRenderer:
    """RasterRenderer backed by pymupdf."""

    def __init__(self, serializer: DocumentSerializer | None = None):
        self.serializer = serializer or PyMuPDFSerializer()

    @contextmanager
    def _open(self, page: Page) -> Generator[fitz.Page, None, None]:
        # Pages that are a bare import can be read straight from their source.
        imported = page.imported
        if imported is not None and len(page.content) == 1:
            doc = open_pdf(imported.source)
            index = imported.index
        else:
            doc = fitz.open(stream=self.serializer.encode(DocumentModel([page])), filetype="pdf")
            index = 0
        try:
            yield doc[index]
        finally:
            doc.close()

    def render(self, page: Page, dpi: int = 200) -> bytes:
        with self._open(page) as fpage:
            return fpage.get_pixmap(dpi=dpi).tobytes("png")

    def text(self, page: Page) -> str:
        with self._open(page) as fpage:
            return fpage.get_text()
