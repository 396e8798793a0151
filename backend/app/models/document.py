"""
PDFMaster — In-memory document model.

A DocumentModel is an ordered list of pages. Each page owns an append-only
list of draw operations. Draw operations are frozen values, so copying a
page means copying its list, never its operations.

Coordinates are PDF points with the origin at the top-left of the page.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Literal, Union

ImageEncoding = Literal["png", "jpeg"]


@dataclass(frozen=True)
class EmbeddedImage:
    """Raster bytes the serializer has accepted for embedding."""

    data: bytes = field(repr=False)
    encoding: ImageEncoding
    pixel_width: int
    pixel_height: int


@dataclass(frozen=True)
class ImportedPage:
    """Full content of page ``index`` of an immutable source PDF buffer."""

    source: bytes = field(repr=False)
    index: int


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float  # baseline
    font_size: float = 12
    color: tuple[float, float, float] = (0, 0, 0)


@dataclass(frozen=True)
class PlacedImage:
    image: EmbeddedImage
    x: float
    y: float
    width: float
    height: float


DrawOp = Union[ImportedPage, TextRun, PlacedImage]


class Page:
    """One page of a document: geometry plus ordered draw operations."""

    def __init__(self, width: float, height: float, content: Iterable[DrawOp] = ()):
        if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
            raise ValueError(f"Page size must be positive, got {width}x{height}")
        self.width = float(width)
        self.height = float(height)
        self._content: list[DrawOp] = []
        for op in content:
            self.draw(op)

    @property
    def size(self) -> tuple[float, float]:
        return self.width, self.height

    @property
    def content(self) -> tuple[DrawOp, ...]:
        return tuple(self._content)

    @property
    def imported(self) -> ImportedPage | None:
        if self._content and isinstance(self._content[0], ImportedPage):
            return self._content[0]
        return None

    def draw(self, op: DrawOp) -> None:
        """Append a draw operation. Imported content may only come first."""
        if isinstance(op, ImportedPage) and self._content:
            raise ValueError("Imported page content must be the first draw operation")
        self._content.append(op)

    def copy(self) -> "Page":
        return Page(self.width, self.height, self._content)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Page):
            return NotImplemented
        return self.size == other.size and self._content == other._content

    def __repr__(self) -> str:
        return f"Page({self.width:g}x{self.height:g}, ops={len(self._content)})"


class DocumentModel:
    """Ordered, paginated document. Built fresh for every request."""

    def __init__(self, pages: Iterable[Page] = (), metadata: dict[str, str] | None = None):
        self.pages: list[Page] = list(pages)
        self.metadata: dict[str, str] = dict(metadata or {})

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def add_page(self, page: Page) -> Page:
        self.pages.append(page)
        return page

    def new_page(self, width: float, height: float) -> Page:
        return self.add_page(Page(width, height))

    def copy_pages_from(self, source: "DocumentModel", indices: Iterable[int]) -> list[Page]:
        """Append independent copies of ``source`` pages in the given order."""
        copied = [source.pages[i].copy() for i in indices]
        self.pages.extend(copied)
        return copied

    def __repr__(self) -> str:
        return f"DocumentModel(pages={self.page_count})"
