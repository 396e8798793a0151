"""
PDFMaster — Supported operations as a closed, typed union.

Each variant carries its own parameters. The orchestrator dispatches on the
variant type, so an operation that is not listed here cannot be requested.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class MergeOperation(BaseModel):
    kind: Literal["merge"] = "merge"


class SplitOperation(BaseModel):
    """Extract a single page. ``page`` is zero-based."""

    kind: Literal["split"] = "split"
    page: int = 0


class ExtractOperation(BaseModel):
    """Extract pages in the given order; repeats are allowed."""

    kind: Literal["extract"] = "extract"
    indices: list[int] = Field(default_factory=list)


class CompressOperation(BaseModel):
    kind: Literal["compress"] = "compress"


class ImagesToPdfOperation(BaseModel):
    kind: Literal["images-to-pdf"] = "images-to-pdf"
    page_size: str = "letter"
    margin: float = 50.0


class PdfToTextOperation(BaseModel):
    kind: Literal["pdf-to-text"] = "pdf-to-text"
    ocr: bool = False


Operation = Annotated[
    Union[
        MergeOperation,
        SplitOperation,
        ExtractOperation,
        CompressOperation,
        ImagesToPdfOperation,
        PdfToTextOperation,
    ],
    Field(discriminator="kind"),
]
