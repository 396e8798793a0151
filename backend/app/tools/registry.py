"""
PDFMaster — Tool registry.

The closed set of operations this service performs. Each entry names its
endpoint and the kind of input it accepts.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ToolEntry(BaseModel):
    id: str
    name: str
    description: str
    endpoint: str
    accepts: list[str] = Field(default_factory=lambda: ["application/pdf"])
    multiple_files: bool = False
    returns: str = "application/pdf"


TOOLS: dict[str, ToolEntry] = {
    "merge": ToolEntry(
        id="merge",
        name="Merge PDF",
        description="Combine several PDFs into one, keeping upload order and page order.",
        endpoint="/v1/merge",
        multiple_files=True,
    ),
    "split": ToolEntry(
        id="split",
        name="Split PDF",
        description="Extract a single page (zero-based) into its own PDF.",
        endpoint="/v1/split",
    ),
    "extract": ToolEntry(
        id="extract",
        name="Extract Pages",
        description="Build a PDF from the listed pages in the listed order; repeats allowed.",
        endpoint="/v1/extract",
    ),
    "compress": ToolEntry(
        id="compress",
        name="Compress PDF",
        description="Re-serialise a PDF and report original size, output size and percent saved.",
        endpoint="/v1/compress",
    ),
    "images-to-pdf": ToolEntry(
        id="images-to-pdf",
        name="Images to PDF",
        description="One page per image, scaled to fit and centred, captioned with the file name.",
        endpoint="/v1/images-to-pdf",
        accepts=["image/*"],
        multiple_files=True,
    ),
    "pdf-to-text": ToolEntry(
        id="pdf-to-text",
        name="PDF to Text",
        description="Extract the text layer of every page, with optional OCR for scanned pages.",
        endpoint="/v1/pdf-to-text",
        returns="application/json",
    ),
}


def get_tool(tool_id: str) -> ToolEntry | None:
    return TOOLS.get(tool_id)


def list_tools() -> list[ToolEntry]:
    return list(TOOLS.values())
