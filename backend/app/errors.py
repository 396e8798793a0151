"""
PDFMaster — Structured error catalog.

Every error has a code, human message, suggested fix and HTTP status.
No raw exceptions leak to the frontend.
"""

from __future__ import annotations

from typing import Any


class PDFMasterError(Exception):
    """Base error with structured code + suggestion."""

    status_code = 400

    def __init__(self, code: str, message: str, suggestion: str = "", detail: Any = None):
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.detail = detail
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "error_code": self.code,
            "message": self.message,
        }
        if self.suggestion:
            d["suggestion"] = self.suggestion
        if self.detail:
            d["detail"] = self.detail
        return d


class EmptyInputError(PDFMasterError):
    def __init__(self, what: str = "files"):
        super().__init__(
            code="EMPTY_INPUT",
            message=f"No {what} supplied",
            suggestion=f"Provide at least one entry in {what}.",
        )


class MalformedDocumentError(PDFMasterError):
    def __init__(self, name: str, reason: str = ""):
        self.name = name
        super().__init__(
            code="MALFORMED_DOCUMENT",
            message=f"Invalid PDF file: {name}",
            suggestion="Check that the file is a readable, unencrypted PDF.",
            detail=reason or None,
        )


class InvalidPageIndexError(PDFMasterError):
    def __init__(self, index: int, page_count: int):
        self.index = index
        self.page_count = page_count
        super().__init__(
            code="INVALID_PAGE_INDEX",
            message=f"Invalid page number {index}: document has {page_count} page(s)",
            suggestion=f"Page numbers are zero-based and must be between 0 and {page_count - 1}.",
        )


class UnsupportedInputTypeError(PDFMasterError):
    status_code = 415

    def __init__(self, name: str, mime_type: str):
        self.name = name
        self.mime_type = mime_type
        super().__init__(
            code="UNSUPPORTED_INPUT_TYPE",
            message=f"File {name} is not an image ({mime_type or 'unknown type'})",
            suggestion="Upload raster images only (jpg, png, gif, bmp, tiff, webp).",
        )


class EncodingFailureError(PDFMasterError):
    status_code = 500

    def __init__(self, reason: str):
        super().__init__(
            code="ENCODING_FAILED",
            message="Could not write the output PDF",
            suggestion="Retry with fewer or smaller inputs.",
            detail=reason,
        )


class LayoutError(PDFMasterError):
    def __init__(self, message: str):
        super().__init__(
            code="INVALID_LAYOUT",
            message=message,
            suggestion="Use a known page size and a margin smaller than half the shorter page side.",
        )


class FileTooLargeError(PDFMasterError):
    status_code = 413

    def __init__(self, name: str, size_mb: float, limit_mb: float):
        super().__init__(
            code="FILE_TOO_LARGE",
            message=f"File exceeds {limit_mb:g}MB limit: {name} ({size_mb:.1f}MB)",
            suggestion="Compress or split the file before uploading.",
        )


class TooManyFilesError(PDFMasterError):
    def __init__(self, count: int, limit: int):
        super().__init__(
            code="TOO_MANY_FILES",
            message=f"{count} files uploaded; at most {limit} are accepted per request",
            suggestion="Split the upload into several requests.",
        )


class RequestCancelledError(PDFMasterError):
    status_code = 499

    def __init__(self):
        super().__init__(
            code="REQUEST_CANCELLED",
            message="Request was cancelled before the document was complete",
        )


class RasterCodecError(PDFMasterError):
    def __init__(self, name: str, target: str, reason: str):
        super().__init__(
            code="RASTER_CODEC_FAILED",
            message=f"Could not convert {name} to {target}: {reason}",
        )


class ImageEmbedError(PDFMasterError):
    def __init__(self, encoding: str, reason: str):
        super().__init__(
            code="IMAGE_EMBED_FAILED",
            message=f"Image is not embeddable as {encoding}: {reason}",
        )
