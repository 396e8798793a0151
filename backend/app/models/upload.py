"""PDFMaster — Uploaded file value handed in by the HTTP layer."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UploadedFile:
    name: str
    mime_type: str
    data: bytes = field(repr=False)

    @property
    def byte_length(self) -> int:
        return len(self.data)

    @property
    def is_image(self) -> bool:
        return self.mime_type.lower().startswith("image/")
