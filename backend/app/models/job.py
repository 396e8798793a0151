"""
PDFMaster — Job result and pipeline output contracts.

Every operation returns a JobResult with full traceability:
timings, hashes, per-image outcomes and artifact metadata.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, Field


class JobState(str, enum.Enum):
    RECEIVED = "RECEIVED"
    VALIDATED = "VALIDATED"
    DECODED = "DECODED"
    COMPOSED = "COMPOSED"
    ENCODED = "ENCODED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


class StepTiming(BaseModel):
    step: str
    duration_ms: int
    status: str = "ok"  # ok | skipped | failed
    detail: str = ""


class ArtifactMetadata(BaseModel):
    filename: str
    size_bytes: int
    pages: int = 0
    content_hash: str = ""  # SHA-256 of output PDF
    media_type: str = "application/pdf"


class CompressionReport(BaseModel):
    original_size: int
    output_size: int
    ratio: float  # percent saved, negative when the output grew

    @classmethod
    def from_sizes(cls, original_size: int, output_size: int) -> "CompressionReport":
        ratio = (original_size - output_size) / original_size * 100 if original_size else 0.0
        return cls(
            original_size=original_size,
            output_size=output_size,
            ratio=round(ratio, 1),
        )


class ImageOutcome(BaseModel):
    filename: str
    embedded: bool
    strategy: str = ""  # png | jpeg | placeholder
    errors: list[str] = Field(default_factory=list)


class JobResult(BaseModel):
    """Complete output contract for every operation."""

    job_id: str
    operation: str
    input_hashes: list[str] = Field(default_factory=list)  # SHA-256 per input file
    artifact: ArtifactMetadata | None = None
    timings: list[StepTiming] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    compression: CompressionReport | None = None
    images: list[ImageOutcome] = Field(default_factory=list)
