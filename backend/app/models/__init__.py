"""PDFMaster data models — typed contracts for the entire pipeline."""

from app.models.document import (
    DocumentModel,
    Page,
    ImportedPage,
    TextRun,
    PlacedImage,
    EmbeddedImage,
)
from app.models.upload import UploadedFile
from app.models.job import (
    JobState,
    StepTiming,
    ArtifactMetadata,
    CompressionReport,
    ImageOutcome,
    JobResult,
)

__all__ = [
    "DocumentModel",
    "Page",
    "ImportedPage",
    "TextRun",
    "PlacedImage",
    "EmbeddedImage",
    "UploadedFile",
    "JobState",
    "StepTiming",
    "ArtifactMetadata",
    "CompressionReport",
    "ImageOutcome",
    "JobResult",
]
