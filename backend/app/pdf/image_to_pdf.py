"""
PDFMaster — Image to PDF converter.

Converts one or more uploaded images into a single document.
Each image becomes one page, centred and scaled to fit inside the margins,
with its file name as a caption. Images that cannot be embedded by any
strategy become a placeholder page instead of failing the request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from app.errors import (
    EmptyInputError,
    ImageEmbedError,
    RasterCodecError,
    UnsupportedInputTypeError,
)
from app.models.document import (
    DocumentModel,
    EmbeddedImage,
    ImageEncoding,
    PlacedImage,
    TextRun,
)
from app.models.job import ImageOutcome
from app.models.upload import UploadedFile
from app.pdf.interfaces import DocumentSerializer, RasterCodec
from app.pdf.layout import check_page_layout, compute_fit
from app.pipeline.cancel import CancellationToken, checkpoint
from app.utils.logging import logger

CAPTION_SIZE = 9
CAPTION_COLOR = (0.35, 0.35, 0.35)
NOTE_COLOR = (0.5, 0.5, 0.5)


@dataclass
class EmbedAttempt:
    strategy: str
    image: EmbeddedImage | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.image is not None


class TranscodeStrategy:
    """
    Normalise an upload to ``encoding`` and hand it to the serializer.

    ``reuse_native`` keeps the original bytes when they already are in the
    target encoding. ``fallback_to_original`` tries the original bytes when
    the codec cannot convert them.
    """

    def __init__(
        self,
        encoding: ImageEncoding,
        reuse_native: bool = False,
        fallback_to_original: bool = False,
    ):
        self.encoding = encoding
        self.reuse_native = reuse_native
        self.fallback_to_original = fallback_to_original

    @property
    def name(self) -> str:
        return self.encoding

    def attempt(
        self,
        upload: UploadedFile,
        serializer: DocumentSerializer,
        codec: RasterCodec,
    ) -> EmbedAttempt:
        result = EmbedAttempt(self.name)
        data = upload.data

        if not (self.reuse_native and codec.sniff(data) == self.encoding):
            try:
                data = codec.transcode(data, self.encoding, upload.name)
            except RasterCodecError as exc:
                result.errors.append(exc.message)
                if not self.fallback_to_original:
                    return result
                data = upload.data

        try:
            result.image = serializer.embed_image(data, self.encoding)
        except ImageEmbedError as exc:
            result.errors.append(exc.message)
        return result


DEFAULT_STRATEGIES: tuple[TranscodeStrategy, ...] = (
    TranscodeStrategy("png", reuse_native=True, fallback_to_original=True),
    TranscodeStrategy("jpeg"),
)


@dataclass
class EmbedReport:
    document: DocumentModel
    outcomes: list[ImageOutcome]

    @property
    def placeholder_count(self) -> int:
        return sum(1 for o in self.outcomes if not o.embedded)


class ImageEmbedder:
    """Builds one page per image, trying each strategy in order."""

    def __init__(
        self,
        serializer: DocumentSerializer,
        codec: RasterCodec,
        strategies: Sequence[TranscodeStrategy] = DEFAULT_STRATEGIES,
    ):
        self.serializer = serializer
        self.codec = codec
        self.strategies = tuple(strategies)

    def embed_images(
        self,
        images: Sequence[UploadedFile],
        page_size: tuple[float, float],
        margin: float,
        token: CancellationToken | None = None,
    ) -> EmbedReport:
        if not images:
            raise EmptyInputError("images")
        for upload in images:
            if not upload.is_image:
                raise UnsupportedInputTypeError(upload.name, upload.mime_type)

        page_w, page_h = page_size
        check_page_layout(page_w, page_h, margin)

        document = DocumentModel()
        outcomes: list[ImageOutcome] = []
        for i, upload in enumerate(images, start=1):
            checkpoint(token)
            attempt = self._embed(upload)
            if attempt.ok:
                self._image_page(document, upload, attempt.image, page_size, margin)
                logger.info(
                    "  Page %d: embedded %s as %s (%dx%d px)",
                    i, upload.name, attempt.strategy,
                    attempt.image.pixel_width, attempt.image.pixel_height,
                )
            else:
                self._placeholder_page(document, upload, page_size, margin)
                logger.warning(
                    "  Page %d: placeholder for %s — %s",
                    i, upload.name, "; ".join(attempt.errors),
                )
            outcomes.append(
                ImageOutcome(
                    filename=upload.name,
                    embedded=attempt.ok,
                    strategy=attempt.strategy if attempt.ok else "placeholder",
                    errors=attempt.errors,
                )
            )

        return EmbedReport(document, outcomes)

    def _embed(self, upload: UploadedFile) -> EmbedAttempt:
        errors: list[str] = []
        for strategy in self.strategies:
            attempt = strategy.attempt(upload, self.serializer, self.codec)
            errors.extend(f"{strategy.name}: {e}" for e in attempt.errors)
            if attempt.ok:
                attempt.errors = errors
                return attempt
        return EmbedAttempt("placeholder", errors=errors)

    def _image_page(
        self,
        document: DocumentModel,
        upload: UploadedFile,
        image: EmbeddedImage,
        page_size: tuple[float, float],
        margin: float,
    ) -> None:
        page_w, page_h = page_size
        fit = compute_fit(image.pixel_width, image.pixel_height, page_w, page_h, margin)
        page = document.new_page(page_w, page_h)
        page.draw(PlacedImage(image, fit.x, fit.y, fit.width, fit.height))
        page.draw(
            TextRun(
                upload.name,
                x=max(margin, CAPTION_SIZE),
                y=page_h - max(margin / 2, CAPTION_SIZE),
                font_size=CAPTION_SIZE,
                color=CAPTION_COLOR,
            )
        )

    def _placeholder_page(
        self,
        document: DocumentModel,
        upload: UploadedFile,
        page_size: tuple[float, float],
        margin: float,
    ) -> None:
        page_w, page_h = page_size
        left = max(margin, 18)
        top = max(margin, 18) + 12
        page = document.new_page(page_w, page_h)
        page.draw(TextRun(f"Image: {upload.name}", x=left, y=top, font_size=12))
        page.draw(
            TextRun(
                "This image could not be embedded: the file is not a readable raster image.",
                x=left,
                y=top + 20,
                font_size=10,
                color=NOTE_COLOR,
            )
        )
