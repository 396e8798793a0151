"""
PDFMaster — Raster codec.

Detects image encodings and re-encodes arbitrary rasters (gif, bmp, tiff,
webp, ...) into one of the encodings the PDF layer can embed. Uses Pillow.
"""

from __future__ import annotations

import io

from PIL import Image, ImageOps, UnidentifiedImageError

from app.errors import RasterCodecError
from app.models.document import ImageEncoding

_PIL_FORMATS: dict[str, str] = {"png": "PNG", "jpeg": "JPEG"}
_PNG_MODES = {"1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16"}


class PillowRasterCodec:
    """RasterCodec backed by Pillow."""

    def __init__(self, jpeg_quality: int = 90):
        self.jpeg_quality = jpeg_quality

    def sniff(self, data: bytes) -> str | None:
        try:
            with Image.open(io.BytesIO(data)) as img:
                return (img.format or "").lower() or None
        except (UnidentifiedImageError, OSError, ValueError):
            return None

    def transcode(self, data: bytes, encoding: ImageEncoding, name: str = "image") -> bytes:
        target = _PIL_FORMATS.get(encoding)
        if target is None:
            raise RasterCodecError(name, encoding, "unsupported target encoding")

        try:
            with Image.open(io.BytesIO(data)) as img:
                img.load()
                img = ImageOps.exif_transpose(img)
                img = _normalise_mode(img, encoding)
                buf = io.BytesIO()
                if encoding == "jpeg":
                    img.save(buf, format=target, quality=self.jpeg_quality)
                else:
                    img.save(buf, format=target, optimize=True)
        except (UnidentifiedImageError, OSError, ValueError, SyntaxError) as exc:
            raise RasterCodecError(name, encoding, str(exc) or type(exc).__name__) from exc

        return buf.getvalue()


def _normalise_mode(img: Image.Image, encoding: ImageEncoding) -> Image.Image:
    """Convert ``img`` to a mode the target encoding can store."""
    if encoding == "jpeg":
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background
        if img.mode not in ("RGB", "L"):
            return img.convert("RGB")
        return img
    if img.mode not in _PNG_MODES:
        return img.convert("RGBA" if "A" in img.mode else "RGB")
    return img
