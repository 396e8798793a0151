"""
PDFMaster — Page geometry.

Named page sizes and the scale-to-fit computation used when an image is
placed on a page. All values are PDF points (72 per inch).
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from app.errors import LayoutError

PAGE_SIZES: dict[str, tuple[float, float]] = {
    "letter": (612.0, 792.0),
    "a4": (595.28, 841.89),
    "legal": (612.0, 1008.0),
}


@dataclass(frozen=True)
class ImagePlacement:
    width: float
    height: float
    x: float
    y: float


def resolve_page_size(name: str) -> tuple[float, float]:
    try:
        return PAGE_SIZES[name.strip().lower()]
    except KeyError:
        raise LayoutError(
            f"Unknown page size '{name}'; expected one of {', '.join(sorted(PAGE_SIZES))}"
        ) from None


def _check_positive(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value) or value <= 0:
            raise LayoutError(f"{name} must be a positive finite number, got {value}")


def check_page_layout(page_width: float, page_height: float, margin: float) -> None:
    """Raise LayoutError unless the margins leave a printable area."""
    _check_positive(page_width=page_width, page_height=page_height)
    if not math.isfinite(margin) or margin < 0:
        raise LayoutError(f"margin must be a non-negative finite number, got {margin}")
    if 2 * margin >= min(page_width, page_height):
        raise LayoutError(
            f"margin {margin:g} leaves no room on a {page_width:g}x{page_height:g} page"
        )


def compute_fit(
    natural_width: float,
    natural_height: float,
    page_width: float,
    page_height: float,
    margin: float,
) -> ImagePlacement:
    """
    Place an image of the given natural size centred on the page.

    Images that fit inside the margins keep their natural size. Larger ones
    are scaled down uniformly until they fit; images are never scaled up.
    """
    _check_positive(natural_width=natural_width, natural_height=natural_height)
    check_page_layout(page_width, page_height, margin)

    max_w = page_width - 2 * margin
    max_h = page_height - 2 * margin

    if natural_width <= max_w and natural_height <= max_h:
        width, height = float(natural_width), float(natural_height)
    else:
        scale = min(max_w / natural_width, max_h / natural_height)
        width = natural_width * scale
        height = natural_height * scale

    return ImagePlacement(
        width=width,
        height=height,
        x=(page_width - width) / 2,
        y=(page_height - height) / 2,
    )
