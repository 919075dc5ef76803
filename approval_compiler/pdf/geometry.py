"""
Page geometry for image attachments.

Computes a page that fully contains an image plus padding, bounded by a
maximum and minimum page size, and the centred draw rectangle that shows the
whole image without cropping or stretching. The calculation is unit-agnostic:
the primary merge path uses points, the fallback path millimetres.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class PageSpec:
    width: float
    height: float


@dataclass(frozen=True)
class DrawRect:
    x: float
    y: float
    width: float
    height: float

    @property
    def x1(self) -> float:
        return self.x + self.width

    @property
    def y1(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class PageGeometry:
    page: PageSpec
    draw: DrawRect
    scale: float


def compute_page_geometry(width: float, height: float, padding: float,
                          max_size: Tuple[float, float],
                          min_size: Tuple[float, float]) -> PageGeometry:
    """
    Size a page around an image and place the image on it.

    Args:
        width: Intrinsic image width
        height: Intrinsic image height
        padding: Total padding added to each page dimension
        max_size: Largest allowed (width, height) of the page
        min_size: Smallest allowed (width, height) of the page

    Returns:
        PageGeometry with the page size, draw rectangle and final scale

    Raises:
        ValueError: If either image dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    max_w, max_h = max_size
    min_w, min_h = min_size

    page_w = width + padding
    page_h = height + padding

    if page_w > max_w or page_h > max_h:
        fit = min((max_w - padding) / width, (max_h - padding) / height)
        page_w = width * fit + padding
        page_h = height * fit + padding

    page_w = max(page_w, min_w)
    page_h = max(page_h, min_h)

    # Scale against the interior of the page actually chosen
    scale = min((page_w - padding) / width, (page_h - padding) / height)
    draw_w = width * scale
    draw_h = height * scale

    return PageGeometry(
        page=PageSpec(page_w, page_h),
        draw=DrawRect((page_w - draw_w) / 2, (page_h - draw_h) / 2, draw_w, draw_h),
        scale=scale,
    )
