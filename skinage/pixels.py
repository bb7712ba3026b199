import logging
import math
from dataclasses import dataclass, field
from typing import Protocol, Sequence, Tuple

import cv2
import numpy as np

from .schemas import Point

logger = logging.getLogger("skinage.pixels")


class PixelBuffer(Protocol):
    """Read access to an RGB image, scoped to rectangular sub-regions."""

    width: int
    height: int

    def get_region(self, x: int, y: int, w: int, h: int) -> np.ndarray:
        """Return an (h, w, 3) RGB array for the given in-bounds rectangle."""
        ...


class ArrayPixelBuffer:
    """PixelBuffer over an in-memory (H, W, 3) RGB numpy array."""

    def __init__(self, image_rgb: np.ndarray):
        if image_rgb.ndim != 3 or image_rgb.shape[2] < 3:
            raise ValueError(f"Expected an (H, W, 3) RGB image, got shape {image_rgb.shape}")
        self._image = image_rgb
        self.height, self.width = image_rgb.shape[:2]

    @classmethod
    def from_bgr(cls, img_bgr: np.ndarray) -> "ArrayPixelBuffer":
        """OpenCV images are BGR; the statistics are defined on RGB."""
        return cls(cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB))

    def get_region(self, x: int, y: int, w: int, h: int) -> np.ndarray:
        return self._image[y : y + h, x : x + w, :3]


@dataclass
class PixelSamples:
    """Per-pixel channel values found inside one zone polygon."""

    r: np.ndarray = field(default_factory=lambda: np.empty(0))
    g: np.ndarray = field(default_factory=lambda: np.empty(0))
    b: np.ndarray = field(default_factory=lambda: np.empty(0))
    brightness: np.ndarray = field(default_factory=lambda: np.empty(0))

    @property
    def count(self) -> int:
        return int(self.brightness.size)


def get_bounding_box(polygon: Sequence[Point]) -> Tuple[int, int, int, int]:
    """(min_x, min_y, max_x, max_y), expanded outward to whole pixels."""
    xs = [p.x for p in polygon]
    ys = [p.y for p in polygon]
    return (
        math.floor(min(xs)),
        math.floor(min(ys)),
        math.ceil(max(xs)),
        math.ceil(max(ys)),
    )


def is_point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Ray casting: a point is inside if a ray crosses an odd number of edges."""
    inside = False
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        if (yi > point.y) != (yj > point.y) and point.x < (xj - xi) * (
            point.y - yi
        ) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def polygon_mask(polygon: Sequence[Point], xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """Vectorized is_point_in_polygon over coordinate grids of equal shape."""
    inside = np.zeros(xs.shape, dtype=bool)
    j = len(polygon) - 1
    for i in range(len(polygon)):
        xi, yi = polygon[i].x, polygon[i].y
        xj, yj = polygon[j].x, polygon[j].y
        j = i
        if yi == yj:
            # Horizontal edges never straddle a scanline
            continue
        straddles = (yi > ys) != (yj > ys)
        x_cross = (xj - xi) * (ys - yi) / (yj - yi) + xi
        inside ^= straddles & (xs < x_cross)
    return inside


def extract_polygon_pixels(
    buffer: PixelBuffer, polygon: Sequence[Point], image_width: int, image_height: int
) -> PixelSamples:
    """
    Collect the RGB values of every pixel inside ``polygon``.

    Only the polygon's bounding box (clipped to the image) is read from the
    buffer. A polygon entirely outside the image yields empty samples.
    """
    min_x, min_y, max_x, max_y = get_bounding_box(polygon)

    min_x = max(0, min_x)
    min_y = max(0, min_y)
    max_x = min(image_width, max_x)
    max_y = min(image_height, max_y)

    width = max_x - min_x
    height = max_y - min_y

    if width <= 0 or height <= 0:
        logger.warning("Polygon lies outside the image; no pixels extracted")
        return PixelSamples()

    region = np.asarray(buffer.get_region(min_x, min_y, width, height), dtype=np.float64)

    ys, xs = np.mgrid[min_y:max_y, min_x:max_x]
    mask = polygon_mask(polygon, xs, ys)

    pixels = region[mask]
    r, g, b = pixels[:, 0], pixels[:, 1], pixels[:, 2]
    return PixelSamples(r=r, g=g, b=b, brightness=(r + g + b) / 3)


def _population_std(values: np.ndarray) -> float:
    if values.size == 0:
        return 0.0
    return float(np.std(values))


def calculate_texture_variance(samples: PixelSamples) -> float:
    """Population std of brightness. Wrinkle proxy."""
    return _population_std(samples.brightness)


def calculate_pigmentation_variance(samples: PixelSamples) -> float:
    """Mean of the R, G, B population stds. Tone unevenness proxy."""
    return (
        _population_std(samples.r) + _population_std(samples.g) + _population_std(samples.b)
    ) / 3


def calculate_average_brightness(samples: PixelSamples) -> float:
    if samples.count == 0:
        return 0.0
    return float(np.mean(samples.brightness))
