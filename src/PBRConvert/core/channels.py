"""Channel extraction and packing between 8-bit rasters and normalized floats.

Two flavours are provided with identical numerics:

- scalar helpers working on a packed 32-bit ARGB pixel value;
- array helpers working on ``(H, W, 4)`` uint8 RGBA rasters.

Normalization divides by 255.0 in float64. Packing truncates
(``floor(value * 255)``) and does not clamp; callers keep values in [0, 1].
"""

from typing import Optional, Tuple

import numpy as np

OPAQUE = 0xFF


def argb_from_rgba(r: int, g: int, b: int, a: int = OPAQUE) -> int:
    """Combine four 8-bit channels into one packed ARGB pixel."""
    r, g, b, a = (int(c) & 0xFF for c in (r, g, b, a))
    return (a << 24) | (r << 16) | (g << 8) | b


def rgba_from_argb(pixel: int) -> Tuple[int, int, int, int]:
    """Split a packed ARGB pixel into ``(r, g, b, a)``."""
    return (
        (pixel >> 16) & 0xFF,
        (pixel >> 8) & 0xFF,
        pixel & 0xFF,
        (pixel >> 24) & 0xFF,
    )


def extract_normalized(pixel: int) -> Tuple[float, float, float]:
    """Return the RGB channels of a packed pixel as floats in [0, 1].

    Alpha is discarded.
    """
    red = ((pixel >> 16) & 0xFF) / 255.0
    green = ((pixel >> 8) & 0xFF) / 255.0
    blue = (pixel & 0xFF) / 255.0
    return red, green, blue


def pack_normalized(r: float, g: float, b: float, alpha: int = OPAQUE) -> int:
    """Truncate normalized RGB to 8 bits and combine with ``alpha``."""
    red = int(r * 255)
    green = int(g * 255)
    blue = int(b * 255)
    return (alpha << 24) | (red << 16) | (green << 8) | blue


def normalize_rgb(raster: np.ndarray) -> np.ndarray:
    """Return the RGB planes of an RGBA raster as float64 in [0, 1]."""
    return raster[:, :, :3].astype(np.float64) / 255.0


def normalize_scalar(raster: np.ndarray) -> np.ndarray:
    """Return the red plane of a (logically grayscale) raster as float64."""
    return raster[:, :, 0].astype(np.float64) / 255.0


def pack_rgb(values: np.ndarray, alpha: Optional[np.ndarray] = None) -> np.ndarray:
    """Truncate ``(H, W, 3)`` normalized values into a new RGBA uint8 raster.

    ``alpha`` is an ``(H, W)`` uint8 plane; when omitted the result is opaque.
    """
    h, w = values.shape[:2]
    out = np.empty((h, w, 4), dtype=np.uint8)
    out[:, :, :3] = np.floor(values * 255.0).astype(np.uint8)
    if alpha is None:
        out[:, :, 3] = OPAQUE
    else:
        out[:, :, 3] = alpha
    return out


def is_grayscale(raster: np.ndarray) -> bool:
    """Return True when the R, G and B planes are identical."""
    rgb = raster[:, :, :3]
    return bool(
        np.array_equal(rgb[:, :, 0], rgb[:, :, 1])
        and np.array_equal(rgb[:, :, 0], rgb[:, :, 2])
    )
