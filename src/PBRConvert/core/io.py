"""Raster I/O -- decode images into 8-bit RGBA arrays and encode them as PNG."""

import logging
import os
import threading
from pathlib import Path

import numpy as np
from PIL import Image

from ..errors import DecodeFailureError, EncodeFailureError

logger = logging.getLogger("pbr_convert.io")


def _infer_integer_mode_bit_depth(img: Image.Image, ext: str) -> int:
    """Infer bit depth for Pillow mode ``I`` images.

    Prefers explicit metadata over pixel-statistics heuristics.
    """
    bits_info = img.info.get("bits")
    if isinstance(bits_info, int) and bits_info > 0:
        return bits_info

    # TIFF BitsPerSample tag
    tag_v2 = getattr(img, "tag_v2", None)
    if tag_v2 is not None:
        bits_tag = tag_v2.get(258)
        if isinstance(bits_tag, tuple) and bits_tag:
            bits_tag = bits_tag[0]
        if isinstance(bits_tag, int) and bits_tag > 0:
            return bits_tag

    # PNG and TIFF both promote 16-bit grayscale to "I".
    if ext in (".png", ".tif", ".tiff"):
        return 16
    return 32


def _gray_to_rgba(plane: np.ndarray) -> np.ndarray:
    h, w = plane.shape
    out = np.empty((h, w, 4), dtype=np.uint8)
    out[:, :, :3] = plane[:, :, None]
    out[:, :, 3] = 0xFF
    return out


def load_raster(path: str) -> np.ndarray:
    """Load an image as a read-only ``(H, W, 4)`` uint8 RGBA array.

    High bit-depth grayscale inputs are reduced to 8 bits by dropping the
    low-order bits. Every other mode goes through Pillow's RGBA conversion.

    Raises:
        DecodeFailureError: the file cannot be decoded as an image.

    """
    ext = Path(path).suffix.lower()
    try:
        with Image.open(path) as img:
            img.load()
            mode = img.mode
            if mode in ("I;16", "I;16B", "I;16L", "I;16N"):
                logger.debug("Reducing 16-bit grayscale '%s' (%s) to 8 bits", path, mode)
                plane = (np.asarray(img, dtype=np.uint32) >> 8).astype(np.uint8)
                arr = _gray_to_rgba(plane)
            elif mode == "I":
                bit_depth = _infer_integer_mode_bit_depth(img, ext)
                logger.debug(
                    "Reducing integer image '%s' with %d-bit depth to 8 bits",
                    path, bit_depth,
                )
                raw = np.asarray(img, dtype=np.int64)
                raw = np.clip(raw, 0, (1 << bit_depth) - 1)
                plane = (raw >> max(bit_depth - 8, 0)).astype(np.uint8)
                arr = _gray_to_rgba(plane)
            elif mode == "F":
                raw = np.asarray(img, dtype=np.float64)
                amin, amax = float(raw.min()), float(raw.max())
                if amin < 0.0 or amax > 1.0:
                    logger.warning(
                        "Float image '%s' has range [%.6f, %.6f]; clipping to [0, 1].",
                        path, amin, amax,
                    )
                plane = np.floor(np.clip(raw, 0.0, 1.0) * 255.0).astype(np.uint8)
                arr = _gray_to_rgba(plane)
            elif mode == "RGBA":
                arr = np.array(img, dtype=np.uint8)
            else:
                logger.debug("Converting '%s' from %s->RGBA", path, mode)
                with img.convert("RGBA") as converted:
                    arr = np.array(converted, dtype=np.uint8)
    except MemoryError:
        raise
    except Exception as e:
        logger.debug("Failed to open image '%s' (ext=%s): %s", path, ext, e)
        raise DecodeFailureError(path, str(e)) from e

    if arr.ndim != 3 or arr.shape[2] != 4 or arr.size == 0:
        raise DecodeFailureError(path, f"unexpected decoded shape {arr.shape}")

    arr.setflags(write=False)
    logger.debug("Loaded %s (%dx%d, source mode %s)", path, arr.shape[1], arr.shape[0], mode)
    return arr


def save_raster(arr: np.ndarray, path: str) -> str:
    """Save an ``(H, W, 4)`` uint8 RGBA array as a PNG at ``path``.

    Uses an atomic write (temp file + ``os.replace``) so an interrupted
    write never leaves a truncated file under the final name.

    Raises:
        EncodeFailureError: the array has the wrong layout or the write fails.

    """
    if arr.dtype != np.uint8 or arr.ndim != 3 or arr.shape[2] != 4 or arr.size == 0:
        raise EncodeFailureError(
            path, f"expected non-empty HxWx4 uint8 array, got {arr.dtype} {arr.shape}"
        )

    tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}.png"
    try:
        with Image.fromarray(np.ascontiguousarray(arr)) as img:
            img.save(tmp_path, format="PNG")
        os.replace(tmp_path, path)
    except OSError as e:
        raise EncodeFailureError(path, str(e)) from e
    finally:
        # Clean up temp file on any error
        if os.path.exists(tmp_path):
            try:
                os.remove(tmp_path)
            except OSError:
                pass
    logger.debug("Saved: %s (%s, 8bit RGBA)", path, arr.shape)
    return path
