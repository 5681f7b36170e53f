"""Core utilities -- re-exports all public symbols for convenience."""

from .channels import (
    argb_from_rgba,
    rgba_from_argb,
    extract_normalized,
    pack_normalized,
    normalize_rgb,
    normalize_scalar,
    pack_rgb,
    is_grayscale,
)
from .io import load_raster, save_raster
from .paths import (
    DIFFUSE_FILENAME,
    SPECULAR_FILENAME,
    GLOSSINESS_FILENAME,
    get_output_paths,
    ensure_output_dir,
)
from .records import ConversionState, ConvertedTextures, ConversionResult
from .logging import setup_logging

__all__ = [
    "argb_from_rgba", "rgba_from_argb",
    "extract_normalized", "pack_normalized",
    "normalize_rgb", "normalize_scalar", "pack_rgb", "is_grayscale",
    "load_raster", "save_raster",
    "DIFFUSE_FILENAME", "SPECULAR_FILENAME", "GLOSSINESS_FILENAME",
    "get_output_paths", "ensure_output_dir",
    "ConversionState", "ConvertedTextures", "ConversionResult",
    "setup_logging",
]
