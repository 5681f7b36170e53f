"""Convert a metalness/roughness texture set into specular/glossiness maps.

`TextureConverter` holds the two tunable constants and computes the output
rasters in memory. `ConversionOrchestrator` drives one file-based request
through validation, conversion and writing, and reports a typed
`ConversionResult` instead of raising.

Per pixel, with base color ``b``, metalness ``m`` and roughness ``r`` (the
latter two read from the red channel only)::

    diffuse    = min(1, (1 - m) + Mc) * b
    specular   = b * m + Dc * (1 - m)
    glossiness = 1 - r
"""

import logging
import os
from typing import Optional, Tuple

import numpy as np

from .config import (
    ConversionConfig,
    DEFAULT_DIELECTRIC_CONSTANT,
    DEFAULT_METALNESS_CONSTANT,
    check_constant_range,
    parse_constant,
)
from .core import (
    ConversionResult,
    ConversionState,
    ConvertedTextures,
    ensure_output_dir,
    extract_normalized,
    get_output_paths,
    is_grayscale,
    load_raster,
    normalize_rgb,
    normalize_scalar,
    pack_normalized,
    pack_rgb,
    save_raster,
)
from .errors import (
    ConversionError,
    DimensionMismatchError,
    MissingInputError,
    OutputDirectoryError,
)

logger = logging.getLogger("pbr_convert.converter")


def validate_dimensions(*rasters: np.ndarray):
    """Raise DimensionMismatchError unless all rasters share width and height."""
    sizes = [(r.shape[1], r.shape[0]) for r in rasters]
    if any(size != sizes[0] for size in sizes[1:]):
        raise DimensionMismatchError(sizes)


def convert_pixel(base_color: int, metalness: int, roughness: int,
                  metalness_constant: float = DEFAULT_METALNESS_CONSTANT,
                  dielectric_constant: float = DEFAULT_DIELECTRIC_CONSTANT,
                  embed_glossiness_in_alpha: bool = False
                  ) -> Tuple[int, int, Optional[int]]:
    """Convert one packed ARGB pixel triple.

    Returns ``(diffuse, specular, glossiness)`` packed ARGB pixels;
    ``glossiness`` is None when it is embedded in the specular alpha.
    """
    base = extract_normalized(base_color)
    metal = extract_normalized(metalness)[0]
    rough = extract_normalized(roughness)[0]

    diffuse_factor = min(1.0, (1 - metal) + metalness_constant)
    diffuse = [diffuse_factor * c for c in base]
    specular = [(c * metal) + (dielectric_constant * (1 - metal)) for c in base]
    gloss = 1 - rough

    diffuse_px = pack_normalized(*diffuse)
    if embed_glossiness_in_alpha:
        return diffuse_px, pack_normalized(*specular, alpha=int(round(gloss * 255))), None
    return diffuse_px, pack_normalized(*specular), pack_normalized(gloss, gloss, gloss)


class TextureConverter:
    """Compute diffuse/specular/glossiness rasters from PBR inputs."""

    def __init__(self, metalness_constant: float = DEFAULT_METALNESS_CONSTANT,
                 dielectric_constant: float = DEFAULT_DIELECTRIC_CONSTANT):
        """Validate and store the tunable constants."""
        self.metalness_constant = parse_constant(metalness_constant, "metalness_constant")
        self.dielectric_constant = parse_constant(dielectric_constant, "dielectric_constant")
        check_constant_range(self.metalness_constant, self.dielectric_constant)

    @classmethod
    def from_config(cls, config: ConversionConfig) -> "TextureConverter":
        return cls(config.metalness_constant, config.dielectric_constant)

    def compute(self, base_color: np.ndarray, metalness: np.ndarray,
                roughness: np.ndarray):
        """Return normalized ``(diffuse, specular, glossiness)`` float arrays.

        ``diffuse`` and ``specular`` are ``(H, W, 3)``; ``glossiness`` is
        ``(H, W)``. Inputs must already share their geometry.
        """
        base = normalize_rgb(base_color)
        metal = normalize_scalar(metalness)[:, :, None]
        rough = normalize_scalar(roughness)

        diffuse = np.minimum(1.0, (1 - metal) + self.metalness_constant) * base
        specular = (base * metal) + (self.dielectric_constant * (1 - metal))
        gloss = 1 - rough
        return diffuse, specular, gloss

    def convert(self, base_color: np.ndarray, metalness: np.ndarray,
                roughness: np.ndarray,
                embed_glossiness_in_alpha: bool = False) -> ConvertedTextures:
        """Validate geometry and build the packed output rasters."""
        validate_dimensions(base_color, metalness, roughness)
        for name, raster in (("metalness", metalness), ("roughness", roughness)):
            if not is_grayscale(raster):
                logger.warning(
                    "%s map is not grayscale; only its red channel is used.",
                    name.capitalize(),
                )

        diffuse, specular, gloss = self.compute(base_color, metalness, roughness)

        diffuse_out = pack_rgb(diffuse)
        if embed_glossiness_in_alpha:
            alpha = np.round(gloss * 255.0).astype(np.uint8)
            return ConvertedTextures(diffuse_out, pack_rgb(specular, alpha=alpha))

        gloss_rgb = np.repeat(gloss[:, :, None], 3, axis=2)
        return ConvertedTextures(diffuse_out, pack_rgb(specular), pack_rgb(gloss_rgb))


class ConversionOrchestrator:
    """Run file-based conversions for a fixed configuration.

    Each call to :meth:`run` is independent. Failures are returned as a
    FAILED :class:`ConversionResult`; nothing is rolled back, so files
    written before an encode failure stay on disk.
    """

    def __init__(self, config: ConversionConfig = None):
        self.config = config if config is not None else ConversionConfig()
        self.converter = TextureConverter.from_config(self.config)
        self.state = None

    def _enter(self, state: ConversionState):
        logger.debug("Conversion state: %s -> %s",
                     self.state.value if self.state else "start", state.value)
        self.state = state

    def run(self, base_color_path: str, metalness_path: str,
            roughness_path: str) -> ConversionResult:
        """Convert the three input files and write the outputs."""
        result = ConversionResult(state=ConversionState.VALIDATING)
        self.state = None
        self._enter(ConversionState.VALIDATING)
        try:
            self._convert_and_write(
                (os.fspath(base_color_path), os.fspath(metalness_path),
                 os.fspath(roughness_path)),
                result,
            )
        except ConversionError as exc:
            self._enter(ConversionState.FAILED)
            result.state = ConversionState.FAILED
            result.error = exc
            logger.error("Error during texture conversion: %s", exc)
            return result

        self._enter(ConversionState.DONE)
        result.state = ConversionState.DONE
        logger.info("Textures successfully converted and saved in: %s",
                    self.config.output_dir)
        return result

    def _convert_and_write(self, inputs, result: ConversionResult):
        missing = [p for p in inputs if not os.path.isfile(p)]
        if missing:
            raise MissingInputError(missing)

        output_dir = self.config.output_dir
        try:
            ensure_output_dir(output_dir)
        except OSError as exc:
            raise OutputDirectoryError(output_dir, str(exc)) from exc

        base_color, metalness, roughness = (load_raster(p) for p in inputs)
        validate_dimensions(base_color, metalness, roughness)
        result.width, result.height = base_color.shape[1], base_color.shape[0]

        self._enter(ConversionState.CONVERTING)
        embed = self.config.embed_glossiness_in_alpha
        textures = self.converter.convert(base_color, metalness, roughness, embed)

        self._enter(ConversionState.WRITING)
        for name, path in get_output_paths(output_dir, embed).items():
            save_raster(getattr(textures, name), path)
            result.written.append(path)


def convert_textures(base_color_path: str, metalness_path: str,
                     roughness_path: str,
                     config: ConversionConfig = None) -> ConversionResult:
    """Convert one texture set; see :class:`ConversionOrchestrator`."""
    return ConversionOrchestrator(config).run(
        base_color_path, metalness_path, roughness_path
    )
