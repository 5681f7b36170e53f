"""Define the immutable conversion configuration.

Use `ConversionConfig` to carry the tunable constants, the glossiness
packing mode and the output destination into the engine, and to load or
persist those settings as YAML.
"""

import dataclasses
import logging
import math
import os
import threading
from dataclasses import dataclass

import yaml

from .errors import InvalidConstantError

logger = logging.getLogger("pbr_convert.config")

# Minimum amount of base color kept in the diffuse of metals.
DEFAULT_METALNESS_CONSTANT = 0.28
# Base reflectivity of non-metals.
DEFAULT_DIELECTRIC_CONSTANT = 0.05

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def parse_constant(value, name: str) -> float:
    """Parse a constant from a number or string.

    Raises:
        InvalidConstantError: ``value`` does not parse as a finite number.

    """
    if isinstance(value, bool):
        raise InvalidConstantError(name, value)
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise InvalidConstantError(name, value) from None
    if not math.isfinite(number):
        raise InvalidConstantError(name, value)
    return number


def check_constant_range(metalness_constant: float, dielectric_constant: float):
    """Reject constants that would push an output channel outside 8 bits.

    The diffuse multiplier is clamped to 1, so only a negative metalness
    constant can leave the range. Specular blends towards the dielectric
    constant, so that one must stay in [0, 1].

    Raises:
        ValueError: a constant is out of range.

    """
    if metalness_constant < 0.0:
        raise ValueError(
            f"metalness_constant must be >= 0, got {metalness_constant}"
        )
    if not (0.0 <= dielectric_constant <= 1.0):
        raise ValueError(
            f"dielectric_constant must be in [0, 1], got {dielectric_constant}"
        )


@dataclass(frozen=True)
class ConversionConfig:
    """Settings for one metalness/roughness -> specular/glossiness conversion."""

    metalness_constant: float = DEFAULT_METALNESS_CONSTANT
    dielectric_constant: float = DEFAULT_DIELECTRIC_CONSTANT
    embed_glossiness_in_alpha: bool = False
    output_dir: str = "./output"
    log_level: str = "INFO"

    def __post_init__(self):
        """Normalize and validate fields. Raises on invalid values."""
        # frozen dataclass: assign normalized values through object.__setattr__
        object.__setattr__(
            self, "metalness_constant",
            parse_constant(self.metalness_constant, "metalness_constant"),
        )
        object.__setattr__(
            self, "dielectric_constant",
            parse_constant(self.dielectric_constant, "dielectric_constant"),
        )
        check_constant_range(self.metalness_constant, self.dielectric_constant)
        if not isinstance(self.embed_glossiness_in_alpha, bool):
            raise ValueError(
                "embed_glossiness_in_alpha must be a boolean, "
                f"got {self.embed_glossiness_in_alpha!r}"
            )
        if not isinstance(self.output_dir, (str, os.PathLike)) or not str(self.output_dir):
            raise ValueError(f"output_dir must be a non-empty path, got {self.output_dir!r}")
        object.__setattr__(self, "output_dir", os.fspath(self.output_dir))
        if str(self.log_level).upper() not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(_VALID_LOG_LEVELS)}, "
                f"got '{self.log_level}'"
            )
        object.__setattr__(self, "log_level", str(self.log_level).upper())

    def with_overrides(self, **overrides) -> "ConversionConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if not changes:
            return self
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_yaml(cls, path: str) -> "ConversionConfig":
        """Load configuration from YAML or return defaults."""
        if not os.path.exists(path):
            logger.info("Config file '%s' not found. Using defaults.", path)
            return cls()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(
                f"Failed to parse YAML config '{path}': {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Config file '{path}' must contain a YAML mapping, "
                f"got {type(data).__name__}"
            )
        try:
            return cls(**_filter_known_fields(cls(), data))
        except ValueError as exc:
            raise ValueError(f"{path}: {exc}") from exc

    def to_yaml(self, path: str):
        """Write configuration to a YAML file."""
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        ext = os.path.splitext(path)[1]
        tmp_path = f"{path}.tmp.{os.getpid()}.{threading.get_ident()}{ext}"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
            os.replace(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    pass


def _filter_known_fields(defaults: ConversionConfig, data: dict) -> dict:
    """Keep only well-typed known keys from ``data``; warn about the rest."""
    kwargs = {}
    for key, value in data.items():
        if not hasattr(defaults, key):
            logger.warning("Unknown config key ignored: '%s'", key)
            continue
        default = getattr(defaults, key)
        if value is None:
            logger.warning(
                "Config key '%s' is null but field default is %s. Using default value.",
                key, type(default).__name__,
            )
            continue
        expected_type = type(default)
        # Allow int->float promotion; constants are validated by parse_constant.
        if (not isinstance(value, expected_type)
                and not (expected_type is float
                         and isinstance(value, (int, str))
                         and not isinstance(value, bool))):
            logger.warning(
                "Config type mismatch for '%s': expected %s, got %s (%r). "
                "Using default value.",
                key, expected_type.__name__, type(value).__name__, value,
            )
            continue
        kwargs[key] = value
    return kwargs
