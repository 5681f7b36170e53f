"""Typed failures raised by the conversion engine.

Every error carries a :class:`FailureKind` so callers can branch on the
cause instead of parsing messages. The orchestrator catches these at its
boundary and reports them through :class:`~PBRConvert.core.records.ConversionResult`.
"""

from enum import Enum
from typing import Sequence, Tuple


class FailureKind(Enum):
    """Enumerate the closed set of conversion failure causes."""

    INVALID_CONSTANT = "invalid_constant"
    MISSING_INPUT = "missing_input"
    DIMENSION_MISMATCH = "dimension_mismatch"
    DECODE_FAILURE = "decode_failure"
    OUTPUT_DIRECTORY = "output_directory"
    ENCODE_FAILURE = "encode_failure"


class ConversionError(RuntimeError):
    """Base class for all recoverable conversion failures."""

    kind: FailureKind = None


class InvalidConstantError(ConversionError, ValueError):
    """Raised when a tunable constant is not a usable number."""

    kind = FailureKind.INVALID_CONSTANT

    def __init__(self, name: str, value):
        self.name = name
        self.value = value
        super().__init__(
            f"{name} must be a finite number, got {value!r}"
        )


class MissingInputError(ConversionError):
    """Raised when one or more input paths do not reference a file."""

    kind = FailureKind.MISSING_INPUT

    def __init__(self, paths: Sequence[str]):
        self.paths = list(paths)
        super().__init__(
            "Input file(s) not found: " + ", ".join(self.paths)
        )


class DimensionMismatchError(ConversionError):
    """Raised when the input rasters do not share width and height."""

    kind = FailureKind.DIMENSION_MISMATCH

    def __init__(self, sizes: Sequence[Tuple[int, int]]):
        self.sizes = [tuple(s) for s in sizes]
        pretty = ", ".join(f"{w}x{h}" for w, h in self.sizes)
        super().__init__(
            f"Input images must have the same dimensions (got {pretty})"
        )


class DecodeFailureError(ConversionError):
    """Raised when an existing input file cannot be decoded."""

    kind = FailureKind.DECODE_FAILURE

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to decode image '{path}': {reason}")


class OutputDirectoryError(ConversionError):
    """Raised when the output directory is missing and cannot be created."""

    kind = FailureKind.OUTPUT_DIRECTORY

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to create output folder at '{path}': {reason}")


class EncodeFailureError(ConversionError):
    """Raised when an output raster cannot be written to disk."""

    kind = FailureKind.ENCODE_FAILURE

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"Failed to write image '{path}': {reason}")
