"""Convert metalness/roughness PBR textures into specular/glossiness maps."""

__version__ = "1.0.0"

from .config import ConversionConfig  # noqa: E402
from .converter import (  # noqa: E402
    ConversionOrchestrator,
    TextureConverter,
    convert_textures,
)
from .core import ConversionResult, ConversionState  # noqa: E402
from .errors import (  # noqa: E402
    ConversionError,
    DecodeFailureError,
    DimensionMismatchError,
    EncodeFailureError,
    FailureKind,
    InvalidConstantError,
    MissingInputError,
    OutputDirectoryError,
)

__all__ = [
    "__version__",
    "ConversionConfig",
    "ConversionOrchestrator", "TextureConverter", "convert_textures",
    "ConversionResult", "ConversionState",
    "ConversionError", "FailureKind",
    "InvalidConstantError", "MissingInputError", "DimensionMismatchError",
    "DecodeFailureError", "OutputDirectoryError", "EncodeFailureError",
]
