"""Result records returned by the conversion orchestrator."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import numpy as np

from ..errors import ConversionError, FailureKind


class ConversionState(Enum):
    """States of a single conversion request."""

    VALIDATING = "validating"
    CONVERTING = "converting"
    WRITING = "writing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ConvertedTextures:
    """In-memory output rasters, each ``(H, W, 4)`` uint8 RGBA."""

    diffuse: np.ndarray
    specular: np.ndarray
    glossiness: Optional[np.ndarray] = None

    @property
    def size(self):
        h, w = self.diffuse.shape[:2]
        return w, h


@dataclass
class ConversionResult:
    """Outcome of one conversion request."""

    state: ConversionState
    written: List[str] = field(default_factory=list)
    error: Optional[ConversionError] = None
    width: int = 0
    height: int = 0

    @property
    def ok(self) -> bool:
        return self.state is ConversionState.DONE

    @property
    def failure(self) -> Optional[FailureKind]:
        return self.error.kind if self.error is not None else None

    def to_dict(self) -> dict:
        """Return a JSON-friendly summary of the result."""
        return {
            "state": self.state.value,
            "written": list(self.written),
            "failure": self.failure.value if self.failure else None,
            "message": str(self.error) if self.error is not None else None,
            "width": self.width,
            "height": self.height,
        }
