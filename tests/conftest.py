"""Shared test fixtures."""

import shutil
import tempfile

import numpy as np
import pytest
from PIL import Image

from PBRConvert.config import ConversionConfig


def solid_raster(width, height, rgb, alpha=255):
    """Return an (H, W, 4) uint8 raster filled with one color."""
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[:, :, :3] = rgb
    arr[:, :, 3] = alpha
    return arr


def write_png(path, arr):
    """Write an RGBA uint8 array to ``path`` and return the path."""
    Image.fromarray(np.ascontiguousarray(arr)).save(path)
    return path


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp()
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def default_config(tmp_dir):
    return ConversionConfig(output_dir=tmp_dir)
