"""Output path helpers."""

import os
from typing import Dict

DIFFUSE_FILENAME = "diffuse.png"
SPECULAR_FILENAME = "specular.png"
GLOSSINESS_FILENAME = "glossiness.png"


def get_output_paths(output_dir: str, embed_glossiness_in_alpha: bool) -> Dict[str, str]:
    """Return ``{map_name: path}`` for the files a conversion writes, in write order."""
    paths = {
        "diffuse": os.path.join(output_dir, DIFFUSE_FILENAME),
        "specular": os.path.join(output_dir, SPECULAR_FILENAME),
    }
    if not embed_glossiness_in_alpha:
        paths["glossiness"] = os.path.join(output_dir, GLOSSINESS_FILENAME)
    return paths


def ensure_output_dir(output_dir: str) -> str:
    """Create ``output_dir`` (and parents) if missing and return it.

    Raises OSError when the path cannot be created or exists as a file.
    """
    if os.path.isdir(output_dir):
        return output_dir
    os.makedirs(output_dir, exist_ok=True)
    return output_dir
