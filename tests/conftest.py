from pathlib import Path

import numpy as np
import pytest
from PIL import Image


def write_image(path: Path, width: int, height: int, mode: str = "RGB", seed: int = 0) -> Path:
    """Write a random-noise image of the given size."""
    rng = np.random.default_rng(seed)
    if mode == "RGB":
        arr = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    elif mode == "RGBA":
        arr = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    else:
        arr = rng.integers(0, 256, size=(height, width), dtype=np.uint8)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(arr).save(path)
    return path


@pytest.fixture
def image_dir(tmp_path):
    d = tmp_path / "images"
    d.mkdir()
    return d


@pytest.fixture
def out_dir(tmp_path):
    return tmp_path / "out"
