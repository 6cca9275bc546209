import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from iEdit.core.buffer import PixelBuffer  # noqa: E402


@pytest.fixture
def gradient_buffer() -> PixelBuffer:
    """A 16x12 buffer with smoothly varying colours and a translucent alpha."""

    ys, xs = np.mgrid[0:12, 0:16]
    array = np.zeros((12, 16, 4), dtype=np.uint8)
    array[..., 0] = (xs * 16) % 256
    array[..., 1] = (ys * 21) % 256
    array[..., 2] = ((xs + ys) * 9) % 256
    array[..., 3] = 200
    return PixelBuffer.from_array(array)


@pytest.fixture
def split_buffer() -> PixelBuffer:
    """An 8x6 buffer: dark red on the left four columns, light blue on the right."""

    array = np.zeros((6, 8, 3), dtype=np.uint8)
    array[:, :4] = (120, 10, 10)
    array[:, 4:] = (40, 160, 230)
    return PixelBuffer.from_array(array)
