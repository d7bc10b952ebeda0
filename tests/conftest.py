import os
import random
import sys

import pytest

# Ensure src and the repo root are on path for test imports
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
SRC = os.path.join(ROOT, "src")
for path in (SRC, ROOT):
    if path not in sys.path:
        sys.path.insert(0, path)

from tests.helpers import fill_cells, make_game  # noqa: E402

__all__ = ["fill_cells", "make_game"]


@pytest.fixture
def game():
    return make_game(seed=7)


@pytest.fixture
def rng():
    return random.Random(1234)
