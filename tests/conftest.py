import sys
from pathlib import Path

import pytest

# Ensure project root (folder containing newsverdict/) is on path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from newsverdict.bundle import ModelBundle  # noqa: E402


@pytest.fixture
def toy_bundle():
    return ModelBundle.create(
        ["report", "fake", "breaking"],
        [1.0, 2.0, 1.5],
        [0.5, -1.2, 0.3],
        0.1,
    )
