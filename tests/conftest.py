import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from chainlint import registry
from chainlint.file_filter import clear_caches


@pytest.fixture
def fresh_registry():
    """A private Registry so tests do not depend on global registration order."""
    return registry.Registry()


@pytest.fixture(autouse=True)
def _clear_filter_caches():
    yield
    clear_caches()
