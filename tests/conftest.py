"""Shared test fixtures for scryptpass tests."""

import pytest

from scryptpass.options import OptionStore, get_store
from scryptpass.params import ParameterSet


@pytest.fixture(autouse=True)
def _reset_options():
    """Restore the process-wide options around every test."""
    get_store().reset()
    yield
    get_store().reset()


@pytest.fixture
def fast_options():
    """Overrides with a small work factor for tests that hash repeatedly."""
    return {"cost": 1024, "block_size": 8, "parallelization": 1}


@pytest.fixture
def store():
    """A private option store, independent of the process-wide one."""
    return OptionStore()


@pytest.fixture
def default_params():
    """Documented default parameters."""
    return ParameterSet()


@pytest.fixture
def strict_params():
    """Default parameters with strict record checks."""
    return ParameterSet(strict=True)
