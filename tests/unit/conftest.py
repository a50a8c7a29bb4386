"""
Unit test fixtures: factory-built inputs.
"""

import pytest

from tests.factories.model_factories import (
    make_block_input,
    make_dataset_input,
    make_farm,
)


@pytest.fixture
def farm_document():
    """Return randomized farm document dict."""
    return make_farm()


@pytest.fixture
def block_input():
    """Return randomized block create payload."""
    return make_block_input()


@pytest.fixture
def dataset_input():
    """Return randomized dataset create payload."""
    return make_dataset_input()
