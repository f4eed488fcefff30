"""pytest configuration and shared fixtures."""

from __future__ import annotations

import os
import sys

import numpy as np
import pytest

# Ensure tests/ dir is on path so test_fpbase imports work
sys.path.insert(0, os.path.dirname(__file__))

from test_fpbase import GROCERY, SCENARIO  # noqa: E402

from fimkit import TransactionStore  # noqa: E402


@pytest.fixture(scope="session")
def grocery_store() -> TransactionStore:
    return TransactionStore.from_transactions(GROCERY)


@pytest.fixture(scope="session")
def scenario_store() -> TransactionStore:
    return TransactionStore.from_transactions(SCENARIO)


@pytest.fixture(scope="session")
def random_stores() -> list[TransactionStore]:
    """Small random matrices of varying density, reproducible."""
    rng = np.random.default_rng(7)
    stores = []
    for n_rows, n_cols, density in [(30, 8, 0.35), (40, 10, 0.5), (25, 7, 0.7), (60, 12, 0.15)]:
        stores.append(TransactionStore(rng.random((n_rows, n_cols)) < density))
    return stores
