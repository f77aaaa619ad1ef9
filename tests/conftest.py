"""
Pytest configuration file for the lazy chain tests.

This file ensures that the project root is in the Python path
so that test files can import lazychain, producers, models and utils.
"""

import sys
from pathlib import Path

# Add the parent directory to the Python path
parent_dir = Path(__file__).parent.parent
if str(parent_dir) not in sys.path:
    sys.path.insert(0, str(parent_dir))

import pytest


class CountingIterator:
    """Caller-supplied producer that records every pull it receives"""

    def __init__(self, items):
        self._items = list(items)
        self._index = 0
        self.pulls = 0

    def __iter__(self):
        return self

    def __next__(self):
        self.pulls += 1
        if self._index >= len(self._items):
            raise StopIteration
        item = self._items[self._index]
        self._index += 1
        return item


@pytest.fixture
def counting_iterator():
    """Factory for iterators that count pulls"""
    return CountingIterator


@pytest.fixture(autouse=True)
def clear_metrics():
    """Start every test with an empty performance ledger"""
    from utils import clear_performance_metrics
    clear_performance_metrics()
    yield
