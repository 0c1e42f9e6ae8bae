"""
pytest configuration for data_explorer tests.
"""

import datetime as dt

import pytest
import sys
from pathlib import Path

# Add the parent directory to sys.path to ensure imports work
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def records():
    """Small dataset with categorical, quantitative and temporal columns."""
    return [
        {"color": "red", "size": 1.0, "weight": 10, "day": dt.date(2024, 1, 1), "flag": "x"},
        {"color": "blue", "size": 2.5, "weight": 12, "day": dt.date(2024, 1, 2), "flag": "x"},
        {"color": "red", "size": 3.0, "weight": 9, "day": dt.date(2024, 1, 3), "flag": "x"},
        {"color": "green", "size": 4.5, "weight": 15, "day": dt.date(2024, 1, 5), "flag": "x"},
        {"color": "blue", "size": 0.5, "weight": 11, "day": dt.date(2024, 1, 8), "flag": "x"},
    ]


@pytest.fixture
def abc_specs():
    """Three series A, B, C where A and C are in multivariate group g1."""
    return [
        {"name": "A", "data_method": lambda r: r["size"], "multivariate": "g1"},
        {"name": "B", "data_method": lambda r: r["color"]},
        {"name": "C", "data_method": lambda r: r["weight"], "multivariate": "g1"},
    ]
