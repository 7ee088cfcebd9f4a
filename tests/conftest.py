"""
tests/conftest.py

Shared fixtures: example worlds and a clean cache/config per test.
"""

import pytest

from component_1_world_state import WorldState
from infrastructure.cache_manager import reset_cache_manager
from shrdlite_config import ShrdliteConfig, set_config

# ==================== Example Worlds ====================

SMALL_WORLD = {
    "stacks": [["e"], ["g", "l"], [], ["k", "m", "f"], []],
    "holding": "a",
    "arm": 0,
    "objects": {
        "a": {"form": "brick", "size": "large", "color": "green"},
        "b": {"form": "brick", "size": "small", "color": "white"},
        "c": {"form": "plank", "size": "large", "color": "red"},
        "d": {"form": "plank", "size": "small", "color": "green"},
        "e": {"form": "ball", "size": "large", "color": "white"},
        "f": {"form": "ball", "size": "small", "color": "black"},
        "g": {"form": "table", "size": "large", "color": "blue"},
        "h": {"form": "table", "size": "small", "color": "red"},
        "i": {"form": "pyramid", "size": "large", "color": "yellow"},
        "j": {"form": "pyramid", "size": "small", "color": "red"},
        "k": {"form": "box", "size": "large", "color": "yellow"},
        "l": {"form": "box", "size": "large", "color": "red"},
        "m": {"form": "box", "size": "small", "color": "blue"},
    },
}

TEST_WORLD = {
    "stacks": [["a"], ["b"], []],
    "holding": None,
    "arm": 0,
    "objects": {
        "a": {"form": "brick", "size": "small", "color": "red"},
        "b": {"form": "brick", "size": "small", "color": "white"},
    },
}

# Four columns, four objects: small enough for exhaustive uniform-cost search
TINY_WORLD = {
    "stacks": [["a", "b"], ["c"], ["d"], []],
    "holding": None,
    "arm": 0,
    "objects": {
        "a": {"form": "table", "size": "large", "color": "blue"},
        "b": {"form": "brick", "size": "small", "color": "red"},
        "c": {"form": "box", "size": "large", "color": "yellow"},
        "d": {"form": "ball", "size": "small", "color": "white"},
    },
}

TWIN_WORLD = {
    "stacks": [["a"], ["b"], ["c"]],
    "holding": None,
    "arm": 1,
    "objects": {
        "a": {"form": "brick", "size": "small", "color": "red"},
        "b": {"form": "brick", "size": "small", "color": "red"},
        "c": {"form": "table", "size": "large", "color": "green"},
    },
}

TABLE_WORLD = {
    "stacks": [["e"], ["h"], []],
    "holding": None,
    "arm": 0,
    "objects": {
        "e": {"form": "ball", "size": "large", "color": "white"},
        "h": {"form": "table", "size": "small", "color": "red"},
    },
}


@pytest.fixture
def small_world():
    return WorldState.from_dict(SMALL_WORLD)


@pytest.fixture
def test_world():
    return WorldState.from_dict(TEST_WORLD)


@pytest.fixture
def tiny_world():
    return WorldState.from_dict(TINY_WORLD)


@pytest.fixture
def twin_world():
    return WorldState.from_dict(TWIN_WORLD)


@pytest.fixture
def table_world():
    return WorldState.from_dict(TABLE_WORLD)


# ==================== Isolation ====================


@pytest.fixture(autouse=True)
def clean_runtime():
    """Fresh default configuration and empty caches for every test."""
    set_config(ShrdliteConfig())
    reset_cache_manager()
    yield
    reset_cache_manager()
    set_config(None)
