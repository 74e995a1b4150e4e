# tests/test_config.py
# Environment-driven configuration.

import pytest

from config import PVSSConfig
from constants import HASH_TO_POINT_MAX_ITERATIONS
from errors import InvalidInput


def test_defaults():
    config = PVSSConfig.from_env({})
    assert config.number_of_nodes == 5
    assert config.threshold == 3
    assert config.max_workers is None
    assert config.log_level == "INFO"
    assert config.hash_to_point_max_iterations == HASH_TO_POINT_MAX_ITERATIONS


def test_from_env_overrides():
    config = PVSSConfig.from_env({
        "NUMBER_OF_NODES": "9",
        "THRESHOLD": "5",
        "PVSS_MAX_WORKERS": "4",
        "LOG_LEVEL": "debug",
    })
    assert (config.number_of_nodes, config.threshold, config.max_workers) == (9, 5, 4)
    assert config.log_level == "DEBUG"


@pytest.mark.parametrize("env", [
    {"THRESHOLD": "0"},
    {"THRESHOLD": "6"},
    {"NUMBER_OF_NODES": "0", "THRESHOLD": "0"},
    {"PVSS_MAX_WORKERS": "0"},
    {"THRESHOLD": "three"},
    {"LOG_LEVEL": "LOUD"},
    {"HASH_TO_POINT_MAX_ITERATIONS": "0"},
])
def test_invalid_env(env):
    with pytest.raises(InvalidInput):
        PVSSConfig.from_env(env)
