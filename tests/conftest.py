# tests/conftest.py
# Shared fixtures and Hypothesis configuration for the PVSS test suite.

import logging
import os
from typing import Callable, Dict, List, Tuple

import pytest
from hypothesis import HealthCheck, settings

from crypto_manager import CryptoManager
from curve import CurveContext, default_context
from data_models import NodeRecord
from field import Scalar

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
test_logger = logging.getLogger("pvss_pytest")

# --- Hypothesis Configuration ---
# Pure-Python scalar multiplication is slow; keep example counts small by default.
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.register_profile(
    "ci",
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
)
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "dev"))

DEFAULT_NUM_NODES = 5
DEFAULT_THRESHOLD = 3

NodeFactory = Callable[[int], Tuple[Dict[int, Scalar], List[NodeRecord]]]


@pytest.fixture(scope="session")
def ctx() -> CurveContext:
    return default_context()


@pytest.fixture
def make_nodes() -> NodeFactory:
    """Factory returning (private keys by index, ordered node records) for n nodes."""

    def factory(n: int) -> Tuple[Dict[int, Scalar], List[NodeRecord]]:
        keys: Dict[int, Scalar] = {}
        nodes: List[NodeRecord] = []
        for i in range(1, n + 1):
            private_key, record = CryptoManager.generate_node_keypair(i)
            keys[i] = private_key
            nodes.append(record)
        return keys, nodes

    return factory


@pytest.fixture
def default_nodes(make_nodes: NodeFactory) -> Tuple[Dict[int, Scalar], List[NodeRecord]]:
    return make_nodes(DEFAULT_NUM_NODES)
