import json
import os.path as path

import pytest

from chaosspace.space import ActionSpace
from chaosspace.topology.manager import CacheManager
from chaosspace.topology.provider import StaticTopologyProvider

TOPOLOGY_FILE = path.join(path.dirname(__file__), 'fixtures', 'topology.json')


def load_documents():
    with open(TOPOLOGY_FILE) as f:
        return json.load(f)


@pytest.fixture
def documents():
    return load_documents()


@pytest.fixture
def provider(documents):
    return StaticTopologyProvider(documents)


@pytest.fixture
def manager(provider):
    return CacheManager(provider, timeout=None)


@pytest.fixture
def space(manager):
    return ActionSpace(manager)
