import json
import random

import pytest

from chaosspace.errors import OutOfRangeError, SelectorCardinalityError
from chaosspace.faults import Injection
from chaosspace.faults.jvm import JVMMySQLException
from chaosspace.faults.pod import PodKill
from chaosspace.space import ActionSpace
from chaosspace.topology.manager import CacheManager


def test_schema_and_decode_from_wire(space):
    template = space.schema(Injection, 'ts')
    wire = json.dumps(space.to_map(template, exclude_unset=True))
    assert '"value"' in wire  # the preset system leaves

    populated = space.vector_to_node(Injection, template, [0, 5, 0, 1])
    wire = json.dumps(space.to_map(populated, exclude_unset=True))
    record = space.decode(space.from_map(json.loads(wire)), 'ts')
    assert record == Injection(PodKill(duration=5, system=0, app_idx=1))
    assert space.validate(Injection, populated, 'ts')


def test_validate_raises(space):
    template = space.schema(Injection, 'ts')
    with pytest.raises(SelectorCardinalityError):
        space.validate(Injection, template, 'ts')
    node = space.encode(PodKill(duration=5, system=0, app_idx=1), 'ts')
    node.children[2].value = 3
    with pytest.raises(OutOfRangeError):
        space.validate(PodKill, node, 'ts')


def test_scenario_workload_index(space):
    template = space.schema(PodKill, 'ts')
    assert template.children[2].range == (0, 2)
    node = space.vector_to_node(PodKill, template, [10, 0, 1])
    record = space.decode(node, 'ts', record_type=PodKill)
    assert record.app_idx == 1
    assert space.groundtruth(record).service == ['ts-order-service']
    assert space.display(record)['injection_point'] == {
        'app_name': 'ts-order-service'}


def test_scenario_database_engine(provider):
    space = ActionSpace(CacheManager(provider, database_engine='postgresql',
                                     timeout=None))
    template = space.schema(JVMMySQLException, 'ts')
    assert template.children[2].range == (0, 0)
    record = space.decode(
        space.vector_to_node(JVMMySQLException, template, [1, 0, 0]), 'ts',
        record_type=JVMMySQLException)
    gt = space.groundtruth(record)
    assert gt.service == ['ts-auth-service', 'postgresql']


def test_groundtruth_uses_record_system(space):
    injection = Injection(PodKill(duration=5, system=1, app_idx=1))
    gt = space.groundtruth(injection)
    assert gt.service == ['frontend']
    assert gt.pod == ['frontend-0']


def test_dimensions_and_sampling(space):
    template = space.schema(Injection, 'ts')
    assert len(space.dimensions(Injection, template)) == 31
    node = space.random_node(Injection, template, random.Random(3))
    assert isinstance(space.decode(node, 'ts'), Injection)
