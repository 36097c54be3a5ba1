import random

import pytest

from chaosspace.errors import (MalformedNodeError, OutOfRangeError,
                               RangeResolutionError)
from chaosspace.faults import FAULT_TYPES, Injection
from chaosspace.faults.jvm import JVMLatency
from chaosspace.faults.pod import PodKill
from chaosspace.schema.codec import NodeCodec
from chaosspace.schema.deriver import SchemaDeriver
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record
from chaosspace.schema.resolver import RangeResolver
from chaosspace.schema.vectors import (action_dimensions, random_node,
                                       random_vector, vector_to_node)


class Point(Record):
    @classmethod
    def schema(cls):
        return [IntField('x', '0-10'), IntField('y', '0-10', optional=True)]


@pytest.fixture
def resolver(manager):
    return RangeResolver(manager)


@pytest.fixture
def template(resolver):
    return SchemaDeriver(resolver).derive(Injection, 'ts')


def test_record_dimensions(resolver):
    template = SchemaDeriver(resolver).derive(PodKill, 'ts')
    dims = action_dimensions(PodKill, template)
    assert [d.path for d in dims] == [(0,), (1,), (2,)]
    assert [d.name for d in dims] == ['duration', 'system', 'app_idx']
    assert [(d.min, d.max) for d in dims] == [(1, 60), (0, 5), (0, 2)]
    assert [d.default for d in dims] == [None, 0, None]


def test_selector_dimensions(template):
    alternatives = action_dimensions(Injection, template)
    assert len(alternatives) == 31
    time_skew = alternatives[16]
    assert [d.name for d in time_skew] == ['duration', 'system',
                                           'container_idx', 'time_offset']
    assert (time_skew[3].min, time_skew[3].max) == (-600, 600)


def test_vector_to_node(resolver, template):
    node = vector_to_node(Injection, template, [0, 5, 0, 1])
    record = NodeCodec(resolver).decode(Injection, node, 'ts')
    assert record == Injection(PodKill(duration=5, system=0, app_idx=1))
    # The template is left untouched
    assert template.children[0].children[0].value is None


def test_vector_to_node_errors(template):
    with pytest.raises(MalformedNodeError):
        vector_to_node(Injection, template, [])
    with pytest.raises(MalformedNodeError):
        vector_to_node(Injection, template, [0, 5, 0])
    with pytest.raises(OutOfRangeError):
        vector_to_node(Injection, template, [31, 5, 0, 1])
    with pytest.raises(OutOfRangeError) as e:
        vector_to_node(Injection, template, [0, 61, 0, 1])
    assert e.value.field == 'duration'


def test_vector_optional_values(resolver):
    template = SchemaDeriver(resolver).derive(Point, 'ts')
    node = vector_to_node(Point, template, [3, None])
    assert list(node.children) == [0]
    assert NodeCodec(resolver).decode(Point, node, 'ts') == Point(x=3)
    with pytest.raises(MalformedNodeError):
        vector_to_node(Point, template, [None, 3])


def test_random_node_is_always_valid(resolver, template):
    codec = NodeCodec(resolver)
    rng = random.Random(1234)
    seen = set()
    for _ in range(200):
        record = codec.decode(Injection, random_node(Injection, template, rng),
                              'ts')
        assert record.value.system == 0
        seen.add(record.alternative)
    assert len(seen) > 20


def test_random_vector_is_seeded(template):
    first = random_vector(Injection, template, random.Random(7))
    second = random_vector(Injection, template, random.Random(7))
    assert first == second


def test_sampling_skips_unavailable_alternatives(resolver):
    # otel-demo records no JVM methods and no database operations
    template = SchemaDeriver(resolver).derive(Injection, 'otel-demo')
    alternatives = action_dimensions(Injection, template)
    assert len(alternatives) == 31
    missing = FAULT_TYPES.index(JVMLatency)
    assert alternatives[missing] is None
    assert alternatives[0] is not None

    with pytest.raises(RangeResolutionError):
        vector_to_node(Injection, template, [missing, 5, 1, 0, 100])

    codec = NodeCodec(resolver)
    rng = random.Random(99)
    for _ in range(100):
        node = random_node(Injection, template, rng)
        record = codec.decode(Injection, node, 'otel-demo')
        assert alternatives[record.choice] is not None
        assert record.value.system == 1
