import json

import pytest

from chaosspace.errors import (MalformedNodeError, OutOfRangeError,
                               RangeResolutionError, SelectorCardinalityError,
                               TypeMismatchError)
from chaosspace.faults import FAULT_TYPES, Injection
from chaosspace.faults.jvm import JVMLatency
from chaosspace.faults.network import NetworkDelay
from chaosspace.faults.pod import PodKill
from chaosspace.faults.time import TimeSkew
from chaosspace.schema.codec import NodeCodec
from chaosspace.schema.fields import IntField
from chaosspace.schema.node import Node
from chaosspace.schema.record import Record
from chaosspace.schema.resolver import RangeResolver


class Point(Record):
    @classmethod
    def schema(cls):
        return [IntField('x', '0-10'), IntField('y', '0-10', optional=True)]


class Small(Record):
    @classmethod
    def schema(cls):
        return [IntField('count', '0-1000', width='uint8')]


@pytest.fixture
def codec(manager):
    return NodeCodec(RangeResolver(manager))


def pod_kill_node(duration=5, system=0, app_idx=1):
    return Node('PodKill', (0, 2), {
        0: Node('duration', value=duration),
        1: Node('system', value=system),
        2: Node('app_idx', value=app_idx),
    })


def test_decode_pod_kill(codec):
    record = codec.decode(PodKill, pod_kill_node(), 'ts')
    assert record == PodKill(duration=5, system=0, app_idx=1)


@pytest.mark.parametrize('record', [
    PodKill(duration=5, system=0, app_idx=1),
    TimeSkew(duration=1, system=0, container_idx=4, time_offset=-600),
    NetworkDelay(duration=60, system=0, network_pair_idx=3, latency=2000,
                 correlation=0, jitter=1000, direction=3),
    Injection(PodKill(duration=5, system=0, app_idx=2)),
    Injection(TimeSkew(duration=1, system=0, container_idx=0,
                       time_offset=600)),
])
def test_round_trip(codec, record):
    node = codec.encode(record, 'ts')
    assert node.is_populated()
    assert codec.decode(type(record), node, 'ts') == record
    assert Node.from_map(json.loads(json.dumps(node.to_map()))) == node
    wire = json.loads(json.dumps(node.to_map(exclude_unset=True)))
    assert codec.decode(type(record), Node.from_map(wire), 'ts') == record


def test_encode_selector(codec):
    node = codec.encode(Injection(PodKill(duration=5, system=0, app_idx=1)),
                        'ts')
    assert node.name == 'Injection'
    assert node.range == (0, 30)
    assert node.value == 0
    assert list(node.children) == [0]
    child = node.children[0]
    assert child.name == 'PodKill'
    assert child.children[2].range == (0, 2)


@pytest.mark.parametrize('duration', [1, 60])
def test_static_bounds_accepted(codec, duration):
    assert codec.decode(PodKill, pod_kill_node(duration=duration),
                        'ts').duration == duration


@pytest.mark.parametrize('duration', [0, 61])
def test_static_bounds_rejected(codec, duration):
    with pytest.raises(OutOfRangeError) as e:
        codec.decode(PodKill, pod_kill_node(duration=duration), 'ts')
    assert e.value.field == 'duration'
    assert e.value.value == duration
    assert e.value.bounds == (1, 60)
    assert not e.value.retryable


def test_dynamic_bounds(codec):
    assert codec.decode(PodKill, pod_kill_node(app_idx=2), 'ts').app_idx == 2
    for app_idx in (-1, 3):
        with pytest.raises(OutOfRangeError) as e:
            codec.decode(PodKill, pod_kill_node(app_idx=app_idx), 'ts')
        assert e.value.bounds == (0, 2)


def test_negative_range(codec):
    node = codec.encode(TimeSkew(duration=1, system=0, container_idx=0,
                                 time_offset=-600), 'ts')
    node.children[3].value = -601
    with pytest.raises(OutOfRangeError):
        codec.decode(TimeSkew, node, 'ts')


def test_stale_index_after_invalidate(documents, manager, codec):
    node = codec.encode(PodKill(duration=5, system=0, app_idx=2), 'ts')
    documents['ts']['labels']['ts0'] = ['ts-auth-service', 'ts-order-service']
    # Same generation: the index is still valid
    assert codec.decode(PodKill, node, 'ts').app_idx == 2
    manager.invalidate('ts')
    with pytest.raises(OutOfRangeError) as e:
        codec.decode(PodKill, node, 'ts')
    assert e.value.bounds == (0, 1)


def test_system_leaf_switches_target(codec):
    # otel-demo has two workloads, ts has three
    record = codec.decode(PodKill, pod_kill_node(system=1, app_idx=1), 'ts')
    assert record.system == 1
    with pytest.raises(OutOfRangeError) as e:
        codec.decode(PodKill, pod_kill_node(system=1, app_idx=2), 'ts')
    assert e.value.bounds == (0, 1)
    with pytest.raises(OutOfRangeError):
        codec.decode(PodKill, pod_kill_node(system=6), 'ts')


def test_selector_cardinality(codec):
    template = Node('Injection', (0, 30))
    with pytest.raises(SelectorCardinalityError):
        codec.decode(Injection, template, 'ts')

    two = Node('Injection', (0, 30), {0: pod_kill_node(),
                                      1: pod_kill_node()})
    with pytest.raises(SelectorCardinalityError):
        codec.decode(Injection, two, 'ts')

    mismatch = Node('Injection', (0, 30), {0: pod_kill_node()}, value=1)
    with pytest.raises(SelectorCardinalityError):
        codec.decode(Injection, mismatch, 'ts')

    inferred = Node('Injection', (0, 30), {0: pod_kill_node()})
    assert codec.decode(Injection, inferred, 'ts') == \
        Injection(PodKill(duration=5, system=0, app_idx=1))

    with pytest.raises(OutOfRangeError):
        codec.decode(Injection, Node('Injection', (0, 30),
                                     {31: pod_kill_node()}), 'ts')


def test_malformed_nodes(codec):
    missing = pod_kill_node()
    del missing.children[2]
    with pytest.raises(MalformedNodeError) as e:
        codec.decode(PodKill, missing, 'ts')
    assert e.value.field == 'app_idx'

    unset = pod_kill_node(app_idx=None)
    with pytest.raises(MalformedNodeError):
        codec.decode(PodKill, unset, 'ts')

    nested = pod_kill_node()
    nested.children[0].children = {0: Node('x', value=1)}
    with pytest.raises(MalformedNodeError):
        codec.decode(PodKill, nested, 'ts')

    extra = pod_kill_node()
    extra.children[3] = Node('extra', value=1)
    with pytest.raises(OutOfRangeError):
        codec.decode(PodKill, extra, 'ts')

    bad_key = pod_kill_node()
    bad_key.children['2'] = bad_key.children.pop(2)
    with pytest.raises(MalformedNodeError):
        codec.decode(PodKill, bad_key, 'ts')

    with pytest.raises(MalformedNodeError):
        codec.decode(PodKill, Node('PodKill', value=1), 'ts')
    with pytest.raises(MalformedNodeError):
        codec.decode(PodKill, {'children': {}}, 'ts')


def test_type_mismatch(codec):
    with pytest.raises(TypeMismatchError):
        codec.decode(PodKill, pod_kill_node(duration=True), 'ts')
    with pytest.raises(TypeMismatchError):
        codec.decode(PodKill, pod_kill_node(duration="5"), 'ts')
    with pytest.raises(TypeMismatchError):
        codec.encode(PodKill(duration=5.0, system=0, app_idx=1), 'ts')
    with pytest.raises(TypeMismatchError):
        codec.encode({'duration': 5}, 'ts')


def test_encode_validates(codec):
    with pytest.raises(OutOfRangeError):
        codec.encode(PodKill(duration=5, system=0, app_idx=3), 'ts')
    with pytest.raises(MalformedNodeError):
        codec.encode(PodKill(duration=5, system=0), 'ts')


def test_optional_fields(codec):
    node = codec.encode(Point(x=3), 'ts')
    assert list(node.children) == [0]
    assert codec.decode(Point, node, 'ts') == Point(x=3)
    node = codec.encode(Point(x=3, y=4), 'ts')
    assert codec.decode(Point, node, 'ts') == Point(x=3, y=4)


def test_width_overflow(codec):
    assert codec.decode(Small, Node(children={0: Node(value=255)}),
                        'ts').count == 255
    with pytest.raises(OutOfRangeError) as e:
        codec.decode(Small, Node(children={0: Node(value=256)}), 'ts')
    assert e.value.bounds == (0, 255)


def test_index_becomes_valid_after_invalidate(documents, manager, codec):
    node = pod_kill_node(app_idx=3)
    with pytest.raises(OutOfRangeError) as e:
        codec.decode(PodKill, node, 'ts')
    assert e.value.bounds == (0, 2)
    documents['ts']['labels']['ts0'].append('ts-zeta-service')
    # Same generation: the new workload is not visible yet
    with pytest.raises(OutOfRangeError):
        codec.decode(PodKill, node, 'ts')
    manager.invalidate('ts')
    assert codec.decode(PodKill, node, 'ts').app_idx == 3


def test_selector_rejects_bool_key(codec):
    node = Node('Injection', (0, 30), {True: pod_kill_node()})
    with pytest.raises(MalformedNodeError):
        codec.decode(Injection, node, 'ts')


def test_decode_unavailable_alternative(codec):
    # otel-demo records no JVM methods
    index = FAULT_TYPES.index(JVMLatency)
    node = Node('Injection', (0, 30), {index: Node('JVMLatency', (0, 3), {
        0: Node('duration', value=5),
        1: Node('system', value=1),
        2: Node('method_idx', value=0),
        3: Node('latency_duration', value=100),
    })})
    with pytest.raises(RangeResolutionError) as e:
        codec.decode(Injection, node, 'otel-demo')
    assert e.value.field == 'method_idx'
    assert e.value.retryable
