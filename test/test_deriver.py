import pytest

from chaosspace.errors import (NoResourcesError, RangeResolutionError,
                               SchemaError, TopologyUnavailableError)
from chaosspace.faults import FAULT_TYPES, Injection
from chaosspace.faults.jvm import (JVMGarbageCollector, JVMLatency,
                                   JVMMySQLLatency)
from chaosspace.faults.pod import PodKill
from chaosspace.faults.time import TimeSkew
from chaosspace.schema.deriver import SchemaDeriver, derive
from chaosspace.schema.fields import IntField, RecordField
from chaosspace.schema.record import Record
from chaosspace.schema.resolver import RangeResolver
from chaosspace.topology.manager import CacheManager

from test import FailingProvider


class Window(Record):
    @classmethod
    def schema(cls):
        return [IntField('start', '0-10'), IntField('end', '0-10')]


class Scheduled(Record):
    @classmethod
    def schema(cls):
        return [IntField('app_idx', dynamic=True),
                RecordField('window', Window, description="When")]


@pytest.fixture
def deriver(manager):
    return SchemaDeriver(RangeResolver(manager))


def test_derive_pod_kill(deriver):
    template = deriver.derive(PodKill, 'ts')
    assert template.name == 'PodKill'
    assert template.range == (0, 2)
    assert sorted(template.children) == [0, 1, 2]

    duration, system, app = (template.children[i] for i in range(3))
    assert (duration.name, duration.range, duration.value) == \
        ('duration', (1, 60), None)
    assert duration.description == "Time Unit Minute"
    assert (system.name, system.range, system.value) == ('system', (0, 5), 0)
    assert system.description.startswith("{ts: 0, otel-demo: 1")
    assert (app.name, app.range, app.value) == ('app_idx', (0, 2), None)
    assert not template.is_populated()


def test_derive_presets_target_system(deriver):
    template = deriver.derive(PodKill, 'otel-demo')
    assert template.children[1].value == 1
    assert template.children[2].range == (0, 1)


def test_derive_negative_range(deriver):
    template = deriver.derive(TimeSkew, 'ts')
    assert template.children[3].name == 'time_offset'
    assert template.children[3].range == (-600, 600)


def test_derive_selector(deriver):
    template = deriver.derive(Injection, 'ts')
    assert template.name == 'Injection'
    assert template.range == (0, 30)
    assert len(template.children) == 31
    assert template.value is None
    assert template.children[0].name == 'PodKill'
    assert template.children[0].range == (0, 2)
    assert template.children[16].name == 'TimeSkew'
    assert template.children[17].range == (0, 6)


def test_derive_nested_record(deriver):
    template = deriver.derive(Scheduled, 'ts')
    window = template.children[1]
    assert (window.name, window.range, window.description) == \
        ('window', (0, 1), "When")
    assert window.children[1].range == (0, 10)


def test_derive_unresolvable(deriver):
    with pytest.raises(NoResourcesError):
        deriver.derive(PodKill, 'media')
    # otel-demo records no JVM methods
    with pytest.raises(NoResourcesError):
        deriver.derive(JVMLatency, 'otel-demo')
    with pytest.raises(RangeResolutionError) as e:
        deriver.derive(Injection, 'media')
    assert not isinstance(e.value, NoResourcesError)


def test_derive_selector_leaves_out_empty_alternatives(deriver):
    # otel-demo records no JVM methods and no database operations
    template = deriver.derive(Injection, 'otel-demo')
    assert template.range == (0, 30)
    assert FAULT_TYPES.index(JVMLatency) not in template.children
    assert FAULT_TYPES.index(JVMMySQLLatency) not in template.children
    assert FAULT_TYPES.index(JVMGarbageCollector) in template.children
    pod_kill = template.children[0]
    assert pod_kill.name == 'PodKill'
    assert pod_kill.children[1].value == 1


def test_derive_selector_fails_on_provider_error(documents):
    manager = CacheManager(FailingProvider(documents), timeout=None)
    deriver = SchemaDeriver(RangeResolver(manager))
    with pytest.raises(RangeResolutionError) as e:
        deriver.derive(Injection, 'ts')
    assert not isinstance(e.value, NoResourcesError)
    assert isinstance(e.value.__cause__, TopologyUnavailableError)


def test_derive_schema_errors(manager):
    class Broken(Record):
        @classmethod
        def schema(cls):
            return [IntField('mystery_idx', dynamic=True)]

    resolver = RangeResolver(manager)
    with pytest.raises(SchemaError):
        derive(Broken, 'ts', resolver)
    with pytest.raises(SchemaError):
        derive(dict, 'ts', resolver)


def test_derive_tracks_topology(documents, manager, deriver):
    assert deriver.derive(PodKill, 'ts').children[2].range == (0, 2)
    documents['ts']['labels']['ts0'].append('ts-zeta-service')
    assert deriver.derive(PodKill, 'ts').children[2].range == (0, 2)
    manager.invalidate('ts')
    assert deriver.derive(PodKill, 'ts').children[2].range == (0, 3)


def test_derive_limits_range_to_width(deriver):
    class Counter(Record):
        @classmethod
        def schema(cls):
            return [IntField('count', '0-1000', width='uint8'),
                    IntField('app_idx', dynamic=True, width='uint8')]

    template = deriver.derive(Counter, 'ts')
    assert template.children[0].range == (0, 255)
    assert template.children[1].range == (0, 2)
