import pytest

from chaosspace.errors import SchemaError, SelectorCardinalityError
from chaosspace.faults import FAULT_TYPES, Injection
from chaosspace.faults.pod import ContainerKill, PodFailure, PodKill
from chaosspace.schema.fields import IntField, RecordField
from chaosspace.schema.record import Record, Selector


class Point(Record):
    @classmethod
    def schema(cls):
        return [IntField('x', '0-10'), IntField('y', '0-10', optional=True)]


class Twins(Selector):
    @classmethod
    def schema(cls):
        return [RecordField('left', Point), RecordField('right', Point)]


def test_record_init_and_equality():
    p = Point(x=1)
    assert p.x == 1
    assert p.y is None
    assert p == Point(x=1, y=None)
    assert p != Point(x=2)
    assert repr(p) == "Point(x=1, y=None)"
    with pytest.raises(TypeError):
        Point(z=1)


def test_record_schema_errors():
    class Empty(Record):
        @classmethod
        def schema(cls):
            return []

    class Duplicate(Record):
        @classmethod
        def schema(cls):
            return [IntField('x', '0-1'), IntField('x', '0-2')]

    class Undeclared(Record):
        pass

    class Bogus(Record):
        @classmethod
        def schema(cls):
            return ['x']

    for record_type in (Empty, Duplicate, Undeclared, Bogus):
        with pytest.raises(SchemaError):
            record_type.fields()


def test_selector_alternative_must_be_a_record():
    class Bad(Selector):
        @classmethod
        def schema(cls):
            return [IntField('x', '0-1')]

    with pytest.raises(SchemaError):
        Bad.fields()


def test_selector_infers_choice():
    kill = PodKill(duration=5, system=0, app_idx=1)
    injection = Injection(kill)
    assert injection.choice == 0
    assert injection.alternative == 'PodKill'
    assert injection.value is kill
    assert Injection.of('PodKill', kill) == injection
    assert Injection(ContainerKill(duration=1, system=0,
                                   container_idx=0)).choice == 2


def test_selector_cardinality():
    with pytest.raises(SelectorCardinalityError):
        Injection()
    with pytest.raises(SelectorCardinalityError):
        Injection.of('PodFailure', PodKill(duration=5, system=0, app_idx=1))
    with pytest.raises(SelectorCardinalityError):
        Injection.of('NoSuchFault', PodKill(duration=5, system=0, app_idx=1))
    with pytest.raises(SelectorCardinalityError):
        Injection(PodFailure(duration=5, system=0, app_idx=1), choice=0)


def test_selector_ambiguous_alternatives():
    with pytest.raises(SelectorCardinalityError):
        Twins(Point(x=1))
    twins = Twins(Point(x=1), choice='right')
    assert twins.choice == 1
    assert twins != Twins(Point(x=1), choice='left')


def test_injection_catalog():
    names = [f.name for f in Injection.fields()]
    assert len(names) == 31
    assert names[0] == 'PodKill'
    assert names[16] == 'TimeSkew'
    assert names[-1] == 'JVMMySQLException'
    assert [f.record_type for f in Injection.fields()] == list(FAULT_TYPES)
    for record_type in FAULT_TYPES:
        fields = record_type.fields()
        assert fields[0].name == 'duration'
        assert fields[0].range == (1, 60)
        assert fields[1].name == 'system'
        assert fields[1].dynamic
        assert fields[2].dynamic
