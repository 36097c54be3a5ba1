from chaosspace.faults.common import duration_field, system_field
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record


def _app_fields():
    return [
        duration_field(),
        system_field(),
        IntField('app_idx', dynamic=True, description="App Index"),
    ]


class PodKill(Record):
    """Kill every pod of a workload."""

    @classmethod
    def schema(cls):
        return _app_fields()


class PodFailure(Record):
    """Make every pod of a workload unavailable."""

    @classmethod
    def schema(cls):
        return _app_fields()


class ContainerKill(Record):
    """Kill a single container."""

    @classmethod
    def schema(cls):
        return [
            duration_field(),
            system_field(),
            IntField('container_idx', dynamic=True,
                     description="Container Index"),
        ]
