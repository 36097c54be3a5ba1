from chaosspace.faults.common import duration_field, system_field
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record


class TimeSkew(Record):
    """Shift the clock of a single container."""

    @classmethod
    def schema(cls):
        return [
            duration_field(),
            system_field(),
            IntField('container_idx', dynamic=True,
                     description="Container Index"),
            IntField('time_offset', '-600-600', width='int32',
                     description="Time offset in seconds"),
        ]
