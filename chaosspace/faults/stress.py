from chaosspace.faults.common import duration_field, system_field
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record


class MemoryStress(Record):

    @classmethod
    def schema(cls):
        return [
            duration_field(),
            system_field(),
            IntField('container_idx', dynamic=True,
                     description="Container Index"),
            IntField('memory_size', '1-1024',
                     description="Memory Size Unit MB"),
            IntField('mem_worker', '1-4',
                     description="Memory Stress Threads"),
        ]


class CPUStress(Record):

    @classmethod
    def schema(cls):
        return [
            duration_field(),
            system_field(),
            IntField('container_idx', dynamic=True,
                     description="Container Index"),
            IntField('cpu_load', '1-100', description="CPU Load Percentage"),
            IntField('cpu_worker', '1-3', description="CPU Stress Threads"),
        ]
