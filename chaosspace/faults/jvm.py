"""
JVM runtime faults. Method faults target one entry of the flattened
(app, class, method) list; database faults target one entry of the
flattened (app, database, table, operation) list.
"""
from chaosspace.faults.common import duration_field, system_field
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record


def _method_fields(*extra):
    return [
        duration_field(),
        system_field(),
        IntField('method_idx', dynamic=True,
                 description="Flattened app+method index"),
    ] + list(extra)


def _database_fields(*extra):
    return [
        duration_field(),
        system_field(),
        IntField('database_idx', dynamic=True,
                 description="Flattened app+database+table index"),
    ] + list(extra)


class JVMLatency(Record):

    @classmethod
    def schema(cls):
        return _method_fields(
            IntField('latency_duration', '1-5000', description="Latency in ms"))


class JVMReturn(Record):

    @classmethod
    def schema(cls):
        return _method_fields(
            IntField('return_type', '1-2',
                     description="Return Type (1=String, 2=Int)"),
            IntField('return_value_opt', '0-1',
                     description="Return value option (0=Default, "
                                 "1=Random)"),
        )


class JVMException(Record):

    @classmethod
    def schema(cls):
        return _method_fields(
            IntField('exception_opt', '0-1',
                     description="Exception option (0=Default, 1=Random)"))


class JVMGarbageCollector(Record):

    @classmethod
    def schema(cls):
        return [
            duration_field(),
            system_field(),
            IntField('app_idx', dynamic=True, description="App Index"),
        ]


class JVMCPUStress(Record):

    @classmethod
    def schema(cls):
        return _method_fields(
            IntField('cpu_count', '1-8',
                     description="Number of CPU cores to stress"))


class JVMMemoryStress(Record):

    @classmethod
    def schema(cls):
        return _method_fields(
            IntField('mem_type', '1-2',
                     description="Memory Type (1=Heap, 2=Stack)"))


class JVMMySQLLatency(Record):

    @classmethod
    def schema(cls):
        return _database_fields(
            IntField('latency_ms', '10-5000', description="Latency in ms"))


class JVMMySQLException(Record):

    @classmethod
    def schema(cls):
        return _database_fields()
