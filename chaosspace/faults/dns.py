from chaosspace.faults.common import duration_field, system_field
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record


def _dns_fields():
    return [
        duration_field(),
        system_field(),
        IntField('dns_endpoint_idx', dynamic=True,
                 description="DNS Endpoint Index"),
    ]


class DNSError(Record):

    @classmethod
    def schema(cls):
        return _dns_fields()


class DNSRandom(Record):

    @classmethod
    def schema(cls):
        return _dns_fields()
