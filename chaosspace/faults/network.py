"""
Network faults between the two services of a network pair (see
SystemCache.get_all_network_pairs).
"""
from chaosspace.faults.common import (direction_field, duration_field,
                                      network_fields, system_field)
from chaosspace.schema.fields import IntField
from chaosspace.schema.record import Record


def _pair_fields(*extra):
    return [
        duration_field(),
        system_field(),
        IntField('network_pair_idx', dynamic=True,
                 description="Flattened network pair index"),
    ] + list(extra)


class NetworkDelay(Record):

    @classmethod
    def schema(cls):
        return _pair_fields(
            IntField('latency', '1-2000',
                     description="Latency in milliseconds"),
            IntField('correlation', '0-100',
                     description="Correlation percentage"),
            IntField('jitter', '0-1000', description="Jitter in milliseconds"),
            direction_field(),
        )


class NetworkLoss(Record):

    @classmethod
    def schema(cls):
        return _pair_fields(*network_fields('loss', "Packet loss percentage"))


class NetworkDuplicate(Record):

    @classmethod
    def schema(cls):
        return _pair_fields(*network_fields(
            'duplicate', "Packet duplication percentage"))


class NetworkCorrupt(Record):

    @classmethod
    def schema(cls):
        return _pair_fields(*network_fields(
            'corrupt', "Packet corruption percentage"))


class NetworkBandwidth(Record):

    @classmethod
    def schema(cls):
        return _pair_fields(
            IntField('rate', '1-1000000', description="Bandwidth rate in kbps"),
            IntField('limit', '1-10000',
                     description="Number of bytes that can be queued"),
            IntField('buffer', '1-10000',
                     description="Maximum amount of bytes available "
                                 "instantaneously"),
            direction_field(),
        )


class NetworkPartition(Record):

    @classmethod
    def schema(cls):
        return _pair_fields(direction_field())
