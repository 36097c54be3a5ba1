from chaosspace.faults.dns import DNSError, DNSRandom
from chaosspace.faults.http import (HTTPRequestAbort, HTTPRequestDelay,
                                    HTTPRequestReplaceMethod,
                                    HTTPRequestReplacePath, HTTPResponseAbort,
                                    HTTPResponseDelay, HTTPResponsePatchBody,
                                    HTTPResponseReplaceBody,
                                    HTTPResponseReplaceCode)
from chaosspace.faults.jvm import (JVMCPUStress, JVMException,
                                   JVMGarbageCollector, JVMLatency,
                                   JVMMemoryStress, JVMMySQLException,
                                   JVMMySQLLatency, JVMReturn)
from chaosspace.faults.network import (NetworkBandwidth, NetworkCorrupt,
                                       NetworkDelay, NetworkDuplicate,
                                       NetworkLoss, NetworkPartition)
from chaosspace.faults.pod import ContainerKill, PodFailure, PodKill
from chaosspace.faults.stress import CPUStress, MemoryStress
from chaosspace.faults.time import TimeSkew
from chaosspace.schema.fields import RecordField
from chaosspace.schema.record import Selector

# Alternative order is part of the action space: alternative i of an
# Injection is FAULT_TYPES[i].
FAULT_TYPES = (
    PodKill,
    PodFailure,
    ContainerKill,
    MemoryStress,
    CPUStress,
    HTTPRequestAbort,
    HTTPResponseAbort,
    HTTPRequestDelay,
    HTTPResponseDelay,
    HTTPResponseReplaceBody,
    HTTPResponsePatchBody,
    HTTPRequestReplacePath,
    HTTPRequestReplaceMethod,
    HTTPResponseReplaceCode,
    DNSError,
    DNSRandom,
    TimeSkew,
    NetworkDelay,
    NetworkLoss,
    NetworkDuplicate,
    NetworkCorrupt,
    NetworkBandwidth,
    NetworkPartition,
    JVMLatency,
    JVMReturn,
    JVMException,
    JVMGarbageCollector,
    JVMCPUStress,
    JVMMemoryStress,
    JVMMySQLLatency,
    JVMMySQLException,
)


class Injection(Selector):
    """
    Exactly one fault of the catalog.

        Injection(PodKill(duration=5, system=0, app_idx=1))
        Injection.of('PodKill', PodKill(duration=5, system=0, app_idx=1))
    """

    @classmethod
    def schema(cls):
        return [RecordField(t.__name__, t) for t in FAULT_TYPES]
