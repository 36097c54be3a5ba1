from enum import Enum


class Role(Enum):
    """
    All resource lists that can size a dynamic field.
    """
    SYSTEM = 'system'
    WORKLOAD = 'workload'
    ENDPOINT = 'endpoint'
    NETWORK = 'network'
    DNS = 'dns'
    DATABASE = 'database'
    METHOD = 'method'
    CONTAINER = 'container'

    @classmethod
    def has_value(cls, value):
        return any(value == item.value for item in cls)


class ResourceKind(Enum):
    """
    All raw resource tables a topology provider must be able to list.

    Network pairs and DNS pairs are not listed here. They are derived by the
    resource topology cache from the ENDPOINT and RPC tables.
    """
    ENDPOINT = 'endpoint'
    RPC = 'rpc'
    DATABASE = 'database'
    METHOD = 'method'
    CONTAINER = 'container'

    @classmethod
    def has_value(cls, value):
        return any(value == item.value for item in cls)


class MetricType(Enum):
    """
    Metrics a fault is expected to move.
    """
    CPU = 'cpu'
    MEMORY = 'memory'
    DISK = 'disk'
    NETWORK_LATENCY = 'network_latency'
    HTTP_LATENCY = 'http_latency'
    SQL_LATENCY = 'sql_latency'


# Endpoint kind reported by the trace analysis pipeline for HTTP spans
ENDPOINT_KIND_HTTP = 'http'

# Network direction codes used by the network fault records
DIRECTIONS = {
    1: 'to',
    2: 'from',
    3: 'both',
}

# Useful for validating boolean user input
true_list = [
   'true', '1', 't', 'y', 'yes'
]
false_list = [
   'false', '0', 'f', 'n', 'no'
]


# Chaos defaults
# Please keep defaults in lexically acending order by name
DEFAULT_CHAOS_DATABASE_ENGINE="mysql"
DEFAULT_CHAOS_EXCLUDED_CALLEES=()
DEFAULT_CHAOS_LABEL_KEY="app"
DEFAULT_CHAOS_NAMESPACE_INDEX=0
DEFAULT_CHAOS_PRELOAD_WORKERS=7
DEFAULT_CHAOS_TOPOLOGY_TIMEOUT=30
