from collections import namedtuple

# Raw rows returned by a topology provider
ServiceEndpoint = namedtuple('ServiceEndpoint', [
    'service_name', 'request_method', 'response_status', 'route',
    'server_address', 'server_port', 'span_name', 'endpoint_kind'])
RPCOperation = namedtuple('RPCOperation', [
    'service_name', 'rpc_system', 'rpc_service', 'rpc_method', 'status_code',
    'server_address', 'server_port', 'span_kind'])
DatabaseOperation = namedtuple('DatabaseOperation', [
    'service_name', 'db_name', 'db_table', 'operation', 'db_system',
    'server_address', 'server_port'])
ClassMethod = namedtuple('ClassMethod', [
    'service_name', 'class_name', 'method_name'])
Container = namedtuple('Container', [
    'pod_name', 'app_label', 'container_name'])

# Flattened, index-stable rows served by the resource topology cache
EndpointPair = namedtuple('EndpointPair', [
    'app_name', 'route', 'method', 'server_address', 'server_port',
    'span_name'])
NetworkPair = namedtuple('NetworkPair', [
    'source_service', 'target_service', 'span_names'])
DNSPair = namedtuple('DNSPair', ['app_name', 'domain', 'span_names'])
DatabasePair = namedtuple('DatabasePair', [
    'app_name', 'db_name', 'table_name', 'operation_type'])
MethodPair = namedtuple('MethodPair', [
    'app_name', 'class_name', 'method_name'])
ContainerInfo = namedtuple('ContainerInfo', [
    'pod_name', 'app_label', 'container_name'])

RAW_RECORDS = {
    'endpoint': ServiceEndpoint,
    'rpc': RPCOperation,
    'database': DatabaseOperation,
    'method': ClassMethod,
    'container': Container,
}


def _column(value):
    return "" if value is None else str(value)


def record_from_dict(record_type, data):
    """
    Build a raw provider row from a dict. Every column is a string: numbers
    (e.g. a JSON integer port) are converted and missing or null columns
    become the empty string.

    :param record_type: The namedtuple class to build.
    :type record_type: type
    :param data: Column name to value mapping. Unknown keys are ignored.
    :type data: Dict
    :return: namedtuple
    """
    return record_type(**{f: _column(data.get(f)) for f in record_type._fields})


def record_to_dict(record):
    """
    Convert a row to a JSON-compatible dict. Tuple columns become lists.
    """
    result = {}
    for key, value in record._asdict().items():
        result[key] = list(value) if isinstance(value, tuple) else value
    return result
