"""
Expected blast radius ("groundtruth") of a fault record.

The groundtruth lists the services, pods, containers, functions and spans a
fault is expected to affect, and the metrics it is expected to move. It is
computed from the same resource cache the record was decoded against: an
index that no longer exists in the current generation is an error, never
silently clamped.
"""
from collections import namedtuple
from typing import List

from chaosspace.common import MetricType
from chaosspace.errors import OutOfRangeError
from chaosspace.faults import dns, http, jvm, network, pod, stress, time
from chaosspace.helpers import as_deadline
from chaosspace.schema.record import Selector
from chaosspace.topology.cache import SystemCache

Groundtruth = namedtuple('Groundtruth', ['service', 'pod', 'container',
                                         'metric', 'function', 'span'])


def _groundtruth(service=(), pod=(), container=(), metric=(), function=(),
                 span=()):
    return Groundtruth(list(service), list(pod), list(container),
                       list(metric), list(function), list(span))


def _pick(items, index: int, what: str):
    if index < 0 or index >= len(items):
        raise OutOfRangeError("{} index out of range: {} (max: {})".format(
            what, index, len(items) - 1), field=what, value=index,
            bounds=(0, len(items) - 1))
    return items[index]


def from_app_idx(cache: SystemCache, namespace: str, app_idx: int,
                 timeout=None) -> Groundtruth:
    labels = cache.get_all_workloads(namespace, timeout=timeout)
    app = _pick(labels, app_idx, 'app')
    return _groundtruth(
        service=[app],
        pod=cache.get_pods_by_service(namespace, app, timeout),
        container=cache.get_containers_by_service(namespace, app, timeout))


def from_container_idx(cache: SystemCache, namespace: str, container_idx: int,
                       timeout=None) -> Groundtruth:
    containers = cache.get_all_containers(namespace, timeout)
    info = _pick(containers, container_idx, 'container')
    return _groundtruth(service=[info.app_label], pod=[info.pod_name],
                        container=[info.container_name])


def _between(cache, namespace, source, target, span_names, timeout):
    containers, pods = cache.get_containers_and_pods_by_services(
        namespace, [source, target], timeout)
    # Fall back to the service names when no span was recorded
    spans = list(span_names) if span_names else [source, target]
    return _groundtruth(service=[source, target], pod=pods,
                        container=containers, span=spans)


def from_endpoint_idx(cache: SystemCache, namespace: str, endpoint_idx: int,
                      timeout=None) -> Groundtruth:
    endpoint = _pick(cache.get_all_endpoints(timeout), endpoint_idx,
                     'endpoint')
    spans = [endpoint.span_name] if endpoint.span_name else None
    return _between(cache, namespace, endpoint.app_name,
                    endpoint.server_address, spans, timeout)


def from_network_pair_idx(cache: SystemCache, namespace: str,
                          network_pair_idx: int, timeout=None) -> Groundtruth:
    pair = _pick(cache.get_all_network_pairs(timeout), network_pair_idx,
                 'network pair')
    return _between(cache, namespace, pair.source_service, pair.target_service,
                    pair.span_names, timeout)


def from_dns_endpoint_idx(cache: SystemCache, namespace: str,
                          dns_endpoint_idx: int, timeout=None) -> Groundtruth:
    pair = _pick(cache.get_all_dns_endpoints(timeout), dns_endpoint_idx,
                 'dns endpoint')
    return _between(cache, namespace, pair.app_name, pair.domain,
                    pair.span_names, timeout)


def from_method_idx(cache: SystemCache, namespace: str, method_idx: int,
                    timeout=None) -> Groundtruth:
    method = _pick(cache.get_all_methods(timeout), method_idx, 'method')
    app = method.app_name
    return _groundtruth(
        service=[app],
        pod=cache.get_pods_by_service(namespace, app, timeout),
        container=cache.get_containers_by_service(namespace, app, timeout),
        function=["{}.{}".format(method.class_name, method.method_name)])


def from_database_idx(cache: SystemCache, namespace: str, database_idx: int,
                      timeout=None) -> Groundtruth:
    """
    The client workload and the database engine's own workload.
    """
    operation = _pick(cache.get_all_database_operations(timeout),
                      database_idx, 'database operation')
    app = operation.app_name
    engine = cache.database_engine
    return _groundtruth(
        service=[app, engine],
        pod=(cache.get_pods_by_service(namespace, app, timeout) +
             cache.get_pods_by_service(namespace, engine, timeout)),
        container=(cache.get_containers_by_service(namespace, app, timeout) +
                   cache.get_containers_by_service(namespace, engine,
                                                   timeout)),
        span=[app, engine])


# fault record type -> (index field, lookup, extra metric)
RULES = {
    pod.PodKill: ('app_idx', from_app_idx, None),
    pod.PodFailure: ('app_idx', from_app_idx, None),
    pod.ContainerKill: ('container_idx', from_container_idx, None),
    stress.MemoryStress: ('container_idx', from_container_idx,
                          MetricType.MEMORY),
    stress.CPUStress: ('container_idx', from_container_idx, MetricType.CPU),
    http.HTTPRequestAbort: ('endpoint_idx', from_endpoint_idx, None),
    http.HTTPResponseAbort: ('endpoint_idx', from_endpoint_idx, None),
    http.HTTPRequestDelay: ('endpoint_idx', from_endpoint_idx,
                            MetricType.HTTP_LATENCY),
    http.HTTPResponseDelay: ('endpoint_idx', from_endpoint_idx,
                             MetricType.HTTP_LATENCY),
    http.HTTPResponseReplaceBody: ('endpoint_idx', from_endpoint_idx, None),
    http.HTTPResponsePatchBody: ('endpoint_idx', from_endpoint_idx, None),
    http.HTTPRequestReplacePath: ('endpoint_idx', from_endpoint_idx, None),
    http.HTTPRequestReplaceMethod: ('endpoint_idx', from_endpoint_idx, None),
    http.HTTPResponseReplaceCode: ('endpoint_idx', from_endpoint_idx, None),
    dns.DNSError: ('dns_endpoint_idx', from_dns_endpoint_idx, None),
    dns.DNSRandom: ('dns_endpoint_idx', from_dns_endpoint_idx, None),
    time.TimeSkew: ('container_idx', from_container_idx, None),
    network.NetworkDelay: ('network_pair_idx', from_network_pair_idx,
                           MetricType.NETWORK_LATENCY),
    network.NetworkLoss: ('network_pair_idx', from_network_pair_idx, None),
    network.NetworkDuplicate: ('network_pair_idx', from_network_pair_idx,
                               None),
    network.NetworkCorrupt: ('network_pair_idx', from_network_pair_idx, None),
    network.NetworkBandwidth: ('network_pair_idx', from_network_pair_idx,
                               None),
    network.NetworkPartition: ('network_pair_idx', from_network_pair_idx,
                               None),
    jvm.JVMLatency: ('method_idx', from_method_idx,
                     MetricType.NETWORK_LATENCY),
    jvm.JVMReturn: ('method_idx', from_method_idx, None),
    jvm.JVMException: ('method_idx', from_method_idx, None),
    jvm.JVMGarbageCollector: ('app_idx', from_app_idx, None),
    jvm.JVMCPUStress: ('method_idx', from_method_idx, MetricType.CPU),
    jvm.JVMMemoryStress: ('method_idx', from_method_idx, MetricType.MEMORY),
    jvm.JVMMySQLLatency: ('database_idx', from_database_idx,
                          MetricType.SQL_LATENCY),
    jvm.JVMMySQLException: ('database_idx', from_database_idx, None),
}


def groundtruth(record, cache: SystemCache, namespace: str,
                timeout=None) -> Groundtruth:
    """
    Compute the groundtruth of a fault record.

    :param record: A fault record, or an Injection selecting one.
    :type record: chaosspace.schema.record.Record
    :param cache: The resource cache of the record's target system.
    :type cache: chaosspace.topology.cache.SystemCache
    :param namespace: The namespace the fault runs in.
    :type namespace: str
    :param timeout: Seconds the provider calls of this computation may take
        together.
    :type timeout: Union[int,float,None]
    :return: Groundtruth
    """
    if isinstance(record, Selector):
        record = record.value
    try:
        field, lookup, metric = RULES[type(record)]
    except KeyError:
        raise ValueError("{} does not support groundtruth "
                         "calculation".format(type(record).__name__))
    result = lookup(cache, namespace, getattr(record, field),
                    as_deadline(timeout))
    if metric is not None:
        result.metric.append(metric.value)
    return result


def as_dict(gt: Groundtruth) -> dict:
    """
    JSON-compatible form, omitting empty lists.
    """
    return {k: v for k, v in gt._asdict().items() if v}
