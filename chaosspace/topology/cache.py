"""
Resource topology cache.

One SystemCache memoizes the resource lists of one target system. Lists are
built lazily on first access, from raw tables read through a TopologyProvider,
and are kept until invalidate() is called. The time between two invalidations
is a 'generation': within a generation, index i into any list always denotes
the same record. Fault records store only such indices, so decoding a record
after an invalidation must re-validate every index.

Population is serialized per cache (exactly one populate per list per
generation, never concurrent with invalidate). Lists are published as tuples
once fully built, so a reader of a populated list takes no lock and can never
observe a partially built list.
"""
import threading
from typing import Callable, Iterable, List, Tuple

from logzero import logger

from chaosspace.common import (ResourceKind, ENDPOINT_KIND_HTTP,
                               DEFAULT_CHAOS_DATABASE_ENGINE,
                               DEFAULT_CHAOS_EXCLUDED_CALLEES,
                               DEFAULT_CHAOS_LABEL_KEY,
                               DEFAULT_CHAOS_TOPOLOGY_TIMEOUT)
from chaosspace.errors import TopologyUnavailableError
from chaosspace.helpers import CallTimeout, Deadline, run
from chaosspace.topology.provider import LabelProvider, TopologyProvider
from chaosspace.topology.records import (ContainerInfo, DatabasePair, DNSPair,
                                         EndpointPair, MethodPair,
                                         NetworkPair)
from chaosspace.topology.routes import is_rpc_route_pattern


def _endpoint_order(pair):
    # caller, route, method, callee, then port and span as tie-breakers
    return tuple(str(column) for column in pair)


class SystemCache(object):
    """
    Memoized, derived resource lists of one target system.

    :param system: The target system identifier.
    :type system: str
    :param provider: Source of the raw resource tables.
    :type provider: chaosspace.topology.provider.TopologyProvider
    :param label_provider: Source of workload labels.
        Optional. (Default: provider)
    :type label_provider: chaosspace.topology.provider.LabelProvider
    :param rpc_route_predicate: Decides whether a route is an RPC path. Pairs
        only reached over RPC routes are not eligible for DNS faults.
        Optional. (Default:
        chaosspace.topology.routes.is_rpc_route_pattern)
    :type rpc_route_predicate: Callable[[str], bool]
    :param database_engine: The only database engine database faults can
        target.
        Optional. (Default: chaosspace.common.DEFAULT_CHAOS_DATABASE_ENGINE)
    :type database_engine: str
    :param excluded_callees: Callees never listed as endpoint targets
        (e.g. message brokers).
        Optional. (Default: chaosspace.common.DEFAULT_CHAOS_EXCLUDED_CALLEES)
    :type excluded_callees: Iterable[str]
    :param label_key: The workload label key.
        Optional. (Default: chaosspace.common.DEFAULT_CHAOS_LABEL_KEY)
    :type label_key: str
    :param timeout: Seconds the provider calls of one lookup may take together
        when the caller does not pass its own timeout or deadline. None means
        no limit.
        Optional. (Default: chaosspace.common.DEFAULT_CHAOS_TOPOLOGY_TIMEOUT)
    :type timeout: Union[int,float,None]
    """

    def __init__(self, system: str, provider: TopologyProvider,
                 label_provider: LabelProvider = None,
                 rpc_route_predicate: Callable[[str], bool] = is_rpc_route_pattern,
                 database_engine: str = DEFAULT_CHAOS_DATABASE_ENGINE,
                 excluded_callees: Iterable[str] = DEFAULT_CHAOS_EXCLUDED_CALLEES,
                 label_key: str = DEFAULT_CHAOS_LABEL_KEY,
                 timeout=DEFAULT_CHAOS_TOPOLOGY_TIMEOUT):
        self.system = system
        self.provider = provider
        self.label_provider = label_provider or provider
        self.rpc_route_predicate = rpc_route_predicate
        self.database_engine = database_engine
        self.excluded_callees = frozenset(excluded_callees)
        self.label_key = label_key
        self.timeout = timeout
        self.generation = 0
        self._entries = {}
        self._lock = threading.RLock()

    def __repr__(self):
        return "SystemCache(system={!r}, generation={})".format(
            self.system, self.generation)

    # Population

    def _get(self, key, build, timeout):
        entries = self._entries
        if key in entries:
            return entries[key]
        deadline = self._deadline(timeout)
        with self._lock:
            # Re-read: an invalidate or another populate may have run while
            # this caller waited for the lock.
            entries = self._entries
            if key in entries:
                return entries[key]
            logger.debug("Populating %s for system %s (generation %d)", key,
                         self.system, self.generation)
            result = tuple(build(deadline))
            entries[key] = result
            return result

    def _deadline(self, timeout):
        # A bounded Deadline is shared by every provider call of a request
        if isinstance(timeout, Deadline):
            if timeout.bounded:
                return timeout
            timeout = None
        return Deadline(self.timeout if timeout is None else timeout)

    def _call_provider(self, what, fn, timeout, *args):
        deadline = self._deadline(timeout)
        try:
            if deadline.expired():
                raise CallTimeout("no time left of {}s to list {}".format(
                    deadline.timeout, what))
            return run(fn, deadline.remaining(), *args)
        except Exception as e:
            logger.error("Failed to list %s for system %s", what, self.system)
            logger.exception(e)
            raise TopologyUnavailableError(
                "failed to list {} for system {}: {}".format(what, self.system,
                                                             e)) from e

    def _raw(self, kind: ResourceKind, timeout, namespace=None):
        key = ('raw', kind.value, namespace)
        return self._get(key, lambda t: self._call_provider(
            kind.value, self.provider.list_resources, t, self.system, kind,
            namespace), timeout)

    def invalidate(self):
        """
        Clear every raw and derived list. The next access starts a new
        generation.
        """
        with self._lock:
            self._entries = {}
            self.generation += 1
            logger.info("Invalidated resource cache of system %s, now at "
                        "generation %d", self.system, self.generation)

    def preload(self, namespace: str, label_key: str = None, timeout=None):
        """
        Populate every list of this cache.

        :param namespace: The namespace to list workloads and containers of.
        :type namespace: str
        :param label_key: The workload label key.
            Optional. (Default: the cache's label key)
        :type label_key: str
        :param timeout: Seconds each list may take to populate, or a
            chaosspace.helpers.Deadline shared by all of them.
        :type timeout: Union[int,float,None,chaosspace.helpers.Deadline]
        :return: None
        """
        self.get_all_workloads(namespace, label_key=label_key, timeout=timeout)
        self.get_all_containers(namespace, timeout=timeout)
        self.get_all_endpoints(timeout=timeout)
        self.get_all_network_pairs(timeout=timeout)
        self.get_all_dns_endpoints(timeout=timeout)
        self.get_all_database_operations(timeout=timeout)
        self.get_all_methods(timeout=timeout)

    # Derived lists

    def get_all_workloads(self, namespace: str, label_key: str = None,
                          timeout=None) -> Tuple[str, ...]:
        """
        All workload labels of a namespace, deduplicated and sorted.
        """
        label_key = label_key or self.label_key

        def build(t):
            labels = self._call_provider(
                "workload labels", self.label_provider.list_workload_labels, t,
                self.system, namespace, label_key)
            logger.debug("Fetched labels for namespace %s with key %s: %s",
                         namespace, label_key, labels)
            return sorted(set(l for l in labels if l))

        return self._get(('workloads', namespace, label_key), build, timeout)

    def get_all_endpoints(self, timeout=None) -> Tuple[EndpointPair, ...]:
        """
        All caller+endpoint pairs that HTTP faults can target, sorted by
        caller, route, method and callee.
        """
        def build(t):
            result = set()
            for e in self._raw(ResourceKind.ENDPOINT, t):
                if e.endpoint_kind and e.endpoint_kind != ENDPOINT_KIND_HTTP:
                    continue
                if not e.route or e.server_address in self.excluded_callees:
                    continue
                result.add(EndpointPair(e.service_name, e.route,
                                        e.request_method, e.server_address,
                                        e.server_port, e.span_name))
            return sorted(result, key=_endpoint_order)

        return self._get('endpoints', build, timeout)

    def _span_names_by_pair(self, endpoints):
        pairs = {}
        for e in endpoints:
            if not e.server_address or e.server_address == e.service_name:
                continue
            spans = pairs.setdefault((e.service_name, e.server_address), set())
            if e.span_name:
                spans.add(e.span_name)
        return pairs

    def get_all_network_pairs(self, timeout=None) -> Tuple[NetworkPair, ...]:
        """
        All (caller, callee) pairs observed in endpoint traffic, each with the
        sorted set of span names seen between them, sorted by caller then
        callee.
        """
        def build(t):
            pairs = self._span_names_by_pair(
                self._raw(ResourceKind.ENDPOINT, t))
            return [NetworkPair(source, target, tuple(sorted(spans)))
                    for (source, target), spans in sorted(pairs.items())]

        return self._get('network_pairs', build, timeout)

    def rpc_only_pairs(self, timeout=None):
        """
        The (caller, callee) pairs that appear in RPC client traffic but never
        in routed (non-RPC) endpoint traffic.

        Such pairs talk over a persistent connection: the callee's host name
        is resolved once, so a DNS fault has no observable effect.

        :return: Set[Tuple[str, str]]
        """
        rpc_pairs = set()
        for op in self._raw(ResourceKind.RPC, timeout):
            if op.server_address:
                rpc_pairs.add((op.service_name, op.server_address))

        routed_pairs = set()
        for e in self._raw(ResourceKind.ENDPOINT, timeout):
            if not e.server_address or e.server_address == e.service_name:
                continue
            if e.route and not self.rpc_route_predicate(e.route):
                routed_pairs.add((e.service_name, e.server_address))

        return rpc_pairs - routed_pairs

    def get_all_dns_endpoints(self, timeout=None) -> Tuple[DNSPair, ...]:
        """
        All caller+domain pairs that DNS faults can target, sorted by caller
        then domain. RPC-only pairs are excluded.
        """
        def build(t):
            excluded = self.rpc_only_pairs(t)
            pairs = self._span_names_by_pair(
                self._raw(ResourceKind.ENDPOINT, t))
            result = []
            for (app, domain), spans in sorted(pairs.items()):
                if (app, domain) in excluded:
                    logger.debug("Skipping RPC-only pair %s->%s", app, domain)
                    continue
                result.append(DNSPair(app, domain, tuple(sorted(spans))))
            return result

        return self._get('dns_endpoints', build, timeout)

    def get_all_database_operations(self,
                                    timeout=None) -> Tuple[DatabasePair, ...]:
        """
        All caller+database+table+operation tuples against the supported
        database engine, sorted by caller, database, table and operation.
        """
        def build(t):
            result = set()
            for op in self._raw(ResourceKind.DATABASE, t):
                if op.db_system != self.database_engine:
                    continue
                result.add(DatabasePair(op.service_name, op.db_name,
                                        op.db_table, op.operation))
            return sorted(result)

        return self._get('database_operations', build, timeout)

    def get_all_methods(self, timeout=None) -> Tuple[MethodPair, ...]:
        """
        All caller+class+method tuples, sorted by caller, class and method.
        """
        def build(t):
            return sorted(set(
                MethodPair(m.service_name, m.class_name, m.method_name)
                for m in self._raw(ResourceKind.METHOD, t)))

        return self._get('methods', build, timeout)

    def get_all_containers(self, namespace: str,
                           timeout=None) -> Tuple[ContainerInfo, ...]:
        """
        All labelled containers of a namespace, sorted by workload label,
        container name and pod name.
        """
        def build(t):
            result = set()
            for c in self._raw(ResourceKind.CONTAINER, t, namespace):
                if c.app_label:
                    result.add(ContainerInfo(c.pod_name, c.app_label,
                                             c.container_name))
            return sorted(result, key=lambda c: (c.app_label,
                                                 c.container_name, c.pod_name))

        return self._get(('containers', namespace), build, timeout)

    # Lookups

    def get_containers_by_service(self, namespace: str, service: str,
                                  timeout=None) -> List[str]:
        return sorted(set(c.container_name
                          for c in self.get_all_containers(namespace, timeout)
                          if c.app_label == service))

    def get_pods_by_service(self, namespace: str, service: str,
                            timeout=None) -> List[str]:
        return sorted(set(c.pod_name
                          for c in self.get_all_containers(namespace, timeout)
                          if c.app_label == service))

    def get_containers_and_pods_by_services(self, namespace: str,
                                            services: Iterable[str],
                                            timeout=None):
        """
        Containers and pods of several services at once.

        :return: Tuple[List[str], List[str]] (containers, pods)
        """
        wanted = set(services)
        containers = set()
        pods = set()
        for c in self.get_all_containers(namespace, timeout):
            if c.app_label in wanted:
                containers.add(c.container_name)
                pods.add(c.pod_name)
        return sorted(containers), sorted(pods)
