import abc
import json
from os.path import expanduser
from typing import Dict, List

from logzero import logger

from chaosspace.common import ResourceKind, ENDPOINT_KIND_HTTP
from chaosspace.topology.records import RAW_RECORDS, record_from_dict


class LabelProvider(metaclass=abc.ABCMeta):
    """
    Lists workload identifiers (label values) deployed in a namespace.
    """

    @abc.abstractmethod
    def list_workload_labels(self, system: str, namespace: str,
                             label_key: str) -> List[str]:
        raise NotImplementedError('users must define list_workload_labels to '
                                  'use this base class')


class TopologyProvider(LabelProvider):
    """
    Lists the raw resource tables of a target system.

    Implementations may perform network I/O. The resource topology cache
    time-boxes every call, so implementations do not need to enforce their own
    deadline.
    """

    def list_resources(self, system: str, kind: ResourceKind,
                       namespace: str = None) -> List:
        """
        List one raw resource table.

        :param system: The target system identifier.
        :type system: str
        :param kind: The table to list.
        :type kind: chaosspace.common.ResourceKind
        :param namespace: The namespace. Only meaningful for
            ResourceKind.CONTAINER.
        :type namespace: str
        :return: List of chaosspace.topology.records rows
        """
        if not isinstance(kind, ResourceKind):
            raise ValueError("kind must be a ResourceKind, got "
                             "{!r}".format(kind))
        return self._list_resources(system, kind, namespace)

    @abc.abstractmethod
    def _list_resources(self, system: str, kind: ResourceKind,
                        namespace: str = None) -> List:
        raise NotImplementedError('users must define _list_resources to use '
                                  'this base class')


class StaticTopologyProvider(TopologyProvider):
    """
    A topology provider backed by in-memory documents.

    The topology document of one system has the form:

        {
          "labels": {"<namespace>": ["<label>", ...]},
          "endpoint": [{"service_name": ..., "route": ..., ...}, ...],
          "rpc": [...],
          "database": [...],
          "method": [...],
          "container": {"<namespace>": [{"pod_name": ..., ...}, ...]}
        }

    Row keys are the field names of the namedtuples in
    chaosspace.topology.records. Endpoint rows without an 'endpoint_kind'
    default to 'http'.

    :param documents: System identifier to topology document mapping.
    :type documents: Dict[str, Dict]
    """

    def __init__(self, documents: Dict[str, Dict]):
        self._documents = documents

    def _document(self, system):
        if system not in self._documents:
            raise KeyError("No topology document for system "
                           "'{}'".format(system))
        return self._documents[system]

    def list_workload_labels(self, system, namespace, label_key):
        labels = self._document(system).get('labels', {})
        logger.debug("Listing '%s' labels of %s/%s", label_key, system,
                     namespace)
        return list(labels.get(namespace, []))

    def _list_resources(self, system, kind, namespace=None):
        rows = self._document(system).get(kind.value, [])
        if kind == ResourceKind.CONTAINER:
            rows = rows.get(namespace, []) if isinstance(rows, dict) else rows
        record_type = RAW_RECORDS[kind.value]
        result = []
        for row in rows:
            if kind == ResourceKind.ENDPOINT and not row.get('endpoint_kind'):
                row = dict(row, endpoint_kind=ENDPOINT_KIND_HTTP)
            result.append(record_from_dict(record_type, row))
        return result


class JsonTopologyProvider(StaticTopologyProvider):
    """
    A topology provider backed by a JSON file mapping each system identifier
    to its topology document (see StaticTopologyProvider).

    The file is re-read on every call so that invalidating the cache picks up
    a regenerated file.

    :param topology_file: The relative or absolute path to the JSON file.
    :type topology_file: str
    """

    def __init__(self, topology_file: str):
        super().__init__({})
        self.topology_file = topology_file

    def _document(self, system):
        with open(expanduser(self.topology_file), 'r') as topologyfile:
            self._documents = json.load(topologyfile)
        return super()._document(system)
