"""
The action space facade.

    manager = CacheManager(JsonTopologyProvider('~/topology.json'))
    space = ActionSpace(manager)
    template = space.schema(Injection, 'ts')
    node = space.random_node(Injection, template, random.Random(7))
    injection = space.decode(node, 'ts')
    space.groundtruth(injection)
"""
from logzero import logger

from chaosspace.display import display_config
from chaosspace.faults import Injection
from chaosspace.groundtruth import groundtruth
from chaosspace.schema.codec import NodeCodec
from chaosspace.schema.deriver import SchemaDeriver
from chaosspace.schema.node import Node
from chaosspace.schema.record import Record, Selector
from chaosspace.schema.resolver import RangeResolver
from chaosspace.schema.vectors import (action_dimensions, random_node,
                                       vector_to_node)
from chaosspace.systems import SystemRegistry
from chaosspace.topology.manager import CacheManager


class ActionSpace(object):
    """
    :param manager: The resource cache registry.
    :type manager: chaosspace.topology.manager.CacheManager
    :param systems: The target systems.
        Optional. (Default: SystemRegistry())
    :type systems: chaosspace.systems.SystemRegistry
    """

    def __init__(self, manager: CacheManager, systems: SystemRegistry = None):
        self.manager = manager
        self.resolver = RangeResolver(manager, systems)
        self.deriver = SchemaDeriver(self.resolver)
        self.codec = NodeCodec(self.resolver)

    @property
    def systems(self) -> SystemRegistry:
        return self.resolver.systems

    def schema(self, record_type, system: str, namespace: str = None,
               timeout=None) -> Node:
        """
        Derive the template of a record type against a system's current
        topology.
        """
        return self.deriver.derive(record_type, system, namespace, timeout)

    def decode(self, node: Node, system: str, namespace: str = None,
               record_type=Injection, timeout=None) -> Record:
        return self.codec.decode(record_type, node, system, namespace, timeout)

    def encode(self, record: Record, system: str, namespace: str = None,
               timeout=None) -> Node:
        return self.codec.encode(record, system, namespace, timeout)

    def validate(self, record_type, node: Node, system: str,
                 namespace: str = None, timeout=None) -> bool:
        """
        Check that a node decodes into record_type. Raises on the first
        violation.

        :return: bool
        """
        self.codec.decode(record_type, node, system, namespace, timeout)
        return True

    @staticmethod
    def to_map(node: Node, exclude_unset: bool = False) -> dict:
        return node.to_map(exclude_unset)

    @staticmethod
    def from_map(data: dict) -> Node:
        return Node.from_map(data)

    # Flat vectors

    @staticmethod
    def dimensions(record_type, template: Node):
        return action_dimensions(record_type, template)

    @staticmethod
    def vector_to_node(record_type, template: Node, vector) -> Node:
        return vector_to_node(record_type, template, vector)

    @staticmethod
    def random_node(record_type, template: Node, rng=None) -> Node:
        return random_node(record_type, template, rng)

    # Interpretation

    def _target(self, record, namespace):
        if isinstance(record, Selector):
            record = record.value
        system = self.systems.by_index(record.system).name
        if namespace is None:
            namespace = self.systems.namespace_for(system)
        return system, namespace

    def groundtruth(self, record: Record, namespace: str = None,
                    timeout=None):
        """
        The expected blast radius of a decoded fault record, computed against
        the cache of the record's own target system.

        :return: chaosspace.groundtruth.Groundtruth
        """
        system, namespace = self._target(record, namespace)
        logger.debug("Computing groundtruth of %r in %s/%s", record, system,
                     namespace)
        return groundtruth(record, self.manager.get_system_cache(system),
                           namespace, timeout)

    def display(self, record: Record, namespace: str = None,
                timeout=None) -> dict:
        return display_config(record, self.resolver, namespace, timeout)
