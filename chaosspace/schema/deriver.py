from logzero import logger

from chaosspace.common import Role
from chaosspace.errors import (NoResourcesError, RangeResolutionError,
                               SchemaError)
from chaosspace.helpers import as_deadline
from chaosspace.schema.node import Node
from chaosspace.schema.record import Record, Selector
from chaosspace.schema.resolver import RangeResolver, role_of


class SchemaDeriver(object):
    """
    Derive the template Node tree of a record type.

    Every leaf of a template is unset, with one exception: the leaf of a
    SYSTEM role field carries the index of the target system, and its
    description lists the index of every system.

    :param resolver: Resolves dynamic field bounds.
    :type resolver: chaosspace.schema.resolver.RangeResolver
    """

    def __init__(self, resolver: RangeResolver):
        self.resolver = resolver

    @property
    def systems(self):
        return self.resolver.systems

    def derive(self, record_type, system: str, namespace: str = None,
               timeout=None) -> Node:
        """
        :param record_type: The record (or selector) class.
        :type record_type: Type[chaosspace.schema.record.Record]
        :param system: The target system.
        :type system: str
        :param namespace: The namespace.
            Optional. (Default: the system's first namespace)
        :type namespace: str
        :param timeout: Seconds every provider call of this derivation may
            take together.
        :type timeout: Union[int,float,None]
        :return: chaosspace.schema.node.Node
        """
        if namespace is None:
            namespace = self.systems.namespace_for(system)
        logger.debug("Deriving %s for system %s namespace %s",
                     record_type.__name__, system, namespace)
        node = self._record_node(record_type, system, namespace,
                                 as_deadline(timeout))
        node.name = record_type.__name__
        return node

    def _record_node(self, record_type, system, namespace, timeout,
                     name="", description=""):
        if issubclass(record_type, Selector):
            return self._selector_node(record_type, system, namespace,
                                       timeout, name, description)
        fields = record_type.fields()
        children = {}
        for index, field in enumerate(fields):
            if field.is_record:
                children[index] = self._record_node(field.record_type, system,
                                                    namespace, timeout,
                                                    field.name,
                                                    field.description)
            else:
                children[index] = self._leaf_node(field, system, namespace,
                                                  timeout)
        return Node(name, (0, len(fields) - 1), children, description)

    def _selector_node(self, selector_type, system, namespace, timeout,
                       name, description):
        fields = selector_type.fields()
        children = {}
        for index, field in enumerate(fields):
            try:
                children[index] = self._record_node(field.record_type,
                                                    system, namespace,
                                                    timeout, field.name,
                                                    field.description)
            except NoResourcesError as e:
                logger.info("Leaving out alternative %s of %s: %s",
                            field.name, selector_type.__name__, e)
        if not children:
            raise RangeResolutionError("no alternative of {} is available "
                                       "for system {} namespace {}".format(
                                           selector_type.__name__, system,
                                           namespace))
        # The range still spans every alternative, available or not
        return Node(name, (0, len(fields) - 1), children, description)

    def _leaf_node(self, field, system, namespace, timeout):
        bounds = self.resolver.field_range(field, system, namespace, timeout)
        node = Node(field.name, bounds, description=field.description)
        if field.dynamic and role_of(field) is Role.SYSTEM:
            node.value = self.systems.index_of(system)
            node.description = self.systems.describe()
        return node


def derive(record_type, system: str, resolver: RangeResolver,
           namespace: str = None, timeout=None) -> Node:
    """
    Shortcut for SchemaDeriver(resolver).derive(...).
    """
    if not (isinstance(record_type, type) and issubclass(record_type, Record)):
        raise SchemaError("{!r} is not a Record type".format(record_type))
    return SchemaDeriver(resolver).derive(record_type, system, namespace,
                                          timeout)
