"""
Decode populated Node trees into validated records, and encode records into
populated Node trees.

Every leaf is checked against bounds resolved at decode time, not the bounds
the tree was derived with: a record derived before a cache invalidation may
hold indices that no longer exist. Decoding the leaf of a SYSTEM role field
switches the system (and its default namespace) used to resolve the
remaining dynamic fields of the record.
"""
from logzero import logger

from chaosspace.common import Role
from chaosspace.errors import (MalformedNodeError, OutOfRangeError,
                               SelectorCardinalityError, TypeMismatchError)
from chaosspace.helpers import as_deadline
from chaosspace.schema.node import Node, as_int
from chaosspace.schema.record import Record, Selector
from chaosspace.schema.resolver import RangeResolver, role_of


class _Target(object):
    """
    The system and namespace dynamic fields resolve against. Mutable: a
    SYSTEM role leaf retargets the fields decoded after it.
    """

    def __init__(self, system, namespace, deadline):
        self.system = system
        self.namespace = namespace
        self.deadline = deadline

    def copy(self):
        return _Target(self.system, self.namespace, self.deadline)


class NodeCodec(object):
    """
    :param resolver: Resolves dynamic field bounds.
    :type resolver: chaosspace.schema.resolver.RangeResolver
    """

    def __init__(self, resolver: RangeResolver):
        self.resolver = resolver

    @property
    def systems(self):
        return self.resolver.systems

    def _target(self, system, namespace, timeout):
        if namespace is None:
            namespace = self.systems.namespace_for(system)
        return _Target(system, namespace, as_deadline(timeout))

    def _bounds(self, field, target):
        return self.resolver.field_range(field, target.system,
                                         target.namespace, target.deadline)

    def _check_value(self, field, value, target):
        if value is None:
            raise MalformedNodeError("field '{}': value is not "
                                     "set".format(field.name),
                                     field=field.name)
        value = as_int(value, field.name)
        low, high = self._bounds(field, target)
        if value < low or value > high:
            raise OutOfRangeError("field '{}': value {} out of range "
                                  "[{}, {}]".format(field.name, value, low,
                                                    high),
                                  field=field.name, value=value,
                                  bounds=(low, high))
        field.check_width(value)
        return value, (low, high)

    def _retarget(self, field, value, target):
        if not (field.dynamic and role_of(field) is Role.SYSTEM):
            return
        system = self.systems.by_index(value).name
        if system != target.system:
            logger.debug("Field %s switches target system from %s to %s",
                         field.name, target.system, system)
            target.system = system
            target.namespace = self.systems.namespace_for(system)

    # Decoding

    def decode(self, record_type, node: Node, system: str,
               namespace: str = None, timeout=None) -> Record:
        """
        Decode a populated Node into an instance of record_type.

        :param record_type: The record (or selector) class.
        :type record_type: Type[chaosspace.schema.record.Record]
        :param node: The populated tree.
        :type node: chaosspace.schema.node.Node
        :param system: The target system.
        :type system: str
        :param namespace: The namespace.
            Optional. (Default: the system's first namespace)
        :type namespace: str
        :param timeout: Seconds every provider call of this request may take
            together.
        :type timeout: Union[int,float,None]
        :return: chaosspace.schema.record.Record
        """
        if not isinstance(node, Node):
            raise MalformedNodeError("expected a Node, got {}".format(
                type(node).__name__))
        target = self._target(system, namespace, timeout)
        return self._decode_record(record_type, node, target)

    def _decode_record(self, record_type, node, target):
        if issubclass(record_type, Selector):
            return self._decode_selector(record_type, node, target)
        fields = record_type.fields()
        children = node.children
        if not children:
            raise MalformedNodeError("record '{}' has no children".format(
                node.name or record_type.__name__), field=node.name)
        for key in children:
            if not isinstance(key, int) or isinstance(key, bool):
                raise MalformedNodeError("record '{}': invalid child key "
                                         "{!r}".format(record_type.__name__,
                                                       key), value=key)
            if key < 0 or key >= len(fields):
                raise OutOfRangeError("record '{}': field index {} out of "
                                      "range [0, {}]".format(
                                          record_type.__name__, key,
                                          len(fields) - 1),
                                      value=key, bounds=(0, len(fields) - 1))

        # A system switch only applies to the rest of this record
        target = target.copy()
        values = {}
        for index, field in enumerate(fields):
            child = children.get(index)
            if child is None:
                if field.optional:
                    values[field.name] = None
                    continue
                raise MalformedNodeError("record '{}': required field '{}' "
                                         "(index {}) is missing".format(
                                             record_type.__name__, field.name,
                                             index), field=field.name)
            if field.is_record:
                values[field.name] = self._decode_record(field.record_type,
                                                         child, target)
            else:
                if child.children:
                    raise MalformedNodeError("field '{}' is a leaf but has "
                                             "children".format(field.name),
                                             field=field.name)
                value, _ = self._check_value(field, child.value, target)
                self._retarget(field, value, target)
                values[field.name] = value
        return record_type(**values)

    def _decode_selector(self, selector_type, node, target):
        fields = selector_type.fields()
        keys = list((node.children or {}).keys())
        if len(keys) != 1:
            raise SelectorCardinalityError("selector '{}' must select exactly "
                                           "one alternative, got {}".format(
                                               selector_type.__name__,
                                               len(keys)),
                                           value=keys,
                                           bounds=(0, len(fields) - 1))
        key = keys[0]
        if isinstance(key, bool) or not isinstance(key, int):
            raise MalformedNodeError("selector '{}': invalid child key "
                                     "{!r}".format(selector_type.__name__,
                                                   key), value=key)
        if key < 0 or key >= len(fields):
            raise OutOfRangeError("selector '{}': alternative {!r} out of "
                                  "range [0, {}]".format(
                                      selector_type.__name__, key,
                                      len(fields) - 1),
                                  value=key, bounds=(0, len(fields) - 1))
        if node.value is not None and as_int(node.value, node.name) != key:
            raise SelectorCardinalityError("selector '{}': value {} does not "
                                           "match selected child {}".format(
                                               selector_type.__name__,
                                               node.value, key),
                                           value=node.value)
        field = fields[key]
        value = self._decode_record(field.record_type, node.children[key],
                                    target)
        return selector_type(value=value, choice=key)

    # Encoding

    def encode(self, record: Record, system: str, namespace: str = None,
               timeout=None) -> Node:
        """
        Encode a record into a populated Node, validating every value
        against its resolved bounds.

        :param record: The record (or selector) instance.
        :type record: chaosspace.schema.record.Record
        :param system: The target system.
        :type system: str
        :param namespace: The namespace.
            Optional. (Default: the system's first namespace)
        :type namespace: str
        :param timeout: Seconds every provider call of this request may take
            together.
        :type timeout: Union[int,float,None]
        :return: chaosspace.schema.node.Node
        """
        if not isinstance(record, Record):
            raise TypeMismatchError("expected a Record, got {}".format(
                type(record).__name__))
        target = self._target(system, namespace, timeout)
        node = self._encode_record(record, target)
        node.name = type(record).__name__
        return node

    def _encode_record(self, record, target, name="", description=""):
        fields = record.fields()
        bounds = (0, len(fields) - 1)
        if isinstance(record, Selector):
            field = fields[record.choice]
            if type(record.value) is not field.record_type:
                raise SelectorCardinalityError("selector '{}': alternative {} "
                                               "does not accept {!r}".format(
                                                   type(record).__name__,
                                                   record.choice,
                                                   record.value),
                                               value=record.choice)
            child = self._encode_record(record.value, target, field.name,
                                        field.description)
            return Node(name, bounds, {record.choice: child}, description,
                        record.choice)

        target = target.copy()
        children = {}
        for index, field in enumerate(fields):
            value = getattr(record, field.name)
            if value is None:
                if field.optional:
                    continue
                raise MalformedNodeError("record '{}': required field '{}' "
                                         "is not set".format(
                                             type(record).__name__,
                                             field.name), field=field.name)
            if field.is_record:
                if not isinstance(value, field.record_type):
                    raise TypeMismatchError("field '{}': expected {}, got "
                                            "{}".format(
                                                field.name,
                                                field.record_type.__name__,
                                                type(value).__name__),
                                            field=field.name, value=value)
                children[index] = self._encode_record(value, target,
                                                      field.name,
                                                      field.description)
            else:
                if not isinstance(value, int) or isinstance(value, bool):
                    raise TypeMismatchError("field '{}': expected integer, "
                                            "got {!r}".format(field.name,
                                                              value),
                                            field=field.name, value=value)
                value, leaf_bounds = self._check_value(field, value, target)
                self._retarget(field, value, target)
                children[index] = Node(field.name, leaf_bounds,
                                       description=field.description,
                                       value=value)
        return Node(name, bounds, children, description)
