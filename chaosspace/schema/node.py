"""
The Node tree and its JSON-compatible wire-map.

A Node is either a template (every leaf value unset) produced by the
deriver, or a populated configuration produced by a caller or by the codec.
Children are keyed by field index. The keys are integers in memory and
decimal strings in the wire-map, so that the map survives json.dumps.
"""
from typing import Dict, Tuple

from chaosspace.errors import MalformedNodeError, TypeMismatchError


def as_int(value, field=None) -> int:
    """
    Coerce a wire-map value to int. Booleans are rejected. Integral floats
    are accepted since JSON decoders may produce them.
    """
    if isinstance(value, bool):
        raise TypeMismatchError("field '{}': expected integer, got "
                                "boolean {!r}".format(field, value),
                                field=field, value=value)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise TypeMismatchError("field '{}': expected integer, got "
                            "{!r}".format(field, value), field=field,
                            value=value)


class Node(object):
    """
    One node of an action-space tree.

    :param name: The field or record name.
    :type name: str
    :param range: Inclusive (min, max) bounds. For a leaf, the value domain.
        For a record, the child index domain.
    :type range: Tuple[int, int]
    :param children: Child nodes keyed by field index.
    :type children: Dict[int, Node]
    :param description: Human readable description.
    :type description: str
    :param value: The leaf value, or the chosen index of a selector. None
        means unset.
    :type value: int
    """

    def __init__(self, name: str = "", range: Tuple[int, int] = None,
                 children: Dict[int, 'Node'] = None, description: str = "",
                 value: int = None):
        self.name = name
        self.range = tuple(range) if range is not None else None
        self.children = dict(children) if children else None
        self.description = description
        self.value = value

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def is_populated(self) -> bool:
        """
        Does every leaf below this node carry a value?
        """
        if self.is_leaf:
            return self.value is not None
        return all(child.is_populated() for child in self.children.values())

    def copy(self) -> 'Node':
        children = None
        if self.children:
            children = {k: c.copy() for k, c in self.children.items()}
        return Node(self.name, self.range, children, self.description,
                    self.value)

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        return (self.name == other.name and self.range == other.range and
                self.description == other.description and
                self.value == other.value and
                (self.children or {}) == (other.children or {}))

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def __repr__(self):
        return "Node(name={!r}, range={}, value={}, children={})".format(
            self.name, self.range, self.value,
            sorted(self.children) if self.children else None)

    def to_map(self, exclude_unset: bool = False) -> dict:
        """
        Convert to a JSON-compatible dict.

        :param exclude_unset: Produce a compact map: drop unset values, empty
            descriptions and empty names, and drop name and range on nodes
            that carry a value or a fully populated subtree. Without it
            every attribute is emitted.
            Optional. (Default: False)
        :type exclude_unset: bool
        :return: dict
        """
        result = {}
        compact = exclude_unset and (self.value is not None or
                                     self.is_populated())
        if not compact:
            if self.name or not exclude_unset:
                result['name'] = self.name
            if self.range is not None:
                result['range'] = list(self.range)
            elif not exclude_unset:
                result['range'] = None
        if self.value is not None or not exclude_unset:
            result['value'] = self.value
        if self.description or not exclude_unset:
            result['description'] = self.description
        if self.children:
            result['children'] = {
                str(k): self.children[k].to_map(exclude_unset)
                for k in sorted(self.children)
            }
        return result

    @classmethod
    def from_map(cls, data: dict) -> 'Node':
        """
        Rebuild a Node from a wire-map. A map must carry a value and/or
        children to be recoverable.

        :param data: The wire-map.
        :type data: dict
        :return: Node
        """
        if not isinstance(data, dict):
            raise MalformedNodeError("node map must be an object, got "
                                     "{}".format(type(data).__name__))
        name = data.get('name') or ""
        value = data.get('value')
        raw_children = data.get('children')
        if value is None and not raw_children:
            raise MalformedNodeError("node '{}': map has neither value nor "
                                     "children".format(name), field=name)
        if value is not None:
            value = as_int(value, name)

        node_range = data.get('range')
        if node_range is not None:
            if not isinstance(node_range, (list, tuple)) or \
                    len(node_range) != 2:
                raise MalformedNodeError("node '{}': range must be a pair, "
                                         "got {!r}".format(name, node_range),
                                         field=name)
            node_range = (as_int(node_range[0], name),
                          as_int(node_range[1], name))

        children = None
        if raw_children:
            if not isinstance(raw_children, dict):
                raise MalformedNodeError("node '{}': children must be an "
                                         "object".format(name), field=name)
            children = {}
            for key, child in raw_children.items():
                try:
                    index = int(key)
                except (TypeError, ValueError):
                    raise MalformedNodeError("node '{}': invalid child key "
                                             "{!r}".format(name, key),
                                             field=name, value=key)
                children[index] = cls.from_map(child)

        description = data.get('description') or ""
        return cls(name, node_range, children, description, value)
