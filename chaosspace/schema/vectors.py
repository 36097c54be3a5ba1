"""
Flatten an action-space template into ordered integer dimensions.

Learning agents act on flat integer vectors rather than trees. For a plain
record a vector holds one value per leaf, in depth-first field order. For a
selector the first value picks the alternative and the remaining values fill
the leaves of that alternative only.
"""
import random
from collections import namedtuple
from typing import List, Sequence

from chaosspace.errors import (MalformedNodeError, OutOfRangeError,
                               RangeResolutionError, SchemaError)
from chaosspace.schema.node import Node, as_int
from chaosspace.schema.record import Selector

# path: child keys from the root of the (alternative's) subtree to the leaf.
# default: the value preset by the template (the target system), if any.
ActionDimension = namedtuple('ActionDimension',
                             ['path', 'name', 'min', 'max', 'optional',
                              'default'])


def _child(template: Node, key: int) -> Node:
    if not template.children or key not in template.children:
        raise MalformedNodeError("template '{}' has no child {}".format(
            template.name, key), field=template.name, value=key)
    return template.children[key]


def _leaf_dimensions(record_type, template, prefix=()):
    dimensions = []
    for index, field in enumerate(record_type.fields()):
        child = _child(template, index)
        path = prefix + (index,)
        if field.is_record:
            if issubclass(field.record_type, Selector):
                raise SchemaError("field '{}': nested selectors cannot be "
                                  "flattened".format(field.name),
                                  field=field.name)
            dimensions.extend(_leaf_dimensions(field.record_type, child, path))
        else:
            low, high = child.range
            dimensions.append(ActionDimension(path, field.name, low, high,
                                              field.optional, child.value))
    return dimensions


def action_dimensions(record_type, template: Node):
    """
    The dimensions of a template.

    :param record_type: The record (or selector) class the template was
        derived from.
    :type record_type: Type[chaosspace.schema.record.Record]
    :param template: The derived template.
    :type template: chaosspace.schema.node.Node
    :return: List[ActionDimension] for a record, or
        List[List[ActionDimension]] (one list per alternative) for a selector.
        An alternative left out of the template (no resources to index) has
        None in place of its list.
    """
    if issubclass(record_type, Selector):
        children = template.children or {}
        return [_leaf_dimensions(field.record_type, children[index])
                if index in children else None
                for index, field in enumerate(record_type.fields())]
    return _leaf_dimensions(record_type, template)


def _populate(template: Node, dimensions, values) -> Node:
    node = template.copy()
    for dimension, value in zip(dimensions, values):
        parent = None
        leaf = node
        for key in dimension.path:
            parent, leaf = leaf, leaf.children[key]
        if value is None:
            if not dimension.optional:
                raise MalformedNodeError("dimension '{}' is required".format(
                    dimension.name), field=dimension.name)
            del parent.children[dimension.path[-1]]
            continue
        value = as_int(value, dimension.name)
        if value < dimension.min or value > dimension.max:
            raise OutOfRangeError("dimension '{}': value {} out of range "
                                  "[{}, {}]".format(dimension.name, value,
                                                    dimension.min,
                                                    dimension.max),
                                  field=dimension.name, value=value,
                                  bounds=(dimension.min, dimension.max))
        leaf.value = value
    return node


def vector_to_node(record_type, template: Node, vector: Sequence) -> Node:
    """
    Build a populated Node from an action vector.

    :param record_type: The record (or selector) class.
    :type record_type: Type[chaosspace.schema.record.Record]
    :param template: The derived template.
    :type template: chaosspace.schema.node.Node
    :param vector: The action values. None skips an optional field.
    :type vector: Sequence[int]
    :return: chaosspace.schema.node.Node
    """
    vector = list(vector)
    if issubclass(record_type, Selector):
        if not vector:
            raise MalformedNodeError("empty action vector")
        alternatives = action_dimensions(record_type, template)
        choice = as_int(vector[0], template.name)
        if choice < 0 or choice >= len(alternatives):
            raise OutOfRangeError("alternative {} out of range [0, "
                                  "{}]".format(choice, len(alternatives) - 1),
                                  value=choice,
                                  bounds=(0, len(alternatives) - 1))
        dimensions = alternatives[choice]
        if dimensions is None:
            raise RangeResolutionError("alternative {} is not available in "
                                       "this template".format(choice),
                                       value=choice)
        values = vector[1:]
        subtree = template.children[choice]
        if len(values) != len(dimensions):
            raise MalformedNodeError("alternative {} expects {} values, got "
                                     "{}".format(subtree.name, len(dimensions),
                                                 len(values)))
        child = _populate(subtree, dimensions, values)
        return Node(template.name, template.range, {choice: child},
                    template.description, choice)

    dimensions = action_dimensions(record_type, template)
    if len(vector) != len(dimensions):
        raise MalformedNodeError("{} expects {} values, got {}".format(
            template.name, len(dimensions), len(vector)))
    return _populate(template, dimensions, vector)


def random_vector(record_type, template: Node, rng=None) -> List[int]:
    """
    A uniformly sampled action vector. Optional fields are always filled;
    values preset by the template are kept.
    """
    rng = rng or random

    def sample(d):
        if d.default is not None:
            return d.default
        return rng.randint(d.min, d.max)

    if issubclass(record_type, Selector):
        alternatives = action_dimensions(record_type, template)
        choice = rng.choice([i for i, dimensions in enumerate(alternatives)
                             if dimensions is not None])
        return [choice] + [sample(d) for d in alternatives[choice]]
    return [sample(d) for d in action_dimensions(record_type, template)]


def random_node(record_type, template: Node, rng=None) -> Node:
    """
    A uniformly sampled populated Node.

    :param rng: Source of randomness, e.g. random.Random(seed).
        Optional. (Default: the random module)
    :type rng: random.Random
    :return: chaosspace.schema.node.Node
    """
    return vector_to_node(record_type, template,
                          random_vector(record_type, template, rng))
