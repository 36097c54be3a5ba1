"""
Errors raised while deriving, encoding or decoding an action space.

Only TopologyUnavailableError and RangeResolutionError are retryable: the
caller may refresh the topology (invalidate the cache) and try again. All
other errors mean the request or the fault record declaration is malformed and
retrying with the same input will fail the same way.
"""


class ActionSpaceError(Exception):
    """
    Base class of every error raised by chaosspace.

    :param message: Human readable message.
    :type message: str
    :param field: Name of the field being processed, if any.
    :type field: str
    :param value: The offending value, if any.
    :type value: Any
    :param bounds: The resolved (min, max) bounds, if any.
    :type bounds: Tuple[int, int]
    """
    retryable = False

    def __init__(self, message, field=None, value=None, bounds=None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.bounds = bounds


class SchemaError(ActionSpaceError):
    """Malformed or unsupported field declaration."""


class TypeMismatchError(SchemaError):
    """A range was declared on, or a value supplied for, a non-integer."""


class TopologyUnavailableError(ActionSpaceError):
    """The resource topology cache could not populate from its provider."""
    retryable = True


class RangeResolutionError(ActionSpaceError):
    """A dynamic range could not be resolved against the live topology."""
    retryable = True


class OutOfRangeError(ActionSpaceError):
    """A value falls outside its (re-)resolved bounds or declared width."""


class SelectorCardinalityError(ActionSpaceError):
    """A selector node does not select exactly one alternative."""


class MalformedNodeError(ActionSpaceError):
    """A node or wire-map cannot be interpreted against a record type."""


class NoResourcesError(RangeResolutionError):
    """A dynamic range resolved to an empty resource list."""
