from typing import Tuple, Union

from chaosspace.errors import SchemaError, TypeMismatchError, OutOfRangeError

# Inclusive bounds of every supported integer width
WIDTHS = {
    'int8': (-2 ** 7, 2 ** 7 - 1),
    'int16': (-2 ** 15, 2 ** 15 - 1),
    'int32': (-2 ** 31, 2 ** 31 - 1),
    'int64': (-2 ** 63, 2 ** 63 - 1),
    'uint8': (0, 2 ** 8 - 1),
    'uint16': (0, 2 ** 16 - 1),
    'uint32': (0, 2 ** 32 - 1),
    'uint64': (0, 2 ** 64 - 1),
}


def parse_range(decl: Union[str, Tuple[int, int]],
                field: str = None) -> Tuple[int, int]:
    """
    Parse a range declaration into inclusive (min, max) bounds.

    Accepts 'min-max' strings, including a leading negative min such as
    '-600-600', or a (min, max) pair of integers.

    :param decl: The range declaration.
    :type decl: Union[str, Tuple[int, int]]
    :param field: The field name, used in error messages.
    :type field: str
    :return: Tuple[int, int]
    """
    if isinstance(decl, (tuple, list)):
        if len(decl) != 2 or not all(isinstance(b, int) and
                                     not isinstance(b, bool) for b in decl):
            raise SchemaError("field {}: range must be a pair of integers, "
                              "got {!r}".format(field, decl), field=field)
        start, end = decl
    elif isinstance(decl, str) and decl:
        negative = decl.startswith('-')
        parts = decl[1:].split('-') if negative else decl.split('-')
        if len(parts) != 2:
            raise SchemaError("field {}: invalid range format '{}': expected "
                              "'start-end' (e.g. '0-100' or "
                              "'-50-50')".format(field, decl), field=field)
        if negative:
            parts[0] = '-' + parts[0]
        try:
            start, end = int(parts[0]), int(parts[1])
        except ValueError:
            raise SchemaError("field {}: invalid bound in range "
                              "'{}'".format(field, decl), field=field)
    else:
        raise SchemaError("field {}: range is empty (expected format "
                          "'start-end', e.g. '0-100')".format(field),
                          field=field)

    if start > end:
        raise SchemaError("field {}: invalid range '{}': start value {} is "
                          "greater than end value {}".format(field, decl,
                                                             start, end),
                          field=field, bounds=(start, end))
    return start, end


class IntField(object):
    """
    An integer field of a fault configuration record.

    :param name: The field name. For dynamic fields it also selects the
        resource list that sizes the field (see
        chaosspace.schema.resolver.FIELD_ROLES).
    :type name: str
    :param range: Static inclusive bounds, 'min-max' or (min, max).
        Required unless dynamic.
    :type range: Union[str, Tuple[int, int]]
    :param dynamic: Resolve the bounds against the live topology?
        Optional. (Default: False)
    :type dynamic: bool
    :param optional: May the field be absent?
        Optional. (Default: False)
    :type optional: bool
    :param description: Human readable description.
    :type description: str
    :param role: Overrides the role derived from the field name.
    :type role: Union[str, chaosspace.common.Role]
    :param width: Declared storage width, one of WIDTHS.
        Optional. (Default: int64)
    :type width: str
    """
    is_record = False

    def __init__(self, name: str, range=None, dynamic: bool = False,
                 optional: bool = False, description: str = "", role=None,
                 width: str = 'int64'):
        if not name or not isinstance(name, str):
            raise SchemaError("field name must be a non-empty string, got "
                              "{!r}".format(name))
        if width not in WIDTHS:
            raise TypeMismatchError("field {}: type '{}' cannot carry an "
                                    "integer range".format(name, width),
                                    field=name)
        if range is None and not dynamic:
            raise SchemaError("field {}: a static range is required unless "
                              "the field is dynamic".format(name), field=name)
        self.name = name
        self.width = width
        self.range = (self.clamp(parse_range(range, name))
                      if range is not None else (0, 0))
        self.dynamic = dynamic
        self.optional = optional
        self.description = description
        self.role = role

    def __repr__(self):
        return "IntField({!r}, range={}, dynamic={})".format(
            self.name, self.range, self.dynamic)

    def clamp(self, bounds):
        """
        Intersect bounds with what the declared width can hold.

        :param bounds: Inclusive (min, max) bounds.
        :type bounds: Tuple[int, int]
        :return: Tuple[int, int]
        """
        low, high = WIDTHS[self.width]
        start, end = max(bounds[0], low), min(bounds[1], high)
        if start > end:
            raise SchemaError("field {}: range {} does not fit type "
                              "{}".format(self.name, tuple(bounds),
                                          self.width),
                              field=self.name, bounds=tuple(bounds))
        return start, end

    def check_width(self, value: int):
        """
        Reject a value the declared width cannot hold.
        """
        low, high = WIDTHS[self.width]
        if value < 0 and low == 0:
            raise OutOfRangeError("field '{}': cannot assign negative value {} "
                                  "to unsigned type {}".format(self.name, value,
                                                               self.width),
                                  field=self.name, value=value,
                                  bounds=(low, high))
        if value < low or value > high:
            raise OutOfRangeError("field '{}': value {} causes overflow for {} "
                                  "type (max: {})".format(self.name, value,
                                                          self.width, high),
                                  field=self.name, value=value,
                                  bounds=(low, high))


class RecordField(object):
    """
    A field nesting another record. Used for plain structure and for the
    alternatives of a Selector.

    :param name: The field name.
    :type name: str
    :param record_type: The nested record class.
    :type record_type: Type[chaosspace.schema.record.Record]
    :param optional: May the field be absent?
        Optional. (Default: False)
    :type optional: bool
    :param description: Human readable description.
    :type description: str
    """
    is_record = True
    dynamic = False

    def __init__(self, name: str, record_type, optional: bool = False,
                 description: str = ""):
        # Imported here to avoid a cycle with chaosspace.schema.record
        from chaosspace.schema.record import Record
        if not name or not isinstance(name, str):
            raise SchemaError("field name must be a non-empty string, got "
                              "{!r}".format(name))
        if not (isinstance(record_type, type) and
                issubclass(record_type, Record)):
            raise SchemaError("field {}: {!r} is not a Record "
                              "type".format(name, record_type), field=name)
        self.name = name
        self.record_type = record_type
        self.optional = optional
        self.description = description

    def __repr__(self):
        return "RecordField({!r}, {})".format(self.name,
                                              self.record_type.__name__)
