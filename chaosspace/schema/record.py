from typing import List

from chaosspace.errors import SchemaError, SelectorCardinalityError
from chaosspace.schema.fields import IntField, RecordField


class Record(object):
    """
    Base class of every fault configuration record.

    Subclasses declare their fields, in order, by overriding schema(). A
    field's position in that list is its key in the Node tree.

        class PodKill(Record):
            @classmethod
            def schema(cls):
                return [IntField('duration', '1-60'),
                        IntField('app_idx', dynamic=True)]
    """

    @classmethod
    def schema(cls) -> List:
        raise NotImplementedError('users must define schema to use this base '
                                  'class')

    @classmethod
    def fields(cls) -> List:
        """
        The validated field list of this record type.
        """
        try:
            fields = list(cls.schema())
        except NotImplementedError:
            raise SchemaError("{} does not declare a schema".format(
                cls.__name__))
        if not fields:
            raise SchemaError("{} declares no fields".format(cls.__name__))
        names = set()
        for field in fields:
            if not isinstance(field, (IntField, RecordField)):
                raise SchemaError("{}: unsupported field declaration "
                                  "{!r}".format(cls.__name__, field))
            if field.name in names:
                raise SchemaError("{}: duplicate field '{}'".format(
                    cls.__name__, field.name), field=field.name)
            names.add(field.name)
        return fields

    def __init__(self, **kwargs):
        names = [f.name for f in self.fields()]
        unknown = set(kwargs) - set(names)
        if unknown:
            raise TypeError("{} has no field(s) {}".format(
                type(self).__name__, ", ".join(sorted(unknown))))
        for name in names:
            setattr(self, name, kwargs.get(name))

    def values(self):
        return [(f.name, getattr(self, f.name)) for f in self.fields()]

    def __eq__(self, other):
        return type(self) is type(other) and self.values() == other.values()

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return "{}({})".format(type(self).__name__, ", ".join(
            "{}={!r}".format(k, v) for k, v in self.values()))


class Selector(Record):
    """
    A tagged union: exactly one of the declared alternatives.

    Every field of a selector's schema must be a RecordField. An instance
    holds the index of the chosen alternative ('choice') and the chosen
    record ('value'). Both are validated at construction, so a Selector
    instance always selects exactly one alternative.

    :param value: The chosen alternative's record.
    :type value: Record
    :param choice: The index or name of the chosen alternative. Required only
        when several alternatives share the value's type.
    :type choice: Union[int, str]
    """

    @classmethod
    def fields(cls) -> List:
        fields = super().fields()
        for field in fields:
            if not isinstance(field, RecordField):
                raise SchemaError("{}: selector alternative '{}' must be a "
                                  "RecordField".format(cls.__name__,
                                                       field.name),
                                  field=field.name)
        return fields

    def __init__(self, value=None, choice=None):
        fields = self.fields()
        if value is None:
            raise SelectorCardinalityError("{} requires exactly one "
                                           "alternative, got none".format(
                                               type(self).__name__))
        if isinstance(choice, str):
            names = [f.name for f in fields]
            if choice not in names:
                raise SelectorCardinalityError("{} has no alternative "
                                               "'{}'".format(
                                                   type(self).__name__, choice),
                                               field=choice)
            choice = names.index(choice)

        matches = [i for i, f in enumerate(fields)
                   if type(value) is f.record_type]
        if choice is None:
            if len(matches) != 1:
                raise SelectorCardinalityError(
                    "{}: cannot infer the alternative of {!r} ({} "
                    "candidates)".format(type(self).__name__, value,
                                         len(matches)))
            choice = matches[0]
        elif choice not in matches:
            raise SelectorCardinalityError(
                "{}: alternative {} does not accept {!r}".format(
                    type(self).__name__, choice, value), value=choice)
        self.choice = choice
        self.value = value

    @classmethod
    def of(cls, name: str, value: Record):
        return cls(value=value, choice=name)

    @property
    def alternative(self) -> str:
        return self.fields()[self.choice].name

    def values(self):
        return [(self.alternative, self.value)]
