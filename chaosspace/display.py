from chaosspace.common import DIRECTIONS, Role
from chaosspace.errors import OutOfRangeError
from chaosspace.schema.record import Selector
from chaosspace.schema.resolver import RangeResolver, role_of
from chaosspace.topology.records import record_to_dict


def display_config(record, resolver: RangeResolver, namespace: str = None,
                   timeout=None) -> dict:
    """
    A human readable, JSON-compatible view of a fault record.

    The 'system' field shows the system name, the dynamic index field is
    replaced by the resolved 'injection_point' record, and 'direction' shows
    its name. Every other field is shown as is.

    :param record: A fault record, or an Injection selecting one.
    :type record: chaosspace.schema.record.Record
    :param resolver: Resolves indices against the record's target system.
    :type resolver: chaosspace.schema.resolver.RangeResolver
    :param namespace: The namespace.
        Optional. (Default: the system's first namespace)
    :type namespace: str
    :param timeout: Seconds each provider call may take.
    :type timeout: Union[int,float,None]
    :return: dict
    """
    if isinstance(record, Selector):
        record = record.value

    system = None
    fields = record.fields()
    for field in fields:
        if field.dynamic and role_of(field) is Role.SYSTEM:
            system = resolver.systems.by_index(getattr(record, field.name)).name
    if namespace is None and system is not None:
        namespace = resolver.systems.namespace_for(system)

    result = {}
    for field in fields:
        value = getattr(record, field.name)
        if value is None:
            continue
        if not field.dynamic:
            if field.name == 'direction':
                value = DIRECTIONS.get(value, value)
            result[field.name] = value
            continue
        role = role_of(field)
        if role is Role.SYSTEM:
            result[field.name] = system
            continue
        items = resolver.resources(role, system, namespace, timeout)
        if value < 0 or value >= len(items):
            raise OutOfRangeError("field '{}': index {} out of range (max: "
                                  "{})".format(field.name, value,
                                               len(items) - 1),
                                  field=field.name, value=value,
                                  bounds=(0, len(items) - 1))
        point = items[value]
        if isinstance(point, str):
            result['injection_point'] = {'app_name': point}
        else:
            result['injection_point'] = record_to_dict(point)
    return result
